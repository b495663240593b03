"""
Configuration manager for loading and validating engine configuration.

A config file has two optional sections, ``engine`` and ``logging``:

    engine:
      small_font_threshold_px: 36
      group_chat_indicators: [여러분, 단체]
    logging:
      level: DEBUG
      file: ./logs/chat_transcript.log
"""
import os
import json
import logging
import yaml
from dataclasses import fields
from typing import Dict, Any, Optional

from chat_transcript.models.config import AppConfig, EngineConfig, LoggingConfig, coerce_setting


logger = logging.getLogger(__name__)

CONFIG_SEARCH_PATHS = (
    "config.yaml",
    "config.yml",
    "config.json",
    "settings.yaml",
    "settings.yml",
    "settings.json",
)

_YAML_EXTENSIONS = (".yaml", ".yml")


class ConfigManager:
    """Loads an AppConfig from YAML or JSON and caches it."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Path to configuration file. If None, the first of
                CONFIG_SEARCH_PATHS that exists in the working directory.
        """
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[AppConfig] = None

    @staticmethod
    def _find_config_file() -> Optional[str]:
        return next((p for p in CONFIG_SEARCH_PATHS if os.path.exists(p)), None)

    def load_config(self) -> AppConfig:
        """
        Load configuration from file, or defaults when there is no file.

        Raises:
            ValueError: If the file is malformed or validation fails
        """
        if self._config is not None:
            return self._config

        if self.config_path and os.path.exists(self.config_path):
            config = self._create_config_from_dict(self._load_config_file(self.config_path))
            logger.info(f"Loaded configuration from {self.config_path}")
        else:
            config = AppConfig()
            logger.debug("No configuration file found, using defaults")

        config.validate()
        self._config = config
        return config

    def load_engine_config(self) -> EngineConfig:
        """Engine section of the loaded configuration."""
        return self.get_config().engine

    @staticmethod
    def _load_config_file(file_path: str) -> Dict[str, Any]:
        """
        Raises:
            ValueError: If file format is not supported or the top level is not a mapping
        """
        file_ext = os.path.splitext(file_path)[1].lower()
        if file_ext not in _YAML_EXTENSIONS and file_ext != ".json":
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) if file_ext in _YAML_EXTENSIONS else json.load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {file_path}")
        return data

    @staticmethod
    def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = config_data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ValueError(f"Configuration section '{name}' must be a mapping")
        return section

    def _create_config_from_dict(self, config_data: Dict[str, Any]) -> AppConfig:
        """
        Build an AppConfig from the ``engine`` and ``logging`` sections.

        Unknown keys are ignored and missing keys keep their defaults; list
        values for vocabularies replace the built-in lists entirely.
        """
        engine_settings = self._section(config_data, 'engine')
        unknown = sorted(set(engine_settings) - {f.name for f in fields(EngineConfig)})
        if unknown:
            logger.warning(f"Ignoring unknown engine settings: {', '.join(unknown)}")
        engine = EngineConfig().with_overrides(**engine_settings)

        log_settings = self._section(config_data, 'logging')
        defaults = LoggingConfig()
        logging_cfg = LoggingConfig(**{
            f.name: coerce_setting(f"logging.{f.name}", log_settings[f.name], getattr(defaults, f.name))
            for f in fields(LoggingConfig)
            if f.name in log_settings
        })

        return AppConfig(engine=engine, logging=logging_cfg)

    def save_config(self, config: AppConfig, file_path: Optional[str] = None) -> None:
        """
        Save configuration to file.

        Args:
            config: Configuration to save
            file_path: Path to save file. If None, uses current config_path
        """
        save_path = file_path or self.config_path or "config.yaml"
        file_ext = os.path.splitext(save_path)[1].lower()
        if file_ext not in _YAML_EXTENSIONS and file_ext != ".json":
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

        save_dir = os.path.dirname(save_path)
        if save_dir:
            os.makedirs(save_dir, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            if file_ext in _YAML_EXTENSIONS:
                yaml.safe_dump(config.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            else:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved configuration to {save_path}")

    def get_config(self) -> AppConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> AppConfig:
        """Reload configuration from file."""
        self._config = None
        return self.load_config()

    def create_default_config_file(self, file_path: str = "config.yaml") -> None:
        self.save_config(AppConfig(), file_path)
