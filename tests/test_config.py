"""
Tests for configuration models, loading and logging setup.
"""
import json
from contextlib import contextmanager
import logging
import os

import pytest
import yaml

from chat_transcript.models.config import AppConfig, EngineConfig, LoggingConfig
from chat_transcript.services.config_manager import ConfigManager
from chat_transcript.services.logging_manager import LoggingManager


class TestAppConfig:
    def test_defaults_are_valid(self):
        cfg = AppConfig()
        assert cfg.validate() is True
        assert cfg.engine.small_font_threshold_px == 40
        assert cfg.engine.name_pair_max_gap_px == 100
        assert cfg.engine.default_element_confidence == 0.5

    def test_invalid_values_are_all_reported(self):
        cfg = AppConfig(
            engine=EngineConfig(name_pair_max_gap_px=0, default_element_confidence=1.5),
            logging=LoggingConfig(level="LOUD"),
        )
        with pytest.raises(ValueError) as exc:
            cfg.validate()
        message = str(exc.value)
        assert "name_pair_max_gap_px" in message
        assert "default_element_confidence" in message
        assert "logging.level" in message

    def test_to_dict_sections(self):
        data = AppConfig().to_dict()
        assert set(data) == {"engine", "logging"}
        assert isinstance(data["engine"]["ui_symbols"], list)
        assert data["logging"]["max_size"] == "10MB"

    def test_with_overrides(self):
        engine = EngineConfig().with_overrides(
            name_pair_max_gap_px=80,
            surnames=["김", "이"],
            system_notice_keywords="입장",
            not_a_field=1,
        )
        assert engine.name_pair_max_gap_px == 80
        assert engine.surnames == ("김", "이")
        assert engine.system_notice_keywords == ("입장",)

    def test_with_overrides_coerces_file_values(self):
        engine = EngineConfig().with_overrides(
            small_font_threshold_px="36",
            name_pair_max_gap_px="80",
            name_pair_requires_small_font="false",
            max_keywords=3.0,
        )
        assert engine.small_font_threshold_px == 36.0
        assert engine.name_pair_max_gap_px == 80
        assert engine.name_pair_requires_small_font is False
        assert engine.max_keywords == 3
        assert isinstance(engine.max_keywords, int)

    @pytest.mark.parametrize("overrides", [
        {"small_font_threshold_px": "big"},
        {"name_pair_max_gap_px": 12.5},
        {"name_pair_requires_small_font": "maybe"},
        {"default_element_confidence": True},
        {"title_min_score": "nan"},
        {"surnames": 5},
    ])
    def test_with_overrides_rejects_unreadable_values(self, overrides):
        with pytest.raises(ValueError) as exc:
            EngineConfig().with_overrides(**overrides)
        assert next(iter(overrides)) in str(exc.value)


class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "absent.yaml"))
        assert manager.load_config().engine == EngineConfig()

    def test_load_yaml(self, tmp_path, sample_config_dict):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(sample_config_dict, allow_unicode=True), encoding="utf-8")
        cfg = ConfigManager(str(path)).load_config()
        assert cfg.engine.small_font_threshold_px == 36
        assert cfg.engine.name_pair_max_gap_px == 120
        assert cfg.engine.default_element_confidence == 0.4
        assert cfg.engine.group_chat_indicators == ("여러분", "단체")
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.max_size == "1MB"

    def test_quoted_numbers_in_yaml_are_read_as_numbers(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            'engine:\n  small_font_threshold_px: "36"\nlogging:\n  console: "false"\n',
            encoding="utf-8",
        )
        cfg = ConfigManager(str(path)).load_config()
        assert cfg.engine.small_font_threshold_px == 36.0
        assert cfg.logging.console is False

    def test_unreadable_number_is_a_value_error(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text('engine:\n  small_font_threshold_px: "big"\n', encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(str(path)).load_config()

    def test_non_mapping_section(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("engine:\n  - 36\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(str(path)).load_config()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert ConfigManager(str(path)).load_config() == AppConfig()

    def test_load_json(self, tmp_path, sample_config_dict):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_config_dict, ensure_ascii=False), encoding="utf-8")
        cfg = ConfigManager(str(path)).load_config()
        assert cfg.engine.name_pair_max_gap_px == 120

    def test_invalid_file_values_raise(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("engine:\n  default_element_confidence: 2.0\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(str(path)).load_config()

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[engine]\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(str(path)).load_config()

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(str(path)).load_config()

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        manager = ConfigManager(str(path))
        cfg = AppConfig(engine=EngineConfig(name_pair_max_gap_px=90))
        manager.save_config(cfg)
        assert manager.reload_config().engine.name_pair_max_gap_px == 90

    def test_create_default_config_file(self, tmp_path):
        path = tmp_path / "settings.json"
        ConfigManager().create_default_config_file(str(path))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["engine"]["small_font_threshold_px"] == 40

    def test_get_config_caches(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "absent.yaml"))
        assert manager.get_config() is manager.get_config()


@contextmanager
def _preserved_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in saved_handlers:
                handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


class TestLoggingManager:
    def test_parse_size(self):
        assert LoggingManager._parse_size("10MB") == 10 * 1024 * 1024
        assert LoggingManager._parse_size("512kb") == 512 * 1024
        assert LoggingManager._parse_size("1GB") == 1024 ** 3
        assert LoggingManager._parse_size("2048") == 2048
        assert LoggingManager._parse_size("lots") == 10 * 1024 * 1024

    def test_setup_creates_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        cfg = AppConfig(logging=LoggingConfig(level="DEBUG", file=str(log_file), console=False))
        with _preserved_root_logger() as root:
            LoggingManager().setup(cfg)
            logging.getLogger("chat_transcript.test").debug("hello")
            for handler in root.handlers:
                handler.flush()
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
        assert os.path.exists(log_file)
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_setup_runs_once(self, tmp_path):
        manager = LoggingManager()
        with _preserved_root_logger() as root:
            manager.setup(AppConfig(logging=LoggingConfig(file="", console=True)))
            handlers = list(root.handlers)
            manager.setup(AppConfig(logging=LoggingConfig(file=str(tmp_path / "x.log"))))
            assert root.handlers == handlers
        assert not (tmp_path / "x.log").exists()
