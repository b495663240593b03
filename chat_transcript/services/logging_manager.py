"""
Logging manager to configure Python logging according to AppConfig.logging.
"""
import logging
from logging.handlers import RotatingFileHandler
import os

from chat_transcript.models.config import LoggingConfig, AppConfig


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024

_SIZE_UNITS = {"KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


class LoggingManager:
    def __init__(self):
        self._configured = False

    def setup(self, cfg: AppConfig) -> None:
        """Configure the root logger once from cfg.logging."""
        if self._configured:
            return

        log_cfg: LoggingConfig = cfg.logging
        level = getattr(logging, log_cfg.level.upper(), logging.INFO)
        formatter = logging.Formatter(LOG_FORMAT)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        if log_cfg.console:
            ch = logging.StreamHandler()
            ch.setLevel(level)
            ch.setFormatter(formatter)
            root_logger.addHandler(ch)

        if log_cfg.file:
            log_dir = os.path.dirname(log_cfg.file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            fh = RotatingFileHandler(log_cfg.file, maxBytes=self._parse_size(log_cfg.max_size), backupCount=3, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(formatter)
            root_logger.addHandler(fh)

        self._configured = True

    @staticmethod
    def _parse_size(size_str: str) -> int:
        """Parse human-readable size (e.g., '10MB') into bytes."""
        s = str(size_str).strip().upper()
        try:
            for unit, factor in _SIZE_UNITS.items():
                if s.endswith(unit):
                    return int(float(s[:-len(unit)]) * factor)
            return int(s)
        except ValueError:
            return DEFAULT_MAX_BYTES
