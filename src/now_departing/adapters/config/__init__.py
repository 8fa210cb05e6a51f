"""Configuration adapters."""

from now_departing.adapters.config.app_config import AppConfig
from now_departing.adapters.config.line_directory import LineDirectory

__all__ = ["AppConfig", "LineDirectory"]
