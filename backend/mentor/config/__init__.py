"""Configuration module exports."""

from .config_manager import ConfigManager
from .config_models import AppSettings

__all__ = ["AppSettings", "ConfigManager"]
