"""
Configuration management for the mentor backend.
"""

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from mentor.config.config_models import AppSettings

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads and caches application settings."""

    def __init__(self, project_root: Optional[Path] = None, load_env: bool = True):
        self._project_root = project_root or Path(__file__).resolve().parents[3]
        self._app_settings: Optional[AppSettings] = None

        if load_env:
            dotenv_path = self._project_root / ".env"
            load_dotenv(dotenv_path=dotenv_path)
            logger.info(f"Loading .env from {dotenv_path}")

    @property
    def app_settings(self) -> AppSettings:
        """Get application settings (cached)."""
        if self._app_settings is None:
            try:
                self._app_settings = AppSettings()
                logger.info("Application settings loaded successfully")
            except ValidationError as e:
                logger.error(f"Failed to load application settings, using defaults: {e}")
                self._app_settings = AppSettings.model_construct()
        return self._app_settings

    def reload(self) -> AppSettings:
        """Drop the cached settings and read the environment again."""
        self._app_settings = None
        return self.app_settings

    def describe(self) -> dict:
        """Settings summary that is safe to log (credentials reduced to presence)."""
        settings = self.app_settings
        return {
            "gemini_key_loaded": bool(settings.gemini_api_key),
            "cad_key_loaded": bool(settings.zoo_cad_api_key),
            "cad_url": settings.zoo_cad_api_url or None,
            "cad_mode": settings.cad_mode,
            "port": settings.port,
            "client_url": settings.client_url,
        }


# Global configuration manager instance
config_manager = ConfigManager()
