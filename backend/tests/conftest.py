"""Shared fixtures for the mentor backend tests."""

import pytest

from mentor.config.config_manager import ConfigManager
from mentor.config.config_models import AppSettings


def make_config(**overrides) -> ConfigManager:
    """ConfigManager with explicit settings instead of the process environment."""
    values = {
        "gemini_api_key": "test-gemini-key",
        "zoo_cad_api_key": "test-cad-key",
        "zoo_cad_api_url": "https://cad.example.test/v1/generate",
        "use_real_cad": False,
    }
    values.update(overrides)
    manager = ConfigManager(load_env=False)
    manager._app_settings = AppSettings(_env_file=None, **values)
    return manager


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def live_config():
    return make_config(use_real_cad=True)


@pytest.fixture
def config_factory():
    return make_config
