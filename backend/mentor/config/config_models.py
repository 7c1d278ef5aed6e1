"""Pydantic models for configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Core surface
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    zoo_cad_api_key: str = Field(default="", validation_alias="ZOO_CAD_API_KEY")
    zoo_cad_api_url: str = Field(default="", validation_alias="ZOO_CAD_API_URL")
    use_real_cad: bool = Field(default=False, validation_alias="USE_REAL_CAD")
    port: int = Field(default=4000, validation_alias="PORT")
    client_url: str = Field(
        default="http://localhost:3000", validation_alias="CLIENT_URL"
    )

    # Logging and dev server
    app_name: str = "Mentor Backend"
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    app_log_dir: str = Field(default="", validation_alias="APP_LOG_DIR")
    environment: str = Field(default="production", validation_alias="ENVIRONMENT")
    debug_mode: bool = Field(default=False, validation_alias="DEBUG_MODE")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "env_prefix": "",
        "populate_by_name": True,
    }

    @property
    def cad_mode(self) -> str:
        return "REAL" if self.use_real_cad else "MOCK"


__all__ = ["AppSettings"]
