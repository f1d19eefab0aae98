"""Application configuration using pydantic-settings."""

import warnings
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# Sentinel value that indicates an unconfigured API key
_UNCONFIGURED_API_KEY = "CHANGE_ME"

# Find .env file: check backend dir first, then project root
_BACKEND_DIR = Path(__file__).parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _BACKEND_DIR / ".env" if (_BACKEND_DIR / ".env").exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    IMPORTANT: The API key guarding this service must be explicitly configured
    via environment variables or .env file. The default uses the 'CHANGE_ME'
    sentinel to make misconfiguration obvious.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote HealthGest backend
    backend_base_url: str = "https://healthgestbackend.onrender.com"
    request_timeout_seconds: float = 30.0

    # Authentication
    api_key: str = _UNCONFIGURED_API_KEY

    # Dashboard tuning
    change_dead_band: float = 0.1
    risk_display_threshold: float = 0.2
    insight_stagger_seconds: float = 5.0

    # Application
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    log_level: str = "INFO"
    debug: bool = False

    def model_post_init(self, __context) -> None:
        """Warn about unconfigured credentials."""
        if self.api_key == _UNCONFIGURED_API_KEY:
            warnings.warn(
                "API_KEY not configured! Set API_KEY environment variable.",
                UserWarning,
                stacklevel=2,
            )


settings = Settings()
