import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # WebSocket settings
    WS_PATH: str = "/"
    WS_SEND_TIMEOUT: float = 5.0  # seconds per outbound send

    ENVIRONMENT: str = "development"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE_PATH: str | None = None
    # Paths to exclude from access logs (e.g., /metrics, /health)
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Reject ports outside the TCP range."""
        if not 0 < v < 65536:
            raise ValueError(f"PORT must be between 1 and 65535, got {v}")
        return v

    @field_validator("WS_SEND_TIMEOUT")
    @classmethod
    def validate_send_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("WS_SEND_TIMEOUT must be positive")
        return v

    @field_validator("WS_PATH")
    @classmethod
    def validate_ws_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("WS_PATH must start with '/'")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and make sure logging knows it."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level


app_settings = Settings()
