from enum import StrEnum

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OversizePolicy(StrEnum):
    """What to do with a message larger than the receive buffer."""

    TRUNCATE = "truncate"
    DROP = "drop"
    CLOSE = "close"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "development"

    # Server settings (used by `chat-relay serve`)
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    # Paths to exclude from access logs (e.g., /metrics, /health)
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    # WebSocket relay settings
    WS_PATH: str = "/ws"
    WS_RECEIVE_BUFFER_SIZE: int = 4096  # bytes per message
    WS_OVERSIZE_POLICY: OversizePolicy = OversizePolicy.TRUNCATE
    WS_SEND_TIMEOUT_SECONDS: float | None = 5.0
    WS_BROADCAST_INCLUDE_SENDER: bool = True

    @field_validator("WS_RECEIVE_BUFFER_SIZE")
    @classmethod
    def validate_buffer_size(cls, v: int) -> int:
        """Receive buffer must be able to hold at least one byte."""
        if v <= 0:
            raise ValueError("WS_RECEIVE_BUFFER_SIZE must be positive")
        return v

    @field_validator("WS_SEND_TIMEOUT_SECONDS")
    @classmethod
    def validate_send_timeout(cls, v: float | None) -> float | None:
        """Send timeout is either disabled (None) or strictly positive."""
        if v is not None and v <= 0:
            raise ValueError("WS_SEND_TIMEOUT_SECONDS must be positive")
        return v


app_settings = Settings()
