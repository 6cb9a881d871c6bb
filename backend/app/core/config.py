# backend/app/core/config.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BROADCAST_BATCH_SIZE,
    MAX_EMOJI_LENGTH,
    MAX_MESSAGE_LENGTH,
)


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.info(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    database_url: str = Field(
        default="sqlite:///./societyhub.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = False

    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-not-for-production"),
        description="Secret key for JWT tokens",
    )
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = 1440

    # Messaging limits
    max_message_length: int = MAX_MESSAGE_LENGTH
    max_emoji_length: int = MAX_EMOJI_LENGTH

    # Notification fan-out
    notification_broadcast_batch_size: int = Field(default=BROADCAST_BATCH_SIZE, ge=1)

    # Realtime presence: write offline only when a user's last connection closes
    presence_refcount_enabled: bool = False

    log_level: str = "INFO"
    cors_origins: str = Field(
        default="http://localhost:5173",
        description="Comma-separated list of allowed browser origins",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        return str(value).strip().upper() or "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
