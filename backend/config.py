from pydantic import field_validator
from pydantic_settings import BaseSettings
from slowapi import Limiter
from slowapi.util import get_remote_address


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        """Accept both a JSON list and a comma-separated string for CORS_ORIGINS."""
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    # Rooms
    broadcast_capacity: int = 100  # messages buffered per subscriber before dropping the oldest
    room_id_min: int = 100
    room_id_max: int = 999
    create_room_rate_limit: str = "30/minute"

    # Observability
    log_level: str = "INFO"
    sentry_dsn: str = ""
    environment: str = "development"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


settings = Settings()

limiter = Limiter(key_func=get_remote_address)
