from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    session_secret_key: str = Field(min_length=32)  # HMAC key for cookie tokens
    previous_secret_keys: list[str] = []  # Still accepted when verifying, never used to sign
    session_backend: Literal["memory", "mongo"] = "memory"
    database_url: str | None = None  # e.g. mongodb://localhost:27017/sessiongate
    store_timeout_ms: int = Field(default=2000, gt=0)  # Upper bound for a single store round trip
    session_ttl_seconds: int = Field(default=30 * 60, gt=0)
    sliding_expiration: bool = True
    session_max_lifetime_seconds: int = Field(default=12 * 60 * 60, gt=0)  # Absolute cap, sliding included
    sweep_interval_seconds: float = Field(default=60.0, gt=0)
    cookie_name: str = "session"
    cookie_secure: bool = True  # Disable only for plain-HTTP local development
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    users: dict[str, str] = {}  # username -> secret for the in-memory user directory
    cors_origins: list[str] = []

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SESSIONGATE_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        if self.session_max_lifetime_seconds < self.session_ttl_seconds:
            raise ValueError("session_max_lifetime_seconds must not be shorter than session_ttl_seconds")
        if self.session_backend == "mongo" and not self.database_url:
            raise ValueError("database_url is required for the mongo session backend")
        if self.cookie_samesite == "none" and not self.cookie_secure:
            # Browsers drop SameSite=None cookies that lack Secure
            raise ValueError("cookie_samesite 'none' requires cookie_secure")
        return self
