"""Session management models."""

import secrets
from datetime import datetime, timedelta
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sessiongate.config import Config
from sessiongate.core.db import MongoModel

SessionId = NewType("SessionId", str)

# 32 random bytes: 256 bits of entropy, so collisions among live ids are negligible
SESSION_ID_BYTES = 32


def generate_session_id() -> SessionId:
    return SessionId(secrets.token_urlsafe(SESSION_ID_BYTES))


class Session(MongoModel):
    """Server-side record binding an opaque id to an authenticated subject.

    Stored with the id as ``_id``; a TTL index on expires_at removes stale records.
    """

    id: SessionId = Field(alias="_id", serialization_alias="id")
    subject_id: str
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def check_expiry(self) -> "Session":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        return self

    def is_expired(self, at: datetime) -> bool:
        return self.expires_at <= at


class SessionPolicy(BaseModel):
    """Expiration rules shared by all session stores."""

    ttl: timedelta
    sliding: bool = True
    max_lifetime: timedelta

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_config(cls, config: Config) -> "SessionPolicy":
        return cls(
            ttl=timedelta(seconds=config.session_ttl_seconds),
            sliding=config.sliding_expiration,
            max_lifetime=timedelta(seconds=config.session_max_lifetime_seconds),
        )

    def initial_expiry(self, created_at: datetime) -> datetime:
        return min(created_at + self.ttl, created_at + self.max_lifetime)

    def extended_expiry(self, session: Session, at: datetime) -> datetime:
        """Expiry after activity at ``at``, never past the absolute cap."""
        return min(at + self.ttl, session.created_at + self.max_lifetime)
