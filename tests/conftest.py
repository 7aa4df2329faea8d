"""Shared pytest fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from sessiongate.config import Config
from sessiongate.core.modules.session.codec import SessionCodec
from sessiongate.core.modules.session.models import SessionPolicy
from sessiongate.core.modules.session.store import MemorySessionStore
from sessiongate.core.modules.user.directory import InMemoryUserDirectory
from sessiongate.gateway import AuthGateway

SECRET_KEY = "test-secret-key-0123456789abcdef0123456789"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Create a clock frozen at a fixed instant."""
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def config():
    """Create a config with short lifetimes for testing."""
    return Config(
        session_secret_key=SECRET_KEY,
        session_ttl_seconds=600,
        session_max_lifetime_seconds=3600,
        sliding_expiration=True,
        cookie_secure=False,
        users={"alice": "wonderland", "bob": "builder"},
        _env_file=None,
    )


@pytest.fixture
def policy(config):
    """Create the session policy derived from the test config."""
    return SessionPolicy.from_config(config)


@pytest.fixture
def memory_store(policy, clock):
    """Create an in-memory session store driven by the fake clock."""
    return MemorySessionStore(policy, clock=clock)


@pytest.fixture
def codec(config, policy, clock):
    """Create a codec driven by the fake clock."""
    return SessionCodec(config.session_secret_key, max_age=policy.max_lifetime, clock=clock)


@pytest.fixture
def users(config):
    """Create the in-memory user directory."""
    return InMemoryUserDirectory(config.users)


@pytest.fixture
def gateway(memory_store, codec, users):
    """Create a gateway over the in-memory store."""
    return AuthGateway(memory_store, codec, users)
