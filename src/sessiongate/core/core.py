from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient

from sessiongate.config import Config
from sessiongate.core.modules.session.codec import SessionCodec
from sessiongate.core.modules.session.models import SessionPolicy
from sessiongate.core.modules.session.mongo_store import MongoSessionStore
from sessiongate.core.modules.session.store import Clock, MemorySessionStore, SessionStore
from sessiongate.core.modules.user.directory import InMemoryUserDirectory, UserDirectory
from sessiongate.errors import CapacityError
from sessiongate.gateway import AuthGateway
from sessiongate.utils import now

logger = structlog.get_logger(__name__)


class Core:
    """Container providing config, the session store, codec and gateway."""

    config: Config
    clock: Clock
    policy: SessionPolicy
    store: SessionStore
    codec: SessionCodec
    users: UserDirectory
    gateway: AuthGateway

    def __init__(
        self,
        config: Config,
        store: SessionStore | None = None,
        users: UserDirectory | None = None,
        clock: Clock = now,
    ) -> None:
        """Build the store for the configured backend unless one is supplied."""
        self.config = config
        self.clock = clock
        self.policy = SessionPolicy.from_config(config)
        self.mongo_client: AsyncMongoClient[dict[str, Any]] | None = None
        self.store = store if store is not None else self._create_store(clock)
        self.codec = SessionCodec(
            config.session_secret_key,
            max_age=self.policy.max_lifetime,
            previous_secret_keys=config.previous_secret_keys,
            clock=clock,
        )
        self.users = users if users is not None else InMemoryUserDirectory(config.users)
        self.gateway = AuthGateway(self.store, self.codec, self.users)
        self._sweeper: asyncio.Task[None] | None = None

    def _create_store(self, clock: Clock) -> SessionStore:
        if self.config.session_backend == "memory":
            return MemorySessionStore(self.policy, clock=clock)

        database_url = self.config.database_url or ""
        self.mongo_client = AsyncMongoClient(
            database_url,
            uuidRepresentation="standard",
            tz_aware=True,
            timeoutMS=self.config.store_timeout_ms,
            serverSelectionTimeoutMS=self.config.store_timeout_ms,
        )
        database = self.mongo_client.get_database(urlparse(database_url).path[1:] or "sessiongate")
        return MongoSessionStore(database, self.policy, clock=clock)

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.store.open()
        self._sweeper = asyncio.create_task(self._sweep_periodically())
        logger.info(
            "core_started",
            backend=self.config.session_backend,
            sliding=self.policy.sliding,
            ttl_seconds=self.config.session_ttl_seconds,
        )

    async def on_stop(self) -> None:
        """Stop the sweeper, then close the store and MongoDB connection."""
        try:
            if self._sweeper is not None:
                self._sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._sweeper
        finally:
            self._sweeper = None
            try:
                await self.store.close()
            finally:
                if self.mongo_client is not None:
                    await self.mongo_client.aclose()

    async def _sweep_periodically(self) -> None:
        while True:
            await asyncio.sleep(self.config.sweep_interval_seconds)
            try:
                removed = await self.store.sweep_expired()
            except CapacityError:
                logger.warning("session_sweep_failed", reason="store_unavailable")
                continue
            except Exception:
                # One bad sweep must not stop later ones
                logger.exception("session_sweep_failed")
                continue
            if removed:
                logger.debug("expired_sessions_swept", count=removed)
