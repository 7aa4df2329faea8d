from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from sessiongate.core.modules.session.models import Session, SessionId, SessionPolicy, generate_session_id
from sessiongate.core.modules.session.store import MAX_ID_ATTEMPTS, Clock
from sessiongate.errors import CapacityError
from sessiongate.utils import now

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def _store_call(operation: str) -> AsyncIterator[None]:
    """Translate any driver failure, timeouts included, into a retryable CapacityError."""
    try:
        yield
    except PyMongoError as e:
        logger.warning("session_store_unavailable", operation=operation, error=type(e).__name__)
        raise CapacityError from e


class MongoSessionStore:
    """Session store backed by a MongoDB collection.

    Each operation is a single-document atomic command, so concurrent calls on
    one id never observe a half-written record. Round-trip timeouts come from the
    client (``timeoutMS``).
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]], policy: SessionPolicy, clock: Clock = now) -> None:
        self.policy = policy
        self._clock = clock
        self._collection = database.get_collection("sessions")

    async def open(self) -> None:
        """Create indexes on startup."""
        async with _store_call("open"):
            # Single index for subject_id (for finding sessions by subject)
            await self._collection.create_index([("subject_id", 1)])
            # TTL index removes records once expires_at has passed
            await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def close(self) -> None:
        """The owning client is closed by Core."""

    async def create(self, subject_id: str) -> Session:
        created_at = self._clock()
        async with _store_call("create"):
            for _ in range(MAX_ID_ATTEMPTS):
                session = Session(
                    id=generate_session_id(),
                    subject_id=subject_id,
                    created_at=created_at,
                    expires_at=self.policy.initial_expiry(created_at),
                )
                try:
                    await self._collection.insert_one(session.to_mongo())
                except DuplicateKeyError:
                    continue
                logger.debug("session_created", subject_id=subject_id, expires_at=session.expires_at.isoformat())
                return session
        raise CapacityError("Could not allocate a session id")

    async def get(self, session_id: SessionId) -> Session | None:
        async with _store_call("get"):
            doc = await self._collection.find_one({"_id": session_id, "expires_at": {"$gt": self._clock()}})
        return Session.model_validate(doc) if doc is not None else None

    async def touch(self, session_id: SessionId) -> Session | None:
        if not self.policy.sliding:
            return await self.get(session_id)

        at = self._clock()
        max_lifetime_ms = int(self.policy.max_lifetime.total_seconds() * 1000)
        async with _store_call("touch"):
            # The filter rejects expired records, so no touch revives a session
            doc = await self._collection.find_one_and_update(
                {"_id": session_id, "expires_at": {"$gt": at}},
                [
                    {
                        "$set": {
                            "expires_at": {
                                "$min": [at + self.policy.ttl, {"$add": ["$created_at", max_lifetime_ms]}],
                            }
                        }
                    }
                ],
                return_document=ReturnDocument.AFTER,
            )
        return Session.model_validate(doc) if doc is not None else None

    async def revoke(self, session_id: SessionId) -> None:
        async with _store_call("revoke"):
            await self._collection.delete_one({"_id": session_id})

    async def sweep_expired(self) -> int:
        async with _store_call("sweep_expired"):
            result = await self._collection.delete_many({"expires_at": {"$lte": self._clock()}})
        return result.deleted_count
