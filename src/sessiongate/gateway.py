import structlog

from sessiongate.core.modules.session.codec import SessionCodec
from sessiongate.core.modules.session.models import Session
from sessiongate.core.modules.session.store import SessionStore
from sessiongate.core.modules.user.directory import UserDirectory
from sessiongate.core.modules.user.models import Credentials, Principal
from sessiongate.errors import UnauthenticatedError, UnauthorizedError

logger = structlog.get_logger(__name__)


class AuthGateway:
    """Issues, reads, refreshes and revokes sessions for the HTTP layer.

    Every authentication failure collapses into UnauthenticatedError; a store
    outage surfaces as CapacityError instead, so it is never mistaken for a
    mass logout.
    """

    def __init__(self, store: SessionStore, codec: SessionCodec, users: UserDirectory) -> None:
        self._store = store
        self._codec = codec
        self._users = users

    async def login(self, credentials: Credentials) -> str:
        """Verify credentials and return a cookie token for a new session."""
        subject_id = await self._users.verify_credentials(credentials)
        if subject_id is None:
            logger.info("login_rejected")
            raise UnauthorizedError
        session = await self._store.create(subject_id)
        logger.info("login_succeeded", subject_id=subject_id)
        return self._codec.encode(session)

    async def authenticate(self, token: str | None) -> str:
        """Return the subject id bound to the token's session."""
        session = await self.resolve(token)
        return session.subject_id

    async def resolve(self, token: str | None) -> Session:
        """Return the live session for the token, extending it under sliding expiration."""
        session_id = self._codec.decode(token)
        if session_id is None:
            raise UnauthenticatedError
        session = await self._store.touch(session_id)
        if session is None:
            raise UnauthenticatedError
        return session

    async def load_principal(self, subject_id: str) -> Principal:
        principal = await self._users.load_principal(subject_id)
        if principal is None:
            raise UnauthenticatedError
        return principal

    async def logout(self, token: str | None) -> None:
        """Revoke the token's session; unreadable tokens are ignored."""
        session_id = self._codec.decode(token)
        if session_id is None:
            return
        await self._store.revoke(session_id)
        logger.info("session_revoked")
