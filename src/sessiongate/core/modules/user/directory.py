import hashlib
import secrets
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from sessiongate.core.modules.user.models import Credentials, Principal

# Compared against when the username is unknown so both failures cost the same
_DUMMY_DIGEST = hashlib.sha256(secrets.token_bytes(32)).digest()


def secret_digest(secret: str) -> bytes:
    """Fixed-length digest so comparisons never depend on the secret's length."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


@runtime_checkable
class UserDirectory(Protocol):
    """Credential check and principal lookup supplied by the hosting application."""

    async def verify_credentials(self, credentials: Credentials) -> str | None: ...

    async def load_principal(self, subject_id: str) -> Principal | None: ...


class InMemoryUserDirectory:
    """Fixed set of accounts; the username doubles as subject id."""

    def __init__(self, accounts: Mapping[str, str]) -> None:
        self._digests = {username: secret_digest(secret) for username, secret in accounts.items()}

    async def verify_credentials(self, credentials: Credentials) -> str | None:
        expected = self._digests.get(credentials.username)
        matched = secrets.compare_digest(
            secret_digest(credentials.password),
            expected if expected is not None else _DUMMY_DIGEST,
        )
        if expected is None or not matched:
            return None
        return credentials.username

    async def load_principal(self, subject_id: str) -> Principal | None:
        if subject_id not in self._digests:
            return None
        return Principal(subject_id=subject_id, username=subject_id)

    def __len__(self) -> int:
        return len(self._digests)
