"""Tamper-evident cookie tokens for session ids.

A token is ``payload.timestamp.signature`` as produced by itsdangerous: the
payload carries only the session id, the timestamp bounds how long the token
may be replayed, and the HMAC-SHA256 signature covers both. Verification uses
``hmac.compare_digest``.
"""

import hashlib
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from itsdangerous import BadData, TimestampSigner, URLSafeTimedSerializer
from itsdangerous.encoding import base64_decode, base64_encode

from sessiongate.core.modules.session.models import Session, SessionId
from sessiongate.core.modules.session.store import Clock
from sessiongate.utils import now

SESSION_SALT = "sessiongate-session-v1"

# Browsers cap a single cookie at about 4 KB
MAX_TOKEN_LENGTH = 4096


class _ClockedSigner(TimestampSigner):
    def __init__(self, *args: Any, clock: Clock, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._clock = clock

    def get_timestamp(self) -> int:
        return int(self._clock().timestamp())


class SessionCodec:
    """Encodes session ids into signed cookie values and back."""

    def __init__(
        self,
        secret_key: str,
        max_age: timedelta,
        previous_secret_keys: Sequence[str] = (),
        clock: Clock = now,
    ) -> None:
        self.max_age = max_age
        # itsdangerous signs with the last key and accepts any of them
        keys = [*previous_secret_keys, secret_key]
        self._serializer = URLSafeTimedSerializer(
            secret_key=keys,
            salt=SESSION_SALT,
            signer=_ClockedSigner,
            signer_kwargs={"digest_method": hashlib.sha256, "clock": clock},
        )

    def encode(self, session: Session) -> str:
        return self._serializer.dumps(session.id)

    def decode(self, token: str | None) -> SessionId | None:
        """Return the embedded session id, or None for any invalid token."""
        if not token or len(token) > MAX_TOKEN_LENGTH or not token.isascii():
            return None
        if not _has_canonical_signature(token):
            return None
        try:
            value = self._serializer.loads(token, max_age=int(self.max_age.total_seconds()))
        except (BadData, ValueError):
            return None
        if not isinstance(value, str) or not value:
            return None
        return SessionId(value)


def _has_canonical_signature(token: str) -> bool:
    # Unpadded base64 leaves spare low bits in the last character; flipping them
    # decodes to the same digest, so only the canonical spelling is accepted.
    _, sep, signature = token.rpartition(".")
    if not sep or not signature:
        return False
    try:
        return base64_encode(base64_decode(signature)) == signature.encode("ascii")
    except BadData:
        return False
