"""Tests for the authentication gateway."""

from unittest.mock import AsyncMock

import pytest

from sessiongate.core.modules.user.models import Credentials
from sessiongate.errors import CapacityError, UnauthenticatedError, UnauthorizedError
from sessiongate.gateway import AuthGateway


def alice() -> Credentials:
    return Credentials(username="alice", password="wonderland")


class TestLogin:
    """Tests for credential login."""

    @pytest.mark.asyncio
    async def test_login_issues_token(self, gateway, memory_store):
        """Test that valid credentials create a session and return a token."""
        token = await gateway.login(alice())
        assert token
        assert len(memory_store) == 1

    @pytest.mark.asyncio
    async def test_unknown_user_and_wrong_password_look_the_same(self, gateway, memory_store):
        """Test that both failure modes raise the same error with the same message."""
        with pytest.raises(UnauthorizedError) as unknown:
            await gateway.login(Credentials(username="mallory", password="wonderland"))
        with pytest.raises(UnauthorizedError) as wrong:
            await gateway.login(Credentials(username="alice", password="guess"))
        assert str(unknown.value) == str(wrong.value) == "Invalid credentials"
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_store_outage_on_login(self, codec, users):
        """Test that a store failure during login surfaces as CapacityError, not bad credentials."""
        broken = AsyncMock()
        broken.create.side_effect = CapacityError
        with pytest.raises(CapacityError):
            await AuthGateway(broken, codec, users).login(alice())


class TestAuthenticate:
    """Tests for resolving tokens to subjects."""

    @pytest.mark.asyncio
    async def test_login_authenticate_logout_scenario(self, gateway):
        """Test alice's full round: login, authenticate, logout, rejected."""
        token = await gateway.login(alice())
        assert await gateway.authenticate(token) == "alice"

        await gateway.logout(token)
        with pytest.raises(UnauthenticatedError):
            await gateway.authenticate(token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "not-a-token"])
    async def test_invalid_token_is_unauthenticated(self, gateway, token):
        """Test that undecodable tokens collapse to UnauthenticatedError."""
        with pytest.raises(UnauthenticatedError, match="Not authenticated"):
            await gateway.authenticate(token)

    @pytest.mark.asyncio
    async def test_expired_session_is_unauthenticated(self, gateway, clock, policy):
        """Test that a valid token for an expired session is rejected the same way."""
        token = await gateway.login(alice())
        clock.advance(seconds=policy.ttl.total_seconds())
        with pytest.raises(UnauthenticatedError, match="Not authenticated"):
            await gateway.authenticate(token)

    @pytest.mark.asyncio
    async def test_activity_slides_expiry(self, gateway, clock, policy):
        """Test that authenticating keeps a session alive past its initial ttl."""
        token = await gateway.login(alice())
        for _ in range(3):
            clock.advance(seconds=policy.ttl.total_seconds() - 1)
            assert await gateway.authenticate(token) == "alice"

    @pytest.mark.asyncio
    async def test_resolve_returns_session(self, gateway, clock, policy):
        """Test that resolve exposes the refreshed session."""
        token = await gateway.login(alice())
        clock.advance(seconds=60)
        session = await gateway.resolve(token)
        assert session.subject_id == "alice"
        assert session.expires_at == clock() + policy.ttl

    @pytest.mark.asyncio
    async def test_store_outage_is_not_unauthenticated(self, codec, users, memory_store):
        """Test that a store failure propagates as CapacityError, not a logout."""
        token = await AuthGateway(memory_store, codec, users).login(alice())
        broken = AsyncMock()
        broken.touch.side_effect = CapacityError
        with pytest.raises(CapacityError):
            await AuthGateway(broken, codec, users).authenticate(token)


class TestLogout:
    """Tests for logout."""

    @pytest.mark.asyncio
    async def test_logout_twice(self, gateway, memory_store):
        """Test that logging out twice is harmless."""
        token = await gateway.login(alice())
        await gateway.logout(token)
        await gateway.logout(token)
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "tampered.token.value"])
    async def test_logout_with_invalid_token_is_noop(self, gateway, memory_store, token):
        """Test that undecodable tokens leave other sessions untouched."""
        await gateway.login(alice())
        await gateway.logout(token)
        assert len(memory_store) == 1

    @pytest.mark.asyncio
    async def test_store_outage_on_logout(self, gateway, codec, users):
        """Test that logout does not report success when the session could not be revoked."""
        token = await gateway.login(alice())
        broken = AsyncMock()
        broken.revoke.side_effect = CapacityError
        with pytest.raises(CapacityError):
            await AuthGateway(broken, codec, users).logout(token)
        assert await gateway.authenticate(token) == "alice"

    @pytest.mark.asyncio
    async def test_logout_invalid_token_skips_store(self, codec, users):
        """Test that an unreadable token never reaches the store, even during an outage."""
        broken = AsyncMock()
        broken.revoke.side_effect = CapacityError
        await AuthGateway(broken, codec, users).logout("garbage")
        broken.revoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_logout_only_revokes_own_session(self, gateway):
        """Test that one device logging out keeps the other signed in."""
        first = await gateway.login(alice())
        second = await gateway.login(alice())
        await gateway.logout(first)
        assert await gateway.authenticate(second) == "alice"


class TestLoadPrincipal:
    """Tests for principal lookup."""

    @pytest.mark.asyncio
    async def test_known_subject(self, gateway):
        """Test that the directory's principal is returned."""
        principal = await gateway.load_principal("bob")
        assert principal.username == "bob"

    @pytest.mark.asyncio
    async def test_removed_subject_is_unauthenticated(self, gateway):
        """Test that a session for a vanished principal is treated as unauthenticated."""
        with pytest.raises(UnauthenticatedError):
            await gateway.load_principal("ghost")
