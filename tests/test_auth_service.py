"""
TripDesk Backend — Auth Service Unit Tests
============================================

What:  Login, logout and cookie signing with a mocked repository.
How:   Real bcrypt at cost 4 (fast), in-memory session store.

What we test:
    ✅ Valid credentials open a session
    ✅ Unknown user and wrong password fail with the same error
    ✅ Unknown user still pays for one bcrypt comparison (timing equalized)
    ✅ Tampered or foreign-secret cookies resolve to no session
    ✅ Logout invalidates the token
"""

from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from tripdesk.exceptions import InvalidCredentialsError, PasswordHashError
from tripdesk.services.auth_service import AuthService, PasswordHasher
from tripdesk.services.session_store import InMemorySessionStore


def _service(repository, *, secret="test-secret", equalize_timing=True):
    return AuthService(
        repository,
        InMemorySessionStore(),
        PasswordHasher(rounds=4),
        secret=secret,
        session_ttl=timedelta(hours=2),
        equalize_timing=equalize_timing,
    )


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


class TestPasswordHasher:

    @pytest.mark.asyncio
    async def test_hash_and_verify(self, hasher):
        digest = await hasher.hash("admin123")

        assert digest.startswith("$2b$04$")
        assert await hasher.verify("admin123", digest)
        assert not await hasher.verify("admin124", digest)

    @pytest.mark.asyncio
    async def test_hashes_are_salted(self, hasher):
        assert await hasher.hash("same") != await hasher.hash("same")

    @pytest.mark.asyncio
    async def test_long_password_is_truncated_not_rejected(self, hasher):
        long_password = "x" * 100
        digest = await hasher.hash(long_password)
        assert await hasher.verify(long_password, digest)

    @pytest.mark.asyncio
    async def test_malformed_stored_hash(self, hasher):
        with pytest.raises(PasswordHashError) as exc_info:
            await hasher.verify("admin123", "not-a-bcrypt-hash")
        assert exc_info.value.message == "Login failed."


class TestLogin:

    @pytest.mark.asyncio
    async def test_valid_credentials(self, mock_repository, hasher):
        digest = await hasher.hash("admin123")
        mock_repository.find_admin_by_username.return_value = SimpleNamespace(
            id=1, username="admin", password_hash=digest
        )
        service = _service(mock_repository)

        session = await service.login("admin", "admin123")

        assert session.username == "admin"
        assert await service.current_session(session.token) == session

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_repository, hasher):
        digest = await hasher.hash("admin123")
        mock_repository.find_admin_by_username.return_value = SimpleNamespace(
            id=1, username="admin", password_hash=digest
        )
        service = _service(mock_repository)

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await service.login("admin", "nope")
        assert exc_info.value.message == "Invalid credentials."

    @pytest.mark.asyncio
    async def test_unknown_user_same_error(self, mock_repository):
        service = _service(mock_repository)

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await service.login("ghost", "admin123")
        assert exc_info.value.message == "Invalid credentials."

    @pytest.mark.asyncio
    async def test_unknown_user_runs_dummy_compare(self, mock_repository):
        service = _service(mock_repository)
        service.hasher.verify = AsyncMock(return_value=False)

        with pytest.raises(InvalidCredentialsError):
            await service.login("ghost", "admin123")
        service.hasher.verify.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_dummy_compare_when_disabled(self, mock_repository):
        service = _service(mock_repository, equalize_timing=False)
        service.hasher.verify = AsyncMock(return_value=False)

        with pytest.raises(InvalidCredentialsError):
            await service.login("ghost", "admin123")
        service.hasher.verify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_logout_invalidates(self, mock_repository, hasher):
        digest = await hasher.hash("admin123")
        mock_repository.find_admin_by_username.return_value = SimpleNamespace(
            id=1, username="admin", password_hash=digest
        )
        service = _service(mock_repository)
        session = await service.login("admin", "admin123")

        await service.logout(session.token)
        await service.logout(None)

        assert await service.current_session(session.token) is None


class TestCookieSigning:

    def test_round_trip(self, mock_repository):
        service = _service(mock_repository)
        signed = service.sign_token("abc123")

        assert signed != "abc123"
        assert service.unsign_token(signed) == "abc123"

    def test_tampered_cookie(self, mock_repository):
        service = _service(mock_repository)
        signed = service.sign_token("abc123")

        assert service.unsign_token("zzz" + signed[3:]) is None
        assert service.unsign_token("abc123") is None
        assert service.unsign_token("") is None
        assert service.unsign_token(None) is None

    def test_other_secret_rejected(self, mock_repository):
        signed = _service(mock_repository, secret="one").sign_token("abc123")
        assert _service(mock_repository, secret="two").unsign_token(signed) is None

    @pytest.mark.asyncio
    async def test_session_from_cookie(self, mock_repository, hasher):
        digest = await hasher.hash("admin123")
        mock_repository.find_admin_by_username.return_value = SimpleNamespace(
            id=1, username="admin", password_hash=digest
        )
        service = _service(mock_repository)
        session = await service.login("admin", "admin123")

        found = await service.session_from_cookie(service.sign_token(session.token))
        assert found == session
