"""
TripDesk Backend — Auth Service
=================================

What:  Password hashing, admin login/logout, and session lookup.
How:   bcrypt for passwords (run in the threadpool so hashing never blocks
       the event loop), a SessionStore for server-side session state, and an
       itsdangerous TimestampSigner for the cookie value.
Who:   Built once by main.create_app(); used by the admin routes, the
       require_admin dependency and the startup bootstrap.

Login flow:
    username lookup ──► not found ──► (dummy bcrypt check) ──► InvalidCredentialsError
                    └─► found ──► bcrypt.checkpw ──► mismatch ──► InvalidCredentialsError
                                                 └─► match ──► SessionStore.create()

    Both failure branches raise the same error with the same message. When
    auth_equalize_timing is on, the unknown-username branch also pays for
    one bcrypt comparison so response time does not reveal which branch ran.

Cookie format:
    "<token>.<timestamp>.<signature>" (TimestampSigner). A cookie that is
    tampered with, signed with another secret, or older than the session
    lifetime resolves to no session.
"""

import logging
from datetime import timedelta
from typing import Optional

import bcrypt
from itsdangerous import BadSignature, TimestampSigner
from starlette.concurrency import run_in_threadpool

from tripdesk.config import Settings
from tripdesk.exceptions import InvalidCredentialsError, PasswordHashError
from tripdesk.services.repository import Repository
from tripdesk.services.session_store import Session, SessionStore

logger = logging.getLogger(__name__)


# bcrypt only reads the first 72 bytes; newer releases raise instead of truncating.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


class PasswordHasher:
    """Salted bcrypt hashing at a fixed cost factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    async def hash(self, password: str) -> str:
        def _hash() -> bytes:
            return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=self.rounds))

        try:
            digest = await run_in_threadpool(_hash)
        except ValueError as e:
            raise PasswordHashError(
                message="Password hashing failed.",
                context={"error_type": type(e).__name__},
            )
        return digest.decode("utf-8")

    async def verify(self, password: str, password_hash: str) -> bool:
        """
        Check a password against a stored digest.

        Raises:
            PasswordHashError: the stored digest is not a valid bcrypt hash.
        """
        def _check() -> bool:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))

        try:
            return await run_in_threadpool(_check)
        except ValueError as e:
            logger.error("Password compare failed: %s", type(e).__name__)
            raise PasswordHashError(context={"error_type": type(e).__name__})


class AuthService:
    """Admin authentication and session lifecycle."""

    COOKIE_SALT = "tripdesk.admin-session"

    def __init__(
        self,
        repository: Repository,
        session_store: SessionStore,
        hasher: PasswordHasher,
        *,
        secret: str,
        session_ttl: timedelta,
        equalize_timing: bool = True,
    ):
        self.repository = repository
        self.session_store = session_store
        self.hasher = hasher
        self.session_ttl = session_ttl
        self.equalize_timing = equalize_timing
        self._signer = TimestampSigner(secret, salt=self.COOKIE_SALT)
        self._dummy_hash: Optional[str] = None

    @classmethod
    def from_settings(
        cls, settings: Settings, repository: Repository, session_store: SessionStore
    ) -> "AuthService":
        return cls(
            repository,
            session_store,
            PasswordHasher(rounds=settings.bcrypt_rounds),
            secret=settings.session_secret,
            session_ttl=timedelta(seconds=settings.session_ttl_seconds),
            equalize_timing=settings.auth_equalize_timing,
        )

    # ── Login / logout ────────────────────────────────────────────────────

    async def login(self, username: str, password: str) -> Session:
        """
        Verify credentials and open a new session.

        Raises:
            InvalidCredentialsError: unknown username or wrong password.
            DatabaseError / PasswordHashError: infrastructure failure (500).
        """
        admin = await self.repository.find_admin_by_username(username)
        if admin is None:
            if self.equalize_timing:
                await self.hasher.verify(password, await self._get_dummy_hash())
            logger.warning("Admin login rejected")
            raise InvalidCredentialsError()

        if not await self.hasher.verify(password, admin.password_hash):
            logger.warning("Admin login rejected")
            raise InvalidCredentialsError()

        session = await self.session_store.create(admin.id, admin.username, self.session_ttl)
        logger.info("Admin '%s' logged in", admin.username)
        return session

    async def logout(self, token: Optional[str]) -> None:
        """Destroy the session behind `token`; a no-op when there is none."""
        if token:
            await self.session_store.delete(token)

    async def current_session(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None
        return await self.session_store.get(token)

    # ── Cookie value ──────────────────────────────────────────────────────

    def sign_token(self, token: str) -> str:
        return self._signer.sign(token).decode("utf-8")

    def unsign_token(self, cookie_value: Optional[str]) -> Optional[str]:
        """Recover the session token from a cookie, or None if it does not verify."""
        if not cookie_value:
            return None
        try:
            raw = self._signer.unsign(
                cookie_value, max_age=int(self.session_ttl.total_seconds())
            )
        except BadSignature:
            return None
        return raw.decode("utf-8")

    async def session_from_cookie(self, cookie_value: Optional[str]) -> Optional[Session]:
        return await self.current_session(self.unsign_token(cookie_value))

    async def _get_dummy_hash(self) -> str:
        # Same cost factor as real hashes so the comparison takes as long.
        if self._dummy_hash is None:
            self._dummy_hash = await self.hasher.hash("tripdesk-timing-placeholder")
        return self._dummy_hash
