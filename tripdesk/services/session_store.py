"""
TripDesk Backend — Admin Session Store
========================================

What:  Server-side state behind the admin session cookie.
How:   SessionStore is the interface; InMemorySessionStore keeps sessions in
       a dict keyed by an opaque random token.
Who:   Owned by AuthService; one instance per process.

Expiry:
    Fixed at creation (created_at + ttl). Reading a session never extends
    it. Expired entries are dropped when looked up and swept on every
    create().

Limitation:
    InMemorySessionStore lives in process memory. Restarting the process
    logs out every administrator, and two processes do not share sessions.
    A multi-instance deployment needs a shared SessionStore implementation
    (for example backed by Redis or the database) passed to AuthService.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Session:
    """Proof of a successful admin login."""
    token: str
    admin_id: int
    username: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SessionStore(ABC):
    """
    Contract:
        - create() issues a fresh unguessable token
        - get() returns None for unknown or expired tokens
        - delete() is idempotent
    """

    @abstractmethod
    async def create(self, admin_id: int, username: str, ttl: timedelta) -> Session:
        ...

    @abstractmethod
    async def get(self, token: str) -> Optional[Session]:
        ...

    @abstractmethod
    async def delete(self, token: str) -> None:
        ...


class InMemorySessionStore(SessionStore):
    """Process-local SessionStore. Mutated only by create/delete/expiry."""

    TOKEN_BYTES = 32

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self, admin_id: int, username: str, ttl: timedelta) -> Session:
        now = self._clock()
        self._purge_expired(now)
        token = secrets.token_urlsafe(self.TOKEN_BYTES)
        session = Session(
            token=token,
            admin_id=admin_id,
            username=username,
            created_at=now,
            expires_at=now + ttl,
        )
        self._sessions[token] = session
        return session

    async def get(self, token: str) -> Optional[Session]:
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            self._sessions.pop(token, None)
            return None
        return session

    async def delete(self, token: str) -> None:
        self._sessions.pop(token, None)

    def _purge_expired(self, now: datetime) -> None:
        expired = [token for token, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug("Purged %d expired sessions", len(expired))
