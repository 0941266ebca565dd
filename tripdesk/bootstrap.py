"""
TripDesk Backend — Startup Bootstrap
======================================

What:  One-time startup step: bring the schema to head and make sure the
       configured administrator exists.
When:  From the application lifespan, before the first request is served.

Failure policy:
    Nothing here stops the process. If the schema cannot be initialized or
    the admin cannot be hashed/inserted, the error is logged and the server
    keeps running without a usable admin account until an operator fixes
    the cause and restarts (degraded start).

    Schema initialization is retried with exponential backoff while the
    database is unreachable (e.g. a Postgres container still starting).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from tripdesk.config import Settings
from tripdesk.database import Database
from tripdesk.exceptions import DatabaseError, DuplicateUsernameError, TripDeskError
from tripdesk.schema import initialize_schema
from tripdesk.services.auth_service import PasswordHasher
from tripdesk.services.repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class BootstrapResult:
    schema_revision: Optional[str] = None
    admin_created: bool = False
    admin_ready: bool = False

    @property
    def ok(self) -> bool:
        return self.schema_revision is not None and self.admin_ready


async def _initialize_schema_with_retry(database: Database, settings: Settings) -> str:
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.schema_init_attempts),
        wait=wait_exponential_jitter(initial=1, max=settings.schema_init_max_wait),
        retry=retry_if_exception_type(DatabaseError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            return await initialize_schema(database.engine)


async def ensure_default_admin(
    repository: Repository, hasher: PasswordHasher, username: str, password: str
) -> bool:
    """
    Create the admin `username` unless it already exists.

    Returns True when a new account was inserted. An existing account is
    left untouched, including its password.
    """
    existing = await repository.find_admin_by_username(username)
    if existing is not None:
        logger.info("Admin '%s' already present", username)
        return False

    password_hash = await hasher.hash(password)
    try:
        await repository.insert_admin(username, password_hash)
    except DuplicateUsernameError:
        # Another process created it between the lookup and the insert.
        logger.info("Admin '%s' already present", username)
        return False

    logger.info("Default admin created.")
    return True


async def bootstrap(
    database: Database,
    repository: Repository,
    hasher: PasswordHasher,
    settings: Settings,
) -> BootstrapResult:
    """Run schema initialization then default-admin provisioning; never raises."""
    result = BootstrapResult()

    try:
        result.schema_revision = await _initialize_schema_with_retry(database, settings)
    except TripDeskError as e:
        logger.error("Bootstrap: schema unavailable, continuing degraded: %s", e.message)
        return result

    try:
        result.admin_created = await ensure_default_admin(
            repository, hasher, settings.admin_username, settings.admin_password
        )
        result.admin_ready = True
    except TripDeskError as e:
        logger.error(
            "Bootstrap: admin provisioning failed, no usable admin account: %s | Context: %s",
            e.message,
            e.context,
        )

    return result
