"""
TripDesk Backend — FastAPI Dependency Providers
=================================================

What:  Hands the application-owned services to route handlers, and the
       require_admin gate.
How:   create_app() stores one Repository and one AuthService on app.state;
       the providers below read them from the request's app. Tests build
       their own app with their own services, so nothing here is global.

Usage in routes:
    @router.get("/admin/registrations")
    async def list_registrations(
        _: Session = Depends(require_admin),
        repository: Repository = Depends(get_repository),
    ):
        ...
"""

import logging
import re
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from tripdesk.config import Settings
from tripdesk.exceptions import UnauthorizedError, ValidationError
from tripdesk.services.auth_service import AuthService
from tripdesk.services.repository import Repository
from tripdesk.services.session_store import Session

logger = logging.getLogger(__name__)

# SQLite and Postgres integer keys are signed 64-bit.
MAX_ID = 2**63 - 1

# ASCII digits only: int() would also take "1_0" and other scripts' digits.
ID_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def session_cookie(request: Request) -> Optional[str]:
    """Raw (signed) session cookie value, if the client sent one."""
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def optional_session(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[Session]:
    return await auth_service.session_from_cookie(session_cookie(request))


async def require_admin(
    session: Optional[Session] = Depends(optional_session),
) -> Session:
    """
    Gate for admin-only routes.

    Raises UnauthorizedError (401, "Unauthorized") before the route body
    runs when there is no valid, unexpired session.
    """
    if session is None:
        raise UnauthorizedError()
    return session


async def json_body(request: Request) -> Optional[Dict[str, Any]]:
    """
    The request body as a JSON object, or None.

    Malformed JSON, an empty body, or a non-object JSON value all yield None
    so the route can answer with its own 400 message.
    """
    try:
        data = await request.json()
    except ValueError:
        logger.debug("Request body is not valid JSON")
        return None
    return data if isinstance(data, dict) else None


def parse_registration_id(raw_id: str) -> int:
    """Path id → int; anything that is not a storable integer is a 400."""
    if not ID_PATTERN.fullmatch(raw_id):
        raise ValidationError(message="Invalid id.", field="id")
    value = int(raw_id)
    if abs(value) > MAX_ID:
        raise ValidationError(message="Invalid id.", field="id")
    return value
