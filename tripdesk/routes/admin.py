"""
TripDesk Backend — Admin Route Handlers
=========================================

What:  Session endpoints (login, logout, me) and the admin-only registration
       management endpoints (list, get, update, delete).
Who:   Called by the admin dashboard script with the session cookie.

Route Inventory:
    POST   /api/admin/login                   → 200 | 400 | 401 | 500
    POST   /api/admin/logout                  → 200
    GET    /api/admin/me                      → 200 | 401
    GET    /api/admin/registrations           → 200 | 401 | 500
    GET    /api/admin/registrations/{id}      → 200 | 400 | 401 | 404 | 500
    PUT    /api/admin/registrations/{id}      → 200 | 400 | 401 | 404 | 500
    DELETE /api/admin/registrations/{id}      → 200 | 400 | 401 | 404 | 500

Every route below `me` depends on require_admin, which answers 401 before the
handler body (and before id parsing) when no valid session is present.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, Response

from tripdesk.config import Settings
from tripdesk.dependencies import (
    get_auth_service,
    get_repository,
    get_settings,
    json_body,
    parse_registration_id,
    require_admin,
    session_cookie,
)
from tripdesk.exceptions import NotFoundError, ValidationError
from tripdesk.schemas.registration import (
    ErrorResponse,
    MeResponse,
    MessageResponse,
    RegistrationDetailResponse,
    RegistrationListResponse,
    RegistrationRecord,
)
from tripdesk.services.auth_service import AuthService
from tripdesk.services.repository import Repository
from tripdesk.services.session_store import Session
from tripdesk.services.validation import registration_columns, validate_registration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

NO_STORE = "no-store"

_gated_errors = {
    401: {"description": "No valid admin session", "model": ErrorResponse},
    500: {"description": "Storage failure", "model": ErrorResponse},
}
_by_id_errors = {
    400: {"description": "Invalid id or payload", "model": ErrorResponse},
    404: {"description": "No registration with this id", "model": ErrorResponse},
    **_gated_errors,
}


def _set_session_cookie(response: Response, settings: Settings, value: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=value,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


# ══════════════════════════════════════════════════════════════════════════
# Session endpoints
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/login",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing username or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        500: {"description": "Login failed", "model": ErrorResponse},
    },
    summary="Log in as administrator",
)
async def login(
    request: Request,
    response: Response,
    payload: Optional[Dict[str, Any]] = Depends(json_body),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Verify credentials and attach a new session cookie.

    On success any session the client already holds is destroyed, so a
    login always issues a fresh token. A failed attempt leaves it intact.
    """
    payload = payload or {}
    username = payload.get("username")
    password = payload.get("password")
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise ValidationError(message="Username and password required.")

    session = await auth_service.login(username, password)
    await auth_service.logout(auth_service.unsign_token(session_cookie(request)))
    _set_session_cookie(response, settings, auth_service.sign_token(session.token))
    return MessageResponse(message="Logged in")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out (idempotent)",
)
async def logout(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    token = auth_service.unsign_token(session_cookie(request))
    if token:
        logger.info("Admin session closed")
    await auth_service.logout(token)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"description": "No valid admin session", "model": ErrorResponse}},
    summary="Current admin session",
)
async def me(
    response: Response,
    session: Session = Depends(require_admin),
) -> MeResponse:
    response.headers["Cache-Control"] = NO_STORE
    return MeResponse(username=session.username)


# ══════════════════════════════════════════════════════════════════════════
# Registration management (admin only)
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/registrations",
    response_model=RegistrationListResponse,
    responses=_gated_errors,
    summary="List registrations, newest first",
)
async def list_registrations(
    response: Response,
    _: Session = Depends(require_admin),
    repository: Repository = Depends(get_repository),
) -> RegistrationListResponse:
    rows = await repository.list_registrations()
    response.headers["Cache-Control"] = NO_STORE
    return RegistrationListResponse(
        data=[RegistrationRecord.model_validate(row) for row in rows]
    )


@router.get(
    "/registrations/{registration_id}",
    response_model=RegistrationDetailResponse,
    responses=_by_id_errors,
    summary="Get one registration",
)
async def get_registration(
    registration_id: str,
    response: Response,
    _: Session = Depends(require_admin),
    repository: Repository = Depends(get_repository),
) -> RegistrationDetailResponse:
    row_id = parse_registration_id(registration_id)
    row = await repository.get_registration(row_id)
    if row is None:
        raise NotFoundError(resource="registration", resource_id=str(row_id))

    response.headers["Cache-Control"] = NO_STORE
    return RegistrationDetailResponse(data=RegistrationRecord.model_validate(row))


@router.put(
    "/registrations/{registration_id}",
    response_model=MessageResponse,
    responses=_by_id_errors,
    summary="Replace a registration's fields",
)
async def update_registration(
    registration_id: str,
    payload: Optional[Dict[str, Any]] = Depends(json_body),
    _: Session = Depends(require_admin),
    repository: Repository = Depends(get_repository),
) -> MessageResponse:
    row_id = parse_registration_id(registration_id)

    error = validate_registration(payload)
    if error:
        raise ValidationError(message=error)

    affected = await repository.update_registration(row_id, registration_columns(payload))
    if affected == 0:
        raise NotFoundError(resource="registration", resource_id=str(row_id))
    return MessageResponse(message="Updated")


@router.delete(
    "/registrations/{registration_id}",
    response_model=MessageResponse,
    responses=_by_id_errors,
    summary="Delete a registration",
)
async def delete_registration(
    registration_id: str,
    _: Session = Depends(require_admin),
    repository: Repository = Depends(get_repository),
) -> MessageResponse:
    row_id = parse_registration_id(registration_id)
    affected = await repository.delete_registration(row_id)
    if affected == 0:
        raise NotFoundError(resource="registration", resource_id=str(row_id))
    return MessageResponse(message="Deleted")
