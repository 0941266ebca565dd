"""
TripDesk Backend — Public Registration Route
==============================================

What:  POST /api/registrations, the traveler-facing form submission.
How:   Validate the JSON body, store it, answer 201 with the new id.
Who:   Called by the public registration form script.

No authentication. Validation happens before any storage access.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from tripdesk.dependencies import get_repository, json_body
from tripdesk.exceptions import ValidationError
from tripdesk.schemas.registration import ErrorResponse, SavedResponse
from tripdesk.services.repository import Repository
from tripdesk.services.validation import registration_columns, validate_registration

router = APIRouter(prefix="/api", tags=["Registrations"])


@router.post(
    "/registrations",
    status_code=201,
    response_model=SavedResponse,
    responses={
        400: {"description": "Payload failed validation", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Submit a travel registration",
)
async def create_registration(
    payload: Optional[Dict[str, Any]] = Depends(json_body),
    repository: Repository = Depends(get_repository),
) -> SavedResponse:
    error = validate_registration(payload)
    if error:
        raise ValidationError(message=error)

    new_id = await repository.insert_registration(registration_columns(payload))
    return SavedResponse(message="Saved", id=new_id)
