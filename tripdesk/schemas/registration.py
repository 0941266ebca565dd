"""
TripDesk Backend — Pydantic Response Schemas
==============================================

What:  Pydantic models for every JSON body the API returns.
How:   Route handlers declare these as response models; FastAPI serializes
       and documents them in the OpenAPI schema.

Request bodies are not modelled here: registration payloads go through
services.validation so the first-failing-rule message reaches the client
unchanged (Pydantic would answer 422 with its own wording).

Registration records use the storage column names (full_name, travel_time,
created_at, ...) because the admin dashboard reads those keys.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class RegistrationRecord(BaseModel):
    """One stored registration as returned to the admin dashboard."""
    id: int = Field(description="Server-assigned identifier")
    full_name: str
    sex: str
    phone: str
    email: str
    destination: str
    city: str
    persons: int
    travel_time: str
    message: Optional[str] = Field(default="", description="Optional free text")
    created_at: str = Field(description="Insertion time, ISO 8601 UTC")

    model_config = {"from_attributes": True}


class RegistrationListResponse(BaseModel):
    """GET /api/admin/registrations, newest first."""
    data: List[RegistrationRecord]


class RegistrationDetailResponse(BaseModel):
    """GET /api/admin/registrations/{id}"""
    data: RegistrationRecord


class SavedResponse(BaseModel):
    """POST /api/registrations (201)."""
    message: str = Field(default="Saved")
    id: int


class MessageResponse(BaseModel):
    """Plain acknowledgement: Logged in, Logged out, Updated, Deleted."""
    message: str


class MeResponse(BaseModel):
    """GET /api/admin/me"""
    username: str


class ErrorResponse(BaseModel):
    """
    Error body shared by every non-2xx response.

    The request correlation id travels in the X-Request-ID header.
    """
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """GET /health"""
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    schema_revision: Optional[str] = Field(default=None, description="Applied Alembic revision")
    uptime_seconds: float
