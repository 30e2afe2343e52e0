"""Pydantic request/response schemas for all API routes.

Centralised here so that schemas can be shared across routes, services and
the auth layer without circular imports. Route files import from here.
"""

import uuid as _uuid
from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

ProjectStatusLiteral = Literal[
    "CREATED", "UPLOADING", "UPLOADED", "PROCESSING", "COMPLETED", "FAILED"
]
AssetTypeLiteral = Literal["image", "video"]
AssetStatusLiteral = Literal["pending", "processing", "complete", "failed"]


def _validate_uuid(value: str, field_name: str) -> str:
    """Reject malformed UUIDs early so they never reach the DB."""
    try:
        _uuid.UUID(value)
    except ValueError:
        raise ValueError(f"{field_name} must be a valid UUID")
    return value


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class SessionUser(BaseModel):
    id: str
    email: str | None = None
    role: str | None = None


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class Asset(BaseModel):
    id: str
    project_id: str
    type: AssetTypeLiteral
    provider: str
    prompt: str
    status: AssetStatusLiteral = "pending"
    external_job_id: str | None = None
    url: str | None = None
    created_by: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class Project(BaseModel):
    id: str
    user_id: str
    company_id: str | None = None
    name: str
    status: ProjectStatusLiteral = "CREATED"
    address: str | None = None
    style: str | None = None
    stage: str | None = None
    notes: str | None = None
    persona_id: str | None = None
    created_at: datetime
    updated_at: datetime


class ProjectWithAssets(Project):
    assets: list[Asset] = Field(default_factory=list)


class ProjectCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    company_id: str | None = Field(default=None, alias="companyId")
    address: str | None = None
    style: str | None = None
    stage: str | None = None
    notes: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be whitespace-only")
        return v

    @field_validator("company_id", "address", "style", "stage", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        # The web client sends "" for untouched inputs; store those as NULL.
        if isinstance(v, str) and not v:
            return None
        return v

    @field_validator("company_id")
    @classmethod
    def validate_company_id(cls, v: str | None) -> str | None:
        return _validate_uuid(v, "companyId") if v is not None else None


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

DEFAULT_COMPANY_COLOR = "#6366f1"


class Company(BaseModel):
    id: str
    name: str
    logo_url: str | None = None
    primary_color: str = DEFAULT_COMPANY_COLOR
    contact_email: str | None = None
    contact_phone: str | None = None
    website: str | None = None
    created_at: datetime


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    primary_color: str = DEFAULT_COMPANY_COLOR
    contact_email: str | None = None
    contact_phone: str | None = None
    website: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be whitespace-only")
        return v

    @field_validator("primary_color", mode="before")
    @classmethod
    def default_color(cls, v: Any) -> Any:
        return v or DEFAULT_COMPANY_COLOR

    @field_validator("contact_email", "contact_phone", "website", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v:
            return None
        return v


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class DataResponse(BaseModel, Generic[T]):
    data: T


class MessageResponse(BaseModel):
    message: str
