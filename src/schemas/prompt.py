"""Pydantic schemas for prompt endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from schemas.validators import (
    normalize_optional_text,
    validate_max_length,
    validate_required_text,
)

REQUIRED_FIELDS = ("name", "description", "category", "content")
# Fields stored in String(255) columns
BOUNDED_FIELDS = ("name", "category", "model")
MAX_FIELD_LENGTH = 255


class PromptCreate(BaseModel):
    """Schema for creating a new prompt."""

    name: str
    description: str
    category: str
    model: str | None = None
    content: str  # Markdown (required)

    @field_validator(*REQUIRED_FIELDS)
    @classmethod
    def check_required(cls, v: str, info: ValidationInfo) -> str:
        """Reject blank required fields."""
        return validate_required_text(v, info.field_name)

    @field_validator("model")
    @classmethod
    def normalize_model(cls, v: str | None) -> str | None:
        """Store an empty model selection as no model."""
        return normalize_optional_text(v)

    @field_validator(*BOUNDED_FIELDS)
    @classmethod
    def check_length(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Reject values longer than their column allows."""
        return validate_max_length(v, info.field_name, MAX_FIELD_LENGTH)


class PromptUpdate(BaseModel):
    """
    Schema for updating an existing prompt.

    Merge-patch semantics: omitted fields keep their current value. Required
    fields may be omitted but not nulled; ``model`` may be set to null to clear it.
    """

    name: str | None = None
    description: str | None = None
    category: str | None = None
    model: str | None = None
    content: str | None = None

    @field_validator(*REQUIRED_FIELDS)
    @classmethod
    def check_required(cls, v: str | None, info: ValidationInfo) -> str:
        """Reject explicit null or blank values for required fields."""
        return validate_required_text(v, info.field_name)

    @field_validator("model")
    @classmethod
    def normalize_model(cls, v: str | None) -> str | None:
        """Store an empty model selection as no model."""
        return normalize_optional_text(v)

    @field_validator(*BOUNDED_FIELDS)
    @classmethod
    def check_length(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Reject values longer than their column allows."""
        return validate_max_length(v, info.field_name, MAX_FIELD_LENGTH)

    def changes(self) -> dict[str, str | None]:
        """Return only the fields that were present in the request."""
        return self.model_dump(exclude_unset=True)


class RevertRequest(BaseModel):
    """Schema for reverting a prompt to one of its versions."""

    version_id: UUID


class PromptVersionResponse(BaseModel):
    """Schema for a single version snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_id: UUID
    version: int
    name: str
    description: str
    category: str
    model: str | None
    content: str
    created_at: datetime


class PromptResponse(BaseModel):
    """Schema for the current state of a prompt."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    category: str
    model: str | None
    content: str
    is_published: bool
    published_at: datetime | None
    github_path: str | None
    created_at: datetime
    updated_at: datetime


class PromptWithVersionsResponse(PromptResponse):
    """Schema for a prompt together with its full history, newest first."""

    versions: list[PromptVersionResponse] = Field(default_factory=list)


class PromptDeleteResponse(BaseModel):
    """Schema for prompt deletion."""

    message: str
    unpublished_from_github: bool  # True if the prompt was published when deleted


class FilterOptionsResponse(BaseModel):
    """Distinct values available for list filtering."""

    categories: list[str]
    models: list[str]


class PromptStatsResponse(BaseModel):
    """Dashboard counters."""

    total: int
    published: int
    recent_count: int  # Prompts updated within the last 7 days
