"""Pydantic schemas for publish endpoints."""
from pydantic import BaseModel

from schemas.prompt import PromptResponse


class PublishResponse(BaseModel):
    """Schema for a successful publish."""

    message: str
    prompt: PromptResponse
    github_path: str


class UpdatePublishedResponse(BaseModel):
    """Schema for a successful refresh of a published file."""

    message: str


class UnpublishResponse(BaseModel):
    """Schema for a successful unpublish."""

    message: str
    prompt: PromptResponse
