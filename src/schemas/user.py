"""Pydantic schemas for the authenticated identity."""
from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    """Identity admitted by the sign-in gate. Not persisted."""

    name: str | None = None
    email: str
