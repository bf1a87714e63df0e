"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.prompt import Prompt
from models.prompt_version import PromptVersion

__all__ = ["Base", "Prompt", "PromptVersion", "TimestampMixin", "UUIDv7Mixin"]
