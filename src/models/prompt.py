"""Prompt model for storing LLM prompt texts and their publish state."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.prompt_version import PromptVersion


class Prompt(Base, UUIDv7Mixin, TimestampMixin):
    """
    Prompt model - the live, mutable record of a prompt.

    Every mutation appends a PromptVersion, so the version with the highest
    number always mirrors the fields stored here.

    Publish state: is_published, published_at and github_path are set and
    cleared together.
    """

    __tablename__ = "prompts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    is_published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        index=True,
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    # Location of the published file in the GitHub repository, e.g. prompts/greeting/prompt.md
    github_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    versions: Mapped[list["PromptVersion"]] = relationship(
        back_populates="prompt",
        cascade="all, delete-orphan",
        order_by="desc(PromptVersion.version)",
    )
