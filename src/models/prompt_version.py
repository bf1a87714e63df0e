"""PromptVersion model for storing immutable prompt snapshots."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UUIDv7Mixin, utc_now

if TYPE_CHECKING:
    from models.prompt import Prompt


class PromptVersion(Base, UUIDv7Mixin):
    """
    PromptVersion model - an immutable snapshot of a prompt's fields.

    Version semantics:
    - Numbers start at 1 and are dense per prompt (max + 1 on every write)
    - Rows are only ever inserted, or removed by cascade when the prompt is deleted
    - A revert appends a copy of the target version instead of truncating history
    """

    __tablename__ = "prompt_versions"
    __table_args__ = (
        UniqueConstraint("prompt_id", "version", name="uq_prompt_versions_prompt_id_version"),
        # Composite index for the primary query pattern:
        # SELECT * FROM prompt_versions WHERE prompt_id = ? ORDER BY version DESC
        Index("ix_prompt_versions_prompt_id_version", "prompt_id", "version"),
    )

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )

    prompt: Mapped["Prompt"] = relationship(back_populates="versions")
