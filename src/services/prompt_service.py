"""Service layer for prompt CRUD operations and version history."""
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.base import utc_now
from models.prompt import Prompt
from models.prompt_version import PromptVersion
from schemas.prompt import PromptCreate, PromptUpdate
from services.exceptions import PromptNotFoundError, VersionNotFoundError
from services.utils import LIKE_ESCAPE, escape_ilike

logger = logging.getLogger(__name__)

# Fields copied between the live prompt and its version snapshots
VERSIONED_FIELDS = ("name", "description", "category", "model", "content")

# Attempts at appending a version before giving up on number collisions
MAX_VERSION_RETRIES = 3

VERSION_UNIQUE_CONSTRAINT = "uq_prompt_versions_prompt_id_version"

# Window used for the "recently updated" dashboard counter
RECENT_WINDOW = timedelta(days=7)

# Filter value meaning "no filter" (sent by the list view's selectors)
ALL_FILTER = "all"


def _is_version_collision(error: IntegrityError) -> bool:
    """
    Check whether an IntegrityError came from the (prompt_id, version) constraint.

    PostgreSQL reports the constraint name; SQLite only lists the columns.
    """
    message = str(error.orig) if error.orig is not None else str(error)
    return (
        VERSION_UNIQUE_CONSTRAINT in message
        or "prompt_versions.prompt_id, prompt_versions.version" in message
    )


def _snapshot(source: Prompt | PromptVersion) -> dict[str, str | None]:
    return {field: getattr(source, field) for field in VERSIONED_FIELDS}


class PromptService:
    """
    Prompt service with an append-only version history.

    Every write to a prompt (create, update, revert) goes through here so the
    live record and its newest version stay identical:
    - create stores version 1
    - update/revert overwrite the live fields and append version max + 1
    - versions are never modified; they disappear only with their prompt
    """

    async def get(
        self,
        db: AsyncSession,
        prompt_id: UUID,
        include_versions: bool = False,
    ) -> Prompt | None:
        """
        Get a prompt by ID.

        Args:
            db: Database session.
            prompt_id: ID of the prompt to retrieve.
            include_versions: If True, eagerly load versions (newest first).

        Returns:
            The prompt if found, None otherwise.
        """
        query = select(Prompt).where(Prompt.id == prompt_id)
        if include_versions:
            query = query.options(selectinload(Prompt.versions))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, data: PromptCreate) -> Prompt:
        """
        Create a new prompt together with its version 1.

        Args:
            db: Database session.
            data: Validated prompt fields.

        Returns:
            The created prompt with versions loaded.
        """
        values = data.model_dump()
        prompt = Prompt(**values)
        prompt.versions.append(PromptVersion(version=1, **values))
        db.add(prompt)
        await db.flush()
        await db.refresh(prompt, attribute_names=["versions"])
        logger.info("Created prompt %s", prompt.id)
        return prompt

    async def update(
        self,
        db: AsyncSession,
        prompt_id: UUID,
        data: PromptUpdate | Mapping[str, str | None],
    ) -> Prompt:
        """
        Apply a partial update and record it as a new version.

        Fields absent from ``data`` keep their current value.

        Args:
            db: Database session.
            prompt_id: ID of the prompt to update.
            data: Partial update; a PromptUpdate only contributes fields that were set.

        Returns:
            The updated prompt with all versions loaded (newest first).

        Raises:
            PromptNotFoundError: If the prompt does not exist.
        """
        prompt = await self.get(db, prompt_id)
        if prompt is None:
            raise PromptNotFoundError(prompt_id)

        changes = data.changes() if isinstance(data, PromptUpdate) else dict(data)
        values = _snapshot(prompt)
        values.update({k: v for k, v in changes.items() if k in VERSIONED_FIELDS})
        return await self._apply_and_record(db, prompt, values)

    async def revert(
        self,
        db: AsyncSession,
        prompt_id: UUID,
        version_id: UUID,
    ) -> Prompt:
        """
        Make an earlier version current again.

        History is not truncated: the target's fields are copied into a new
        version appended after the current newest one.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
            VersionNotFoundError: If the version does not exist or belongs to
                another prompt.
        """
        prompt = await self.get(db, prompt_id)
        if prompt is None:
            raise PromptNotFoundError(prompt_id)

        target = await db.get(PromptVersion, version_id)
        if target is None or target.prompt_id != prompt_id:
            raise VersionNotFoundError(version_id)

        logger.info("Reverting prompt %s to version %s", prompt_id, target.version)
        return await self._apply_and_record(db, prompt, _snapshot(target))

    async def list_versions(self, db: AsyncSession, prompt_id: UUID) -> list[PromptVersion]:
        """Return all versions of a prompt, newest first (empty if none)."""
        result = await db.execute(
            select(PromptVersion)
            .where(PromptVersion.prompt_id == prompt_id)
            .order_by(PromptVersion.version.desc()),
        )
        return list(result.scalars().all())

    async def delete(self, db: AsyncSession, prompt_id: UUID) -> bool:
        """
        Delete a prompt and, by cascade, all of its versions.

        Publish state is not touched here; callers reconcile GitHub first.

        Returns:
            True if deleted, False if not found.
        """
        prompt = await self.get(db, prompt_id)
        if prompt is None:
            return False
        await db.delete(prompt)
        await db.flush()
        logger.info("Deleted prompt %s", prompt_id)
        return True

    async def mark_published(
        self,
        db: AsyncSession,
        prompt: Prompt,
        github_path: str,
    ) -> Prompt:
        """Record that the prompt now has a file at ``github_path``."""
        prompt.is_published = True
        prompt.published_at = utc_now()
        prompt.github_path = github_path
        await db.flush()
        return prompt

    async def mark_unpublished(self, db: AsyncSession, prompt: Prompt) -> Prompt:
        """Clear all publish state from the prompt."""
        prompt.is_published = False
        prompt.published_at = None
        prompt.github_path = None
        await db.flush()
        return prompt

    async def list_prompts(
        self,
        db: AsyncSession,
        query: str | None = None,
        category: str | None = None,
        model: str | None = None,
    ) -> list[Prompt]:
        """
        List prompts, most recently updated first.

        Args:
            db: Database session.
            query: Case-insensitive substring matched against name, description,
                content, category, and model.
            category: Exact category filter ("all" or None for no filter).
            model: Exact model filter ("all" or None for no filter).
        """
        stmt = select(Prompt)
        if category and category != ALL_FILTER:
            stmt = stmt.where(Prompt.category == category)
        if model and model != ALL_FILTER:
            stmt = stmt.where(Prompt.model == model)
        if query and query.strip():
            stmt = stmt.where(*self._build_text_search_filter(query.strip()))
        stmt = stmt.order_by(Prompt.updated_at.desc(), Prompt.id.desc())
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_published(self, db: AsyncSession) -> list[Prompt]:
        """Return all published prompts ordered by category, then name."""
        result = await db.execute(
            select(Prompt)
            .where(Prompt.is_published.is_(True))
            .order_by(Prompt.category.asc(), Prompt.name.asc()),
        )
        return list(result.scalars().all())

    async def get_categories(self, db: AsyncSession) -> list[str]:
        """Return distinct categories, sorted ascending."""
        result = await db.execute(select(Prompt.category).distinct())
        return sorted(result.scalars().all())

    async def get_filter_options(self, db: AsyncSession) -> dict[str, list[str]]:
        """Return distinct categories and non-null models, each sorted."""
        models = await db.execute(
            select(Prompt.model).where(Prompt.model.is_not(None)).distinct(),
        )
        return {
            "categories": await self.get_categories(db),
            "models": sorted(models.scalars().all()),
        }

    async def get_stats(self, db: AsyncSession, now: datetime | None = None) -> dict[str, int]:
        """Count all prompts, published prompts, and prompts updated in the last week."""
        since = (now or utc_now()) - RECENT_WINDOW
        total = (await db.execute(select(func.count()).select_from(Prompt))).scalar_one()
        published = (
            await db.execute(
                select(func.count()).select_from(Prompt).where(Prompt.is_published.is_(True)),
            )
        ).scalar_one()
        recent = (
            await db.execute(
                select(func.count()).select_from(Prompt).where(Prompt.updated_at >= since),
            )
        ).scalar_one()
        return {"total": total, "published": published, "recent_count": recent}

    def _build_text_search_filter(self, text: str) -> list[ColumnElement[bool]]:
        """Build text search filter for prompt fields."""
        pattern = f"%{escape_ilike(text)}%"
        return [
            or_(
                Prompt.name.ilike(pattern, escape=LIKE_ESCAPE),
                Prompt.description.ilike(pattern, escape=LIKE_ESCAPE),
                Prompt.content.ilike(pattern, escape=LIKE_ESCAPE),
                Prompt.category.ilike(pattern, escape=LIKE_ESCAPE),
                Prompt.model.ilike(pattern, escape=LIKE_ESCAPE),
            ),
        ]

    async def _next_version_number(self, db: AsyncSession, prompt_id: UUID) -> int:
        """Return max(version) + 1 for the prompt, or 1 if it has no versions."""
        result = await db.execute(
            select(func.max(PromptVersion.version)).where(PromptVersion.prompt_id == prompt_id),
        )
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    async def _apply_and_record(
        self,
        db: AsyncSession,
        prompt: Prompt,
        values: dict[str, str | None],
    ) -> Prompt:
        """
        Write ``values`` to the live prompt and append a matching version.

        Both writes share the request transaction. The version insert runs in a
        savepoint so that a concurrent writer taking the same number only costs
        a retry with a fresh max + 1, not the whole update.

        Raises:
            IntegrityError: If max retries exceeded on version collision.
        """
        for field, value in values.items():
            setattr(prompt, field, value)
        prompt.updated_at = utc_now()
        await db.flush()

        for attempt in range(MAX_VERSION_RETRIES):
            try:
                async with db.begin_nested():  # Creates savepoint
                    number = await self._next_version_number(db, prompt.id)
                    db.add(PromptVersion(prompt_id=prompt.id, version=number, **values))
                    await db.flush()
                break
            except IntegrityError as e:
                # Only retry on version uniqueness violations
                if not _is_version_collision(e):
                    raise
                # Savepoint automatically rolled back, parent transaction intact
                if attempt == MAX_VERSION_RETRIES - 1:
                    raise
                logger.warning(
                    "Version number collision on prompt %s (attempt %d), retrying",
                    prompt.id,
                    attempt + 1,
                )

        await db.refresh(prompt, attribute_names=["versions"])
        return prompt
