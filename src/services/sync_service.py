"""
Workflows that keep a prompt row and its GitHub file in step.

The database and GitHub share no transaction, so each workflow is an ordered
series of steps. The primary GitHub write or delete is the point of no
return: if it fails, nothing local changes and the error propagates. Steps
after it (README regeneration) are best-effort: failures are logged and
never undo what came before.

Deleting a prompt is the exception to "GitHub first": the GitHub cleanup is
itself best-effort, so an unreachable repository can never keep a prompt
from being deleted locally. The cost is a possibly orphaned file.
"""
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.prompt import Prompt
from services.exceptions import InvalidStateError, PromptNotFoundError, PublishError
from services.prompt_service import PromptService
from services.publish_service import PublishService

logger = logging.getLogger(__name__)


class PromptSyncService:
    """Publish, refresh, unpublish, and delete prompts across database and GitHub."""

    def __init__(
        self,
        prompt_service: PromptService,
        publish_service: PublishService | None,
    ) -> None:
        self.prompts = prompt_service
        self.publisher = publish_service

    def _require_publisher(self) -> PublishService:
        if self.publisher is None:
            raise PublishError("GitHub publishing is not configured")
        return self.publisher

    async def _get_or_raise(self, db: AsyncSession, prompt_id: UUID) -> Prompt:
        prompt = await self.prompts.get(db, prompt_id)
        if prompt is None:
            raise PromptNotFoundError(prompt_id)
        return prompt

    async def refresh_index(
        self,
        db: AsyncSession,
        exclude_id: UUID | None = None,
    ) -> bool:
        """
        Regenerate the README from the currently published prompts.

        Best-effort: any PublishError is logged and reported as False.

        Args:
            db: Database session.
            exclude_id: Prompt to leave out (one that is about to be deleted).

        Returns:
            True if the README was written.
        """
        if self.publisher is None:
            return False
        published = await self.prompts.list_published(db)
        if exclude_id is not None:
            published = [p for p in published if p.id != exclude_id]
        try:
            await self.publisher.regenerate_index(published)
        except PublishError as e:
            logger.warning("Error updating README: %s", e, exc_info=True)
            return False
        return True

    async def publish(self, db: AsyncSession, prompt_id: UUID) -> Prompt:
        """
        Publish a prompt: write its file, then mark it published, then refresh the README.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
            InvalidStateError: If the prompt is already published or its name
                yields no path.
            PublishError: If the file could not be written; the prompt stays
                unpublished.
        """
        prompt = await self._get_or_raise(db, prompt_id)
        if prompt.is_published:
            raise InvalidStateError("Prompt is already published")

        path = await self._require_publisher().publish(prompt)
        await self.prompts.mark_published(db, prompt, path)
        await self.refresh_index(db)
        return prompt

    async def update_published(self, db: AsyncSession, prompt_id: UUID) -> Prompt:
        """
        Push the prompt's current state to its existing file, then refresh the README.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
            InvalidStateError: If the prompt is not published.
            RemoteFileNotFoundError: If the file is gone from GitHub.
            PublishError: On conflict or other GitHub failure.
        """
        prompt = await self._get_or_raise(db, prompt_id)
        if not prompt.is_published or not prompt.github_path:
            raise InvalidStateError("Prompt is not published")

        await self._require_publisher().update_published(prompt, prompt.github_path)
        await self.refresh_index(db)
        return prompt

    async def unpublish(self, db: AsyncSession, prompt_id: UUID) -> Prompt:
        """
        Remove the prompt's file, then mark it unpublished, then refresh the README.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
            InvalidStateError: If the prompt is not published.
            RemoteFileNotFoundError: If the file is gone from GitHub.
            PublishError: If the delete failed; the prompt stays published.
        """
        prompt = await self._get_or_raise(db, prompt_id)
        if not prompt.is_published or not prompt.github_path:
            raise InvalidStateError("Prompt is not published")

        await self._require_publisher().unpublish(prompt.github_path)
        await self.prompts.mark_unpublished(db, prompt)
        await self.refresh_index(db)
        return prompt

    async def delete(self, db: AsyncSession, prompt_id: UUID) -> bool:
        """
        Delete a prompt, cleaning up GitHub first when it is published.

        GitHub failures are logged and ignored; the local delete always runs.

        Returns:
            True if the prompt was published at the time of deletion.

        Raises:
            PromptNotFoundError: If the prompt does not exist.
        """
        prompt = await self._get_or_raise(db, prompt_id)
        was_published = prompt.is_published

        if prompt.is_published and prompt.github_path and self.publisher is None:
            logger.warning(
                "GitHub publishing is not configured; file %s for prompt %s is left in place",
                prompt.github_path,
                prompt_id,
            )
        elif prompt.is_published and prompt.github_path:
            try:
                await self.publisher.unpublish(prompt.github_path)
            except PublishError as e:
                logger.warning(
                    "Error unpublishing prompt %s from GitHub, deleting locally anyway: %s",
                    prompt_id,
                    e,
                    exc_info=True,
                )
            else:
                await self.refresh_index(db, exclude_id=prompt_id)

        await self.prompts.delete(db, prompt_id)
        return was_published
