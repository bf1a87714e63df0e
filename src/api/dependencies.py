"""FastAPI dependencies for injection."""
from fastapi import Depends, HTTPException, status

from core.auth import get_current_user
from core.config import Settings, get_settings
from db.session import get_async_session
from services.github_client import GitHubContentsClient
from services.model_catalog import ModelCatalog, load_model_catalog
from services.prompt_service import PromptService
from services.publish_service import PublishService
from services.sync_service import PromptSyncService

prompt_service = PromptService()


def get_prompt_service() -> PromptService:
    """Return the shared (stateless) prompt service."""
    return prompt_service


def get_optional_publish_service(
    settings: Settings = Depends(get_settings),
) -> PublishService | None:
    """Return a publisher for the configured GitHub repository, or None if unconfigured."""
    if not settings.github_configured:
        return None
    return PublishService(GitHubContentsClient.from_settings(settings))


def get_publish_service(
    publisher: PublishService | None = Depends(get_optional_publish_service),
) -> PublishService:
    """
    Return a publisher for the configured GitHub repository.

    Raises:
        HTTPException: 503 if GitHub publishing is not configured.
    """
    if publisher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="GitHub publishing is not configured",
        )
    return publisher


def get_sync_service(
    prompts: PromptService = Depends(get_prompt_service),
    publisher: PublishService = Depends(get_publish_service),
) -> PromptSyncService:
    """Return the service coordinating database and GitHub changes."""
    return PromptSyncService(prompts, publisher)


def get_deletion_sync_service(
    prompts: PromptService = Depends(get_prompt_service),
    publisher: PublishService | None = Depends(get_optional_publish_service),
) -> PromptSyncService:
    """
    Return a sync service for deletes.

    Deleting never requires GitHub, so an unconfigured repository is allowed here.
    """
    return PromptSyncService(prompts, publisher)


def get_model_catalog(settings: Settings = Depends(get_settings)) -> ModelCatalog:
    """Return the process-wide model catalog."""
    return load_model_catalog(settings.model_catalog_path)


__all__ = [
    "get_async_session",
    "get_current_user",
    "get_deletion_sync_service",
    "get_model_catalog",
    "get_optional_publish_service",
    "get_prompt_service",
    "get_publish_service",
    "get_settings",
    "get_sync_service",
]
