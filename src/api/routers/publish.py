"""Endpoints that publish prompts to, and remove them from, the GitHub repository."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_sync_service
from schemas.prompt import PromptResponse
from schemas.publish import PublishResponse, UnpublishResponse, UpdatePublishedResponse
from services.exceptions import (
    InvalidStateError,
    PromptNotFoundError,
    PublishError,
    RemoteFileNotFoundError,
)
from services.sync_service import PromptSyncService

router = APIRouter(
    prefix="/prompts",
    tags=["publish"],
    dependencies=[Depends(get_current_user)],
)


def _to_http_error(error: Exception) -> HTTPException:
    """Translate a publish workflow error into its HTTP response."""
    if isinstance(error, PromptNotFoundError):
        return HTTPException(status_code=404, detail="Prompt not found")
    if isinstance(error, InvalidStateError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, RemoteFileNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=502, detail=str(error))


@router.post("/{prompt_id}/publish", response_model=PublishResponse)
async def publish_prompt(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    sync_service: PromptSyncService = Depends(get_sync_service),
) -> PublishResponse:
    """
    Publish a prompt to GitHub.

    Writes prompts/<slug>/prompt.md, marks the prompt published, and refreshes
    the README. The prompt stays unpublished if the file write fails.
    """
    try:
        prompt = await sync_service.publish(db, prompt_id)
    except (PromptNotFoundError, InvalidStateError, PublishError) as e:
        raise _to_http_error(e)
    return PublishResponse(
        message="Prompt published successfully",
        prompt=PromptResponse.model_validate(prompt),
        github_path=prompt.github_path,
    )


@router.put("/{prompt_id}/publish", response_model=UpdatePublishedResponse)
async def update_published_prompt(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    sync_service: PromptSyncService = Depends(get_sync_service),
) -> UpdatePublishedResponse:
    """Push a published prompt's current state to its existing GitHub file."""
    try:
        await sync_service.update_published(db, prompt_id)
    except (PromptNotFoundError, InvalidStateError, PublishError) as e:
        raise _to_http_error(e)
    return UpdatePublishedResponse(message="Published prompt updated successfully")


@router.delete("/{prompt_id}/publish", response_model=UnpublishResponse)
async def unpublish_prompt(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    sync_service: PromptSyncService = Depends(get_sync_service),
) -> UnpublishResponse:
    """Remove a prompt's file from GitHub and mark it unpublished."""
    try:
        prompt = await sync_service.unpublish(db, prompt_id)
    except (PromptNotFoundError, InvalidStateError, PublishError) as e:
        raise _to_http_error(e)
    return UnpublishResponse(
        message="Prompt unpublished successfully",
        prompt=PromptResponse.model_validate(prompt),
    )
