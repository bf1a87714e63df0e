"""Prompts CRUD and version history endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_user,
    get_deletion_sync_service,
    get_prompt_service,
)
from schemas.prompt import (
    FilterOptionsResponse,
    PromptCreate,
    PromptDeleteResponse,
    PromptResponse,
    PromptUpdate,
    PromptVersionResponse,
    PromptWithVersionsResponse,
    RevertRequest,
)
from services.exceptions import PromptNotFoundError, VersionNotFoundError
from services.prompt_service import PromptService
from services.sync_service import PromptSyncService

router = APIRouter(
    prefix="/prompts",
    tags=["prompts"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/", response_model=PromptWithVersionsResponse, status_code=201)
async def create_prompt(
    data: PromptCreate,
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptWithVersionsResponse:
    """Create a new prompt; its first version is recorded as version 1."""
    prompt = await prompt_service.create(db, data)
    return PromptWithVersionsResponse.model_validate(prompt)


@router.get("/", response_model=list[PromptResponse])
async def list_prompts(
    q: str | None = Query(
        default=None,
        description="Search query (matches name, description, content, category, model)",
    ),
    category: str | None = Query(default=None, description="Filter by category ('all' = any)"),
    model: str | None = Query(default=None, description="Filter by model ('all' = any)"),
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> list[PromptResponse]:
    """List prompts, most recently updated first."""
    prompts = await prompt_service.list_prompts(db, query=q, category=category, model=model)
    return [PromptResponse.model_validate(p) for p in prompts]


@router.get("/filters", response_model=FilterOptionsResponse)
async def get_filter_options(
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> FilterOptionsResponse:
    """Get the distinct categories and models available for filtering."""
    return FilterOptionsResponse(**await prompt_service.get_filter_options(db))


@router.get("/{prompt_id}", response_model=PromptWithVersionsResponse)
async def get_prompt(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptWithVersionsResponse:
    """Get a single prompt with its version history."""
    prompt = await prompt_service.get(db, prompt_id, include_versions=True)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return PromptWithVersionsResponse.model_validate(prompt)


@router.api_route(
    "/{prompt_id}",
    methods=["PATCH", "PUT"],
    response_model=PromptWithVersionsResponse,
)
async def update_prompt(
    prompt_id: UUID,
    data: PromptUpdate,
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptWithVersionsResponse:
    """
    Update a prompt.

    Only fields present in the body change; every update appends a version.
    A published prompt's GitHub file is not touched until PUT /prompts/{id}/publish.
    """
    try:
        prompt = await prompt_service.update(db, prompt_id, data)
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return PromptWithVersionsResponse.model_validate(prompt)


@router.delete("/{prompt_id}", response_model=PromptDeleteResponse)
async def delete_prompt(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    sync_service: PromptSyncService = Depends(get_deletion_sync_service),
) -> PromptDeleteResponse:
    """
    Delete a prompt and its versions.

    A published prompt is removed from GitHub first when possible; GitHub
    failures never block the local delete.
    """
    try:
        was_published = await sync_service.delete(db, prompt_id)
    except PromptNotFoundError:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return PromptDeleteResponse(
        message="Prompt deleted successfully",
        unpublished_from_github=was_published,
    )


@router.get("/{prompt_id}/versions", response_model=list[PromptVersionResponse])
async def list_prompt_versions(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> list[PromptVersionResponse]:
    """List a prompt's versions, newest first."""
    if await prompt_service.get(db, prompt_id) is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    versions = await prompt_service.list_versions(db, prompt_id)
    return [PromptVersionResponse.model_validate(v) for v in versions]


@router.post("/{prompt_id}/revert", response_model=PromptWithVersionsResponse)
async def revert_prompt(
    prompt_id: UUID,
    data: RevertRequest,
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptWithVersionsResponse:
    """
    Revert a prompt to an earlier version.

    Appends a new version copying the target; intervening versions are kept.
    """
    try:
        prompt = await prompt_service.revert(db, prompt_id, data.version_id)
    except (PromptNotFoundError, VersionNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PromptWithVersionsResponse.model_validate(prompt)
