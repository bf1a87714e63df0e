"""Lookup endpoints: prompt categories and the LLM model catalog."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_user,
    get_model_catalog,
    get_prompt_service,
)
from schemas.model_catalog import LLMModel, ModelOption
from services.model_catalog import ModelCatalog
from services.prompt_service import PromptService

router = APIRouter(tags=["catalog"], dependencies=[Depends(get_current_user)])


@router.get("/categories", response_model=list[str])
async def list_categories(
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> list[str]:
    """Get the distinct categories in use, sorted ascending."""
    return await prompt_service.get_categories(db)


@router.get("/models", response_model=list[ModelOption])
async def list_models(
    catalog: ModelCatalog = Depends(get_model_catalog),
) -> list[ModelOption]:
    """Get the models offered when editing a prompt."""
    return catalog.options()


@router.get("/models/{item}", response_model=LLMModel)
async def get_model(
    item: str,
    catalog: ModelCatalog = Depends(get_model_catalog),
) -> LLMModel:
    """Get a single catalog record by its item identifier."""
    model = catalog.get(item)
    if model is None:
        raise HTTPException(status_code=404, detail="Model not found")
    return model
