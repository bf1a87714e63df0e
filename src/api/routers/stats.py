"""Dashboard statistics endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_prompt_service
from schemas.prompt import PromptStatsResponse
from services.prompt_service import PromptService

router = APIRouter(tags=["stats"], dependencies=[Depends(get_current_user)])


@router.get("/stats", response_model=PromptStatsResponse)
async def get_stats(
    db: AsyncSession = Depends(get_async_session),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptStatsResponse:
    """Count all prompts, published prompts, and prompts updated in the last 7 days."""
    return PromptStatsResponse(**await prompt_service.get_stats(db))
