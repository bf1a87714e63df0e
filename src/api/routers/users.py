"""User endpoints."""
from fastapi import APIRouter, Depends

from api.dependencies import get_current_user
from schemas.user import AuthenticatedUser

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=AuthenticatedUser)
async def get_current_user_info(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Get the identity admitted by the sign-in gate."""
    return current_user
