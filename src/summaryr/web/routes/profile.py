"""Profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from summaryr.db.profiles_repository import get_profile, upsert_profile
from summaryr.web.deps import get_current_user
from summaryr.web.schemas import ProfileResponse, ProfileUpdate

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def read_profile(user_id: str = Depends(get_current_user)) -> ProfileResponse:
    """Get the caller's profile."""
    profile = get_profile(user_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return ProfileResponse.model_validate(profile)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    user_id: str = Depends(get_current_user),
) -> ProfileResponse:
    """Create or update the caller's profile."""
    profile = upsert_profile(user_id, email=body.email, full_name=body.full_name)
    return ProfileResponse.model_validate(profile)
