"""
User profile API endpoints.
"""

from fastapi import APIRouter, HTTPException, status, Depends

from .auth import public_user
from .deps import get_user_storage, to_http_exception
from ..core.dates import to_iso
from ..core.errors import FitTrackError
from ..models import User, ProfileUpdate
from ..storage import UserStorage
from ..utils.auth import get_current_user_id, get_password_hash

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile", response_model=User)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    users: UserStorage = Depends(get_user_storage),
):
    """Account fields plus the health profile of the current user."""
    user = await users.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return public_user(user)


@router.put("/profile", response_model=User)
async def update_profile(
    profile_update: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    users: UserStorage = Depends(get_user_storage),
):
    """
    Update profile information.

    Only the fields present in the request body are changed; a password
    is re-hashed before it is stored.

    Args:
        profile_update: Updated profile fields
        user_id: Current user ID from token

    Returns:
        Updated user object
    """
    updates = profile_update.model_dump(exclude_unset=True)
    password = updates.pop("password", None)
    if password is not None:
        updates["hashed_password"] = get_password_hash(password)
    if updates.get("dob") is not None:
        updates["dob"] = to_iso(updates["dob"])

    try:
        user = await users.update_user(user_id, updates)
    except FitTrackError as e:
        raise to_http_exception(e) from e

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return public_user(user)
