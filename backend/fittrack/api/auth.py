"""
Authentication API endpoints.
"""

import logging
from datetime import timedelta
from uuid import uuid4

from fastapi import APIRouter, HTTPException, status, Depends, Form

from .deps import get_settings, get_user_storage, to_http_exception
from ..config import Settings
from ..core.errors import FitTrackError
from ..models import UserCreate, Token, User
from ..storage import UserStorage
from ..utils.auth import (
    authenticate_user,
    create_access_token,
    get_password_hash,
    get_current_user_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def public_user(user: dict) -> User:
    """Strip the password hash from a stored account."""
    return User(**{k: v for k, v in user.items() if k != 'hashed_password'})


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    users: UserStorage = Depends(get_user_storage),
):
    """
    Register a new user.

    Args:
        user_data: User registration data

    Returns:
        User: Created user object

    Raises:
        HTTPException: If username already exists
    """
    existing_user = await users.get_user_by_username(user_data.username)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered"
        )

    try:
        user = await users.create_user(
            user_id=str(uuid4()),
            username=user_data.username,
            hashed_password=get_password_hash(user_data.password),
            email=user_data.email,
            full_name=user_data.full_name,
        )
    except FitTrackError as e:
        raise to_http_exception(e) from e

    return public_user(user)


@router.post("/login", response_model=Token)
async def login(
    username: str = Form(...),
    password: str = Form(...),
    users: UserStorage = Depends(get_user_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Login and get access token.

    Raises:
        HTTPException: If authentication fails
    """
    user = await authenticate_user(users, username, password)
    if not user:
        logger.warning("Failed login attempt", extra={"extra_fields": {"username": username}})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": user["user_id"], "username": user["username"]},
        settings=settings,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes)
    )

    return Token(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=User)
async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    users: UserStorage = Depends(get_user_storage),
):
    """Get current user information."""
    user = await users.get_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return public_user(user)
