"""
Authentication utilities - JWT token handling and password hashing.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import Settings
from ..models import TokenData
from ..storage.user_storage import UserStorage

# Bearer token security
security = HTTPBearer()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash a password."""
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
    return hashed.decode('utf-8')


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode ("sub" must hold the user id)
        settings: Application settings holding the signing key and algorithm
        expires_delta: Optional expiration time delta

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> Optional[TokenData]:
    """
    Decode and verify a JWT access token.

    Returns:
        Optional[TokenData]: Token data if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None
    return TokenData(user_id=user_id, username=payload.get("username"))


async def get_current_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """
    Dependency to get current user ID from the bearer token.

    The token is checked against the settings the app was created with.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    token_data = decode_access_token(credentials.credentials, request.app.state.settings)
    if token_data is None or token_data.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token_data.user_id


async def authenticate_user(users: UserStorage, username: str, password: str) -> Optional[dict]:
    """
    Authenticate a user by username and password.

    Returns:
        Optional[dict]: User data if authenticated, None otherwise
    """
    user = await users.get_user_by_username(username)
    if not user or not user.get("is_active", True):
        return None
    if not verify_password(password, user["hashed_password"]):
        return None
    return user
