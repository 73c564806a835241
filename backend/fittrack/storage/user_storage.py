"""
User Storage - Persistent account and profile storage using StorageInterface.
"""

import asyncio
import json
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from .interface import StorageInterface
from ..core.errors import InvalidArgument, StorageError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "gender", "dob", "height_cm", "weight_kg", "target_weight_kg",
    "activity_level", "sleep_hours",
)


class UserStorage:
    """
    Manages persistent storage of user accounts.
    One JSON file per user in users/, plus a username -> user_id index.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize user storage.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.users_dir = "users"
        self._username_index_path = f"{self.users_dir}/username_index.json"
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, path: str) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    def _user_path(self, user_id: str) -> str:
        return f"{self.users_dir}/{user_id}/account.json"

    async def _load_username_index(self) -> Dict[str, str]:
        """Load username to user_id index mapping."""
        content = await self.storage.load(self._username_index_path)
        if content is None:
            return {}
        return json.loads(content.decode('utf-8'))

    async def _save_json(self, path: str, data: Dict[str, Any]) -> None:
        content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if not await self.storage.save(path, content):
            raise StorageError(f"Failed to write {path}")

    @staticmethod
    def _from_json(user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert datetime strings back to datetime objects."""
        for key in ('created_at', 'updated_at'):
            if isinstance(user_data.get(key), str):
                user_data[key] = datetime.fromisoformat(user_data[key])
        return user_data

    async def get_user(self, user_id: str) -> Optional[Dict]:
        """
        Get user by user_id.

        Args:
            user_id: User ID

        Returns:
            Optional[Dict]: User data or None if not found
        """
        if not user_id or "/" in user_id or user_id.startswith("."):
            return None
        content = await self.storage.load(self._user_path(user_id))
        if content is None:
            return None
        return self._from_json(json.loads(content.decode('utf-8')))

    async def get_user_by_username(self, username: str) -> Optional[Dict]:
        """Get user by username, None if not registered."""
        index = await self._load_username_index()
        user_id = index.get(username)
        if user_id is None:
            return None
        return await self.get_user(user_id)

    async def create_user(
        self,
        user_id: str,
        username: str,
        hashed_password: str,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> Dict:
        """
        Create a new user with an empty health profile.

        Args:
            user_id: User ID (UUID)
            username: Username
            hashed_password: Hashed password
            email: Optional email
            full_name: Optional display name

        Returns:
            Dict: Created user data

        Raises:
            InvalidArgument: The username is already registered
        """
        now = datetime.now(timezone.utc)

        user_data = {
            "user_id": user_id,
            "username": username,
            "email": email,
            "full_name": full_name,
            "hashed_password": hashed_password,
            "created_at": now,
            "updated_at": now,
            "is_active": True,
            **{field: None for field in PROFILE_FIELDS},
        }

        # The index check, the account write and the index write happen under one lock
        async with self._lock(self._username_index_path):
            index = await self._load_username_index()
            if username in index:
                raise InvalidArgument("Username already registered")

            await self._save_json(self._user_path(user_id), user_data)
            index[username] = user_id
            await self._save_json(self._username_index_path, index)

        logger.info(f"Created user {username}", extra={"extra_fields": {"user_id": user_id}})
        return user_data

    async def update_user(self, user_id: str, updates: Dict[str, Any]) -> Optional[Dict]:
        """
        Update user data.

        Args:
            user_id: User ID
            updates: Dictionary of fields to update

        Returns:
            Optional[Dict]: Updated user data or None if user not found
        """
        async with self._lock(self._user_path(user_id)):
            user = await self.get_user(user_id)
            if user is None:
                return None

            user.update(updates)
            user['updated_at'] = datetime.now(timezone.utc)
            await self._save_json(self._user_path(user_id), user)
        return user
