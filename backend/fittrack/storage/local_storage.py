"""
Local Filesystem Storage Implementation.
Stores all data under a base directory on the server.
"""

import logging
import uuid
import aiofiles
from pathlib import Path
from typing import Optional, List

from .interface import StorageInterface

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    Local filesystem storage implementation.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Base directory for all stored files
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to full absolute path within base directory."""
        full_path = (self.base_dir / path).resolve()

        # Path must stay inside base_dir
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise ValueError(f"Invalid path: {path} - path traversal detected")

        return full_path

    async def save(self, path: str, content: bytes | str) -> bool:
        """Save content to local filesystem."""
        full_path = self._get_full_path(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = full_path.with_name(f"{full_path.name}.{uuid.uuid4().hex}.tmp")

            if isinstance(content, str):
                async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                    await f.write(content)
            else:
                async with aiofiles.open(tmp_path, 'wb') as f:
                    await f.write(content)

            # Atomic replace
            tmp_path.replace(full_path)
            return True
        except OSError as e:
            logger.error(f"Error saving file {path}: {e}", exc_info=True)
            return False

    async def load(self, path: str) -> Optional[bytes]:
        """Load content from local filesystem."""
        full_path = self._get_full_path(path)
        if not full_path.exists():
            return None

        async with aiofiles.open(full_path, 'rb') as f:
            return await f.read()

    async def exists(self, path: str) -> bool:
        """Check if file exists."""
        try:
            return self._get_full_path(path).exists()
        except ValueError:
            return False

    async def delete(self, path: str) -> bool:
        """Delete file from local filesystem."""
        full_path = self._get_full_path(path)
        try:
            if full_path.exists():
                full_path.unlink()
                return True
            return False
        except OSError as e:
            logger.error(f"Error deleting file {path}: {e}", exc_info=True)
            return False

    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """List files in directory."""
        full_path = self._get_full_path(path)
        if not full_path.is_dir():
            return []

        files = [p for p in full_path.glob(pattern or "*") if p.is_file() and p.suffix != ".tmp"]
        return sorted(str(p.relative_to(self.base_dir)) for p in files)
