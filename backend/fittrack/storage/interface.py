"""
Storage Interface - Abstract base class for all storage backends.
The record store and user store only talk to this interface, so a
cloud bucket or database backend can replace the local filesystem.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageInterface(ABC):
    """
    Abstract storage interface that defines the contract for all storage implementations.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Save content to the specified path, replacing any previous content.

        Args:
            path: Relative path (e.g., "users/123/records/weight.json")
            content: Content to save (bytes or str)

        Returns:
            bool: True if save was successful, False otherwise
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Args:
            path: Relative path to load from

        Returns:
            Optional[bytes]: File content as bytes, or None if file doesn't exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists at the specified path."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete file at the specified path.

        Returns:
            bool: True if a file was deleted, False otherwise
        """
        pass

    @abstractmethod
    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """
        List files directly inside a directory.

        Args:
            path: Directory path to list
            pattern: Optional glob pattern to filter files (e.g., "*.json")

        Returns:
            List[str]: Sorted relative file paths
        """
        pass
