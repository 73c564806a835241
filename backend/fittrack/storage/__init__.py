"""Storage module - provides interface and implementations for data persistence."""

from .interface import StorageInterface
from .local_storage import LocalStorage
from .user_storage import UserStorage
from .record_store import RecordStore, TABLES

__all__ = ['StorageInterface', 'LocalStorage', 'UserStorage', 'RecordStore', 'TABLES']
