"""
Record Store - Flat per-user tables of typed rows on top of StorageInterface.

Each (user, table) pair is one JSON file holding a list of rows:

    users/{user_id}/records/{table}.json

Rows are validated against the table's pydantic model on write and again on
read, so malformed rows never reach the aggregation or dashboard code.
"""

import asyncio
import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .interface import StorageInterface
from ..core.errors import NotFound, StorageError, ValidationError, InvalidArgument
from ..models.tracking import (
    StoredRecord, WeightEntry, SleepEntry, CalorieEntry, ActivityEntry,
    NutritionLog, MedicalCondition,
)
from ..models.chat import ChatContext, ChatMessage

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=StoredRecord)

# Table name -> row model
TABLES: Dict[str, Type[StoredRecord]] = {
    "weight": WeightEntry,
    "sleep": SleepEntry,
    "calories": CalorieEntry,
    "activity": ActivityEntry,
    "nutrition": NutritionLog,
    "medical": MedicalCondition,
    "chat_contexts": ChatContext,
    "chat_messages": ChatMessage,
}


def _sort_key(row: StoredRecord):
    row_date = getattr(row, "date", None)
    return (row_date or date.min, row.created_at)


class RecordStore:
    """
    CRUD over per-user tables.

    Every operation takes the owner's user_id; a row that exists but belongs
    to another user is reported exactly like a missing row.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize the record store.

        Args:
            storage: Storage backend used for the table files
        """
        self.storage = storage
        self._locks: Dict[str, asyncio.Lock] = {}

    def _table_path(self, table: str, user_id: str) -> str:
        if table not in TABLES:
            raise InvalidArgument(f"Unknown table: {table}")
        if not user_id or "/" in user_id or user_id.startswith("."):
            raise InvalidArgument(f"Invalid user id: {user_id!r}")
        return f"users/{user_id}/records/{table}.json"

    def _lock(self, path: str) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    async def _read_rows(self, path: str) -> List[Dict[str, Any]]:
        content = await self.storage.load(path)
        if content is None:
            return []
        try:
            rows = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Corrupt table file {path}: {e}") from e
        if not isinstance(rows, list):
            raise StorageError(f"Corrupt table file {path}: expected a list")
        return rows

    async def _write_rows(self, path: str, rows: List[Dict[str, Any]]) -> None:
        content = json.dumps(rows, ensure_ascii=False, indent=2)
        if not await self.storage.save(path, content):
            raise StorageError(f"Failed to write table file {path}")

    def _parse(self, table: str, raw: Dict[str, Any]) -> StoredRecord:
        try:
            return TABLES[table].model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed {table} row {raw.get('id')!r}: {e}") from e

    @staticmethod
    def _dump(row: StoredRecord) -> Dict[str, Any]:
        data = row.model_dump(mode="json")
        # Derived fields are recomputed on read
        data.pop("net", None)
        return data

    async def insert(self, table: str, user_id: str, data: BaseModel | Dict[str, Any]) -> StoredRecord:
        """
        Insert a new row owned by user_id.

        Args:
            table: Table name (see TABLES)
            user_id: Owner
            data: Row fields (model or dict); id is generated unless provided

        Returns:
            The stored row model

        Raises:
            ValidationError: If the row does not match the table model
        """
        path = self._table_path(table, user_id)
        fields = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        fields["user_id"] = user_id
        fields["id"] = fields.get("id") or str(uuid4())
        fields["created_at"] = datetime.now(timezone.utc)
        row = self._parse(table, fields)

        async with self._lock(path):
            rows = await self._read_rows(path)
            rows.append(self._dump(row))
            await self._write_rows(path, rows)

        logger.debug(f"Inserted {table} row {row.id} for user {user_id}")
        return row

    async def list(
        self,
        table: str,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        **filters: Any,
    ) -> List[StoredRecord]:
        """
        List a user's rows, oldest first (by date, then created_at).

        Args:
            table: Table name
            user_id: Owner
            start: Inclusive lower date bound (dated tables only)
            end: Inclusive upper date bound (dated tables only)
            **filters: Exact field matches, e.g. context_id="..."
        """
        path = self._table_path(table, user_id)
        result = []
        for raw in await self._read_rows(path):
            row = self._parse(table, raw)
            if row.user_id != user_id:
                continue
            row_date = getattr(row, "date", None)
            if start is not None and row_date is not None and row_date < start:
                continue
            if end is not None and row_date is not None and row_date > end:
                continue
            if any(getattr(row, key, None) != value for key, value in filters.items()):
                continue
            result.append(row)
        return sorted(result, key=_sort_key)

    async def get(self, table: str, user_id: str, row_id: str) -> StoredRecord:
        """Get one row by id; NotFound if missing or not owned."""
        for row in await self.list(table, user_id):
            if row.id == row_id:
                return row
        raise NotFound(f"{table} row not found")

    async def update(self, table: str, user_id: str, row_id: str, changes: Dict[str, Any]) -> StoredRecord:
        """
        Apply field changes to one row.

        Raises:
            NotFound: Row missing or not owned
            ValidationError: Result does not match the table model
        """
        path = self._table_path(table, user_id)
        protected = {"id", "user_id", "created_at"}
        async with self._lock(path):
            rows = await self._read_rows(path)
            for index, raw in enumerate(rows):
                if raw.get("id") == row_id and raw.get("user_id") == user_id:
                    merged = {**raw, **{k: v for k, v in changes.items() if k not in protected}}
                    row = self._parse(table, merged)
                    rows[index] = self._dump(row)
                    await self._write_rows(path, rows)
                    return row
        raise NotFound(f"{table} row not found")

    async def delete(self, table: str, user_id: str, row_id: str) -> None:
        """Delete one row; NotFound if missing or not owned."""
        removed = await self.delete_where(table, user_id, id=row_id)
        if removed == 0:
            raise NotFound(f"{table} row not found")

    async def delete_where(self, table: str, user_id: str, **filters: Any) -> int:
        """
        Delete every row of the user matching all filters.

        Returns:
            int: Number of rows removed
        """
        path = self._table_path(table, user_id)
        async with self._lock(path):
            rows = await self._read_rows(path)
            kept = [
                raw for raw in rows
                if raw.get("user_id") != user_id
                or any(raw.get(key) != value for key, value in filters.items())
            ]
            removed = len(rows) - len(kept)
            if removed:
                await self._write_rows(path, kept)
        return removed
