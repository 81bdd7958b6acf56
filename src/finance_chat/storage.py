import asyncio
import json
import os
import uuid
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from finance_chat.logger import get_logger
from finance_chat.models import Personality

logger = get_logger(__name__)

Row = dict[str, Any]


class RowStore(ABC):
    """Flat row storage addressed by table name and equality filters."""

    @abstractmethod
    async def insert(self, table: str, rows: list[Row]) -> None:
        pass

    @abstractmethod
    async def select(
        self, table: str, filters: dict[str, str], order_by: str | None = None
    ) -> list[Row]:
        pass

    @abstractmethod
    async def delete(self, table: str, filters: dict[str, str]) -> None:
        pass

    async def aclose(self) -> None:
        return None


def _matches(row: Row, filters: dict[str, str]) -> bool:
    return all(row.get(key) == value for key, value in filters.items())


class JsonRowStore(RowStore):
    def __init__(self, data_path: str = "records.json"):
        self.data_path = data_path
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, list[Row]]:
        if not os.path.exists(self.data_path):
            return {}
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("[STORE] Corrupt record file %s, starting empty.", self.data_path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, list[Row]]) -> None:
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    async def insert(self, table: str, rows: list[Row]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            bucket = data.setdefault(table, [])
            for row in rows:
                stored = dict(row)
                stored.setdefault("id", uuid.uuid4().hex)
                bucket.append(stored)
            await asyncio.to_thread(self._save, data)

    async def select(
        self, table: str, filters: dict[str, str], order_by: str | None = None
    ) -> list[Row]:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
        rows = [dict(row) for row in data.get(table, []) if _matches(row, filters)]
        if order_by:
            rows.sort(key=lambda row: str(row.get(order_by) or ""))
        return rows

    async def delete(self, table: str, filters: dict[str, str]) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            rows = data.get(table, [])
            kept = [row for row in rows if not _matches(row, filters)]
            logger.info("[STORE] Deleted %s row(s) from %s.", len(rows) - len(kept), table)
            data[table] = kept
            await asyncio.to_thread(self._save, data)


class PersonalityStore:
    def __init__(self, data_path: str = "personality.json"):
        self.data_path = data_path
        self.personality = Personality()
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                self.personality = Personality.model_validate(json.load(f))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable personality file %s: %s", self.data_path, exc)
            self.personality = Personality()

    def save(self) -> None:
        with open(self.data_path, "w", encoding="utf-8") as f:
            json.dump(self.personality.model_dump(), f, indent=2, ensure_ascii=False)

    def get(self) -> Personality:
        return self.personality

    def update(self, updates: dict[str, Any]) -> Personality:
        merged = {**self.personality.model_dump(), **updates}
        self.personality = Personality.model_validate(merged)
        self.save()
        return self.personality
