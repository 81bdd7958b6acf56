import asyncio
import os
from typing import Any

import httpx

from finance_chat.logger import get_logger
from finance_chat.storage import Row, RowStore

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class SupabaseClient(RowStore):
    """Row store backed by a Supabase (PostgREST) table endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or os.getenv("SUPABASE_URL") or "").rstrip("/") or None
        self.api_key = api_key or os.getenv("SUPABASE_KEY")
        self.timeout = timeout
        self.headers = self._build_headers()
        self._client = client
        self._client_lock = asyncio.Lock()

    def _build_headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key or "",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is not None and not client.is_closed:
            return client

        async with self._client_lock:
            # Another task may have created it while we waited
            client = self._client
            if client is None or client.is_closed:
                client = httpx.AsyncClient()
                self._client = client
            return client

    def _table_url(self, table: str) -> str:
        if not self.base_url:
            raise RuntimeError("SUPABASE_URL is not configured.")
        return f"{self.base_url}/rest/v1/{table}"

    @staticmethod
    def _filter_params(filters: dict[str, str]) -> dict[str, Any]:
        return {key: f"eq.{value}" for key, value in filters.items()}

    async def insert(self, table: str, rows: list[Row]) -> None:
        if not rows:
            return
        client = await self._get_client()
        response = await client.post(
            self._table_url(table),
            headers={**self.headers, "Prefer": "return=minimal"},
            json=rows,
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.debug("[STORE] Inserted %s row(s) into %s.", len(rows), table)

    async def select(
        self, table: str, filters: dict[str, str], order_by: str | None = None
    ) -> list[Row]:
        params = {"select": "*", **self._filter_params(filters)}
        if order_by:
            params["order"] = f"{order_by}.asc"

        client = await self._get_client()
        response = await client.get(
            self._table_url(table),
            headers=self.headers,
            params=params,
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, list) else []

    async def delete(self, table: str, filters: dict[str, str]) -> None:
        if not filters:
            # PostgREST refuses unfiltered deletes; never wipe a whole table.
            raise ValueError("Refusing to delete without filters.")
        client = await self._get_client()
        response = await client.delete(
            self._table_url(table),
            headers=self.headers,
            params=self._filter_params(filters),
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.info("[STORE] Deleted rows from %s where %s.", table, filters)
