"""Supabase-backed key-value store."""

import asyncio
from dataclasses import dataclass
from functools import partial

from supabase import Client

from intake_tracker.domain.errors import StoreUnavailable
from intake_tracker.services.store import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Key-value store on a ``(key text primary key, value text)`` table."""

    client: Client
    table: str = "kv_store"
    page_size: int = 1000

    async def get(self, key: str) -> str | None:
        """Return the value stored under a key, if present."""
        response = await self._execute(
            lambda: self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if response.data:
            return str(response.data[0]["value"])
        return None

    async def put(self, key: str, value: str) -> None:
        """Insert or replace the value stored under a key."""
        await self._execute(
            lambda: self.client.table(self.table)
            .upsert({"key": key, "value": value})
            .execute()
        )

    async def delete(self, key: str) -> None:
        """Delete a key."""
        await self._execute(
            lambda: self.client.table(self.table).delete().eq("key", key).execute()
        )

    async def _execute(self, query):  # type: ignore[no-untyped-def]
        try:
            return await asyncio.to_thread(query)
        except Exception as exc:
            raise StoreUnavailable(f"Supabase {self.table} request failed") from exc

    async def list(self, prefix: str | None = None) -> list[str]:
        """Return key names, optionally filtered by prefix.

        Keys are read in pages of ``page_size`` rows, which must not exceed
        the server's max-rows setting.
        """

        def query(start: int):  # type: ignore[no-untyped-def]
            builder = self.client.table(self.table).select("key")
            if prefix:
                builder = builder.like("key", f"{_escape_like(prefix)}%")
            return (
                builder.order("key")
                .range(start, start + self.page_size - 1)
                .execute()
            )

        keys: list[str] = []
        while True:
            response = await self._execute(partial(query, len(keys)))
            rows = response.data or []
            keys.extend(str(row["key"]) for row in rows)
            if len(rows) < self.page_size:
                return keys


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
