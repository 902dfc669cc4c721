"""Supabase client helpers."""

from __future__ import annotations

from typing import Any

from supabase import Client, create_client

from golfmx.config import Settings


def connect(settings: Settings) -> Client:
    """Create a Supabase client (service-role, for backend workers)."""
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


class Database:
    """Thin query helpers bound to one client and schema."""

    def __init__(self, client: Client, schema: str = "public") -> None:
        self.client = client
        self.schema = schema

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(connect(settings), settings.supabase_schema)

    def table(self, name: str):
        """Return a table query builder scoped to the configured schema."""
        return self.client.schema(self.schema).table(name)

    def upsert_rows(self, table: str, rows: list[dict], on_conflict: str) -> list[dict]:
        """Upsert rows into a table, returning the upserted records."""
        if not rows:
            return []
        return (
            self.table(table)
            .upsert(rows, on_conflict=on_conflict)
            .execute()
            .data
        )

    def insert_rows(self, table: str, rows: list[dict]) -> list[dict]:
        """Insert rows into a table, returning inserted records."""
        if not rows:
            return []
        return self.table(table).insert(rows).execute().data

    def select_rows(
        self,
        table: str,
        columns: str = "*",
        filters: dict | None = None,
        in_filters: dict[str, list[Any]] | None = None,
    ) -> list[dict]:
        """Simple select with optional equality and membership filters."""
        q = self.table(table).select(columns)
        for k, v in (filters or {}).items():
            q = q.eq(k, v)
        for k, values in (in_filters or {}).items():
            q = q.in_(k, values)
        return q.execute().data

    def update_rows(self, table: str, values: dict, filters: dict) -> list[dict]:
        """Update rows matching equality filters. Returns updated records."""
        q = self.table(table).update(values)
        for k, v in filters.items():
            q = q.eq(k, v)
        return q.execute().data
