"""Supabase-backed key-value store."""

from dataclasses import dataclass

from supabase import Client

from event_snap.domain.errors import StorageError
from event_snap.services.kv import KeyValueStore

_PAGE_SIZE = 1000


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Key-value store over a ``(key text primary key, value jsonb)`` table.

    Client errors are re-raised as ``StorageError``.
    """

    client: Client
    table_name: str = "kv_store"

    def get(self, key: str) -> dict[str, object] | None:
        """Return the value for a key, if present."""
        try:
            response = (
                self.client.table(self.table_name)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise StorageError("Failed to read from key-value store") from exc
        if not response.data:
            return None
        return response.data[0]["value"]

    def set(self, key: str, value: dict[str, object]) -> None:
        """Insert or replace the value for a key."""
        try:
            self.client.table(self.table_name).upsert(
                {"key": key, "value": value}
            ).execute()
        except Exception as exc:
            raise StorageError("Failed to write to key-value store") from exc

    def delete(self, key: str) -> None:
        """Delete a key."""
        try:
            self.client.table(self.table_name).delete().eq("key", key).execute()
        except Exception as exc:
            raise StorageError("Failed to delete from key-value store") from exc

    def get_by_prefix(self, prefix: str) -> list[dict[str, object]]:
        """Return values for all keys starting with the prefix, in key order."""
        return [value for _, value in self.items_by_prefix(prefix)]

    def items_by_prefix(self, prefix: str) -> list[tuple[str, dict[str, object]]]:
        """Return ``(key, value)`` pairs for keys starting with the prefix."""
        pattern = f"{_escape_like(prefix)}%"
        items: list[tuple[str, dict[str, object]]] = []
        start = 0
        while True:
            try:
                response = (
                    self.client.table(self.table_name)
                    .select("key, value")
                    .like("key", pattern)
                    .order("key")
                    .range(start, start + _PAGE_SIZE - 1)
                    .execute()
                )
            except Exception as exc:
                raise StorageError("Failed to scan key-value store") from exc
            rows = response.data or []
            items.extend((row["key"], row["value"]) for row in rows)
            if len(rows) < _PAGE_SIZE:
                return items
            start += _PAGE_SIZE


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so a prefix matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
