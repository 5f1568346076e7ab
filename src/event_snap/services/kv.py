"""Key-value persistence abstractions."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Interface for JSON values addressed by string keys."""

    def get(self, key: str) -> dict[str, object] | None:
        """Return the value stored under a key, if present."""

    def set(self, key: str, value: dict[str, object]) -> None:
        """Store a value under a key, replacing any existing one."""

    def delete(self, key: str) -> None:
        """Delete the value stored under a key."""

    def get_by_prefix(self, prefix: str) -> list[dict[str, object]]:
        """Return every value whose key starts with the prefix."""

    def items_by_prefix(self, prefix: str) -> list[tuple[str, dict[str, object]]]:
        """Return ``(key, value)`` pairs whose key starts with the prefix."""
