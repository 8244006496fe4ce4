"""Key-value store protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """Opaque durable storage of textual values by key.

    Implementations report storage failures as ``PersistenceError`` so callers
    never depend on a particular backend's exception types.
    """

    def get_value(self, key: str) -> Optional[str]:
        """Return the stored text or None when the key is absent."""
        ...

    def set_value(self, key: str, value: str) -> None:
        """Create or overwrite a key."""
        ...

    def set_many(self, values: dict[str, str]) -> None:
        """Write several keys in one unit of work."""
        ...
