"""Key-value persistence of named JSON blobs."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from finscope.core.exceptions import StorageError


class PersistenceGateway(ABC):
    """Opaque store: whatever JSON value was last written under a key is returned as-is."""

    backend: str = "abstract"

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete ``key``; returns whether it existed."""

    def close(self) -> None:
        """Release resources held by the store."""

    def _dumps(self, key: str, value: Any) -> str:
        try:
            return json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}", key=key, backend=self.backend) from e


class MemoryStore(PersistenceGateway):
    """In-process store; values are kept as JSON text so reads never alias writes."""

    backend = "memory"

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        text = self._data.get(key)
        return None if text is None else json.loads(text)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = self._dumps(key, value)

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)


__all__ = ["PersistenceGateway", "MemoryStore"]
