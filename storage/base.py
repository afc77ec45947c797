from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Low-level string store the persistence adapter writes blobs into.

    Implementations raise ``StorageReadFailure`` / ``StorageWriteFailure``
    instead of backend-specific exceptions.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> list[str]:
        ...
