from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

from .results import StoreResult


class CollectionDocumentStore(Protocol):
    """
    Minimal DB-friendly interface: an ordered array of records persisted per path.
    """

    def load(self, path: Path) -> list[Any]:
        """Load the raw records; raises on corruption, [] when the file is absent."""
        ...

    def read(self, path: Path) -> StoreResult:
        """Load the full collection (never raises; records empty when the file is absent)."""
        ...

    def write(self, path: Path, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> StoreResult:
        """Append one or more records, assigning ids where missing."""
        ...

    def remove(self, path: Path, record_id: Any) -> StoreResult:
        """Delete the record with the given id, rewriting the file."""
        ...

    def update(self, path: Path, record_id: Any, field: str, value: Any) -> StoreResult:
        """Set one field on the record with the given id, rewriting the file."""
        ...

    def append_to_field(
        self, path: Path, record_id: Any, field: str, item: Any, *, unique: bool = True
    ) -> StoreResult:
        """Append to a list field on the record with the given id in one locked cycle."""
        ...
