from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from json_store import JsonStoreError, atomic_write_json, read_json

from .ids import DEFAULT_MAX_ATTEMPTS, IdentifierSpaceExhausted, generate_numeric_id, is_valid_numeric_id
from .interfaces import CollectionDocumentStore
from .locks import GLOBAL_PATH_LOCKS, PathLockRegistry
from .results import StoreResult

logger = logging.getLogger(__name__)

# Disk access and JSON encoding errors, deep nesting included; reported as IO_FAILURE.
_IO_ERRORS = (OSError, JsonStoreError, TypeError, ValueError, RecursionError)


def _same_id(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    return a is not None and a == b


def _id_key(record: Any) -> Any:
    if not isinstance(record, dict):
        return None
    value = record.get("id")
    return value if isinstance(value, (int, str, float)) and not isinstance(value, bool) else None


class DiskJsonCollectionStore(CollectionDocumentStore):
    """
    Stores collections as JSON arrays on disk, one file per collection.

    - No records are cached: every call re-reads the file.
    - write/remove/update hold the path's lock for the whole read-modify-write cycle.
    - Writes are atomic (temp file + replace) and validate the whole batch first.
    - Nothing raises across the public methods; failures come back as StoreResult.
    """

    def __init__(
        self,
        *,
        locks: PathLockRegistry | None = None,
        max_id_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: random.Random | None = None,
    ):
        self._locks = locks if locks is not None else GLOBAL_PATH_LOCKS
        self._max_id_attempts = max_id_attempts
        self._rng = rng

    def _io_failure(self, op: str, path: Path, e: Exception) -> StoreResult:
        logger.warning("STORE %s: %s failed: %r", op.upper(), path, e)
        messages = {
            "read": "Error reading data",
            "write": "Error writing data",
            "remove": "Error removing data",
            "update": "Error updating data",
        }
        return StoreResult.failure("IO_FAILURE", messages[op], detail=str(e))

    def load(self, path: Path) -> list[Any]:
        """
        Return the records in file order; a missing file or non-array payload is [].

        Raises JsonStoreError on corruption. Every operation loads through here.
        """
        raw = read_json(path)
        return raw if isinstance(raw, list) else []

    def read(self, path: Path) -> StoreResult:
        try:
            records = self.load(path)
        except _IO_ERRORS as e:
            return self._io_failure("read", path, e)
        return StoreResult.success("Data successfully read", records=records)

    def write(self, path: Path, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> StoreResult:
        incoming = [data] if isinstance(data, Mapping) else data
        if isinstance(incoming, (str, bytes)) or not isinstance(incoming, Sequence):
            return StoreResult.failure(
                "INVALID_INPUT", "data must be a record or a list of records", value=repr(data)
            )
        if not all(isinstance(item, Mapping) for item in incoming):
            return StoreResult.failure("INVALID_INPUT", "every record must be a mapping of fields")

        # Copies, so a rejected batch never leaves assigned ids on the caller's objects.
        batch = [dict(item) for item in incoming]

        with self._locks.exclusive(path):
            try:
                existing = self.load(path)
            except _IO_ERRORS as e:
                return self._io_failure("write", path, e)

            used = {key for key in map(_id_key, existing) if key is not None}
            assigned: list[int] = []
            for record in batch:
                record_id = record.get("id")
                if record_id is None:
                    try:
                        record_id = generate_numeric_id(
                            used, rng=self._rng, max_attempts=self._max_id_attempts
                        )
                    except IdentifierSpaceExhausted as e:
                        logger.warning("STORE WRITE: %s: %s", path, e)
                        return StoreResult.failure(
                            "RESOURCE_EXHAUSTED", "Could not generate a unique id", detail=str(e)
                        )
                    record["id"] = record_id
                elif not is_valid_numeric_id(record_id):
                    return StoreResult.failure(
                        "INVALID_IDENTIFIER",
                        f"Invalid id: {record_id}. ID must be a 10-digit number",
                        value=record_id,
                    )
                elif record_id in used:
                    return StoreResult.failure(
                        "DUPLICATE_IDENTIFIER",
                        f"Duplicate id: {record_id} already exists",
                        value=record_id,
                    )
                used.add(record_id)
                assigned.append(record_id)

            try:
                atomic_write_json(path, [*existing, *batch])
            except _IO_ERRORS as e:
                return self._io_failure("write", path, e)

        logger.debug("STORE WRITE: %s appended ids=%s", path, assigned)
        return StoreResult.success("Data successfully written", ids=assigned, records=batch)

    def remove(self, path: Path, record_id: Any) -> StoreResult:
        with self._locks.exclusive(path):
            if not path.exists():
                return StoreResult.failure("NOT_FOUND", "File not found", detail=str(path))
            try:
                existing = self.load(path)
            except _IO_ERRORS as e:
                return self._io_failure("remove", path, e)

            survivors = [r for r in existing if not _same_id(_id_key(r), record_id)]
            if len(survivors) == len(existing):
                return StoreResult.failure(
                    "NOT_FOUND", f"Item with id {record_id} not found", value=record_id
                )

            try:
                atomic_write_json(path, survivors)
            except _IO_ERRORS as e:
                return self._io_failure("remove", path, e)

        logger.debug("STORE REMOVE: %s id=%s", path, record_id)
        return StoreResult.success(f"Item with id {record_id} successfully removed")

    def update(self, path: Path, record_id: Any, field: str, value: Any) -> StoreResult:
        invalid = _check_field(field, record_id)
        if invalid is not None:
            return invalid

        def _set(target: dict[str, Any]) -> StoreResult | None:
            target[field] = value
            return None

        return self._modify_record("update", path, record_id, _set)

    def append_to_field(
        self, path: Path, record_id: Any, field: str, item: Any, *, unique: bool = True
    ) -> StoreResult:
        """
        Append `item` to the list stored under `field` on one record.

        Load, append and rewrite happen under a single hold of the path's lock,
        so concurrent appends to the same record all land. With `unique`, an item
        already present is a successful no-op.
        """
        invalid = _check_field(field, record_id)
        if invalid is not None:
            return invalid

        def _append(target: dict[str, Any]) -> StoreResult | None:
            current = target.get(field)
            if current is None:
                current = target[field] = []
            elif not isinstance(current, list):
                return StoreResult.failure(
                    "INVALID_INPUT", f"field {field} of item {record_id} is not a list", value=record_id
                )
            if unique and item in current:
                return StoreResult.success(
                    f"Item with id {record_id} already has it in {field}", records=[target]
                )
            current.append(item)
            return None

        return self._modify_record("update", path, record_id, _append)

    def _modify_record(
        self,
        op: str,
        path: Path,
        record_id: Any,
        change: Callable[[dict[str, Any]], StoreResult | None],
    ) -> StoreResult:
        # change() returns a result to finish early without rewriting, or None to persist.
        with self._locks.exclusive(path):
            if not path.exists():
                return StoreResult.failure("NOT_FOUND", "File not found", detail=str(path))
            try:
                existing = self.load(path)
            except _IO_ERRORS as e:
                return self._io_failure(op, path, e)

            target = next((r for r in existing if _same_id(_id_key(r), record_id)), None)
            if target is None:
                return StoreResult.failure(
                    "NOT_FOUND", f"Item with id {record_id} not found", value=record_id
                )
            early = change(target)
            if early is not None:
                return early

            try:
                atomic_write_json(path, existing)
            except _IO_ERRORS as e:
                return self._io_failure(op, path, e)

        logger.debug("STORE %s: %s id=%s", op.upper(), path, record_id)
        return StoreResult.success(f"Item with id {record_id} successfully updated", records=[target])


def _check_field(field: Any, record_id: Any) -> StoreResult | None:
    if not isinstance(field, str) or not field.strip():
        return StoreResult.failure("INVALID_INPUT", "field must be a non-empty string", value=field)
    if field == "id":
        return StoreResult.failure("INVALID_INPUT", "id cannot be updated", value=record_id)
    return None


class AsyncDiskCollectionStore:
    """
    Async wrapper around the disk-backed collection store.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O.
    """

    def __init__(self, store: DiskJsonCollectionStore | None = None) -> None:
        self._store = store if store is not None else DiskJsonCollectionStore()

    async def read(self, path: Path) -> StoreResult:
        return await asyncio.to_thread(self._store.read, path)

    async def write(self, path: Path, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> StoreResult:
        return await asyncio.to_thread(self._store.write, path, data)

    async def remove(self, path: Path, record_id: Any) -> StoreResult:
        return await asyncio.to_thread(self._store.remove, path, record_id)

    async def update(self, path: Path, record_id: Any, field: str, value: Any) -> StoreResult:
        return await asyncio.to_thread(self._store.update, path, record_id, field, value)

    async def append_to_field(
        self, path: Path, record_id: Any, field: str, item: Any, *, unique: bool = True
    ) -> StoreResult:
        return await asyncio.to_thread(
            self._store.append_to_field, path, record_id, field, item, unique=unique
        )
