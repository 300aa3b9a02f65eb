from __future__ import annotations

from .disk_store import AsyncDiskCollectionStore, DiskJsonCollectionStore
from .ids import IdentifierAllocator, IdentifierSpaceExhausted, generate_numeric_id
from .repositories import (
    AsyncCategoryRepository,
    AsyncCollectionRepository,
    AsyncProductRepository,
    AsyncUserRepository,
)
from .results import ErrorDetail, StoreResult

__all__ = [
    "DiskJsonCollectionStore",
    "AsyncDiskCollectionStore",
    "IdentifierAllocator",
    "IdentifierSpaceExhausted",
    "generate_numeric_id",
    "AsyncCollectionRepository",
    "AsyncUserRepository",
    "AsyncProductRepository",
    "AsyncCategoryRepository",
    "ErrorDetail",
    "StoreResult",
]
