from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, ClassVar, Mapping, Protocol, Sequence

from pydantic import ValidationError

from .catalog_records import BasketLine, CatalogRecord, CategoryRecord, ProductRecord, UserRecord
from .disk_store import AsyncDiskCollectionStore
from .paths import collection_path
from .results import BatchItemOutcome, StoreResult

logger = logging.getLogger(__name__)


class AsyncCatalogRepository(Protocol):
    async def create(self, payload: Mapping[str, Any]) -> StoreResult: ...
    async def create_many(self, payloads: Sequence[Mapping[str, Any]]) -> StoreResult: ...
    async def list_all(self) -> StoreResult: ...
    async def get_by_id(self, record_id: Any) -> StoreResult: ...
    async def update(self, record_id: Any, field: str, value: Any) -> StoreResult: ...
    async def delete_by_id(self, record_id: Any) -> StoreResult: ...
    async def delete_many(self, ids: Any) -> StoreResult: ...


class AsyncCollectionRepository(AsyncCatalogRepository):
    """
    One collection file, one repository.

    Owns the collection's path for the life of the process and delegates every
    operation to the document store. Lookups are linear scans over the full read.
    """

    kind: ClassVar[str]
    plural: ClassVar[str]
    record_model: ClassVar[type[CatalogRecord]]

    def __init__(self, *, path: Path | None = None, store: AsyncDiskCollectionStore | None = None) -> None:
        self._path = path if path is not None else collection_path(self.kind)
        self._store = store if store is not None else AsyncDiskCollectionStore()

    @property
    def path(self) -> Path:
        return self._path

    def _validate(self, payload: Any) -> dict[str, Any] | StoreResult:
        if not isinstance(payload, Mapping):
            return StoreResult.failure("INVALID_INPUT", f"{self.kind} payload must be an object")
        try:
            return self.record_model.model_validate(dict(payload)).to_store_doc()
        except ValidationError as e:
            return StoreResult.failure(
                "INVALID_INPUT", f"Invalid {self.kind} payload", detail=str(e)
            )

    async def create(self, payload: Mapping[str, Any]) -> StoreResult:
        doc = self._validate(payload)
        if isinstance(doc, StoreResult):
            return doc
        return await self._store.write(self._path, doc)

    async def create_many(self, payloads: Sequence[Mapping[str, Any]]) -> StoreResult:
        """Import a batch in one write: all records land or none do."""
        if isinstance(payloads, (str, bytes)) or not isinstance(payloads, Sequence):
            return StoreResult.failure("INVALID_INPUT", f"{self.plural} must be an array")
        docs: list[dict[str, Any]] = []
        for payload in payloads:
            doc = self._validate(payload)
            if isinstance(doc, StoreResult):
                return doc
            docs.append(doc)
        return await self._store.write(self._path, docs)

    async def list_all(self) -> StoreResult:
        return await self._store.read(self._path)

    async def get_by_id(self, record_id: Any) -> StoreResult:
        res = await self._store.read(self._path)
        if not res.ok:
            return res
        rec = next((r for r in res.records or [] if isinstance(r, dict) and r.get("id") == record_id), None)
        if rec is None:
            return StoreResult.failure(
                "NOT_FOUND", f"{self.kind.capitalize()} with id {record_id} not found", value=record_id
            )
        return StoreResult.success(f"{self.kind.capitalize()} found", records=[rec])

    async def update(self, record_id: Any, field: str, value: Any) -> StoreResult:
        return await self._store.update(self._path, record_id, field, value)

    async def delete_by_id(self, record_id: Any) -> StoreResult:
        return await self._store.remove(self._path, record_id)

    async def delete_many(self, ids: Any) -> StoreResult:
        if not isinstance(ids, list) or len(ids) == 0:
            return StoreResult.failure("INVALID_INPUT", "ids must be a non-empty array", value=repr(ids))

        # Sequential on purpose: one removal at a time against the same file.
        results: list[BatchItemOutcome] = []
        for record_id in ids:
            result = await self._store.remove(self._path, record_id)
            results.append(BatchItemOutcome(id=record_id, result=result))

        missed = sum(1 for item in results if not item.result.ok)
        if missed:
            logger.info("BATCH DELETE: %s: %d of %d ids not removed", self.plural, missed, len(ids))
        return StoreResult.success(f"Attempted to delete {len(ids)} {self.plural}", results=results)

    async def _append_to_list_field(
        self, record_id: Any, field: str, item: Any, *, unique: bool = True
    ) -> StoreResult:
        return await self._store.append_to_field(self._path, record_id, field, item, unique=unique)


class AsyncUserRepository(AsyncCollectionRepository):
    kind = "user"
    plural = "users"
    record_model = UserRecord

    async def add_to_basket(self, user_id: Any, product_id: int, quantity: int = 1) -> StoreResult:
        try:
            line = BasketLine(product_id=product_id, quantity=quantity)
        except ValidationError as e:
            return StoreResult.failure("INVALID_INPUT", "Invalid basket line", detail=str(e))
        return await self._append_to_list_field(
            user_id, "basket", line.model_dump(mode="json"), unique=False
        )


class AsyncCategoryRepository(AsyncCollectionRepository):
    kind = "category"
    plural = "categories"
    record_model = CategoryRecord


class AsyncProductRepository(AsyncCollectionRepository):
    kind = "product"
    plural = "products"
    record_model = ProductRecord

    async def link_category(
        self, product_id: Any, category_id: Any, categories: AsyncCategoryRepository
    ) -> StoreResult:
        """
        Record the association on both sides as id references.

        Two independent single-file updates; there is no transaction across the
        product and category files.
        """
        category = await categories.get_by_id(category_id)
        if not category.ok:
            return category
        product_side = await self._append_to_list_field(product_id, "category_ids", category_id)
        if not product_side.ok:
            return product_side
        category_side = await categories._append_to_list_field(category_id, "product_ids", product_id)
        if not category_side.ok:
            return category_side
        return StoreResult.success(
            f"Product {product_id} linked to category {category_id}",
            records=[*(product_side.records or []), *(category_side.records or [])],
        )


__all__ = [
    "AsyncCatalogRepository",
    "AsyncCollectionRepository",
    "AsyncUserRepository",
    "AsyncProductRepository",
    "AsyncCategoryRepository",
]
