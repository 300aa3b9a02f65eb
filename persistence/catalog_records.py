from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BasketLine(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class CatalogRecord(BaseModel):
    """
    Base for catalog records. Extra fields are kept: the store treats records as
    opaque mappings and only cares about `id`.
    """

    model_config = ConfigDict(extra="allow")

    # Left untyped: id shape and range are checked by the store on write.
    id: Any = None

    def to_store_doc(self) -> dict[str, Any]:
        doc = self.model_dump(mode="json")
        if doc.get("id") is None:
            doc.pop("id", None)
        return doc


class UserRecord(CatalogRecord):
    name: str | None = None
    surname: str | None = None
    username: str | None = None
    email: str | None = None
    passwordHash: str | None = None
    basket: list[BasketLine] = Field(default_factory=list)


class ProductRecord(CatalogRecord):
    name: str | None = None
    description: str | None = None
    price: float | None = None
    stock: int | None = None
    # Associations are plain id references, never nested records.
    category_ids: list[int] = Field(default_factory=list)


class CategoryRecord(CatalogRecord):
    name: str | None = None
    description: str | None = None
    product_ids: list[int] = Field(default_factory=list)
