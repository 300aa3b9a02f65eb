from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from persistence.disk_store import AsyncDiskCollectionStore, DiskJsonCollectionStore
from persistence.repositories import (
    AsyncCategoryRepository,
    AsyncCollectionRepository,
    AsyncProductRepository,
    AsyncUserRepository,
)
from persistence.results import StoreResult
from settings import get_settings

logger = logging.getLogger(__name__)

SETTINGS = get_settings()

STORE = AsyncDiskCollectionStore(DiskJsonCollectionStore(max_id_attempts=SETTINGS.id_max_attempts))

USER_REPO = AsyncUserRepository(store=STORE)
PRODUCT_REPO = AsyncProductRepository(store=STORE)
CATEGORY_REPO = AsyncCategoryRepository(store=STORE)


class DeleteManyBody(BaseModel):
    # Left loose so a malformed list is reported as INVALID_INPUT, not a 422.
    ids: Any = None


class UpdateFieldBody(BaseModel):
    field: str
    value: Any = None


class LinkBody(BaseModel):
    category_id: int


class BasketBody(BaseModel):
    product_id: int
    quantity: int = 1


def _reply(result: StoreResult) -> JSONResponse:
    if not result.ok:
        logger.info("STORE RESULT: status=%s kind=%s message=%s", result.status, result.kind, result.message)
    return JSONResponse(result.to_response(), status_code=result.status)


def build_collection_router(repo: AsyncCollectionRepository) -> APIRouter:
    """
    Routes for one collection, mounted under /<plural>:

      GET    /all    -> { "<plural>": [...] }
      GET    /{id}   -> { "<kind>": {...} }
      POST   /       -> create one record, or import a list in one batch
      PATCH  /{id}   -> set one field
      DELETE /{id}   -> delete one
      DELETE /       -> { "ids": [...] } delete many
    """
    router = APIRouter(prefix=f"/{repo.plural}", tags=[repo.plural])

    @router.get("/all")
    async def list_records() -> JSONResponse:
        res = await repo.list_all()
        if not res.ok:
            return _reply(res)
        return JSONResponse({repo.plural: res.records or []})

    @router.get("/{record_id}")
    async def get_record(record_id: int) -> JSONResponse:
        res = await repo.get_by_id(record_id)
        if not res.ok:
            return _reply(res)
        return JSONResponse({repo.kind: (res.records or [None])[0]})

    @router.post("/")
    async def create_record(payload: dict[str, Any] | list[dict[str, Any]] = Body(...)) -> JSONResponse:
        if isinstance(payload, list):
            return _reply(await repo.create_many(payload))
        return _reply(await repo.create(payload))

    @router.patch("/{record_id}")
    async def update_record(record_id: int, body: UpdateFieldBody) -> JSONResponse:
        return _reply(await repo.update(record_id, body.field, body.value))

    @router.delete("/{record_id}")
    async def delete_record(record_id: int) -> JSONResponse:
        return _reply(await repo.delete_by_id(record_id))

    @router.delete("/")
    async def delete_records(body: DeleteManyBody | None = None) -> JSONResponse:
        ids = body.ids if body is not None else None
        return _reply(await repo.delete_many(ids))

    return router


users_router = build_collection_router(USER_REPO)
products_router = build_collection_router(PRODUCT_REPO)
categories_router = build_collection_router(CATEGORY_REPO)


@products_router.post("/{product_id}/categories")
async def link_product_category(product_id: int, body: LinkBody) -> JSONResponse:
    return _reply(await PRODUCT_REPO.link_category(product_id, body.category_id, CATEGORY_REPO))


@users_router.post("/{user_id}/basket")
async def add_to_basket(user_id: int, body: BasketBody) -> JSONResponse:
    return _reply(await USER_REPO.add_to_basket(user_id, body.product_id, body.quantity))


routers = [users_router, products_router, categories_router]
