from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from persistence.ids import IdentifierAllocator
from persistence.results import StoreResult

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app() -> FastAPI:
    load_dotenv("local.env")

    from settings import get_settings
    from endpoints.catalog_endpoints import routers

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Catalog store")
    # One allocator per process; request ids never repeat while it lives.
    app.state.request_ids = IdentifierAllocator(max_attempts=settings.id_max_attempts)

    @app.middleware("http")
    async def tag_request(request: Request, call_next):
        request_id = app.state.request_ids.allocate()
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        if settings.debug_log_requests:
            logger.info(
                "REQUEST %s: %s %s -> %s", request_id, request.method, request.url.path, response.status_code
            )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        res = StoreResult.failure("INVALID_INPUT", "Invalid request", detail=str(exc.errors()))
        return JSONResponse(res.to_response(), status_code=res.status)

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    for router in routers:
        app.include_router(router)

    return app


app = create_app()
