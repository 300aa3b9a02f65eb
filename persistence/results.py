from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel

ErrorKind = Literal[
    "NOT_FOUND",
    "INVALID_IDENTIFIER",
    "DUPLICATE_IDENTIFIER",
    "IO_FAILURE",
    "INVALID_INPUT",
    "RESOURCE_EXHAUSTED",
]

STATUS_FOR_KIND: dict[str, int] = {
    "NOT_FOUND": 404,
    "INVALID_IDENTIFIER": 400,
    "DUPLICATE_IDENTIFIER": 409,
    "IO_FAILURE": 500,
    "INVALID_INPUT": 400,
    "RESOURCE_EXHAUSTED": 503,
}


class ErrorDetail(BaseModel):
    kind: ErrorKind
    detail: str | None = None
    value: Any = None


class BatchItemOutcome(BaseModel):
    id: Any
    result: StoreResult


class StoreResult(BaseModel):
    """
    Tagged outcome of every store operation.

    The status mirrors an HTTP status code so route handlers can pass it
    through, but the store itself never speaks HTTP:
      { "status": 200, "message": "...", "ids": [...], "records": [...] }
      { "status": 409, "message": "...", "error": { "kind": "DUPLICATE_IDENTIFIER", ... } }
    """

    status: int
    message: str
    error: ErrorDetail | None = None
    ids: list[int] | None = None
    records: list[Any] | None = None
    results: list[BatchItemOutcome] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 300

    @property
    def kind(self) -> str | None:
        return self.error.kind if self.error is not None else None

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def success(cls, message: str, **fields: Any) -> "StoreResult":
        return cls(status=200, message=message, **fields)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        detail: str | None = None,
        value: Any = None,
    ) -> "StoreResult":
        return cls(
            status=STATUS_FOR_KIND[kind],
            message=message,
            error=ErrorDetail(kind=kind, detail=detail, value=value),
        )


BatchItemOutcome.model_rebuild()
StoreResult.model_rebuild()
