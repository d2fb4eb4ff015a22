from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from almacen.services.exceptions import (
    DanglingReferenceError,
    InsufficientStockError,
    InternalError,
    NoLinkedItemsError,
    NotFoundError,
    StockError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[StockError], int] = {
    ValidationError: 400,
    NoLinkedItemsError: 400,
    NotFoundError: 404,
    InsufficientStockError: 409,
    DanglingReferenceError: 409,
    InternalError: 500,
}

GENERIC_ERROR = "Error interno"


def error_body(message: str, **extra) -> dict:
    return {"ok": False, "error": message, **extra}


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query")]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts) or "Entrada inválida"


async def stock_error_handler(request: Request, exc: StockError) -> JSONResponse:
    status_code = STATUS_BY_ERROR.get(type(exc), 500)
    return JSONResponse(status_code=status_code, content=error_body(exc.message, **exc.extra))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body(_describe(exc)))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("DB ERROR %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_body(GENERIC_ERROR))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StockError, stock_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
