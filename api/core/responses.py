"""
Uniform response envelope: {"success": bool, "message": str, "data": ...}.

`data` is left out of the JSON body when there is no payload. The exception
handlers below turn every error raised inside a request (ours and the
framework's) into the same envelope.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import AppError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ServerErrorMiddleware sits outside CORSMiddleware, so unexpected 500s add
# the CORS header themselves.
_CORS_ORIGIN_HEADER = {"Access-Control-Allow-Origin": "*"}


class APIResponse(BaseModel, Generic[T]):
    success: bool
    message: str
    data: T | None = None

    @model_serializer(mode="wrap")
    def serialize_envelope(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload = handler(self)
        if payload.get("data") is None:
            payload.pop("data", None)
        return payload


def ok(message: str, data: Any = None) -> APIResponse:
    return APIResponse(success=True, message=message, data=data)


def fail(message: str) -> APIResponse:
    return APIResponse(success=False, message=message)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=fail(message).model_dump(mode="json"))


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "malformed request"


async def _app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("request_failed error=%s message=%s", type(exc).__name__, exc.message)
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, f"invalid parameters: {_format_validation_errors(exc)}")


async def _http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    response = error_response(500, str(exc) or type(exc).__name__)
    response.headers.update(_CORS_ORIGIN_HEADER)
    return response


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
