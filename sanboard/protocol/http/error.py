from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, cast

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from ...engine.errors import NotationError


logger = logging.getLogger(__name__)

_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
    422: "unprocessable_entity",
}


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    field_errors: Optional[List[Dict[str, str]]] = None,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the ``{"error": {...}}`` body shared by every failing route.

    ``token`` carries the offending SAN/FEN text for notation errors and
    ``field_errors`` the per-field details of a validation failure; both are
    omitted when empty.
    """
    body: Dict[str, Any] = {
        "code": code,
        "message": message,
        "type": err_type,
        "request_id": request_id,
    }
    if field_errors:
        body["field_errors"] = field_errors
    if token is not None:
        body["token"] = token
    return {"error": body}


def _respond(request: Request, status_code: int, code: str, message: str, **extra: Any) -> JSONResponse:
    payload = error_envelope(
        code=code,
        message=message,
        err_type="client_error" if status_code < 500 else "server_error",
        request_id=getattr(request.state, "request_id", ""),
        **extra,
    )
    return JSONResponse(status_code=status_code, content=payload)


def _status_to_code(status_code: int) -> str:
    if status_code >= 500:
        return "internal_error"
    return _STATUS_CODES.get(status_code, "error")


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, HTTPException):
        return await exception_handler(request, exc)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _respond(request, exc.status_code, _status_to_code(exc.status_code), detail)


async def notation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Bad FEN or SAN input: 400 with the error's own code and token."""
    err = cast(NotationError, exc)
    logger.info(
        "notation error",
        extra={
            "request_id": getattr(request.state, "request_id", ""),
            "code": err.code,
            "token": err.token,
        },
    )
    return _respond(request, status.HTTP_400_BAD_REQUEST, err.code, str(err), token=err.token)


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    rve = cast(RequestValidationError, exc)
    field_errors = [
        {
            "field": ".".join(str(p) for p in e.get("loc", []) if p is not None),
            "code": e.get("type", "value_error"),
            "message": e.get("msg", "invalid value"),
        }
        for e in rve.errors()
    ]
    return _respond(
        request,
        422,
        "unprocessable_entity",
        "Validation error",
        field_errors=field_errors or None,
    )


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, HTTPException):
        return await http_exception_handler(request, exc)
    logger.exception(
        "Unhandled exception", extra={"request_id": getattr(request.state, "request_id", "")}
    )
    return _respond(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal Server Error"
    )
