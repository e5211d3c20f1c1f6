"""JSON envelope shared by every API route.

Success bodies look like ``{"success": true, "data": ...}`` and errors like
``{"success": false, "error": {"message", "code", "details"}}``.
"""

import logging
from typing import Any, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised by routes to short-circuit with an error envelope."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> "ApiError":
        return cls(message, "UNAUTHORIZED", status.HTTP_401_UNAUTHORIZED)

    @classmethod
    def forbidden(cls, message: str = "Forbidden") -> "ApiError":
        return cls(message, "FORBIDDEN", status.HTTP_403_FORBIDDEN)

    @classmethod
    def not_found(cls, message: str = "Not found") -> "ApiError":
        return cls(message, "NOT_FOUND", status.HTTP_404_NOT_FOUND)

    @classmethod
    def server_error(cls, message: str = "Internal server error") -> "ApiError":
        return cls(message, "INTERNAL_SERVER_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)


def success(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": True, "data": data}, by_alias=True),
    )


def error(
    message: str,
    code: str = "UNKNOWN_ERROR",
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: Optional[Any] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "success": False,
                "error": {"message": message, "code": code, "details": details},
            }
        ),
    )


_HTTP_CODES = {
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_501_NOT_IMPLEMENTED: "NOT_IMPLEMENTED",
}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error(exc.message, exc.code, exc.status_code, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = error(
        str(exc.detail),
        _HTTP_CODES.get(exc.status_code, "UNKNOWN_ERROR"),
        exc.status_code,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return error("Validation failed", "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST, errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error("Internal server error", "INTERNAL_SERVER_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)
