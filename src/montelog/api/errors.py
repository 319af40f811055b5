"""Error responses for the Monte-Log API.

Every error body has the same Result/Message structure:

    {"messages": [{"code": "NotFound", "messageType": "Error",
                   "text": "Post with ID 42 not found", "timestamp": "..."}]}

Domain errors raised by services are translated here; routers never build
error responses themselves.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from montelog.errors import (
    DuplicateActionError,
    MontelogError,
    NotFoundError,
    RejectedActionError,
    RepositoryError,
    UnauthorizedError,
)
from montelog.services import SessionUnavailableError

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """Type of message in error response."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    EXCEPTION = "Exception"


class Message(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str | None = None


class Result(BaseModel):
    model_config = {"extra": "forbid"}

    messages: list[Message]


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        code: str,
        text: str,
        message_type: MessageType = MessageType.ERROR,
    ):
        self.code = code
        self.text = text
        self.message_type = message_type
        super().__init__(status_code=status_code, detail=text)

    def to_result(self) -> Result:
        return Result(
            messages=[
                Message(
                    code=self.code,
                    messageType=self.message_type,
                    text=self.text,
                    timestamp=datetime.now(UTC).isoformat(),
                )
            ]
        )


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, text: str):
        super().__init__(status_code=400, code="BadRequest", text=text)


class InternalServerError(ApiError):
    """Internal server error (500)."""

    def __init__(self, text: str = "An unexpected error occurred"):
        super().__init__(
            status_code=500,
            code="InternalServerError",
            text=text,
            message_type=MessageType.EXCEPTION,
        )


def to_api_error(exc: MontelogError) -> ApiError:
    """Map a domain error to its HTTP representation."""
    if isinstance(exc, NotFoundError):
        return ApiError(404, "NotFound", str(exc))
    if isinstance(exc, DuplicateActionError):
        return ApiError(409, "DuplicateAction", str(exc))
    if isinstance(exc, RejectedActionError):
        return ApiError(409, "Rejected", str(exc))
    if isinstance(exc, UnauthorizedError):
        return ApiError(401, "Unauthorized", str(exc) or "Login required")
    if isinstance(exc, SessionUnavailableError):
        return ApiError(503, "ServiceUnavailable", "Sessions are temporarily unavailable")
    if isinstance(exc, RepositoryError):
        return InternalServerError("A database operation failed")
    return InternalServerError()


def error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_result().model_dump(by_alias=True),
    )


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc)


async def domain_exception_handler(request: Request, exc: MontelogError) -> JSONResponse:
    """Translate service errors raised inside a request."""
    error = to_api_error(exc)
    if error.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return error_response(error)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(InternalServerError())
