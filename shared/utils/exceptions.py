"""
Centralized HTTP exceptions for consistent error handling.

Every error leaves the API in the same envelope:

    {"error": {"code": "VALIDATION_ERROR", "message": "...", "details": {...}}}

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Template", template_id)
    raise ValidationError("Template and content are required", details={...})
"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        detail: str,
        details: dict[str, Any] | None = None,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, code=code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Error envelope for the JSON response body."""
        error: dict[str, Any] = {"code": self.code, "message": self.detail}
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Template", "business-plan")
    """

    def __init__(self, entity: str, entity_id: str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} '{entity_id}' not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code="NOT_FOUND",
            detail=detail,
            log_level="info",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Template and content are required",
                              details={"template": "required", "content": "valid"})
    """

    def __init__(self, detail: str, details: dict[str, Any] | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="VALIDATION_ERROR",
            detail=detail,
            details=details,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# Exception handlers
# =============================================================================


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException in the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Render framework-raised HTTP errors (unknown route, wrong method) in the
    same envelope as AppException.
    """
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        content = {
            "error": {
                "code": "NOT_FOUND",
                "message": f"Endpoint {request.method} {request.url.path} not found",
                "suggestion": "Visit /api/v1 for available endpoints",
            }
        }
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        content = {
            "error": {
                "code": "METHOD_NOT_ALLOWED",
                "message": f"Method {request.method} not allowed for {request.url.path}",
            }
        }
    else:
        content = {"error": {"code": "HTTP_ERROR", "message": str(exc.detail)}}

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log and return a generic 500."""
    from shared.config.settings import get_settings

    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        exc_info=True,
    )
    error: dict[str, Any] = {
        "code": "INTERNAL_ERROR",
        "message": "An unexpected error occurred",
    }
    if get_settings().environment == "development":
        error["details"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error})


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request parsing errors (bad JSON body, bad query params) as 400."""
    logger.info("Request validation failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
            }
        },
    )
