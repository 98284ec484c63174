"""
Error types and FastAPI handlers.

Service code raises ``AppError`` subclasses; the handlers below turn them into
a consistent JSON body: ``{"success": false, "message", "code", "details"}``.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for the application."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found", resource: str | None = None):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource} if resource else None,
        )


class ValidationError(AppError):
    def __init__(self, message: str = "Validation failed", errors: dict | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details={"errors": errors} if errors else None,
        )


class AuthenticationError(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, code="UNAUTHENTICATED", status_code=401)


class AuthorizationError(AppError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, code="UNAUTHORIZED", status_code=403)


class RateLimitError(AppError):
    def __init__(self, message: str = "Too many requests. Please try again later.", retry_after: int | None = None):
        self.retry_after = retry_after
        super().__init__(
            message=message,
            code="RATE_LIMITED",
            status_code=429,
            details={"retry_after": retry_after} if retry_after else None,
        )


class ExternalServiceError(AppError):
    """A third-party SDK (payment provider) failed."""

    def __init__(self, message: str = "Upstream service failed", service: str | None = None):
        super().__init__(
            message=message,
            code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details={"service": service} if service else None,
        )


class PersistenceError(AppError):
    """A database write still failed after retrying."""

    def __init__(self, message: str = "Could not save your progress. Please try again."):
        super().__init__(message=message, code="DB_WRITE_FAILED", status_code=503)


def register_error_handlers(app: FastAPI) -> None:
    """Register AppError and catch-all handlers with the app."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, error: AppError):
        if error.status_code >= 500:
            logger.error("%s: %s (%s %s)", error.code, error.message, request.method, request.url.path)
        else:
            logger.info("%s: %s (%s %s)", error.code, error.message, request.method, request.url.path)
        headers = None
        if isinstance(error, RateLimitError) and error.retry_after:
            headers = {"Retry-After": str(error.retry_after)}
        return JSONResponse(error.to_dict(), status_code=error.status_code, headers=headers)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, error: Exception):
        logger.exception("Internal server error on %s %s", request.method, request.url.path)
        return JSONResponse(
            {"success": False, "message": "Internal server error", "code": "SERVER_ERROR"},
            status_code=500,
        )
