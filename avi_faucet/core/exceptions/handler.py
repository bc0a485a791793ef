"""
Centralized error handling for the faucet API.
Error envelopes carry ``success: false`` like a failed airdrop response.
"""

import traceback
from typing import Dict, Any, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from datetime import datetime

from avi_faucet.core.logger.logger import get_logger
from avi_faucet.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


class ServiceErrorCode:
    """Standard error codes for services"""

    # Validation
    INVALID_INPUT = "INVALID_INPUT"

    # Rate-limit store
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    # System
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ServiceError(Exception):
    """
    Standardized service error for internal use.
    Gets converted to a JSON envelope by the error handler.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def request_id_of(request: Request) -> str:
    """Correlation id assigned by the request logging middleware."""
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "unknown")


def build_error_envelope(
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Same top-level shape as a failed airdrop (``success``/``message``), with
    the machine-readable part under ``error``.
    """
    error: Dict[str, Any] = {
        "code": code,
        "request_id": request_id,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
    if details:
        error["details"] = details

    return {"success": False, "message": message, "error": error}


class GlobalErrorHandler:
    """Exception handlers registered on the app by create_app"""

    @staticmethod
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        request_id = request_id_of(request)

        logger.error(
            f"Service error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "status_code": exc.status_code,
                "request_id": request_id,
                "path": request.url.path,
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=build_error_envelope(exc.code, exc.message, request_id, exc.details),
        )

    @staticmethod
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Body did not match the airdrop schema."""
        request_id = request_id_of(request)

        validation_errors = [
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]

        logger.warning(
            f"Validation error: {len(validation_errors)} errors",
            extra={
                "validation_errors": validation_errors,
                "request_id": request_id,
                "path": request.url.path,
            }
        )

        return JSONResponse(
            status_code=422,
            content=build_error_envelope(
                ServiceErrorCode.INVALID_INPUT,
                "Validation failed",
                request_id,
                {"validation_errors": validation_errors},
            ),
        )

    @staticmethod
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = request_id_of(request)

        logger.error(
            f"Unexpected error: {type(exc).__name__}",
            extra={
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "request_id": request_id,
                "path": request.url.path,
            },
            exc_info=True
        )

        # Tracebacks only leave the process in debug mode
        details = {"traceback": traceback.format_exc()} if settings.DEBUG else None
        message = f"Internal error: {exc}" if settings.DEBUG else "An unexpected error occurred. Please try again."

        return JSONResponse(
            status_code=500,
            content=build_error_envelope(ServiceErrorCode.INTERNAL_ERROR, message, request_id, details),
        )
