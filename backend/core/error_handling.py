# backend/core/error_handling.py

"""
Error taxonomy and handling utilities for API routes.

Services raise the ``APIError`` subclasses below; routes wrapped with
``handle_api_errors`` turn them into ``HTTPException`` responses carrying a
stable ``error_code`` and a human readable message. Storage-layer error text
and stack traces are logged, never returned.
"""

from typing import Callable, Dict, Any, Optional
from functools import wraps
import logging
import inspect
import traceback
import uuid
from datetime import datetime

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, DataError, OperationalError
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors"""

    error_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_detail(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(APIError):
    """Resource not found error"""

    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} with identifier {identifier} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "identifier": str(identifier)},
        )


class AuthorizationError(APIError):
    """Actor lacks the role or ownership required for the operation"""

    error_code = "FORBIDDEN"

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, status_code=status.HTTP_403_FORBIDDEN, details=details
        )


class AuthenticationError(APIError):
    error_code = "NOT_AUTHENTICATED"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class InvalidTransitionError(APIError):
    """Requested order status is not reachable from the current status"""

    error_code = "INVALID_TRANSITION"

    def __init__(self, current_status: str, target_status: str, message: Optional[str] = None):
        super().__init__(
            message=message
            or f"Invalid status transition from {current_status} to {target_status}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"current_status": current_status, "target_status": target_status},
        )


class InsufficientPointsError(APIError):
    """Points balance does not cover the requested spend"""

    error_code = "INSUFFICIENT_POINTS"

    def __init__(self, balance: int, required: int):
        super().__init__(
            message="Insufficient loyalty points balance",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"current_balance": balance, "required": required},
        )


class APIValidationError(APIError):
    """Input validation error - renamed from ValidationError to avoid Pydantic collision"""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"validation_errors": errors} if errors else {},
        )


class ConflictError(APIError):
    """Concurrent modification or resource conflict"""

    error_code = "CONFLICT"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message, status_code=status.HTTP_409_CONFLICT, details=details
        )


def _raise_for_exception(e: Exception, func_name: str) -> None:
    """Translate an exception raised inside a route into an HTTPException"""
    if isinstance(e, APIError):
        logger.warning(
            f"API Error in {func_name}: {e.message}",
            extra={"status_code": e.status_code, "details": e.details},
        )
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    if isinstance(e, HTTPException):
        raise e

    if isinstance(e, ValidationError):
        logger.warning(f"Pydantic validation error in {func_name}: {e.errors()}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": e.errors(include_url=False, include_context=False)},
            },
        )

    if isinstance(e, IntegrityError):
        logger.error(f"Database integrity error in {func_name}: {str(e.orig)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error_code": "CONFLICT",
                "message": "Database constraint violation",
                "details": {},
            },
        )

    if isinstance(e, DataError):
        logger.error(f"Data error in {func_name}: {str(e.orig)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error_code": "VALIDATION_ERROR",
                "message": "Invalid data format or type",
                "details": {},
            },
        )

    if isinstance(e, OperationalError):
        logger.error(f"Database operational error in {func_name}: {str(e.orig)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error_code": "SERVICE_UNAVAILABLE",
                "message": "Database service temporarily unavailable",
                "details": {},
            },
        )

    logger.error(f"Unexpected error in {func_name}: {str(e)}\n{traceback.format_exc()}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {},
        },
    )


def handle_api_errors(func: Callable) -> Callable:
    """
    Decorator to handle common API errors with proper status codes and messages.
    Properly handles both async and sync functions.

    Usage:
        @router.get("/items/{item_id}")
        @handle_api_errors
        async def get_item(item_id: int, db: Session = Depends(get_db)):
            ...
    """
    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                _raise_for_exception(e, func.__name__)

        return async_wrapper

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _raise_for_exception(e, func.__name__)

    return sync_wrapper


def create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "detail": {
            "error_code": error_code,
            "message": message,
            "details": details or {},
        },
        "timestamp": datetime.utcnow().isoformat(),
    }

    if request_id:
        content["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=content)


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle domain errors raised outside decorated handlers (dependencies)"""
    logger.warning(f"{type(exc).__name__} at {request.url.path}: {exc.message}")
    return create_error_response(
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        request_id=request.headers.get("X-Request-ID"),
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies as VALIDATION_ERROR"""
    errors = jsonable_encoder(
        [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]
    )
    logger.info(f"Request validation failed at {request.url.path}: {errors}")
    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_code="VALIDATION_ERROR",
        message="Request validation failed",
        details={"validation_errors": errors},
        request_id=request.headers.get("X-Request-ID"),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    logger.error(
        f"Unhandled exception: {str(exc)}\n{traceback.format_exc()}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        request_id=request_id,
    )


def register_exception_handlers(app) -> None:
    """Register exception handlers with the FastAPI app"""
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
