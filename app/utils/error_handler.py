"""
Error handling utilities
Every error leaves the API as a JSON body carrying a ``message`` field
"""

import uuid
import traceback
import logging
from typing import Optional
from datetime import datetime
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import is_development

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please provide all required fields"

class ErrorContext:
    """Context object for tracking error information across the request lifecycle"""

    def __init__(self, request: Request):
        self.error_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.user_agent = request.headers.get("user-agent")
        self.timestamp = datetime.utcnow()

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class DatabaseError(Exception):
    """Custom exception for database-related errors"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class PhotoUploadError(Exception):
    """One or more photos of a submission could not be stored"""
    def __init__(self, message: str, failures: Optional[list] = None):
        self.message = message
        self.failures = failures or []
        super().__init__(self.message)

class ErrorHandler:
    """Centralized error response construction"""

    @staticmethod
    def create_error_response(
        error_context: ErrorContext,
        error: Exception,
        status_code: int = 500,
        include_details: bool = False
    ) -> JSONResponse:
        """Create a standardized server error response"""

        content = {
            "message": ErrorHandler._get_user_friendly_message(error),
            "errorId": error_context.error_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        if include_details:
            content["error"] = {
                "type": type(error).__name__,
                "detail": str(error),
            }

        ErrorHandler._log_error(error_context, error, status_code)

        return JSONResponse(status_code=status_code, content=content)

    @staticmethod
    def _get_user_friendly_message(error: Exception) -> str:
        if isinstance(error, PhotoUploadError):
            return error.message
        elif isinstance(error, DatabaseError):
            return "A database error occurred. Please try again later."
        else:
            return "Something went wrong!"

    @staticmethod
    def _log_error(error_context: ErrorContext, error: Exception, status_code: int):
        """Log error with comprehensive context"""
        logger.error(
            f"Error {error_context.error_id}: {type(error).__name__} in {error_context.method} {error_context.endpoint}",
            extra={
                "error_id": error_context.error_id,
                "endpoint": error_context.endpoint,
                "method": error_context.method,
                "status_code": status_code,
                "client_ip": error_context.client_ip,
                "user_agent": error_context.user_agent,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "stack_trace": "".join(traceback.format_exception(type(error), error, error.__traceback__))
            }
        )

def validation_message(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into one human readable sentence"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    if any(err.get("type") in ("missing", "string_too_short") for err in errors):
        return REQUIRED_FIELDS_MESSAGE
    message = errors[0].get("msg", "Invalid request")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": validation_message(exc), "errors": errors},
    )

async def photo_upload_exception_handler(request: Request, exc: PhotoUploadError):
    return ErrorHandler.create_error_response(ErrorContext(request), exc, 500, include_details=is_development())

async def database_exception_handler(request: Request, exc: DatabaseError):
    return ErrorHandler.create_error_response(ErrorContext(request), exc, 500, include_details=is_development())

async def unhandled_exception_handler(request: Request, exc: Exception):
    return ErrorHandler.create_error_response(ErrorContext(request), exc, 500, include_details=is_development())

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PhotoUploadError, photo_upload_exception_handler)
    app.add_exception_handler(DatabaseError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
