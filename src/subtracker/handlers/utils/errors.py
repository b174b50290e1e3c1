"""
Error taxonomy and API response utilities for the Lambda handlers.

Services raise the exceptions defined here; the ``handle_service_errors``
decorator converts them (and anything unexpected) into API Gateway proxy
responses with a stable ``error`` field and an optional ``message``.
"""

import functools
import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from subtracker.handlers.utils.observability import count_metric, logger, tracer

INTERNAL_SERVER_ERROR = 'Internal server error'


class ErrorSeverity(str, Enum):
    """Error severity levels for classification."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    VALIDATION = "VALIDATION"
    AUTHENTICATION = "AUTHENTICATION"
    BUSINESS_LOGIC = "BUSINESS_LOGIC"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    RATE_LIMIT = "RATE_LIMIT"


class BaseServiceError(Exception):
    """
    Base exception class for service errors.

    ``error`` is the short, stable string clients branch on. ``message`` is an
    optional human readable explanation and ``detail`` an optional hint about
    the caller's authorization context.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    severity: ErrorSeverity = ErrorSeverity.HIGH
    category: ErrorCategory = ErrorCategory.INFRASTRUCTURE

    def __init__(
        self,
        error: str,
        message: Optional[str] = None,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(error)
        self.error = error
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.error_id = str(uuid.uuid4())

    def to_response_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        if self.detail:
            body["detail"] = self.detail
        return body

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "error": self.error,
            "message": self.message,
            "detail": self.detail,
            "severity": self.severity.value,
            "category": self.category.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class ValidationError(BaseServiceError):
    """Raised when caller input is malformed or violates a policy."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    severity = ErrorSeverity.LOW
    category = ErrorCategory.VALIDATION

    def __init__(
        self,
        error: str,
        message: Optional[str] = None,
        reason: Optional[str] = None,
        field: Optional[str] = None,
    ):
        super().__init__(error=error, message=message)
        self.reason = reason
        self.field = field


class AuthenticationError(BaseServiceError):
    """Raised when the caller identity is missing, invalid or not yet verified (401/403)."""

    status_code = 401
    error_code = "AUTHENTICATION_ERROR"
    severity = ErrorSeverity.LOW
    category = ErrorCategory.AUTHENTICATION


class NotFoundError(BaseServiceError):
    """Raised when a resource is absent or not owned by the caller."""

    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"
    severity = ErrorSeverity.LOW
    category = ErrorCategory.BUSINESS_LOGIC


class ConflictError(BaseServiceError):
    """Raised when a resource already exists."""

    status_code = 409
    error_code = "RESOURCE_CONFLICT"
    severity = ErrorSeverity.LOW
    category = ErrorCategory.BUSINESS_LOGIC


class RateLimitError(BaseServiceError):
    """Raised when an external provider throttles the caller."""

    status_code = 429
    error_code = "RATE_LIMIT_EXCEEDED"
    severity = ErrorSeverity.MEDIUM
    category = ErrorCategory.RATE_LIMIT


class UpstreamError(BaseServiceError):
    """Raised when an external service fails in a way we have no mapping for."""

    status_code = 500
    error_code = "UPSTREAM_ERROR"
    severity = ErrorSeverity.HIGH
    category = ErrorCategory.EXTERNAL_SERVICE


class InternalError(BaseServiceError):
    """Raised for unexpected local faults."""

    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    severity = ErrorSeverity.CRITICAL
    category = ErrorCategory.INFRASTRUCTURE


@tracer.capture_method
def log_error_metrics(error: BaseServiceError) -> None:
    """Log error metrics for monitoring and alerting."""
    count_metric("ErrorCount")
    count_metric(f"Error{error.category.value}Count")
    count_metric(f"Error{error.severity.value}Count")

    tracer.put_annotation("error_code", error.error_code)
    tracer.put_annotation("error_category", error.category.value)
    tracer.put_metadata("error_details", error.to_dict())

    log = logger.error if error.status_code >= 500 else logger.warning
    log("Service error occurred", extra={
        "error_id": error.error_id,
        "error_code": error.error_code,
        "status_code": error.status_code,
        "error_severity": error.severity.value,
        "error_category": error.category.value,
        "error": error.error,
        "error_message": error.message,
    })


def create_api_response(
    status_code: int,
    body: Any,
    headers: Optional[Dict[str, str]] = None,
    cors_enabled: bool = True,
) -> Dict[str, Any]:
    """Create standardized API Gateway response."""

    default_headers = {
        "Content-Type": "application/json",
        "X-Request-ID": str(uuid.uuid4()),
    }

    if cors_enabled:
        default_headers.update({
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
            "Access-Control-Allow-Methods": "OPTIONS,POST,GET,PUT,DELETE",
        })

    if headers:
        default_headers.update(headers)

    return {
        "statusCode": status_code,
        "headers": default_headers,
        "body": body if isinstance(body, str) else json.dumps(body, default=str),
    }


def error_response(error: BaseServiceError, cors_enabled: bool = True) -> Dict[str, Any]:
    """Render a service error as an API Gateway response."""
    return create_api_response(
        status_code=error.status_code,
        body=error.to_response_body(),
        cors_enabled=cors_enabled,
    )


def handle_service_errors(func: Callable[..., Dict[str, Any]]) -> Callable[..., Dict[str, Any]]:
    """Decorator to handle service errors and convert them to HTTP responses."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BaseServiceError as e:
            log_error_metrics(e)
            return error_response(e)

        except PydanticValidationError as e:
            logger.warning("Request validation failed", extra={
                "validation_errors": str(e),
                "error_count": e.error_count(),
            })
            count_metric("ValidationError")

            validation_error = ValidationError(
                error="Request validation failed",
                message="; ".join(
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
                ),
            )
            return error_response(validation_error)

        except Exception as e:
            logger.exception("Unexpected error in handler", extra={
                "error": str(e),
                "function_name": func.__name__,
            })
            count_metric("UnexpectedError")

            return error_response(InternalError(error=INTERNAL_SERVER_ERROR, message=str(e)))

    return wrapper
