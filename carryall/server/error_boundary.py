"""Common error-boundary helpers for server dispatch.

Every server-side fault collapses into a single ``errortext`` envelope; these helpers
log the fault and build that envelope.
"""

from __future__ import annotations

from typing import Any, Callable

from carryall.protocol.envelope import ResponseEnvelope
from carryall.utils.exceptions import (
    CarryallError,
    ErrorCategory,
    ExecutionFault,
    NotAllowedFault,
    classify_exception,
    sanitize_error_message,
)


def not_allowed_result(
    *,
    callable_name: Any,
    log_denied: Callable[[str, Any], None],
) -> ResponseEnvelope:
    """Build the response for a callable rejected by the trust policy."""
    fault = NotAllowedFault(callable_name)
    log_denied("Bridge call denied: {}", callable_name)
    return ResponseEnvelope.for_error(fault.message)


def carryall_error_result(
    *,
    callable_name: str,
    exc: CarryallError,
    log_warning: Callable[[str, Any, Any, Any], None],
) -> ResponseEnvelope:
    """Map a CarryallError raised during dispatch to an errortext envelope."""
    log_warning("Bridge call {} failed with {}: {}", callable_name, exc.code, exc.message)
    return ResponseEnvelope.for_error(exc.message)


def unhandled_exception_result(
    *,
    callable_name: str,
    exc: Exception,
    log_exception: Callable[[str, Any, Any, Any], None],
) -> ResponseEnvelope:
    """Map an exception raised by the callable itself to a sanitized execution fault."""
    code, _ = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc) or type(exc).__name__)
    log_exception("Bridge call {} failed with [{}]: {}", callable_name, code, sanitized)
    return ResponseEnvelope.for_error(ExecutionFault(callable_name, sanitized).message)


def classify_http_status(exc: Exception) -> int:
    """Map an exception that escapes dispatch to an HTTP status code."""
    _, category = classify_exception(exc)
    category_to_status = {
        ErrorCategory.VALIDATION: 400,
        ErrorCategory.NOT_FOUND: 404,
        ErrorCategory.PERMISSION: 403,
        ErrorCategory.TIMEOUT: 504,
        ErrorCategory.RETRYABLE: 503,
    }
    return category_to_status.get(category, 500)
