"""
Exception hierarchy and error handling utilities for carryall.

Provides:
- Fault classes with error codes for every stage of a bridge call
- Error categorization (validation, not found, permission, retryable, fatal)
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"


class CarryallError(Exception):
    """Base exception for all carryall errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(CarryallError):
    """Invalid input handed to a client-side builder."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class DecodeFault(CarryallError):
    """Text that should hold JSON (a request field or a response body) could not be decoded."""

    def __init__(self, message: str, payload: str | None = None, field: str | None = None):
        details: dict[str, Any] = {"payload": payload}
        if field:
            details["field"] = field
        super().__init__(message, code="DECODE_FAULT", category=ErrorCategory.VALIDATION, details=details)
        self.payload = payload
        self.field = field


class NotAllowedFault(CarryallError):
    """The requested callable is rejected by the trust policy."""

    def __init__(self, callable_name: Any):
        super().__init__(
            f'Callable "{callable_name}" is not allowed',
            code="NOT_ALLOWED",
            category=ErrorCategory.PERMISSION,
            details={"callable": str(callable_name)},
        )


class LookupFault(CarryallError):
    """A callable, attribute or getter method does not exist."""

    def __init__(self, message: str, name: str | None = None):
        details = {"name": name} if name else {}
        super().__init__(message, code="NOT_FOUND", category=ErrorCategory.NOT_FOUND, details=details)


class ExecutionFault(CarryallError):
    """The invoked callable raised while running its own logic."""

    def __init__(self, callable_name: str, message: str):
        super().__init__(
            f'Callable "{callable_name}" failed: {message}',
            code="EXECUTION_FAULT",
            category=ErrorCategory.FATAL,
            details={"callable": callable_name},
        )


class RemoteError(CarryallError):
    """The server answered with an errortext envelope."""

    def __init__(self, message: str):
        super().__init__(message, code="REMOTE_ERROR", category=ErrorCategory.FATAL)


class RemoteCodeFault(CarryallError):
    """Executing code returned by the server failed on the client."""

    def __init__(self, message: str, source: str):
        super().__init__(message, code="REMOTE_CODE_FAULT", category=ErrorCategory.FATAL, details={"source": source})
        self.source = source


class TransportFault(CarryallError):
    """The HTTP exchange failed or did not produce a usable response."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRANSPORT_ERROR",
        status_code: int | None = None,
        body: str | None = None,
    ):
        category = ErrorCategory.TIMEOUT if code == "TRANSPORT_TIMEOUT" else ErrorCategory.RETRYABLE
        super().__init__(
            message,
            code=code,
            category=category,
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory]:
    """Classify an exception and return (error_code, category)."""
    if isinstance(exc, CarryallError):
        return exc.code, exc.category

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, (ValueError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    if isinstance(exc, (KeyError, AttributeError)):
        return "MISSING_KEY", ErrorCategory.NOT_FOUND

    if isinstance(exc, PermissionError):
        return "PERMISSION_DENIED", ErrorCategory.PERMISSION

    return "INTERNAL_ERROR", ErrorCategory.FATAL
