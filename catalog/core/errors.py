"""Error Hierarchy — typed, categorized exceptions for all catalog failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope used by the HTTP binding
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CatalogError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Controllers return these as causes inside outcomes; only StorageError is raised
      across the gateway boundary
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    entity_kind: str | None = None
    entity_id: str | None = None
    debug_info: dict[str, Any] | None = None


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "entity_kind": self.context.entity_kind,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class FieldValidationError(CatalogError):
    """One or more mutation fields failed validation."""
    def __init__(self, fields: list[dict], context: ErrorContext | None = None):
        super().__init__(
            f"Invalid fields: {', '.join(f['field'] for f in fields)}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.fields = fields

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = self.fields
        return response


class ResourceNotFoundError(CatalogError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class IntegrityViolationError(CatalogError):
    """Delete refused because other records still reference the target."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        dependents: list[dict],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' is still referenced by "
            f"{len(dependents)} record(s)",
            "INTEGRITY_VIOLATION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.dependents = dependents

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["dependents"] = self.dependents
        return response


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageError(CatalogError):
    """Storage gateway operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class UnknownOperationError(CatalogError):
    """Presentation layer asked for an operation that is not registered."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Operation '{operation}' does not exist.",
            "UNKNOWN_OPERATION", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, context, 500,
        )
        self.operation = operation


class InvalidTransitionError(CatalogError):
    """Mutation state machine asked to make a transition it does not allow."""
    def __init__(self, source: str, target: str, context: ErrorContext | None = None):
        super().__init__(
            f"Illegal mutation transition {source} -> {target}",
            "INVALID_TRANSITION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.source = source
        self.target = target
