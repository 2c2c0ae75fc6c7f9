"""Typed error hierarchy shared by services and the HTTP layer.

Every error carries a code, category, severity, and HTTP status so the API
can render one uniform envelope. Services raise these before touching the
store, so a raised error never leaves partial state behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Extra context attached to an error for logs and responses."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity: str | None = None
    entity_id: int | str | None = None
    caller: str | None = None


class CoverDropError(Exception):
    """Base exception for all service errors."""

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
        """Convert to the standard REST error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity": self.context.entity,
                    "entity_id": self.context.entity_id,
                },
            }
        }


class NotFoundError(CoverDropError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: int | str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.entity = entity
        ctx.entity_id = entity_id
        super().__init__(
            f"{entity} '{entity_id}' not found",
            "NOT_FOUND",
            ErrorCategory.NOT_FOUND,
            ErrorSeverity.ERROR,
            ctx,
            404,
        )


class AlreadyExistsError(CoverDropError):
    """Entity already exists. Reserved; no current operation raises it."""

    def __init__(self, entity: str, entity_id: int | str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.entity = entity
        ctx.entity_id = entity_id
        super().__init__(
            f"{entity} '{entity_id}' already exists",
            "ALREADY_EXISTS",
            ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR,
            ctx,
            409,
        )


class NotAuthorizedError(CoverDropError):
    """Caller is not the owner or creator of the entity."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message,
            "NOT_AUTHORIZED",
            ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING,
            context,
            403,
        )


class InvalidInputError(CoverDropError):
    """State-machine precondition violated or value out of range."""

    def __init__(self, message: str, field_name: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message,
            "INVALID_INPUT",
            ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR,
            context,
            400,
        )
        self.field_name = field_name


class InvalidCoverageError(InvalidInputError):
    """Desired coverage is outside the insurable ratio band."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "coverage_amount", context)
        self.code = "INVALID_COVERAGE"


class SystemFailureError(CoverDropError):
    """Catch-all for collaborator or infrastructure failures."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message,
            "SYSTEM_ERROR",
            ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL,
            context,
            500,
        )
