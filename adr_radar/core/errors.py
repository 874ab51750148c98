"""Error Hierarchy — typed, categorized exceptions for every adr-radar failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Conflicts and partial writes are recoverable; none of these errors ends the session
    - to_response() produces the REST envelope; status_text() produces the one-line
      message shown in the terminal status bar
    - Store and writer raise these; the Sync Protocol translates them into SyncResult

Design Decisions:
    - Single hierarchy with RadarError base: the API handler and the TUI controller
      both catch one type
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    CONSISTENCY = "consistency"
    DATABASE = "database"
    FILESYSTEM = "filesystem"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    blip_id: int | None = None
    adr_id: int | None = None
    path: str | None = None
    user_message: str | None = None


class RadarError(Exception):
    """Base exception for all adr-radar errors."""

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

    @property
    def recoverable(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING)

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
                    "blip_id": self.context.blip_id,
                    "adr_id": self.context.adr_id,
                    "path": self.context.path,
                },
            }
        }

    def status_text(self) -> str:
        """Single line for the terminal status bar."""
        return self.context.user_message or self.message


# ─── Domain Errors (400-level) ──────────────────────────────────

class WizardValidationError(RadarError):
    """A wizard step rejected its field value."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class DuplicateNameError(RadarError):
    """A blip with this name already exists."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Blip already exists: {name}",
            "DUPLICATE_NAME", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.name = name


class DuplicateAdrError(RadarError):
    """An ADR with this (title, timestamp) pair already exists."""
    def __init__(self, title: str, timestamp: str, context: ErrorContext | None = None):
        super().__init__(
            f"ADR already exists: '{title}' at {timestamp}",
            "DUPLICATE_ADR", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.title = title
        self.timestamp = timestamp


class ResourceNotFoundError(RadarError):
    """Requested row does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Consistency Errors (row kept, file or link missing) ────────

class PartialWriteError(RadarError):
    """Row committed but the Markdown document could not be written."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Saved to database but document write failed: {message}",
            "PARTIAL_WRITE", ErrorCategory.CONSISTENCY,
            ErrorSeverity.WARNING, context, 207,
        )


class OrphanAdrError(RadarError):
    """ADR stored but the blip it names does not exist."""
    def __init__(self, blip_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"ADR saved but no blip named '{blip_name}' to link",
            "ORPHAN_ADR", ErrorCategory.CONSISTENCY,
            ErrorSeverity.WARNING, context, 207,
        )
        self.blip_name = blip_name


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DocumentWriteError(RadarError):
    """Filesystem refused the document write."""
    def __init__(self, path: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.path = path
        super().__init__(
            f"Could not write {path}: {reason}",
            "IO_ERROR", ErrorCategory.FILESYSTEM,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.path = path


class DatabaseError(RadarError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
