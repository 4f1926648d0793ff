"""Exception hierarchy for armkit.

armkit separates failures into four kinds so callers can branch on them:

- ValidationError: a required parameter or builder stage was missing. Raised
  locally before anything is sent to the service.
- TransportError: the request never produced a response (connectivity,
  transport-level timeout).
- RemoteError: the service answered with a status code the operation does not
  register as a success. Carries the parsed service error body.
- CommitError: a builder commit where one or more of the constituent calls
  (the parent or any pending child) failed.

All armkit errors inherit from ArmKitError and include:
- error_code: an ErrorCode enum for categorization
- context: ErrorContext with operation/request/response details

Example:
    try:
        profile.update().with_tag("env", "prod").apply()
    except CommitError as e:
        for failure in e.failures:
            print(failure.constituent, failure.error)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for armkit.

    Error codes are organized by category:
    - E0xx: Transport errors (no response received)
    - E1xx: Remote errors (service returned an error status)
    - E2xx: Local validation errors
    - E3xx: Builder commit errors
    - E9xx: Unknown/internal errors
    """

    # Transport errors (E0xx)
    TRANSPORT_FAILED = "E001"
    TRANSPORT_TIMEOUT = "E002"

    # Remote errors (E1xx)
    REMOTE_ERROR = "E101"
    REMOTE_BAD_REQUEST = "E102"
    REMOTE_DECODE_FAILED = "E103"
    REMOTE_NOT_FOUND = "E104"
    REMOTE_CONFLICT = "E109"

    # Validation errors (E2xx)
    VALIDATION_FAILED = "E201"
    INVALID_CONFIG = "E202"
    INVALID_RESOURCE_ID = "E203"
    INCOMPLETE_DEFINITION = "E204"

    # Commit errors (E3xx)
    COMMIT_FAILED = "E301"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 100:
            return "transport"
        elif code_num < 200:
            return "remote"
        elif code_num < 300:
            return "validation"
        elif code_num < 400:
            return "commit"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context captured when an error is raised.

    Attributes:
        operation: Name of the operation being invoked (e.g. "Endpoints.get").
        request: Request details (method, url).
        response: Response details (status, body).
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    operation: str | None = None
    request: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "operation": self.operation,
            "request": self.request,
            "response": self.response,
            "extra": self.extra or None,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}


class ArmKitError(Exception):
    """Base exception for all armkit errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]
        if self.context.operation:
            parts.append(f"operation={self.context.operation}")
        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with request/response details."""
        lines = [f"Error [{self.error_code.value}]: {self.message}"]

        if self.context.operation:
            lines.append(f"Operation: {self.context.operation}")
        if self.context.request:
            method = self.context.request.get("method", "?")
            url = self.context.request.get("url", "?")
            lines.append(f"Request: {method} {url}")
        if self.context.response:
            status = self.context.response.get("status", "?")
            lines.append(f"Response: HTTP {status}")
        if self.cause is not None:
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ValidationError(ArmKitError, ValueError):
    """A required parameter was missing or invalid.

    Raised before any request is dispatched, so the caller can supply the
    missing value and try again.
    """

    error_code = ErrorCode.VALIDATION_FAILED
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message=message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            base = f"{base} (field: {self.field})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        result["value"] = repr(self.value)
        return result

    @classmethod
    def required(cls, name: str, operation: str | None = None) -> ValidationError:
        """Build the error raised for a missing required parameter."""
        return cls(
            f"Parameter {name} is required and cannot be None.",
            field=name,
            context=ErrorContext(operation=operation),
        )


class ConfigValidationError(ValidationError):
    """Client configuration is invalid."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"


class InvalidResourceIdError(ValidationError):
    """A resource id string could not be parsed."""

    error_code = ErrorCode.INVALID_RESOURCE_ID
    default_message = "Invalid resource id"


class IncompleteDefinitionError(ValidationError):
    """A builder was attached or committed before its required stages ran."""

    error_code = ErrorCode.INCOMPLETE_DEFINITION
    default_message = "Definition is missing required fields"

    def __init__(
        self,
        message: str | None = None,
        missing: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.missing = list(missing or [])
        super().__init__(message=message, **kwargs)


class TransportError(ArmKitError):
    """The request could not complete and no response was received."""

    error_code = ErrorCode.TRANSPORT_FAILED
    default_message = "HTTP transport failed"


class TransportTimeoutError(TransportError):
    """The transport timed out before a response arrived."""

    error_code = ErrorCode.TRANSPORT_TIMEOUT
    default_message = "HTTP transport timed out"


@dataclass
class RemoteErrorDetail:
    """One entry of a service error body (top-level or a sub-error)."""

    code: str | None = None
    message: str | None = None
    target: str | None = None
    details: list[RemoteErrorDetail] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: Any) -> RemoteErrorDetail:
        """Parse the service error schema.

        Accepts both the enveloped form ``{"error": {...}}`` and a bare
        ``{"code": ..., "message": ...}`` object. Anything else yields an
        empty detail carrying the raw body as the message.
        """
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            body = body["error"]
        if not isinstance(body, dict):
            return cls(message=str(body) if body else None)
        details = [cls.from_body(d) for d in body.get("details") or [] if isinstance(d, dict)]
        return cls(
            code=body.get("code"),
            message=body.get("message"),
            target=body.get("target"),
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.target:
            result["target"] = self.target
        if self.details:
            result["details"] = [d.to_dict() for d in self.details]
        return result


class RemoteError(ArmKitError):
    """The service returned a status code the operation does not register.

    Attributes:
        status_code: HTTP status of the response.
        body: Parsed service error (code, message, target, sub-errors).
    """

    error_code = ErrorCode.REMOTE_ERROR
    default_message = "Service returned an error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        body: RemoteErrorDetail | None = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.body = body or RemoteErrorDetail()
        super().__init__(message=message, **kwargs)

    @property
    def code(self) -> str | None:
        return self.body.code

    @property
    def service_message(self) -> str | None:
        return self.body.message

    @property
    def target(self) -> str | None:
        return self.body.target

    @property
    def details(self) -> list[RemoteErrorDetail]:
        return self.body.details

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        result["body"] = self.body.to_dict()
        return result

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: Any,
        context: ErrorContext | None = None,
    ) -> RemoteError:
        """Build the RemoteError subclass matching ``status_code``."""
        detail = RemoteErrorDetail.from_body(body)
        error_cls = _REMOTE_ERRORS_BY_STATUS.get(status_code, RemoteError)
        message = f"Status code {status_code}"
        summary = ": ".join(p for p in (detail.code, detail.message) if p)
        if summary:
            message = f"{message}, {summary}"
        return error_cls(message=message, status_code=status_code, body=detail, context=context)


class ResponseDecodeError(RemoteError):
    """A success response body could not be parsed into its declared type."""

    error_code = ErrorCode.REMOTE_DECODE_FAILED
    default_message = "Response body could not be decoded"


class BadRequestError(RemoteError):
    """The service rejected the request body or parameters (400)."""

    error_code = ErrorCode.REMOTE_BAD_REQUEST


class NotFoundError(RemoteError):
    """The addressed resource does not exist (404)."""

    error_code = ErrorCode.REMOTE_NOT_FOUND


class ConflictError(RemoteError):
    """The request conflicts with the current resource state (409)."""

    error_code = ErrorCode.REMOTE_CONFLICT


_REMOTE_ERRORS_BY_STATUS: dict[int, type[RemoteError]] = {
    400: BadRequestError,
    404: NotFoundError,
    409: ConflictError,
}


@dataclass
class CommitFailure:
    """One failed constituent call inside a builder commit."""

    constituent: str
    action: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.action} {self.constituent}: {self.error}"


class CommitError(ArmKitError):
    """A builder commit failed in one or more of its constituent calls.

    Each failure is kept with its original error, so callers can inspect
    which parent or child call went wrong and why.
    """

    error_code = ErrorCode.COMMIT_FAILED
    default_message = "Commit failed"

    def __init__(
        self,
        message: str | None = None,
        failures: list[CommitFailure] | None = None,
        **kwargs: Any,
    ) -> None:
        self.failures = list(failures or [])
        if message is None and self.failures:
            message = "Commit failed: " + "; ".join(str(f) for f in self.failures)
        cause = self.failures[0].error if self.failures else None
        kwargs.setdefault("cause", cause)
        super().__init__(message=message, **kwargs)

    @property
    def failed_constituents(self) -> list[str]:
        return [f.constituent for f in self.failures]

    def error_for(self, constituent: str) -> Exception | None:
        """Return the error of the named constituent, if it failed."""
        for failure in self.failures:
            if failure.constituent == constituent:
                return failure.error
        return None

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["failures"] = [
            {"constituent": f.constituent, "action": f.action, "error": str(f.error)}
            for f in self.failures
        ]
        return result
