"""Error types raised by armkit."""

from armkit.errors.base import (
    ArmKitError,
    BadRequestError,
    CommitError,
    CommitFailure,
    ConfigValidationError,
    ConflictError,
    ErrorCode,
    ErrorContext,
    IncompleteDefinitionError,
    InvalidResourceIdError,
    NotFoundError,
    RemoteError,
    RemoteErrorDetail,
    ResponseDecodeError,
    TransportError,
    TransportTimeoutError,
    ValidationError,
)

__all__ = [
    "ArmKitError",
    "BadRequestError",
    "CommitError",
    "CommitFailure",
    "ConfigValidationError",
    "ConflictError",
    "ErrorCode",
    "ErrorContext",
    "IncompleteDefinitionError",
    "InvalidResourceIdError",
    "NotFoundError",
    "RemoteError",
    "RemoteErrorDetail",
    "ResponseDecodeError",
    "TransportError",
    "TransportTimeoutError",
    "ValidationError",
]
