"""Error taxonomy shared by the reconciliation engine and its adapters."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Finite classification of provider and store failures."""

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    THROTTLED = "throttled"
    AUTHENTICATION = "authentication"
    PROCESSING = "processing"
    INTEGRITY = "integrity"
    UNKNOWN = "unknown"

    @property
    def is_transient(self) -> bool:
        return self in _TRANSIENT_KINDS


_TRANSIENT_KINDS = frozenset({ErrorKind.CONNECTION, ErrorKind.TIMEOUT, ErrorKind.THROTTLED})


class ReclaimerError(RuntimeError):
    """Base class for domain-level failures."""


class UpstreamError(ReclaimerError):
    """Raised when the report provider fails or misbehaves."""

    def __init__(self, message: str, *, kind: ErrorKind = ErrorKind.UNKNOWN) -> None:
        super().__init__(message)
        self.kind = kind


class UpstreamTimeoutError(UpstreamError):
    """A report never reached DONE within the polling ceiling."""

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.TIMEOUT)


class UpstreamProcessingError(UpstreamError):
    """A report ended FATAL/CANCELLED or came back without the expected ids."""

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.PROCESSING)


class RowParseError(ReclaimerError):
    """A report row is malformed or lacks required fields."""

    def __init__(self, report: str, row_number: int | None, reason: str) -> None:
        location = f"row {row_number}" if row_number is not None else "row"
        super().__init__(f"{report} {location}: {reason}")
        self.report = report
        self.row_number = row_number
        self.reason = reason


class StoreError(ReclaimerError):
    def __init__(self, message: str, *, kind: ErrorKind = ErrorKind.UNKNOWN) -> None:
        super().__init__(message)
        self.kind = kind


class DuplicateKeyError(StoreError):
    """The store rejected a write because a unique key already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.INTEGRITY)


class NotFoundError(ReclaimerError):
    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class InvalidStatusError(ReclaimerError, ValueError):
    def __init__(self, value: object, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Invalid status {value!r}; expected one of: {', '.join(allowed)}")
        self.value = value
        self.allowed = allowed
