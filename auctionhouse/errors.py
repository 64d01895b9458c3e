"""Service errors carrying a gRPC-style status code."""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar


class StatusCode(IntEnum):
    """Canonical status codes of the RPC layer."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class ServiceError(Exception):
    """Base class for errors reported to callers of the auction service."""

    code: ClassVar[StatusCode] = StatusCode.UNKNOWN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.name}, message={self.message!r})"


class InvalidArgument(ServiceError):
    """The request carried a malformed or disallowed value."""

    code = StatusCode.INVALID_ARGUMENT


class NotFound(ServiceError):
    """The requested entity does not exist."""

    code = StatusCode.NOT_FOUND


class FailedPrecondition(ServiceError):
    """The system is not in a state that allows the operation."""

    code = StatusCode.FAILED_PRECONDITION


class InternalError(ServiceError):
    """An unexpected failure, typically in the storage layer."""

    code = StatusCode.INTERNAL