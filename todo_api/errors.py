from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    """Stable error codes reported in failure envelopes."""

    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    PERSISTENCE = "persistence_error"
    INTERNAL = "internal_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNSUPPORTED_OPERATION: status.HTTP_405_METHOD_NOT_ALLOWED,
    ErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class TodoApiError(Exception):
    """Base class for errors that map onto a failure envelope."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class ValidationError(TodoApiError):
    """Caller input failed a precondition (missing title, missing id, bad patch)."""

    kind = ErrorKind.VALIDATION


class NotFoundError(TodoApiError):
    kind = ErrorKind.NOT_FOUND


class UnsupportedOperationError(TodoApiError):
    kind = ErrorKind.UNSUPPORTED_OPERATION


class PersistenceError(TodoApiError):
    """The task document could not be written."""

    kind = ErrorKind.PERSISTENCE
