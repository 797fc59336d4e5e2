"""
Error taxonomy shared by the service layer.

Every failure a service can report belongs to exactly one ``ErrorKind``.
Services raise a ``ServiceError`` subclass carrying its kind and a stable,
machine-readable reason; the request layer maps kinds to HTTP status codes.
"""
import enum


class ErrorKind(str, enum.Enum):
    """Closed set of failure kinds."""
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Base class for all service failures."""
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, reason={self.reason!r})"


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(ServiceError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class ValidationFailedError(ServiceError):
    kind = ErrorKind.VALIDATION_FAILED


class InternalError(ServiceError):
    kind = ErrorKind.INTERNAL


# HTTP status for each kind, used by the exception handler in app.main
HTTP_STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION_FAILED: 422,
    ErrorKind.INTERNAL: 500,
}
