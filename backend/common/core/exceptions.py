class AppException(Exception):
    """Base application exception."""

    pass


class NotFoundError(AppException):
    """Resource not found exception."""

    pass


class ValidationError(AppException):
    """Validation error exception."""

    pass


class ConflictError(AppException):
    """Operation not allowed in the resource's current state."""

    pass


class UpstreamError(AppException):
    """A remote service failed or refused the call."""

    pass


class ForbiddenError(AppException):
    """Caller is known but not allowed to do this."""

    pass
