"""Translation of application errors into HTTP responses."""

from fastapi import HTTPException, status

from common.core.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from packages.billing.exceptions import FetchFailure

# First match wins, so specific types go before their categories
_STATUS_BY_ERROR = (
    (FetchFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_CONTENT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
)


def to_http_exception(error: AppException) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error)
    )
