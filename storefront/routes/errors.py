from fastapi import HTTPException

from storefront.exceptions import (
    InvalidTransitionError,
    OrderError,
    OrderNotFoundError,
    OrderValidationError,
    StoreUnavailableError,
)

STATUS_CODES = {
    OrderValidationError: 400,
    OrderNotFoundError: 404,
    InvalidTransitionError: 409,
    StoreUnavailableError: 503,
}


def http_error(exc: OrderError) -> HTTPException:
    status_code = STATUS_CODES.get(type(exc), 500)
    if isinstance(exc, StoreUnavailableError):
        return HTTPException(status_code, "Database unavailable")
    return HTTPException(status_code, str(exc))
