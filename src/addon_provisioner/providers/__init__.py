"""Remote API clients for the add-on provisioner."""

from .heroku_client import (
    NOT_FOUND_ERROR_ID,
    HerokuAPIError,
    HerokuClient,
    HerokuTimeoutError,
    is_not_found_error,
)

__all__ = [
    "NOT_FOUND_ERROR_ID",
    "HerokuAPIError",
    "HerokuClient",
    "HerokuTimeoutError",
    "is_not_found_error",
]
