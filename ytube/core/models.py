"""Core data models for API results."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3/"

MISSING_KEY_MESSAGE = (
    "Please set a key using set_key method. "
    "Get an key in https://console.developers.google.com"
)
NOT_FOUND_MESSAGE = "Not found error"
FORBIDDEN_MESSAGE = "forbidden"
# Spelling kept as returned by earlier releases; callers match on it.
RATE_LIMIT_MESSAGE = "Retelimit exceeded"
UNKNOWN_ERROR_MESSAGE = "Some kind of error"

UNAUTHORIZED_MARKER = "The request is not properly authorized"

ErrorResult = dict[str, dict[str, str]]
Callback = Callable[..., Any]


def new_error(message: str) -> ErrorResult:
    """Wrap a message in the API's error shape."""
    return {"error": {"message": message}}


@dataclass
class APIResponse:
    """Outcome of a single API request."""
    success: bool
    data: Any | None = None
    error: Any | None = None
    status_code: int | None = None

    def deliver(self, callback: Callback | None) -> "APIResponse":
        """Hand the result to an error-first callback.

        Failures are delivered as ``callback(error)``, successes as
        ``callback(None, data)``.
        """
        if callback is not None:
            if self.success:
                callback(None, self.data)
            else:
                callback(self.error)
        return self
