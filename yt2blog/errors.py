"""Error types and user-facing error formatting for YT2Blog."""

from datetime import datetime, timezone
from typing import Optional, Union

from .models import ErrorReport


class YT2BlogError(Exception):
    """Base class for all YT2Blog errors."""


class InputValidationError(YT2BlogError):
    """Raised when a request is rejected before any network call is made."""


class PipelineError(YT2BlogError):
    """Raised when the generation pipeline reaches an inconsistent state."""


class UpstreamError(YT2BlogError):
    """Raised when an upstream API (OpenAI, YouTube) fails or returns garbage.

    Attributes:
        status_code: HTTP status of the failed response, if there was one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidApiKeyError(UpstreamError):
    """Raised when the LLM provider rejects the API key (HTTP 401)."""

    def __init__(self, message: str = "Invalid OpenAI API key. Please check your key and try again."):
        super().__init__(message, status_code=401)


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream call does not answer before its deadline."""


class ContentFetchError(YT2BlogError):
    """Raised when content for one of the requested videos cannot be fetched.

    Attributes:
        url: The video URL that failed.
    """

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Failed to scrape content from {url}: {cause}")
        self.url = url
        self.cause = cause


def format_error_message(error: Union[Exception, str, None]) -> str:
    """Format an error for display to the user.

    Args:
        error: An exception, a plain message, or None.

    Returns:
        A short human-readable message.
    """
    if error is None:
        return "An unknown error occurred"

    if isinstance(error, str):
        return error

    message = str(error)
    status = getattr(error, "status_code", None)

    if isinstance(error, InvalidApiKeyError):
        return message

    if status is not None:
        if status in (401, 403):
            return "Authentication failed. Please check your API key"
        if status == 404:
            return "Resource not found"
        if status == 429:
            return "Too many requests. Please try again later"
        if status >= 500:
            return "Server error. Please try again later"

    if "Network" in message or "ECONNREFUSED" in message or "Connection" in message:
        return "Network error. Please check your internet connection"

    return message or "An unexpected error occurred"


def create_error_report(error: Union[Exception, str, None], context: str) -> ErrorReport:
    """Build an ErrorReport for the host (CLI or API) to display.

    Args:
        error: The original error.
        context: Where the error happened, e.g. "Failed to generate article".

    Returns:
        ErrorReport with a formatted message and timestamp.
    """
    return ErrorReport(
        message=format_error_message(error),
        context=context,
        timestamp=datetime.now(timezone.utc),
    )
