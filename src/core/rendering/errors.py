"""
Conversion Errors
=================

Exception taxonomy for HTML to image conversion and the mapping from raw
browser failures onto it. Each error carries the HTTP status and the
user-facing message it is reported with.
"""

from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class ConversionError(Exception):
    """Generic conversion failure."""

    status_code = 500
    error_code = "CONVERSION_ERROR"
    default_message = "Internal server error during conversion"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        detail: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.detail = detail
        self.hint = hint
        super().__init__(self.message)


class InputValidationError(ConversionError):
    """The request was rejected before any browser resource was allocated."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class MissingInputError(InputValidationError):
    """A required input field was absent or empty."""

    error_code = "MISSING_INPUT"
    default_message = "HTML content is required"


class RenderTimeoutError(ConversionError):
    """Loading or waiting exceeded the request timeout."""

    status_code = 408
    error_code = "TIMEOUT"
    default_message = "Request timeout - page took too long to load"


class ResourceLoadError(ConversionError):
    """A resource referenced by the submitted HTML failed to load."""

    status_code = 400
    error_code = "RESOURCE_LOAD_ERROR"
    default_message = "Network error loading resources"


class EngineError(ConversionError):
    """The browser engine or its protocol layer failed."""

    status_code = 500
    error_code = "ENGINE_ERROR"
    default_message = "Browser protocol error"


class BrowserLaunchError(EngineError):
    """The shared browser process could not be started."""

    error_code = "BROWSER_LAUNCH_FAILED"


def classify_failure(exc: BaseException) -> ConversionError:
    """
    Map an arbitrary failure raised while converting onto the error taxonomy.

    Args:
        exc: The exception raised by the browser or the conversion steps

    Returns:
        A ConversionError carrying the matching status and message
    """
    if isinstance(exc, ConversionError):
        return exc

    detail = str(exc)
    if isinstance(exc, PlaywrightTimeoutError) or "timeout" in detail.lower():
        return RenderTimeoutError(detail=detail)
    if "net::ERR_" in detail:
        return ResourceLoadError(detail=detail)
    if "Protocol error" in detail:
        return EngineError(detail=detail)
    return ConversionError(detail=detail)
