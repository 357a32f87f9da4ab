"""
HTML Image Converter
====================

Renders one HTML payload into a PNG or JPEG screenshot on a page borrowed
from the shared browser.
"""

from typing import Any, Dict, Optional

from playwright.async_api import Page

from src.config.logging import get_logger
from src.config.settings import Settings, get_settings
from src.core.rendering.browser_manager import BrowserManager
from src.core.rendering.errors import (
    ConversionError,
    EngineError,
    InputValidationError,
    MissingInputError,
    classify_failure,
)
from src.models.schemas import (
    ConvertRequest,
    ImageResult,
    WaitMillis,
    WaitSelector,
    WaitStrategy,
)

logger = get_logger(__name__)


class HTMLImageConverter:
    """Playwright-based HTML to image converter."""

    def __init__(self, browser_manager: BrowserManager, settings: Optional[Settings] = None):
        self.browser_manager = browser_manager
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="converter")  # structlog.BoundLoggerBase

    def apply_defaults(self, request: ConvertRequest) -> ConvertRequest:
        """Fill viewport and timeout fields the caller left out from settings."""
        defaults = {
            "width": self.settings.default_width,
            "height": self.settings.default_height,
            "timeout": self.settings.default_timeout_ms,
        }
        missing = {name: value for name, value in defaults.items() if name not in request.model_fields_set}
        if not missing:
            return request
        return request.model_copy(update=missing)

    def validate(self, request: ConvertRequest) -> None:
        """
        Reject requests that must not reach the browser.

        Raises:
            MissingInputError: If no HTML was supplied
            InputValidationError: If the viewport exceeds the configured maximum
        """
        if not request.html or not request.html.strip():
            raise MissingInputError(hint="Please provide HTML content in the request body")

        if request.width > self.settings.max_width or request.height > self.settings.max_height:
            raise InputValidationError(
                "Dimensions too large",
                hint=(
                    f"Maximum dimensions are "
                    f"{self.settings.max_width}x{self.settings.max_height}"
                ),
            )

    async def convert(self, request: ConvertRequest) -> ImageResult:
        """
        Render the request's HTML and capture it as an image.

        Args:
            request: Validated conversion request

        Returns:
            ImageResult holding the encoded bytes

        Raises:
            ConversionError: Any failure, already mapped onto the error taxonomy
        """
        request = self.apply_defaults(request)
        try:
            self.validate(request)
        except InputValidationError as e:
            self.logger.warning("Conversion rejected", error=e.message, hint=e.hint)
            raise

        self.logger.info(
            "Converting HTML",
            html_length=len(request.html),
            width=request.width,
            height=request.height,
            format=request.format.value,
            full_page=request.full_page,
        )

        try:
            async with self.browser_manager.open_page(request.width, request.height) as page:
                await self._render(page, request)
                data = await page.screenshot(**self._screenshot_options(request))
        except Exception as e:
            error = classify_failure(e)
            self._log_failure(error, e)
            if error is e:
                raise
            raise error from e

        result = ImageResult(
            data=data,
            format=request.format,
            width=request.width,
            height=request.height,
            full_page=request.full_page,
        )
        self.logger.info("Conversion completed", size=result.size, format=result.format.value)
        return result

    async def _render(self, page: Page, request: ConvertRequest) -> None:
        """Load content, apply style and script, then wait as requested."""
        await page.set_content(request.html, wait_until="networkidle", timeout=request.timeout)

        # Added after loading; set_content replaces the whole document.
        if request.css:
            await page.add_style_tag(content=request.css)

        if request.javascript:
            await page.evaluate(request.javascript)

        await self._wait(page, request.wait_strategy, request.timeout)

    async def _wait(self, page: Page, strategy: WaitStrategy, timeout: int) -> None:
        if isinstance(strategy, WaitSelector):
            await page.wait_for_selector(strategy.selector, timeout=timeout)
        elif isinstance(strategy, WaitMillis):
            await page.wait_for_timeout(strategy.milliseconds)

    def _screenshot_options(self, request: ConvertRequest) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "type": request.format.value,
            "full_page": request.full_page,
        }
        if request.format.is_lossy:
            options["quality"] = request.quality
        return options

    def _log_failure(self, error: ConversionError, cause: BaseException) -> None:
        if isinstance(error, EngineError):
            self.logger.error(
                "Browser engine error",
                error_code=error.error_code,
                error=error.detail or str(cause),
                exc_info=cause,
            )
        else:
            self.logger.error(
                "Conversion error", error_code=error.error_code, error=error.detail or str(cause)
            )
