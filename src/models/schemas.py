"""
Pydantic Models and Schemas
===========================

Request/response models for the conversion API and the internal types that
flow between the HTTP layer and the rendering core.
"""

import math
from typing import Optional, List, Dict, Any, Union, Literal
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.types import StrictStr, StrictInt, StrictFloat


SELECTOR_PREFIX = "selector:"


def utc_now() -> datetime:
    """Timezone-aware current time, used for response timestamps."""
    return datetime.now(timezone.utc)


# Enums
class ImageFormat(str, Enum):
    """Supported screenshot encodings."""
    PNG = "png"
    JPEG = "jpeg"

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"

    @property
    def is_lossy(self) -> bool:
        return self is ImageFormat.JPEG


# Wait strategies
@dataclass(frozen=True)
class NoWait:
    """Capture as soon as the content and script have run."""


@dataclass(frozen=True)
class WaitMillis:
    """Pause for a fixed number of milliseconds before capture."""
    milliseconds: int


@dataclass(frozen=True)
class WaitSelector:
    """Block until an element matching ``selector`` exists."""
    selector: str


WaitStrategy = Union[NoWait, WaitMillis, WaitSelector]


def parse_wait_for(raw: Union[str, int, float, None]) -> WaitStrategy:
    """
    Decide the wait strategy for a raw ``waitFor`` value.

    ``"selector:<css>"`` waits for an element, a non-negative number (or a
    string holding one) pauses for that many milliseconds, anything else
    does not wait.

    Args:
        raw: Value of the ``waitFor`` request field

    Returns:
        The wait strategy to apply before capture
    """
    if raw is None or isinstance(raw, bool):
        return NoWait()

    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith(SELECTOR_PREFIX):
            selector = text[len(SELECTOR_PREFIX):].strip()
            return WaitSelector(selector) if selector else NoWait()
        try:
            raw = float(text)
        except ValueError:
            return NoWait()

    if math.isnan(raw) or math.isinf(raw) or raw < 0:
        return NoWait()
    return WaitMillis(int(raw))


# API Request/Response Models
class ConvertRequest(BaseModel):
    """Request model for HTML to image conversion."""

    model_config = ConfigDict(populate_by_name=True)

    html: Optional[str] = Field(None, description="HTML document to render")
    width: int = Field(1280, gt=0, description="Viewport width in pixels")
    height: int = Field(720, gt=0, description="Viewport height in pixels")
    full_page: bool = Field(
        False, alias="fullPage", description="Capture the full scrollable page"
    )
    quality: int = Field(100, ge=1, le=100, description="JPEG quality (ignored for PNG)")
    format: ImageFormat = Field(ImageFormat.PNG, description="Output encoding")
    wait_for: Optional[Union[StrictStr, StrictInt, StrictFloat]] = Field(
        None,
        alias="waitFor",
        description="'selector:<css>' to wait for an element, or milliseconds to pause",
    )
    css: str = Field("", description="Extra stylesheet injected into the page")
    javascript: str = Field("", description="Script evaluated in the page before capture")
    timeout: int = Field(30000, gt=0, description="Load and wait timeout in milliseconds")

    @property
    def wait_strategy(self) -> WaitStrategy:
        return parse_wait_for(self.wait_for)


class ImageResult(BaseModel):
    """Result of a single conversion."""
    data: bytes = Field(..., description="Encoded image bytes", exclude=True)
    format: ImageFormat = Field(..., description="Image encoding")
    width: int = Field(..., description="Viewport width")
    height: int = Field(..., description="Viewport height")
    full_page: bool = Field(False, description="Whether the full page was captured")

    @property
    def content_type(self) -> str:
        return self.format.content_type

    @property
    def size(self) -> int:
        return len(self.data)


class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall status")
    timestamp: datetime = Field(default_factory=utc_now, description="Check timestamp")
    browser: Literal["connected", "disconnected"] = Field(
        ..., description="Shared browser connectivity"
    )


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    message: Optional[str] = Field(None, description="Hint for the caller")
    details: Optional[Union[str, List[Any], Dict[str, Any]]] = Field(
        None, description="Underlying error detail"
    )
    error_code: Optional[str] = Field(None, description="Error code")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    timestamp: datetime = Field(default_factory=utc_now, description="Error timestamp")
