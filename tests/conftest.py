"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, a mocked Playwright driver, the application and
an HTTP test client.
"""

from typing import Any, Callable, Generator
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.config.settings import Settings
from src.core.rendering.browser_manager import BrowserManager
from src.core.rendering.converter import HTMLImageConverter
from tests.utils.helpers import SAMPLE_HTML, make_settings
from tests.utils.mocks import (
    MockChromium,
    MockPlaywright,
    MockPlaywrightContextManager,
    PageBehavior,
)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings fixture."""
    return make_settings()


@pytest.fixture
def page_behavior() -> PageBehavior:
    """Failure and timing knobs shared by every mock page."""
    return PageBehavior()


@pytest.fixture
def mock_playwright(page_behavior: PageBehavior) -> Generator[MockPlaywright, None, None]:
    """Replace the Playwright driver with an in-memory mock."""
    playwright = MockPlaywright(MockChromium(page_behavior))
    with patch(
        "src.core.rendering.browser_manager.async_playwright",
        return_value=MockPlaywrightContextManager(playwright),
    ):
        yield playwright


@pytest.fixture
def mock_chromium(mock_playwright: MockPlaywright) -> MockChromium:
    """The mocked browser type; inspect launches and browsers here."""
    return mock_playwright.chromium


@pytest.fixture
def browser_manager(test_settings: Settings, mock_playwright: MockPlaywright) -> BrowserManager:
    """Browser manager running on the mocked driver."""
    return BrowserManager(test_settings)


@pytest.fixture
def converter(browser_manager: BrowserManager, test_settings: Settings) -> HTMLImageConverter:
    """Converter on top of the mocked browser manager."""
    return HTMLImageConverter(browser_manager, test_settings)


@pytest.fixture
def app(test_settings: Settings, browser_manager: BrowserManager) -> FastAPI:
    """Application wired to the mocked browser manager."""
    return create_app(test_settings, browser_manager)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """HTTP test client; runs the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_factory(mock_playwright: MockPlaywright) -> Callable[..., FastAPI]:
    """Build an application with settings overrides on the mocked driver."""

    def _build(**overrides: Any) -> FastAPI:
        settings = make_settings(**overrides)
        return create_app(settings, BrowserManager(settings))

    return _build


@pytest.fixture
def sample_html() -> str:
    """Minimal HTML document."""
    return SAMPLE_HTML
