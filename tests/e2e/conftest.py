"""
E2E Test Configuration
======================

End-to-end fixtures driving a real headless Chromium through Playwright.
Tests are skipped when no browser can be launched on the host.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.core.rendering.browser_manager import BrowserManager
from tests.utils.helpers import make_settings


@pytest.fixture(scope="module")
def real_client() -> Generator[TestClient, None, None]:
    """Client for an app whose browser is launched at startup."""
    settings = make_settings(launch_browser_on_startup=True)
    browser_manager = BrowserManager(settings)
    app = create_app(settings, browser_manager)

    with TestClient(app) as client:
        if not browser_manager.is_connected():
            pytest.skip("Chromium could not be launched; run `playwright install chromium`")
        yield client
