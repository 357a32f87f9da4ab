"""
API Dependencies
================

FastAPI dependencies resolving the per-application resources stored on
``app.state`` by the application factory.
"""

from fastapi import Request

from src.config.settings import Settings
from src.core.rendering.browser_manager import BrowserManager
from src.core.rendering.converter import HTMLImageConverter


def get_current_settings(request: Request) -> Settings:
    """Dependency to get the settings the app was built with."""
    return request.app.state.settings


def get_browser_manager(request: Request) -> BrowserManager:
    """Dependency to get the shared browser manager."""
    return request.app.state.browser_manager


def get_converter(request: Request) -> HTMLImageConverter:
    """Dependency to get the HTML to image converter."""
    return request.app.state.converter
