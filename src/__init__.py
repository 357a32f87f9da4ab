"""
HTML to Image API
=================

An HTTP service that renders arbitrary HTML into PNG or JPEG images using a
shared headless Chromium driven by Playwright.

This package provides:
- FastAPI REST endpoints for conversion and health checks
- Browser lifecycle management with request-scoped pages
- Rate limiting and security middleware
"""

__version__ = "1.0.0"
__author__ = "HTML to Image API Team"
