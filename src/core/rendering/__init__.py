"""
Rendering Module
===============

HTML to image conversion with browser automation.

Components:
- browser_manager: Shared browser process and request-scoped pages
- converter: HTML to PNG/JPEG screenshot conversion
- errors: Conversion error taxonomy and failure classification
"""
