"""
Core Business Logic
==================

Core business logic for HTML to image conversion.

Modules:
- rendering: Browser lifecycle management and screenshot capture
"""
