"""
FastAPI REST Endpoints
======================

REST API endpoints for HTTP access to HTML to image conversion.

Endpoints:
- GET /: Service information
- GET /health: Browser health check
- POST /convert: HTML to PNG/JPEG conversion
"""
