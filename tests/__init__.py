"""
Test Suite
==========

Test suite matching the src/ directory structure.

Test Categories:
- unit: Unit tests for individual components
- integration: HTTP API tests against mocked browsers
- e2e: Tests against a real headless Chromium
"""
