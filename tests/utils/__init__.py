"""
Test Utilities
==============

Mocks and assertion helpers for testing.
"""
