"""
Data Models
===========

Pydantic data models for request/response validation and internal data structures.

Models:
- schemas: API request and response schemas, wait strategies
"""
