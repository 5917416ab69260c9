"""Core business logic: scoring, factor descriptions, examples, document analysis, and data models.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
SQLAlchemy or any server framework, so the scoring engine can be used on
its own.
"""
