"""
Core domain layer for customer-matcher.

This package contains pure matching logic with no database, file or
network access. All code here should be testable without I/O operations.
"""

from __future__ import annotations

__all__ = []
