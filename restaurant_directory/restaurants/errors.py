"""
Error kinds raised by the restaurant directory.

``DuplicateError`` and ``NotFoundError`` are expected outcomes that the API
maps to 409 and 404. ``BackendError`` wraps any store or cache I/O failure
and keeps the underlying message in ``detail`` for diagnostics.
"""

from __future__ import annotations


class DirectoryError(Exception):
    """Base exception for restaurant directory operations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DuplicateError(DirectoryError):
    def __init__(self, name: str):
        self.name = name
        super().__init__("Restaurant already exists")


class NotFoundError(DirectoryError):
    def __init__(self, name: str):
        self.name = name
        super().__init__("Restaurant not found")


class BackendError(DirectoryError):
    def __init__(self, message: str, detail: str | None = None):
        self.detail = detail
        super().__init__(message)
