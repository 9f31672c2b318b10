"""Error kinds raised by the catalog services."""

from __future__ import annotations


class PetadexError(Exception):
    """Base class for catalog errors that callers are expected to handle."""


class ValidationError(PetadexError, ValueError):
    """A caller-supplied identifier or pagination parameter was rejected."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(PetadexError, LookupError):
    """The requested entity (or the parent of a requested listing) does not exist."""

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


__all__ = ["PetadexError", "ValidationError", "NotFoundError"]
