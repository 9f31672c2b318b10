"""Identifier parsing shared by the services and the HTTP layer.

Values arrive either as Python objects (services, CLI) or as raw query and
path strings (HTTP). Both go through the same pydantic adapters, and any
pydantic failure is re-raised as the catalog's own ``ValidationError`` so
the API maps it to a 400 before a statement is prepared.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import Field, StringConstraints, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from petadex.core.errors import ValidationError

MAX_IDENTIFIER_LENGTH = 64
# SQLite INTEGER is a signed 64-bit value; anything wider overflows the binding.
SQLITE_MAX_INTEGER = 2**63 - 1
SQLITE_MIN_INTEGER = -(2**63)

PositiveId = Annotated[int, Field(gt=0, le=SQLITE_MAX_INTEGER)]
StorageInt = Annotated[int, Field(ge=SQLITE_MIN_INTEGER, le=SQLITE_MAX_INTEGER)]
Identifier = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_IDENTIFIER_LENGTH),
]

_POSITIVE_ID = TypeAdapter(PositiveId)
_STORAGE_INT = TypeAdapter(StorageInt)
_IDENTIFIER = TypeAdapter(Identifier)
_FLAG = TypeAdapter(bool)


def _validate(adapter: TypeAdapter, value: Any, field: str, message: str) -> Any:
    if isinstance(value, str):
        value = value.strip()
    try:
        return adapter.validate_python(value)
    except PydanticValidationError as exc:
        raise ValidationError(field, message) from exc


def parse_positive_int(value: Any, field: str) -> int:
    """Accept a positive integer or its decimal string form."""
    if isinstance(value, bool):
        raise ValidationError(field, "must be a positive integer")
    return _validate(_POSITIVE_ID, value, field, "must be a positive integer")


def parse_identifier(value: Any, field: str) -> str:
    """Accept a non-empty string of at most 64 characters."""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    return _validate(
        _IDENTIFIER,
        value,
        field,
        f"must be a non-empty string of at most {MAX_IDENTIFIER_LENGTH} characters",
    )


def parse_optional_int(value: Any, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(field, "must be an integer")
    return _validate(_STORAGE_INT, value, field, "must be an integer")


def parse_optional_bool(value: Any, field: str) -> Optional[bool]:
    if value is None or value == "":
        return None
    return _validate(_FLAG, value, field, "must be 'true' or 'false'")


__all__ = [
    "MAX_IDENTIFIER_LENGTH",
    "SQLITE_MAX_INTEGER",
    "SQLITE_MIN_INTEGER",
    "parse_identifier",
    "parse_optional_bool",
    "parse_optional_int",
    "parse_positive_int",
]
