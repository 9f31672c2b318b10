"""Filter specifications and a small parameterised predicate builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

from petadex.core.errors import ValidationError
from petadex.core.validators import (
    SQLITE_MAX_INTEGER,
    parse_optional_bool,
    parse_optional_int,
)

DEFAULT_LIMIT = 50
MAX_LIMIT = 1000


@dataclass(frozen=True)
class EnzymeFilter:
    family: Optional[int] = None
    component: Optional[int] = None
    has_component: Optional[bool] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "EnzymeFilter":
        return cls(
            family=parse_optional_int(params.get("family"), "family"),
            component=parse_optional_int(params.get("component"), "component"),
            has_component=parse_optional_bool(params.get("has_component"), "has_component"),
        )

    def predicate(self) -> "Predicate":
        """Assemble the WHERE clause for ``enzyme_fastaa e LEFT JOIN enzyme_taxonomy t``.

        Clauses are always added in the same order (family, component,
        has_component) so equal filters produce identical SQL.
        """
        predicate = Predicate()
        if self.family is not None:
            predicate.equals("t.family", self.family)
        if self.component is not None:
            predicate.equals("t.component", self.component)
        if self.has_component is True:
            predicate.is_not_null("t.component")
        elif self.has_component is False:
            predicate.is_null("t.component")
        return predicate


@dataclass(frozen=True)
class PageRequest:
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ValidationError("limit", "must be an integer")
        if isinstance(self.offset, bool) or not isinstance(self.offset, int):
            raise ValidationError("offset", "must be an integer")
        if self.offset < 0:
            raise ValidationError("offset", "must be greater than or equal to 0")
        if self.offset > SQLITE_MAX_INTEGER:
            raise ValidationError("offset", f"must be at most {SQLITE_MAX_INTEGER}")
        # frozen dataclass: clamp through object.__setattr__
        object.__setattr__(self, "limit", min(max(self.limit, 1), MAX_LIMIT))

    @classmethod
    def from_params(cls, limit: Any = None, offset: Any = None) -> "PageRequest":
        parsed_limit = parse_optional_int(limit, "limit")
        parsed_offset = parse_optional_int(offset, "offset")
        return cls(
            limit=DEFAULT_LIMIT if parsed_limit is None else parsed_limit,
            offset=0 if parsed_offset is None else parsed_offset,
        )


@dataclass
class Predicate:
    """Collects AND-ed conditions and their bound parameters."""

    clauses: List[str] = field(default_factory=list)
    params: List[Any] = field(default_factory=list)

    def equals(self, column: str, value: Any) -> "Predicate":
        self.clauses.append(f"{column} = ?")
        self.params.append(value)
        return self

    def is_null(self, column: str) -> "Predicate":
        self.clauses.append(f"{column} IS NULL")
        return self

    def is_not_null(self, column: str) -> "Predicate":
        self.clauses.append(f"{column} IS NOT NULL")
        return self

    def sql(self) -> Tuple[str, List[Any]]:
        if not self.clauses:
            return "", []
        return "WHERE " + " AND ".join(self.clauses), list(self.params)


def absent_first_desc(column: str) -> str:
    """ORDER BY fragment: NULLs first, then values descending."""
    return f"{column} IS NOT NULL, {column} DESC"


def absent_first_asc(column: str) -> str:
    return f"{column} IS NOT NULL, {column} ASC"


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "EnzymeFilter",
    "PageRequest",
    "Predicate",
    "absent_first_asc",
    "absent_first_desc",
]
