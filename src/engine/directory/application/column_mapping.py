"""Declarative mapping from feed columns to user fields."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

_TRUTHY = frozenset({"true", "yes", "1"})


def parse_active(value: str | None) -> bool:
    """Interpret an active flag from a feed.

    Absent or blank means active. Otherwise only true, yes and 1
    (any case) are active.
    """
    if value is None or not value.strip():
        return True
    return value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class MappedRecord:
    """User fields extracted from one feed row. Values are trimmed."""

    login_name: str | None
    email: str | None
    first_name: str | None
    last_name: str | None
    active: bool


@dataclass(frozen=True)
class ColumnMapping:
    """Which feed column supplies which user field.

    Header matching is case-insensitive. Columns not named here are
    ignored.
    """

    login_name: str = "loginName"
    email: str = "email"
    first_name: str = "firstName"
    last_name: str = "lastName"
    active: str = "active"

    DEFAULT: ClassVar[ColumnMapping]

    @property
    def columns(self) -> tuple[str, ...]:
        return (
            self.login_name,
            self.email,
            self.first_name,
            self.last_name,
            self.active,
        )

    def template_header(self) -> str:
        """Header line of a blank feed using this mapping."""
        return ",".join(self.columns)

    def extract(self, row: Mapping[str | None, str | None]) -> MappedRecord:
        """Pull the mapped fields out of a raw row."""
        normalized: dict[str, str | None] = {}
        for key, value in row.items():
            if key is None:
                continue
            normalized[key.strip().lower()] = (
                value.strip() if value is not None else None
            )

        def get(column: str) -> str | None:
            return normalized.get(column.lower())

        return MappedRecord(
            login_name=get(self.login_name),
            email=get(self.email),
            first_name=get(self.first_name),
            last_name=get(self.last_name),
            active=parse_active(get(self.active)),
        )


ColumnMapping.DEFAULT = ColumnMapping()
