"""Row-shaping helpers translating between storage and application field names.

Storage rows use lower snake_case column names (``reported_user_id``) while
API payloads use lower camelCase (``reportedUserId``). Entities declare their
columns once through :class:`FieldMap`; the generic ``keys_to_*`` helpers
remain available for open-ended records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple

_UPPER = re.compile(r"[A-Z]")
_UNDERSCORE_LOWER = re.compile(r"_([a-z])")


def to_snake_case(name: str) -> str:
    return _UPPER.sub(lambda match: f"_{match.group(0).lower()}", name)


def to_camel_case(name: str) -> str:
    return _UNDERSCORE_LOWER.sub(lambda match: match.group(1).upper(), name)


def keys_to_camel_case(record: Mapping[str, Any]) -> dict[str, Any]:
    return {to_camel_case(key): value for key, value in record.items()}


def keys_to_snake_case(record: Mapping[str, Any]) -> dict[str, Any]:
    return {to_snake_case(key): value for key, value in record.items()}


@dataclass(frozen=True, slots=True)
class FieldMap:
    """Declared storage-name/application-name pairs for one entity."""

    pairs: tuple[tuple[str, str], ...]

    @classmethod
    def of(cls, *columns: str) -> "FieldMap":
        pairs: list[tuple[str, str]] = []
        for column in columns:
            application_name = to_camel_case(column)
            if to_snake_case(application_name) != column:
                raise ValueError(f"column {column!r} does not round-trip through {application_name!r}")
            pairs.append((column, application_name))
        return cls(pairs=tuple(pairs))

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(column for column, _ in self.pairs)

    def select_list(self) -> str:
        return ", ".join(self.columns)

    def pick(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Return the declared columns of ``row``; a missing column raises KeyError."""
        missing = [column for column in self.columns if column not in row]
        if missing:
            raise KeyError(f"row is missing columns: {', '.join(missing)}")
        return {column: row[column] for column in self.columns}

    def to_application(self, record: Mapping[str, Any]) -> dict[str, Any]:
        picked = self.pick(record)
        return {name: picked[column] for column, name in self.pairs}

    def to_storage(self, record: Mapping[str, Any]) -> dict[str, Any]:
        lookup = {name: column for column, name in self.pairs}
        unknown = [key for key in record if key not in lookup]
        if unknown:
            raise KeyError(f"unknown fields: {', '.join(unknown)}")
        return {lookup[key]: value for key, value in record.items()}


class WhereClause(NamedTuple):
    clause: str
    values: list[Any]


def build_where_clause(conditions: Mapping[str, Any], start_index: int = 1) -> WhereClause:
    """Build ``WHERE a = $n AND ...`` from the conditions that carry a value.

    ``None`` means "no filter" for that field. An empty clause means no
    filtering at all, never "match nothing".
    """
    entries = [(key, value) for key, value in conditions.items() if value is not None]
    if not entries:
        return WhereClause("", [])
    predicates = [f"{key} = ${start_index + offset}" for offset, (key, _) in enumerate(entries)]
    values = [value for _, value in entries]
    return WhereClause(f"WHERE {' AND '.join(predicates)}", values)
