"""Query collaborator contract consumed by the domain services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence


@dataclass(slots=True)
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


class Database(Protocol):
    async def execute(self, query: str, params: Sequence[Any] = ()) -> QueryResult:
        ...


def extract_single_row(result: QueryResult) -> Optional[dict[str, Any]]:
    return result.rows[0] if result.rows else None


def extract_rows(result: QueryResult) -> list[dict[str, Any]]:
    return result.rows


def has_rows(result: QueryResult) -> bool:
    return result.row_count > 0
