"""AsyncPG pool management and the query collaborator used by domain services."""

from __future__ import annotations

from typing import Any, Optional, Sequence

import asyncpg

from accountdesk.domain.common.database import QueryResult
from accountdesk.settings import settings

_pool: Optional[asyncpg.pool.Pool] = None


async def init_pool() -> asyncpg.pool.Pool:
	global _pool
	if _pool is None:
		dsn = settings.postgres_url.replace("localhost", "127.0.0.1")
		_pool = await asyncpg.create_pool(
			dsn=dsn,
			min_size=settings.postgres_min_pool_size,
			max_size=settings.postgres_max_pool_size,
			ssl="require" if settings.postgres_ssl else "disable",
		)
	return _pool


async def get_pool() -> asyncpg.pool.Pool:
	if _pool is None:
		await init_pool()
	assert _pool is not None
	return _pool


async def close_pool() -> None:
	global _pool
	if _pool is not None:
		await _pool.close()
		_pool = None


class PostgresDatabase:
	"""Runs positional-parameter statements against an asyncpg pool.

	Every statement issued by the services either selects rows or carries a
	RETURNING clause, so the row count is the number of rows fetched.
	Driver errors (unique/foreign-key violations, connection failures)
	propagate unchanged.

	Timestamps are bound as aware UTC datetimes and cast with
	``::timestamptz`` in the statements, so both ``timestamp`` and
	``timestamptz`` columns accept them.
	"""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self.pool = pool

	async def execute(self, query: str, params: Sequence[Any] = ()) -> QueryResult:
		records = await self.pool.fetch(query, *params)
		rows = [dict(record) for record in records]
		return QueryResult(rows=rows, row_count=len(rows))
