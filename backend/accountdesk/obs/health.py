"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, Tuple

from accountdesk.infra import postgres
from accountdesk.obs import metrics

LOGGER = logging.getLogger(__name__)


async def _postgres_status(timeout: float = 0.3) -> Dict[str, Any]:
	try:
		pool = await postgres.get_pool()
	except Exception as exc:  # pragma: no cover - connection bootstrap failure
		metrics.mark_postgres(False)
		LOGGER.warning("Postgres connection unavailable", exc_info=True)
		return {"ok": False, "error": str(exc)}

	start = perf_counter()
	try:
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		metrics.mark_postgres(False)
		LOGGER.warning("Postgres readiness query failed", exc_info=True)
		return {"ok": False, "error": str(exc)}
	latency = perf_counter() - start
	metrics.mark_postgres(True, latency_seconds=latency)
	return {"ok": True, "latency_ms": round(latency * 1000, 2)}


async def basic() -> Dict[str, Any]:
	return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	postgres_state = await _postgres_status()
	ok = bool(postgres_state.get("ok"))
	return (
		200 if ok else 503,
		{"status": "ok" if ok else "degraded", "checks": {"postgres": postgres_state}},
	)
