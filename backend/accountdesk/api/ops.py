"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Header, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from accountdesk.infra.auth import require_admin
from accountdesk.obs import health
from accountdesk.settings import settings

router = APIRouter(prefix="", tags=["ops"])


@router.get("/health")
async def health_basic() -> dict[str, Any]:
	return await health.basic()


@router.get("/health/live")
async def health_live() -> dict[str, Any]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready() -> Response:
	status_code, payload = await health.readiness()
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics")
async def metrics_endpoint(
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
) -> Response:
	if not settings.obs_metrics_public:
		await require_admin(x_admin_token=x_admin_token)
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
