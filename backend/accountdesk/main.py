"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accountdesk.api import admin, inquiries, me, ops, reports
from accountdesk.api.errors import install_error_handlers
from accountdesk.domain.container import build_services
from accountdesk.infra import postgres
from accountdesk.obs import init as obs_init
from accountdesk.obs import logging as obs_logging
from accountdesk.settings import settings

logger = obs_logging.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	pool = await postgres.init_pool()
	app.state.services = build_services(postgres.PostgresDatabase(pool))
	logger.info("database_connected", extra={"environment": settings.environment})
	try:
		yield
	finally:
		await postgres.close_pool()


def _allowed_origins() -> list[str]:
	origins = list(settings.cors_allow_origins)
	if not origins:
		origins = [settings.frontend_url, "http://localhost:8080", "http://localhost:5174"]
	# Starlette disallows wildcard '*' with allow_credentials=True.
	return [origin for origin in origins if origin != "*"] or [settings.frontend_url]


app = FastAPI(title="accountdesk API", lifespan=lifespan)
install_error_handlers(app)

app.add_middleware(
	CORSMiddleware,
	allow_origins=_allowed_origins(),
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
obs_init(app)

app.include_router(ops.router, tags=["ops"])
app.include_router(me.router)
app.include_router(reports.router)
app.include_router(inquiries.router)
app.include_router(admin.router)
