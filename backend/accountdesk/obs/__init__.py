"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from accountdesk.obs import logging as obs_logging
from accountdesk.obs import middleware
from accountdesk.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	global _logging_configured
	if settings.obs_enabled and not _logging_configured:
		obs_logging.configure_logging()
		_logging_configured = True
	# The middleware always stamps request ids; access logs and metrics follow obs_enabled.
	middleware.install(app, enabled=settings.obs_enabled)


__all__ = ["init"]
