"""Observability bootstrap: JSON logging and request instrumentation."""

from __future__ import annotations

from fastapi import FastAPI

from contentsite.obs import logging as obs_logging
from contentsite.obs import middleware
from contentsite.settings import settings


def init(app: FastAPI) -> bool:
	"""Wire observability into `app` once; returns whether it is active."""
	if getattr(app.state, "obs_installed", False):
		return True
	if not settings.obs_enabled:
		return False
	obs_logging.configure_logging()
	middleware.install(app)
	app.state.obs_installed = True
	return True


__all__ = ["init"]
