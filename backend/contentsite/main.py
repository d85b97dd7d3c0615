"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contentsite.api import admin, content, ops, research
from contentsite.api.errors import install_error_handlers
from contentsite.api.middleware_request_id import RequestIdMiddleware
from contentsite.infra.redis import StoreClient
from contentsite.obs import init as obs_init
from contentsite.settings import settings

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	store = StoreClient.from_settings(settings)
	http = httpx.AsyncClient(timeout=settings.pdf_fetch_timeout_seconds, follow_redirects=True)
	app.state.store = store
	app.state.http = http
	if not await store.ensure_connection():
		# Reads fall back to content files until the store comes back
		LOGGER.warning("store unavailable at startup")
	try:
		yield
	finally:
		await http.aclose()
		await store.close()


app = FastAPI(title="Content Service", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True. Replace '*' with explicit origins.
if "*" in allow_origins:
	allow_origins = ["http://localhost:3000", "http://127.0.0.1:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)

# Ensure every request carries an X-Request-Id and make it available on request.state
app.add_middleware(RequestIdMiddleware)

app.include_router(admin.router)
app.include_router(content.router)
app.include_router(research.router)
app.include_router(ops.router)
