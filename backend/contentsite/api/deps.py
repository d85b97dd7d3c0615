"""Shared FastAPI dependencies: store, repository, outbound HTTP, admin guard."""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import Depends, Header, HTTPException, Request, status

from contentsite.domain.content.files import FileReader
from contentsite.domain.content.repository import ContentRepository
from contentsite.domain.content.views import ViewCounter
from contentsite.infra.redis import StoreClient
from contentsite.settings import settings


def get_store(request: Request) -> StoreClient:
	store = getattr(request.app.state, "store", None)
	if store is None:
		store = StoreClient.from_settings(settings)
		request.app.state.store = store
	return store


def get_file_reader() -> FileReader:
	return FileReader(settings.content_root)


def get_repository(
	store: StoreClient = Depends(get_store),
	reader: FileReader = Depends(get_file_reader),
) -> ContentRepository:
	return ContentRepository(store, reader)


def get_view_counter(store: StoreClient = Depends(get_store)) -> ViewCounter:
	return ViewCounter(store)


def get_http_client(request: Request) -> httpx.AsyncClient:
	client = getattr(request.app.state, "http", None)
	if client is None:
		client = httpx.AsyncClient(timeout=settings.pdf_fetch_timeout_seconds, follow_redirects=True)
		request.app.state.http = client
	return client


def _resolve_token(x_admin_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
	if x_admin_token:
		return x_admin_token
	if authorization and authorization.lower().startswith("bearer "):
		return authorization.split(" ", 1)[1]
	return None


async def require_admin(
	X_Admin_Token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	token = settings.admin_token
	if not token:
		# Fail closed: if no token is configured, no admin access is allowed.
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	provided = _resolve_token(X_Admin_Token, authorization)
	if provided != token:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


async def require_metrics_access(
	X_Admin_Token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	if settings.obs_metrics_public:
		return
	await require_admin(X_Admin_Token=X_Admin_Token, authorization=authorization)
