"""Research article view counters and PDF document delivery."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response, StreamingResponse

from contentsite.api.deps import get_http_client, get_repository, get_view_counter
from contentsite.domain.content.documents import deliver_document, find_document_url
from contentsite.domain.content.errors import ValidationError
from contentsite.domain.content.repository import ContentRepository
from contentsite.domain.content.views import ViewCounter
from contentsite.settings import settings

router = APIRouter(tags=["research"])


@router.get("/api/research/views")
async def get_views_endpoint(
	slug: Optional[str] = Query(default=None),
	counter: ViewCounter = Depends(get_view_counter),
) -> dict[str, Any]:
	if not slug:
		raise ValidationError("slug is required")
	return {"slug": slug, "views": await counter.get(slug)}


@router.post("/api/research/views")
async def increment_views_endpoint(
	request: Request,
	counter: ViewCounter = Depends(get_view_counter),
) -> dict[str, Any]:
	try:
		payload = await request.json()
	except ValueError:
		payload = None
	slug = payload.get("slug") if isinstance(payload, dict) else None
	if not slug or not isinstance(slug, str):
		raise ValidationError("slug is required")
	views = await counter.increment(slug)
	return {"slug": slug, "views": views, "success": True}


@router.get("/research/files/{slug}")
async def research_file_endpoint(
	slug: str,
	repository: ContentRepository = Depends(get_repository),
	http: httpx.AsyncClient = Depends(get_http_client),
) -> Response:
	url = await find_document_url(repository, slug)
	delivery = await deliver_document(url, slug, http, trusted_hosts=settings.pdf_trusted_hosts)
	if delivery.streamed:
		return StreamingResponse(delivery.body, headers=delivery.headers, media_type="application/pdf")
	return RedirectResponse(delivery.redirect_to or url)
