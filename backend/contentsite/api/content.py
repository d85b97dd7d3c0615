"""Public read endpoints backed by the store with file fallback."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from contentsite.api.deps import get_repository
from contentsite.domain.content.collections import ANNOUNCEMENTS
from contentsite.domain.content.errors import RecordNotFoundError
from contentsite.domain.content.repository import ContentRepository

router = APIRouter(tags=["content"])


@router.get("/api/content/team")
async def team_endpoint(repository: ContentRepository = Depends(get_repository)) -> list[dict[str, Any]]:
	return repository.get_team()


@router.get("/api/content/site-settings")
async def site_settings_endpoint(repository: ContentRepository = Depends(get_repository)) -> dict[str, Any]:
	return repository.get_site_settings()


@router.get("/api/content/{collection}")
async def collection_endpoint(
	collection: str,
	repository: ContentRepository = Depends(get_repository),
) -> list[dict[str, Any]]:
	return await repository.get_all(collection)


@router.get("/api/content/{collection}/{identifier}")
async def record_endpoint(
	collection: str,
	identifier: str,
	repository: ContentRepository = Depends(get_repository),
) -> dict[str, Any]:
	record = await repository.get_one(collection, identifier)
	if record is None:
		raise RecordNotFoundError(f"{collection} record not found: {identifier}")
	return record


@router.get("/api/announcements")
async def announcements_endpoint(repository: ContentRepository = Depends(get_repository)) -> list[dict[str, Any]]:
	return await repository.get_all(ANNOUNCEMENTS.name)
