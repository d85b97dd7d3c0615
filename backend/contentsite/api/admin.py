"""Admin CRUD endpoints over content collections plus the file-to-store migration."""

from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from contentsite.api.deps import get_file_reader, get_store, require_admin
from contentsite.domain.content.admin import CollectionAdmin, parse_identifiers
from contentsite.domain.content.collections import get_collection
from contentsite.domain.content.errors import ValidationError
from contentsite.domain.content.files import FileReader
from contentsite.domain.content.migration import migrate_content
from contentsite.infra.redis import StoreClient
from contentsite.settings import is_true

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _admin(collection: str, store: StoreClient) -> CollectionAdmin:
	return CollectionAdmin(store, get_collection(collection))


async def _read_json(request: Request) -> Any:
	body = await request.body()
	if not body:
		raise ValidationError("request body is required")
	try:
		return json.loads(body)
	except ValueError as exc:
		raise ValidationError("request body is not valid JSON") from exc


@router.post("/migrate")
async def migrate_endpoint(
	force: Optional[str] = Query(default=None),
	collections: Optional[str] = Query(default=None),
	store: StoreClient = Depends(get_store),
	reader: FileReader = Depends(get_file_reader),
) -> JSONResponse:
	names = parse_identifiers(collections) or None
	if names:
		for name in names:
			get_collection(name)
	report = await migrate_content(store, reader, names, force=is_true(force))
	if report.ok:
		status_code = status.HTTP_200_OK
	elif report.partial:
		status_code = status.HTTP_207_MULTI_STATUS
	else:
		status_code = status.HTTP_503_SERVICE_UNAVAILABLE
	return JSONResponse(content=report.as_dict(), status_code=status_code)


@router.get("/{collection}")
async def list_or_get_endpoint(
	collection: str,
	record_id: Optional[str] = Query(default=None, alias="id"),
	slug: Optional[str] = Query(default=None),
	store: StoreClient = Depends(get_store),
) -> Any:
	admin = _admin(collection, store)
	identifier = slug or record_id
	if identifier:
		return await admin.get(identifier)
	return await admin.list()


@router.post("/{collection}")
async def create_endpoint(
	collection: str,
	request: Request,
	store: StoreClient = Depends(get_store),
) -> dict[str, Any]:
	admin = _admin(collection, store)
	payload = await _read_json(request)
	if isinstance(payload, list):
		records = await admin.replace_all(payload)
		return {"success": True, collection: records}
	result = await admin.create(payload)
	return {"success": True, "record": result.record, "total": result.total}


@router.put("/{collection}")
async def update_endpoint(
	collection: str,
	request: Request,
	store: StoreClient = Depends(get_store),
) -> dict[str, Any]:
	admin = _admin(collection, store)
	result = await admin.update(await _read_json(request))
	return {"success": True, "record": result.record, "created": result.created}


@router.delete("/{collection}")
async def delete_endpoint(
	collection: str,
	record_id: Optional[str] = Query(default=None, alias="id"),
	slug: Optional[str] = Query(default=None),
	ids: Optional[str] = Query(default=None),
	slugs: Optional[str] = Query(default=None),
	store: StoreClient = Depends(get_store),
) -> dict[str, Any]:
	admin = _admin(collection, store)
	identifiers = parse_identifiers(ids) + parse_identifiers(slugs)
	result = await admin.delete(identifier=slug or record_id, identifiers=identifiers)
	return {
		"success": True,
		"deleted_count": result.deleted_count,
		"deleted": result.deleted,
		"remaining": result.remaining,
	}
