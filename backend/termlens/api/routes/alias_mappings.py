"""Learned alias management: list, delete, export and import."""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from termlens.api.schemas.terms import AliasImportRequest
from termlens.db import alias_mapping_store

router = APIRouter(prefix="/api/alias-mappings", tags=["alias-mappings"])

_EXPORT_VERSION = 1


@router.get("")
async def list_mappings():
    mappings = await alias_mapping_store.list_all()
    return {"mappings": [m.model_dump(by_alias=True, mode="json") for m in mappings]}


@router.delete("/{mapping_id}")
async def delete_mapping(mapping_id: int):
    if not await alias_mapping_store.delete(mapping_id):
        raise HTTPException(status_code=404, detail=f"Alias mapping not found: {mapping_id}")
    return {"ok": True}


@router.get("/export")
async def export_mappings():
    mappings = await alias_mapping_store.list_all()
    return {
        "version": _EXPORT_VERSION,
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "mappings": [m.model_dump(by_alias=True, mode="json") for m in mappings],
    }


@router.post("/import")
async def import_mappings(req: AliasImportRequest):
    """Merge exported mappings in; keys that already exist are left alone."""
    imported = await alias_mapping_store.import_many(req.mappings)
    return {
        "imported": imported,
        "skipped": len(req.mappings) - imported,
    }
