"""Feedback review endpoints: queue, resolve and ignore low-confidence terms."""

from fastapi import APIRouter, HTTPException

from termlens.api.schemas.terms import FeedbackCreateRequest, FeedbackResolveRequest
from termlens.infra.errors import FeedbackNotFoundError, FeedbackStateError, InputError
from termlens.services import feedback_service

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


def _raise_http(e: Exception):
    if isinstance(e, FeedbackNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, FeedbackStateError):
        raise HTTPException(status_code=409, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))


@router.post("", status_code=201)
async def create_feedback(req: FeedbackCreateRequest):
    try:
        item = await feedback_service.record_feedback(
            req.original_token,
            req.entity_type,
            req.suggestions,
            req.confidence_score,
            faction_id=req.faction_id,
            player_index=req.player_index,
            transcript_context=req.transcript_context,
            video_id=req.video_id,
            video_timestamp=req.video_timestamp,
        )
    except InputError as e:
        _raise_http(e)
    return item.model_dump(by_alias=True, mode="json")


@router.get("")
async def list_feedback(status: str | None = None):
    try:
        items = await feedback_service.list_feedback(status)
    except InputError as e:
        _raise_http(e)
    return {"items": [i.model_dump(by_alias=True, mode="json") for i in items]}


@router.get("/pending-count")
async def pending_count():
    return {"count": await feedback_service.pending_count()}


@router.get("/{item_id}")
async def get_feedback(item_id: str):
    try:
        item = await feedback_service.get_feedback(item_id)
    except FeedbackNotFoundError as e:
        _raise_http(e)
    return item.model_dump(by_alias=True, mode="json")


@router.post("/{item_id}/resolve")
async def resolve_feedback(item_id: str, req: FeedbackResolveRequest):
    """Resolve a pending item; persistMapping teaches the alias for next time."""
    try:
        item = await feedback_service.resolve_feedback(
            item_id, req.canonical_name, persist_mapping=req.persist_mapping
        )
    except (InputError, FeedbackNotFoundError, FeedbackStateError) as e:
        _raise_http(e)
    return item.model_dump(by_alias=True, mode="json")


@router.post("/{item_id}/ignore")
async def ignore_feedback(item_id: str):
    try:
        item = await feedback_service.ignore_feedback(item_id)
    except (FeedbackNotFoundError, FeedbackStateError) as e:
        _raise_http(e)
    return item.model_dump(by_alias=True, mode="json")
