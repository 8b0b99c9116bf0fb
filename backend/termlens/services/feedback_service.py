"""Feedback lifecycle: low-confidence resolutions queued for human review.

pending -> resolved | ignored. Resolving with persist_mapping stores a learned
alias so the same mishearing resolves through the alias tier next time.
Persisting the alias is best-effort: a failed write is logged and the item
still ends up resolved.
"""

from __future__ import annotations

import logging
import sqlite3

from termlens.db import alias_mapping_store, feedback_store
from termlens.infra import config
from termlens.infra.errors import (
    BackingStoreUnavailable,
    FeedbackNotFoundError,
    FeedbackStateError,
    InputError,
)
from termlens.models.terms import (
    Category,
    FeedbackItem,
    FeedbackStatus,
    Suggestion,
    ValidateResult,
    parse_category,
)
from termlens.utils.normalizer import normalize

logger = logging.getLogger(__name__)


async def record_feedback(
    token: str,
    entity_type: str | Category,
    suggestions: list[Suggestion] | None = None,
    confidence: float = 0.0,
    *,
    faction_id: str | None = None,
    player_index: int | None = None,
    transcript_context: str | None = None,
    video_id: str | None = None,
    video_timestamp: float | None = None,
) -> FeedbackItem:
    """File a pending feedback item for a token that did not resolve confidently."""
    if not isinstance(token, str) or not normalize(token):
        raise InputError("originalToken is required")
    if not 0.0 <= confidence <= 1.0:
        raise InputError("confidenceScore must be between 0 and 1")
    item = await feedback_store.insert_feedback(
        original_token=token,
        entity_type=parse_category(entity_type),
        confidence_score=confidence,
        suggestions=suggestions or [],
        faction_id=faction_id,
        player_index=player_index,
        transcript_context=transcript_context,
        video_id=video_id,
        video_timestamp=video_timestamp,
    )
    logger.info("Recorded feedback %s for %r (%.2f)", item.id, token, confidence)
    return item


async def get_feedback(item_id: str) -> FeedbackItem:
    item = await feedback_store.get_feedback(item_id)
    if item is None:
        raise FeedbackNotFoundError(f"Feedback item not found: {item_id}")
    return item


async def list_feedback(status: str | None = None) -> list[FeedbackItem]:
    if status is None:
        return await feedback_store.list_feedback()
    try:
        wanted = FeedbackStatus(status.lower())
    except ValueError:
        valid = ", ".join(s.value for s in FeedbackStatus)
        raise InputError(f"Invalid status. Must be one of: {valid}") from None
    return await feedback_store.list_feedback(wanted)


async def pending_count() -> int:
    return await feedback_store.count_by_status(FeedbackStatus.PENDING)


async def resolve_feedback(
    item_id: str,
    canonical_name: str,
    persist_mapping: bool = True,
) -> FeedbackItem:
    """Mark a pending item resolved to canonical_name, optionally learning the alias."""
    if not isinstance(canonical_name, str) or not canonical_name.strip():
        raise InputError("canonicalName is required")
    canonical_name = canonical_name.strip()
    item = await get_feedback(item_id)
    if not await feedback_store.transition(item_id, FeedbackStatus.RESOLVED, canonical_name):
        raise FeedbackStateError(f"Feedback item {item_id} is already {item.status.value}")
    logger.info("Resolved feedback %s: %r -> %r", item_id, item.original_token, canonical_name)

    if persist_mapping:
        await _persist_mapping(item, canonical_name)
    return await get_feedback(item_id)


async def ignore_feedback(item_id: str) -> FeedbackItem:
    item = await get_feedback(item_id)
    if not await feedback_store.transition(item_id, FeedbackStatus.IGNORED):
        raise FeedbackStateError(f"Feedback item {item_id} is already {item.status.value}")
    logger.info("Ignored feedback %s (%r)", item_id, item.original_token)
    return await get_feedback(item_id)


async def record_low_confidence(
    results: list[ValidateResult],
    categories: list[Category],
    faction_id: str | None = None,
) -> list[FeedbackItem]:
    """File feedback for each validate result under CATEGORIZATION_CONFIDENCE.

    Best-effort: store failures are logged and the item is skipped.
    """
    fallback_type = categories[0] if categories else Category.UNIT
    recorded = []
    for result in results:
        if result.confidence >= config.CATEGORIZATION_CONFIDENCE or not normalize(result.input):
            continue
        suggestions = []
        if result.match is not None:
            suggestions.append(Suggestion(name=result.match, confidence=result.confidence))
        suggestions.extend(Suggestion(name=a.name, confidence=a.confidence) for a in result.alternates)
        try:
            item = await record_feedback(
                result.input,
                result.category or fallback_type,
                suggestions,
                result.confidence,
                faction_id=faction_id,
            )
        except (sqlite3.Error, OSError):
            logger.warning("Could not record feedback for %r", result.input, exc_info=True)
            continue
        recorded.append(item)
    return recorded


async def _persist_mapping(item: FeedbackItem, canonical_name: str) -> None:
    try:
        mapping = await alias_mapping_store.upsert(
            normalize(item.original_token),
            canonical_name,
            item.entity_type,
            item.faction_id,
        )
    except BackingStoreUnavailable:
        logger.warning(
            "Could not persist alias %r -> %r for feedback %s",
            item.original_token, canonical_name, item.id,
            exc_info=True,
        )
        return
    logger.info(
        "Learned alias %r -> %r (%s, used %d times)",
        mapping.alias, canonical_name, mapping.entity_type.value, mapping.usage_count,
    )
