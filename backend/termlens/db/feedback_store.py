"""CRUD operations for the feedback_items table."""

from __future__ import annotations

import json
import uuid

from termlens.db.sqlite_db import get_connection
from termlens.models.terms import Category, FeedbackItem, FeedbackStatus, Suggestion


def _row_to_item(row) -> FeedbackItem:
    return FeedbackItem(
        id=row["id"],
        original_token=row["original_token"],
        entity_type=Category(row["entity_type"]),
        faction_id=row["faction_id"],
        player_index=row["player_index"],
        transcript_context=row["transcript_context"],
        video_id=row["video_id"],
        video_timestamp=row["video_timestamp"],
        confidence_score=row["confidence_score"],
        suggestions=[Suggestion(**s) for s in json.loads(row["suggestions"] or "[]")],
        status=FeedbackStatus(row["status"]),
        resolved_to=row["resolved_to"],
        created_at=row["created_at"],
    )


async def insert_feedback(
    original_token: str,
    entity_type: Category,
    confidence_score: float,
    suggestions: list[Suggestion],
    faction_id: str | None = None,
    player_index: int | None = None,
    transcript_context: str | None = None,
    video_id: str | None = None,
    video_timestamp: float | None = None,
) -> FeedbackItem:
    item_id = str(uuid.uuid4())
    conn = await get_connection()
    try:
        await conn.execute(
            """
            INSERT INTO feedback_items
                (id, original_token, entity_type, faction_id, player_index,
                 transcript_context, video_id, video_timestamp,
                 confidence_score, suggestions)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                item_id,
                original_token,
                entity_type.value,
                faction_id,
                player_index,
                transcript_context,
                video_id,
                video_timestamp,
                confidence_score,
                json.dumps([s.model_dump() for s in suggestions], ensure_ascii=False),
            ),
        )
        await conn.commit()
        cursor = await conn.execute(
            "SELECT * FROM feedback_items WHERE id = ?", (item_id,)
        )
        row = await cursor.fetchone()
        return _row_to_item(row)
    finally:
        await conn.close()


async def get_feedback(item_id: str) -> FeedbackItem | None:
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            "SELECT * FROM feedback_items WHERE id = ?", (item_id,)
        )
        row = await cursor.fetchone()
        return _row_to_item(row) if row else None
    finally:
        await conn.close()


async def list_feedback(status: FeedbackStatus | None = None) -> list[FeedbackItem]:
    """List feedback items, oldest first so a review queue drains in order."""
    conn = await get_connection()
    try:
        if status is None:
            cursor = await conn.execute(
                "SELECT * FROM feedback_items ORDER BY created_at, rowid"
            )
        else:
            cursor = await conn.execute(
                "SELECT * FROM feedback_items WHERE status = ? ORDER BY created_at, rowid",
                (status.value,),
            )
        rows = await cursor.fetchall()
        return [_row_to_item(row) for row in rows]
    finally:
        await conn.close()


async def count_by_status(status: FeedbackStatus) -> int:
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            "SELECT COUNT(*) FROM feedback_items WHERE status = ?", (status.value,)
        )
        row = await cursor.fetchone()
        return row[0]
    finally:
        await conn.close()


async def transition(
    item_id: str,
    status: FeedbackStatus,
    resolved_to: str | None = None,
) -> bool:
    """Move a pending item to `status`. Returns False if it was not pending."""
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            """
            UPDATE feedback_items
            SET status = ?, resolved_to = ?, updated_at = datetime('now')
            WHERE id = ? AND status = 'pending'
            """,
            (status.value, resolved_to, item_id),
        )
        await conn.commit()
        return cursor.rowcount > 0
    finally:
        await conn.close()
