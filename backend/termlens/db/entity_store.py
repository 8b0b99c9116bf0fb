"""Read access to the canonical entity store (factions + canonical_entities).

The tables are filled by the external ingestion pipeline (or the seed
script); the engine only ever reads them.
"""

from __future__ import annotations

import sqlite3

from termlens.db.sqlite_db import get_connection
from termlens.infra.errors import BackingStoreUnavailable
from termlens.models.terms import CandidateEntity, Category


def _faction_clause(factions: list[str]) -> tuple[str, list[str]]:
    """Build the faction filter. Core entities (no faction) always pass."""
    wanted = [f.strip().lower().replace("'", "") for f in factions if f and f.strip()]
    if not wanted:
        return "", []
    parts = []
    params: list[str] = []
    for faction in wanted:
        # names and slugs are compared with apostrophes removed on both sides
        parts.append(
            "(REPLACE(LOWER(f.name), '''', '') LIKE ?"
            " OR REPLACE(f.slug, '''', '') = ?)"
        )
        params.extend([f"%{faction}%", faction])
    return f" AND (e.faction_id IS NULL OR {' OR '.join(parts)})", params


async def load_candidates(
    categories: list[Category],
    factions: list[str],
) -> list[CandidateEntity]:
    """Fetch every canonical entity in the given categories and factions."""
    if not categories:
        return []
    placeholders = ",".join("?" for _ in categories)
    faction_sql, faction_params = _faction_clause(factions)
    try:
        conn = await get_connection()
        try:
            cursor = await conn.execute(
                f"""
                SELECT e.name, e.category, f.name AS faction
                FROM canonical_entities e
                LEFT JOIN factions f ON f.id = e.faction_id
                WHERE e.category IN ({placeholders}){faction_sql}
                ORDER BY e.name, e.category
                """,
                [c.value for c in categories] + faction_params,
            )
            rows = await cursor.fetchall()
        finally:
            await conn.close()
    except (sqlite3.Error, OSError) as e:
        raise BackingStoreUnavailable(f"Failed to load candidates: {e}") from e

    return [
        CandidateEntity(
            name=row["name"],
            category=Category(row["category"]),
            faction=row["faction"],
        )
        for row in rows
    ]


async def fetch_names_for_category(
    category: Category,
    faction: str | None = None,
) -> list[str]:
    """Distinct canonical names for one category, alphabetical."""
    candidates = await load_candidates([category], [faction] if faction else [])
    return sorted({c.name for c in candidates}, key=str.casefold)


async def upsert_faction(name: str, slug: str) -> int:
    conn = await get_connection()
    try:
        await conn.execute(
            """
            INSERT INTO factions (name, slug) VALUES (?, ?)
            ON CONFLICT(name) DO UPDATE SET slug = excluded.slug
            """,
            (name, slug),
        )
        await conn.commit()
        cursor = await conn.execute("SELECT id FROM factions WHERE name = ?", (name,))
        row = await cursor.fetchone()
        return row["id"]
    finally:
        await conn.close()


async def insert_entities(entities: list[CandidateEntity]) -> int:
    """Insert canonical entities, skipping ones already present. Returns inserted count."""
    conn = await get_connection()
    try:
        cursor = await conn.execute("SELECT id, name FROM factions")
        faction_ids = {row["name"]: row["id"] for row in await cursor.fetchall()}
        inserted = 0
        for entity in entities:
            faction_id = faction_ids.get(entity.faction) if entity.faction else None
            exists = await conn.execute(
                """
                SELECT 1 FROM canonical_entities
                WHERE name = ? AND category = ? AND faction_id IS ?
                """,
                (entity.name, entity.category.value, faction_id),
            )
            if await exists.fetchone():
                continue
            await conn.execute(
                "INSERT INTO canonical_entities (name, category, faction_id) VALUES (?, ?, ?)",
                (entity.name, entity.category.value, faction_id),
            )
            inserted += 1
        await conn.commit()
        return inserted
    finally:
        await conn.close()
