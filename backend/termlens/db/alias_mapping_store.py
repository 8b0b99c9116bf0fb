"""CRUD operations for the alias_mappings table (learned user aliases).

Aliases and faction ids are stored normalized. The faction-agnostic scope is
stored as '' so UNIQUE(alias, entity_type, faction_id) holds for it too.
"""

from __future__ import annotations

import sqlite3

from termlens.db.sqlite_db import get_connection
from termlens.infra.errors import BackingStoreUnavailable
from termlens.models.terms import AliasMapping, Category
from termlens.utils.normalizer import normalize


def _scope(faction_id: str | None) -> str:
    return normalize(faction_id) if faction_id else ""


def _row_to_mapping(row) -> AliasMapping:
    return AliasMapping(
        id=row["id"],
        alias=row["alias"],
        canonical_name=row["canonical_name"],
        entity_type=Category(row["entity_type"]),
        faction_id=row["faction_id"] or None,
        created_at=row["created_at"],
        usage_count=row["usage_count"],
    )


async def find(
    alias: str,
    entity_type: Category | None = None,
    faction_id: str | None = None,
) -> AliasMapping | None:
    """Exact lookup within one faction scope (None = faction-agnostic).

    Without an entity_type the most used mapping for the alias wins.
    """
    sql = "SELECT * FROM alias_mappings WHERE alias = ? AND faction_id = ?"
    params: list = [normalize(alias), _scope(faction_id)]
    if entity_type is not None:
        sql += " AND entity_type = ?"
        params.append(entity_type.value)
    sql += " ORDER BY usage_count DESC, id LIMIT 1"
    try:
        conn = await get_connection()
        try:
            cursor = await conn.execute(sql, params)
            row = await cursor.fetchone()
        finally:
            await conn.close()
    except (sqlite3.Error, OSError) as e:
        raise BackingStoreUnavailable(f"Alias lookup failed: {e}") from e
    return _row_to_mapping(row) if row else None


async def upsert(
    alias: str,
    canonical_name: str,
    entity_type: Category,
    faction_id: str | None = None,
) -> AliasMapping:
    """Insert a mapping, or bump usage_count and retarget it if the key exists."""
    key = (normalize(alias), entity_type.value, _scope(faction_id))
    try:
        conn = await get_connection()
        try:
            await conn.execute(
                """
                INSERT INTO alias_mappings (alias, canonical_name, entity_type, faction_id)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(alias, entity_type, faction_id) DO UPDATE SET
                    canonical_name = excluded.canonical_name,
                    usage_count = usage_count + 1
                """,
                (key[0], canonical_name, key[1], key[2]),
            )
            await conn.commit()
            cursor = await conn.execute(
                """
                SELECT * FROM alias_mappings
                WHERE alias = ? AND entity_type = ? AND faction_id = ?
                """,
                key,
            )
            row = await cursor.fetchone()
        finally:
            await conn.close()
    except (sqlite3.Error, OSError) as e:
        raise BackingStoreUnavailable(f"Alias upsert failed: {e}") from e
    return _row_to_mapping(row)


async def increment_usage(mapping_id: int) -> None:
    try:
        conn = await get_connection()
        try:
            await conn.execute(
                "UPDATE alias_mappings SET usage_count = usage_count + 1 WHERE id = ?",
                (mapping_id,),
            )
            await conn.commit()
        finally:
            await conn.close()
    except (sqlite3.Error, OSError) as e:
        raise BackingStoreUnavailable(f"Alias usage update failed: {e}") from e


async def list_all() -> list[AliasMapping]:
    """All mappings, most used first."""
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            "SELECT * FROM alias_mappings ORDER BY usage_count DESC, alias, id"
        )
        rows = await cursor.fetchall()
        return [_row_to_mapping(row) for row in rows]
    finally:
        await conn.close()


async def delete(mapping_id: int) -> bool:
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            "DELETE FROM alias_mappings WHERE id = ?", (mapping_id,)
        )
        await conn.commit()
        return cursor.rowcount > 0
    finally:
        await conn.close()


async def import_many(mappings: list[AliasMapping]) -> int:
    """Merge mappings in, keeping existing keys untouched. Returns inserted count."""
    conn = await get_connection()
    try:
        imported = 0
        for mapping in mappings:
            if not normalize(mapping.alias):
                continue
            cursor = await conn.execute(
                """
                INSERT INTO alias_mappings
                    (alias, canonical_name, entity_type, faction_id, usage_count)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(alias, entity_type, faction_id) DO NOTHING
                """,
                (
                    normalize(mapping.alias),
                    mapping.canonical_name,
                    mapping.entity_type.value,
                    _scope(mapping.faction_id),
                    max(mapping.usage_count, 1),
                ),
            )
            imported += cursor.rowcount
        await conn.commit()
        return imported
    finally:
        await conn.close()
