import aiosqlite

from termlens.infra.config import DB_PATH, ensure_data_dir

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS factions (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL UNIQUE,
    slug            TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS canonical_entities (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL,
    category        TEXT NOT NULL,
    faction_id      INTEGER REFERENCES factions(id) ON DELETE CASCADE,
    UNIQUE(name, category, faction_id)
);

CREATE TABLE IF NOT EXISTS alias_mappings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    alias           TEXT NOT NULL,
    canonical_name  TEXT NOT NULL,
    entity_type     TEXT NOT NULL,
    faction_id      TEXT NOT NULL DEFAULT '',
    usage_count     INTEGER NOT NULL DEFAULT 1,
    created_at      TEXT DEFAULT (datetime('now')),
    UNIQUE(alias, entity_type, faction_id)
);

CREATE TABLE IF NOT EXISTS feedback_items (
    id                  TEXT PRIMARY KEY,
    original_token      TEXT NOT NULL,
    entity_type         TEXT NOT NULL,
    faction_id          TEXT,
    player_index        INTEGER,
    transcript_context  TEXT,
    video_id            TEXT,
    video_timestamp     REAL,
    confidence_score    REAL NOT NULL DEFAULT 0,
    suggestions         TEXT NOT NULL DEFAULT '[]',
    status              TEXT NOT NULL DEFAULT 'pending',
    resolved_to         TEXT,
    created_at          TEXT DEFAULT (datetime('now')),
    updated_at          TEXT DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_entities_category ON canonical_entities(category);
CREATE INDEX IF NOT EXISTS idx_alias_lookup ON alias_mappings(alias);
CREATE INDEX IF NOT EXISTS idx_feedback_status ON feedback_items(status, created_at);
"""


async def get_connection() -> aiosqlite.Connection:
    conn = await aiosqlite.connect(str(DB_PATH))
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = aiosqlite.Row
    return conn


async def init_db() -> None:
    ensure_data_dir()
    conn = await get_connection()
    try:
        await conn.executescript(_SCHEMA_SQL)
        # Migration: capture-side fields added to feedback_items
        for col, col_type in [("video_id", "TEXT"), ("video_timestamp", "REAL")]:
            try:
                await conn.execute(
                    f"ALTER TABLE feedback_items ADD COLUMN {col} {col_type}"
                )
            except aiosqlite.OperationalError:
                pass  # Column already exists
        await conn.commit()
    finally:
        await conn.close()
