"""Shared test fixtures for backend tests."""

import aiosqlite
import pytest
import pytest_asyncio

from unittest.mock import patch

from termlens.db.sqlite_db import _SCHEMA_SQL
from termlens.infra.errors import BackingStoreUnavailable
from termlens.models.terms import AliasMapping, CandidateEntity, Category
from termlens.services.candidate_index import CandidateIndex
from termlens.services.term_resolver import reset_term_resolver

_PATCHED_STORES = (
    "termlens.db.entity_store",
    "termlens.db.alias_mapping_store",
    "termlens.db.feedback_store",
)


@pytest_asyncio.fixture
async def memory_db():
    """Create an in-memory SQLite database with full schema."""
    conn = await aiosqlite.connect(":memory:")
    await conn.execute("PRAGMA foreign_keys=ON")
    conn.row_factory = aiosqlite.Row
    await conn.executescript(_SCHEMA_SQL)
    await conn.commit()
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def mock_get_connection(memory_db):
    """Patch get_connection in every store to return a shared in-memory DB.

    We wrap the real connection so close() is a no-op during tests
    (the fixture manages the lifecycle).
    """

    class _NonClosingConnection:
        """Proxy that prevents the stores from closing the shared conn."""

        def __init__(self, conn):
            self._conn = conn

        def __getattr__(self, name):
            return getattr(self._conn, name)

        async def close(self):
            pass  # no-op

    async def _factory():
        return _NonClosingConnection(memory_db)

    patchers = [patch(f"{module}.get_connection", _factory) for module in _PATCHED_STORES]
    for p in patchers:
        p.start()
    try:
        yield memory_db
    finally:
        for p in reversed(patchers):
            p.stop()


# ── Candidate data ────────────────────────────────

SAMPLE_CANDIDATES = [
    CandidateEntity(name="Guilliman", category=Category.UNIT, faction="Adeptus Astartes"),
    CandidateEntity(name="Terminator Squad", category=Category.UNIT, faction="Adeptus Astartes"),
    CandidateEntity(name="Intercessor Squad", category=Category.UNIT, faction="Adeptus Astartes"),
    CandidateEntity(name="Kabalite Warriors", category=Category.UNIT, faction="Drukhari"),
    CandidateEntity(name="Wyches", category=Category.UNIT, faction="Drukhari"),
    CandidateEntity(name="Kabalite Cartel", category=Category.DETACHMENT, faction="Drukhari"),
    CandidateEntity(name="Mont'ka", category=Category.DETACHMENT, faction="T'au Empire"),
    CandidateEntity(name="Cortex", category=Category.ENHANCEMENT, faction="Adeptus Mechanicus"),
    CandidateEntity(name="Fire Overwatch", category=Category.STRATAGEM),
    CandidateEntity(name="Command Re-roll", category=Category.STRATAGEM),
    CandidateEntity(name="Drukhari", category=Category.FACTION),
    CandidateEntity(name="T'au Empire", category=Category.FACTION),
    CandidateEntity(name="Dreadnought", category=Category.KEYWORD),
]


def make_fetcher(candidates, calls=None):
    """Async fetcher over a fixed list, recording each (categories, factions) call."""

    async def _fetch(categories, factions):
        if calls is not None:
            calls.append((list(categories), list(factions)))
        wanted = [f.lower() for f in factions]
        return [
            c for c in candidates
            if c.category in categories
            and (not wanted or c.faction is None or any(w in c.faction.lower() for w in wanted))
        ]

    return _fetch


@pytest.fixture
def fetcher_factory():
    return make_fetcher


@pytest.fixture
def sample_candidates():
    return list(SAMPLE_CANDIDATES)


@pytest.fixture
def static_index(sample_candidates):
    return CandidateIndex(fetcher=make_fetcher(sample_candidates))


@pytest.fixture(autouse=True)
def _reset_resolver():
    yield
    reset_term_resolver(None)


# ── Alias repository double ───────────────────────


class FakeAliasRepository:
    """In-memory AliasRepository keyed like the alias_mappings table."""

    def __init__(self, mappings=()):
        self.rows: dict[tuple[str, str, str], AliasMapping] = {}
        self.increments: list[int] = []
        self.fail = False
        for mapping in mappings:
            self.add(mapping)

    def add(self, mapping):
        mapping.id = mapping.id or len(self.rows) + 1
        key = (mapping.alias, mapping.entity_type.value, mapping.faction_id or "")
        self.rows[key] = mapping

    async def find(self, alias, entity_type=None, faction_id=None):
        if self.fail:
            raise BackingStoreUnavailable("store down")
        for (key_alias, key_type, key_faction), mapping in self.rows.items():
            if key_alias != alias or key_faction != (faction_id or ""):
                continue
            if entity_type is not None and key_type != entity_type.value:
                continue
            return mapping
        return None

    async def upsert(self, alias, canonical_name, entity_type, faction_id=None):
        mapping = AliasMapping(
            alias=alias,
            canonical_name=canonical_name,
            entity_type=entity_type,
            faction_id=faction_id,
        )
        self.add(mapping)
        return mapping

    async def increment_usage(self, mapping_id):
        self.increments.append(mapping_id)


@pytest.fixture
def fake_aliases():
    return FakeAliasRepository()
