"""Exact-match shortcuts tried before fuzzy scoring.

Lookup order, first hit wins:
  1. learned alias scoped to each caller faction     (USER_ALIAS_CONFIDENCE)
  2. learned faction-agnostic alias                   (USER_ALIAS_CONFIDENCE)
  3. built-in alias table                             (BUILTIN_ALIAS_CONFIDENCE)
  4. curated caption mishearings, by list position    (PHONETIC_HIGH/LOW)

A miss is None, never an exception. A failing alias store only skips tiers
1-2; the static tables still answer.
"""

from __future__ import annotations

import logging
from typing import Protocol

from termlens.db import alias_mapping_store
from termlens.infra import config
from termlens.infra.errors import BackingStoreUnavailable
from termlens.models.terms import AliasMapping, Category, MatchResult
from termlens.utils.game_terms import BUILTIN_ALIASES, PHONETIC_INDEX
from termlens.utils.normalizer import normalize

logger = logging.getLogger(__name__)

# Variants at positions 0-2 are the common mishearings
PHONETIC_HIGH_POSITIONS = 3


class AliasRepository(Protocol):
    """Storage for learned aliases. alias_mapping_store satisfies it."""

    async def find(
        self,
        alias: str,
        entity_type: Category | None = None,
        faction_id: str | None = None,
    ) -> AliasMapping | None: ...

    async def upsert(
        self,
        alias: str,
        canonical_name: str,
        entity_type: Category,
        faction_id: str | None = None,
    ) -> AliasMapping: ...

    async def increment_usage(self, mapping_id: int) -> None: ...


class AliasResolver:
    def __init__(self, repository: AliasRepository | None = None) -> None:
        self._repository = repository if repository is not None else alias_mapping_store

    async def lookup_exact(
        self,
        token: str,
        entity_type: Category | None = None,
        faction_id: str | None = None,
        faction_ids: list[str] | None = None,
    ) -> MatchResult | None:
        """First hit across the tiers. Each faction scope is tried, in order,
        before the faction-agnostic one."""
        key = normalize(token)
        if not key:
            return None

        scopes: list[str | None] = []
        for faction in [faction_id, *(faction_ids or [])]:
            scope = normalize(faction)
            if scope and scope not in scopes:
                scopes.append(scope)
        scopes.append(None)
        for scope in scopes:
            mapping = await self._find_learned(key, entity_type, scope)
            if mapping is not None:
                return MatchResult(
                    name=mapping.canonical_name,
                    category=mapping.entity_type,
                    faction=mapping.faction_id,
                    confidence=config.USER_ALIAS_CONFIDENCE,
                    source="alias",
                    alias_id=mapping.id,
                )

        builtin = BUILTIN_ALIASES.get(key)
        if builtin is not None and _category_allowed(builtin[1], entity_type):
            return MatchResult(
                name=builtin[0],
                category=builtin[1],
                confidence=config.BUILTIN_ALIAS_CONFIDENCE,
                source="builtin",
            )

        phonetic = PHONETIC_INDEX.get(key)
        if phonetic is not None and _category_allowed(phonetic[1], entity_type):
            canonical, category, position = phonetic
            confidence = (
                config.PHONETIC_HIGH_CONFIDENCE
                if position < PHONETIC_HIGH_POSITIONS
                else config.PHONETIC_LOW_CONFIDENCE
            )
            return MatchResult(
                name=canonical,
                category=category,
                confidence=confidence,
                source="phonetic",
            )

        return None

    async def record_use(self, match: MatchResult) -> None:
        """Bump usage_count of the learned alias behind match, best-effort."""
        if match.alias_id is None:
            return
        try:
            await self._repository.increment_usage(match.alias_id)
        except BackingStoreUnavailable:
            logger.warning("Could not record use of alias %d", match.alias_id, exc_info=True)

    async def _find_learned(
        self,
        key: str,
        entity_type: Category | None,
        faction_id: str | None,
    ) -> AliasMapping | None:
        try:
            return await self._repository.find(key, entity_type, faction_id)
        except BackingStoreUnavailable:
            logger.warning(
                "Alias store unavailable, skipping learned aliases for %r", key,
                exc_info=True,
            )
            return None


def _category_allowed(category: Category, entity_type: Category | None) -> bool:
    return entity_type is None or category == entity_type
