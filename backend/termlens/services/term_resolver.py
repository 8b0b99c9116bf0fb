"""Resolve noisy caption tokens to canonical, categorized game entities.

Orchestrates the alias tiers, the fuzzy scorer and the candidate index:

  find_best_matches  one token against an explicit candidate list
  validate_terms     a batch of tokens against a category/faction scope
  resolve_term       one token across all categories, re-ranked by faction hints

Only learned-alias usage counts are written; everything else is read-only.
"""

from __future__ import annotations

import logging

from termlens.infra import config
from termlens.infra.errors import InputError
from termlens.models.terms import (
    Alternate,
    CandidateEntity,
    Category,
    MatchResult,
    ScoredCandidate,
    TermResolution,
    ValidateBatch,
    ValidateResult,
    parse_categories,
)
from termlens.services.alias_resolver import AliasResolver
from termlens.services.candidate_index import CandidateIndex
from termlens.services.fuzzy_scorer import score
from termlens.utils.game_terms import BUILTIN_ALIASES
from termlens.utils.normalizer import normalize, strip_apostrophes

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
MAX_ALTERNATES = 4

# resolve_term never searches keywords
RESOLVE_CATEGORIES = [c for c in Category if c is not Category.KEYWORD]


def _rank_key(match: MatchResult) -> tuple:
    return (
        -match.confidence,
        match.name.casefold(),
        match.name,
        match.category.value,
        match.faction or "",
    )


def _anchor_key(name: str) -> str:
    return strip_apostrophes(normalize(name))


class TermResolver:
    def __init__(
        self,
        candidate_index: CandidateIndex | None = None,
        alias_resolver: AliasResolver | None = None,
    ) -> None:
        self.candidate_index = candidate_index if candidate_index is not None else CandidateIndex()
        self.alias_resolver = alias_resolver if alias_resolver is not None else AliasResolver()

    # ── find_best_matches ─────────────────────────

    async def find_best_matches(
        self,
        term: object,
        candidates: list[CandidateEntity],
        *,
        min_confidence: float | None = None,
        limit: int = DEFAULT_LIMIT,
        check_aliases: bool = True,
        entity_type: Category | None = None,
        faction_id: str | None = None,
        faction_ids: list[str] | None = None,
    ) -> list[MatchResult]:
        """Ranked matches for term: confidence descending, ties by name.

        An alias/phonetic hit is always kept (even under min_confidence) and
        padded with up to limit-1 fuzzy matches. With no hit, every candidate
        is scored and those under min_confidence are dropped.
        """
        token = normalize(term)
        if not token or limit <= 0:
            return []
        floor = config.FUZZY_LOW_CONFIDENCE if min_confidence is None else min_confidence

        hit: MatchResult | None = None
        anchored: CandidateEntity | None = None
        if check_aliases:
            hit = await self.alias_resolver.lookup_exact(
                token, entity_type, faction_id, faction_ids,
            )
            if hit is not None and candidates:
                anchored = _find_anchor(hit, candidates)
                if anchored is None:
                    logger.debug(
                        "Alias hit %r -> %r has no candidate, falling back to fuzzy",
                        token, hit.name,
                    )
                    hit = None
                else:
                    hit = hit.model_copy(update={
                        "name": anchored.name,
                        "category": anchored.category,
                        "faction": anchored.faction,
                    })

        if hit is not None:
            await self.alias_resolver.record_use(hit)
            rest = [c for c in candidates if c is not anchored]
            extras = self._score_all(token, rest, floor)[: limit - 1]
            return sorted([hit, *extras], key=_rank_key)

        return self._score_all(token, candidates, floor)[:limit]

    def _score_all(
        self,
        token: str,
        candidates: list[CandidateEntity],
        floor: float,
    ) -> list[MatchResult]:
        results = []
        for candidate in candidates:
            confidence = score(token, normalize(candidate.name))
            if confidence < floor or confidence <= 0.0:
                continue
            results.append(MatchResult(
                name=candidate.name,
                category=candidate.category,
                faction=candidate.faction,
                confidence=confidence,
            ))
        results.sort(key=_rank_key)
        return results

    # ── validate_terms ────────────────────────────

    async def validate_terms(
        self,
        terms: list,
        factions: list[str] | None = None,
        categories: list[str] | None = None,
        min_confidence: float | None = None,
    ) -> ValidateBatch:
        """Best match plus alternates for each term, in input order.

        Batches over MAX_BATCH_TERMS are truncated and flagged, not rejected.
        """
        if not isinstance(terms, list):
            raise InputError("terms must be an array")
        scope = parse_categories(categories)
        factions = [f for f in factions or [] if isinstance(f, str) and f.strip()]
        floor = config.FUZZY_LOW_CONFIDENCE if min_confidence is None else min_confidence

        received = len(terms)
        batch = terms[: config.MAX_BATCH_TERMS]
        if received > len(batch):
            logger.info("Truncated validate batch from %d to %d terms", received, len(batch))

        candidates = await self.candidate_index.load_candidates(scope, factions)
        entity_type = scope[0] if len(scope) == 1 else None

        results = []
        for term in batch:
            if not isinstance(term, str):
                results.append(ValidateResult(input="" if term is None else str(term)))
                continue
            matches = await self.find_best_matches(
                term,
                candidates,
                min_confidence=floor,
                limit=MAX_ALTERNATES + 1,
                entity_type=entity_type,
                faction_ids=factions,
            )
            matches = [m for m in matches if m.category in scope]
            results.append(_to_validate_result(term, matches))

        return ValidateBatch(
            results=results,
            processed=len(results),
            matched=sum(1 for r in results if r.match is not None),
            received=received,
            truncated=received > len(batch),
        )

    # ── resolve_term ──────────────────────────────

    async def resolve_term(
        self,
        term: object,
        faction_hints: list[str] | None = None,
        context_snippet: str | None = None,
        candidates: list[CandidateEntity] | None = None,
    ) -> TermResolution:
        """Search every non-keyword category and re-rank by faction evidence."""
        if not normalize(term):
            raise InputError("term is required")
        if candidates is None:
            candidates = await self.candidate_index.load_candidates(RESOLVE_CATEGORIES, [])

        hints = [normalize(h) for h in faction_hints or []]
        hints = [h for h in hints if h]
        context = normalize(context_snippet)

        matches = await self.find_best_matches(
            term,
            candidates,
            min_confidence=config.RESOLVE_MIN_CONFIDENCE,
            limit=config.RESOLVE_LIMIT,
            faction_ids=hints,
        )

        scored = []
        for match in matches:
            boost = _faction_boost(normalize(match.faction), hints, context)
            scored.append(ScoredCandidate(
                name=match.name,
                category=match.category,
                faction=match.faction,
                confidence=round(match.confidence, 2),
                relevance=min(1.0, round(match.confidence + boost, 2)),
            ))
        scored.sort(key=lambda c: (-c.relevance, -c.confidence, c.name.casefold(), c.name))

        confident = [c for c in scored if c.relevance >= config.CATEGORIZATION_CONFIDENCE]
        return TermResolution(
            term=str(term),
            ambiguous=len(confident) > 1,
            candidates=scored,
            recommendation=scored[0].name if scored else None,
        )


# ── Helpers ───────────────────────────────────────


def _find_anchor(hit: MatchResult, candidates: list[CandidateEntity]) -> CandidateEntity | None:
    """The candidate an alias hit refers to: same name, preferring category then faction."""
    key = _anchor_key(hit.name)
    same_name = [c for c in candidates if _anchor_key(c.name) == key]
    if not same_name:
        return None
    hit_faction = normalize(hit.faction)
    return min(
        same_name,
        key=lambda c: (
            c.category != hit.category,
            bool(hit_faction) and normalize(c.faction) != hit_faction,
        ),
    )


def _faction_boost(faction: str, hints: list[str], context: str) -> float:
    if not faction:
        return 0.0
    boost = 0.0
    for hint in hints:
        if hint in faction or faction in hint:
            boost += config.FACTION_HINT_BOOST
            break
    if context and faction in context:
        boost += config.CONTEXT_FACTION_BOOST
    return boost


def _to_validate_result(term: str, matches: list[MatchResult]) -> ValidateResult:
    if not matches:
        return ValidateResult(input=term)
    best = matches[0]
    return ValidateResult(
        input=term,
        match=best.name,
        category=best.category,
        faction=best.faction,
        confidence=round(best.confidence, 2),
        source=best.source,
        auto_apply=round(best.confidence, 2) >= config.FUZZY_HIGH_CONFIDENCE,
        alternates=[
            Alternate(name=m.name, confidence=round(m.confidence, 2))
            for m in matches[1 : MAX_ALTERNATES + 1]
        ],
    )


def resolve_alias(term: object) -> str | None:
    """Canonical name for a built-in alias, or None."""
    builtin = BUILTIN_ALIASES.get(normalize(term))
    return builtin[0] if builtin else None


def is_match(term: object, name: str, min_confidence: float = 0.7) -> bool:
    """True if term is a built-in alias of name or scores at least min_confidence."""
    aliased = resolve_alias(term)
    if aliased is not None and _anchor_key(aliased) == _anchor_key(name):
        return True
    return score(normalize(term), normalize(name)) >= min_confidence


# ── Process-wide instance ─────────────────────────

_resolver: TermResolver | None = None


def get_term_resolver() -> TermResolver:
    global _resolver
    if _resolver is None:
        _resolver = TermResolver()
    return _resolver


def reset_term_resolver(resolver: TermResolver | None = None) -> None:
    """Replace (or drop) the process-wide resolver, e.g. after a reseed or in tests."""
    global _resolver
    _resolver = resolver
