"""Tests for the resolver: ranking, thresholds, batch validation, disambiguation."""

import pytest

from termlens.infra import config
from termlens.infra.errors import InputError
from termlens.models.terms import AliasMapping, CandidateEntity, Category
from termlens.services.alias_resolver import AliasResolver
from termlens.services.term_resolver import TermResolver, is_match, resolve_alias


@pytest.fixture
def resolver(static_index, fake_aliases):
    return TermResolver(static_index, AliasResolver(fake_aliases))


# ── find_best_matches ─────────────────────────────


@pytest.mark.asyncio
async def test_results_are_ranked(resolver, sample_candidates):
    matches = await resolver.find_best_matches(
        "kabalite warrior", sample_candidates, min_confidence=0.0, limit=20,
    )
    assert matches[0].name == "Kabalite Warriors"
    confidences = [m.confidence for m in matches]
    assert confidences == sorted(confidences, reverse=True)


@pytest.mark.asyncio
async def test_ties_break_by_case_insensitive_name(resolver):
    candidates = [
        CandidateEntity(name="kabay", category=Category.UNIT),
        CandidateEntity(name="Kabax", category=Category.UNIT),
    ]
    matches = await resolver.find_best_matches("kaba", candidates, min_confidence=0.0)
    assert [m.name for m in matches] == ["Kabax", "kabay"]
    assert matches[0].confidence == matches[1].confidence


@pytest.mark.asyncio
async def test_nothing_above_threshold_returns_empty(resolver, sample_candidates):
    matches = await resolver.find_best_matches("xyz123", sample_candidates, min_confidence=0.6)
    assert matches == []


@pytest.mark.asyncio
async def test_limit_truncates(resolver, sample_candidates):
    matches = await resolver.find_best_matches(
        "squad", sample_candidates, min_confidence=0.0, limit=2,
    )
    assert len(matches) == 2


@pytest.mark.asyncio
async def test_empty_term_matches_nothing(resolver, sample_candidates):
    assert await resolver.find_best_matches("", sample_candidates) == []
    assert await resolver.find_best_matches(None, sample_candidates) == []
    assert await resolver.find_best_matches("!!", sample_candidates) == []


@pytest.mark.asyncio
async def test_alias_hit_leads_and_is_padded_with_fuzzy(resolver, sample_candidates):
    matches = await resolver.find_best_matches(
        "termies", sample_candidates, min_confidence=0.0, limit=3,
    )
    assert matches[0].name == "Terminator Squad"
    assert matches[0].source == "builtin"
    assert matches[0].faction == "Adeptus Astartes"
    assert len(matches) == 3
    assert all(m.source == "fuzzy" for m in matches[1:])
    assert [m.name for m in matches].count("Terminator Squad") == 1


@pytest.mark.asyncio
async def test_alias_hit_takes_candidate_spelling(resolver, sample_candidates):
    matches = await resolver.find_best_matches("montka", sample_candidates)
    assert matches[0].name == "Mont'ka"
    assert matches[0].category == Category.DETACHMENT
    assert matches[0].faction == "T'au Empire"


@pytest.mark.asyncio
async def test_alias_hit_without_candidate_falls_back_to_fuzzy(resolver):
    candidates = [CandidateEntity(name="Termagants", category=Category.UNIT)]
    matches = await resolver.find_best_matches("termies", candidates, min_confidence=0.0)
    assert [m.source for m in matches] == ["fuzzy"]
    assert matches[0].name == "Termagants"


@pytest.mark.asyncio
async def test_alias_hit_with_no_candidates(resolver):
    matches = await resolver.find_best_matches("termies", [])
    assert len(matches) == 1
    assert matches[0].name == "Terminator Squad"
    assert matches[0].confidence == config.BUILTIN_ALIAS_CONFIDENCE


@pytest.mark.asyncio
async def test_phonetic_hit_kept_below_min_confidence(resolver, sample_candidates):
    matches = await resolver.find_best_matches("gilman", sample_candidates, min_confidence=0.6)
    assert matches[0].name == "Guilliman"
    assert matches[0].confidence == config.PHONETIC_HIGH_CONFIDENCE
    assert matches[0].source == "phonetic"


@pytest.mark.asyncio
async def test_check_aliases_false_skips_alias_tiers(resolver, sample_candidates):
    matches = await resolver.find_best_matches(
        "gilman", sample_candidates, min_confidence=0.6, check_aliases=False,
    )
    assert matches[0].name == "Guilliman"
    assert matches[0].source == "fuzzy"
    assert matches[0].confidence == pytest.approx(2 / 3 + config.PHONETIC_BONUS)


@pytest.mark.asyncio
async def test_learned_alias_use_is_counted(resolver, fake_aliases, sample_candidates):
    fake_aliases.add(AliasMapping(
        id=7, alias="robot girlyman", canonical_name="Guilliman", entity_type=Category.UNIT,
    ))
    matches = await resolver.find_best_matches("Robot Girlyman", sample_candidates)
    assert matches[0].name == "Guilliman"
    assert matches[0].confidence == config.USER_ALIAS_CONFIDENCE
    assert fake_aliases.increments == [7]


# ── validate_terms ────────────────────────────────


@pytest.mark.asyncio
async def test_batch_keeps_input_length_and_order(resolver):
    batch = await resolver.validate_terms(["a", "b", "c"])
    assert [r.input for r in batch.results] == ["a", "b", "c"]
    assert batch.processed == 3
    assert batch.received == 3
    assert batch.truncated is False


@pytest.mark.asyncio
async def test_batch_reports_matches_and_misses(resolver):
    batch = await resolver.validate_terms(["termies", "xyz123", "Fire Overwatch"])
    first, second, third = batch.results
    assert first.match == "Terminator Squad"
    assert first.category == Category.UNIT
    assert first.source == "builtin"
    assert second.match is None
    assert second.confidence == 0.0
    assert third.match == "Fire Overwatch"
    assert third.confidence == 1.0
    assert batch.matched == 2


@pytest.mark.asyncio
async def test_batch_flags_auto_apply_at_high_confidence(resolver, monkeypatch):
    batch = await resolver.validate_terms(["termies", "gilman", "xyz123"])
    termies, gilman, miss = batch.results
    assert termies.auto_apply is True
    assert gilman.match == "Guilliman"
    assert gilman.auto_apply is False
    assert miss.auto_apply is False

    monkeypatch.setattr(config, "FUZZY_HIGH_CONFIDENCE", 0.95)
    batch = await resolver.validate_terms(["termies"])
    assert batch.results[0].auto_apply is False


@pytest.mark.asyncio
async def test_batch_non_string_terms_are_unmatched(resolver):
    batch = await resolver.validate_terms([None, 5, "termies"])
    assert [r.input for r in batch.results] == ["", "5", "termies"]
    assert batch.results[0].match is None
    assert batch.results[1].match is None
    assert batch.results[2].match == "Terminator Squad"


@pytest.mark.asyncio
async def test_batch_over_cap_is_truncated(resolver, monkeypatch):
    monkeypatch.setattr(config, "MAX_BATCH_TERMS", 3)
    batch = await resolver.validate_terms(["a", "b", "c", "d", "e"])
    assert batch.processed == 3
    assert batch.received == 5
    assert batch.truncated is True
    assert [r.input for r in batch.results] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_batch_category_scope(resolver):
    batch = await resolver.validate_terms(["overwatch", "termies"], categories=["stratagems"])
    assert batch.results[0].match == "Fire Overwatch"
    assert batch.results[0].category == Category.STRATAGEM
    assert batch.results[1].match is None


@pytest.mark.asyncio
async def test_batch_faction_scope(resolver):
    batch = await resolver.validate_terms(["wyches", "intercessor squad"], factions=["Drukhari"])
    assert batch.results[0].match == "Wyches"
    assert batch.results[1].match is None


@pytest.mark.asyncio
async def test_batch_alternates_are_capped_and_rounded(resolver):
    batch = await resolver.validate_terms(["squad"], min_confidence=0.0)
    result = batch.results[0]
    assert len(result.alternates) <= 4
    for value in [result.confidence, *(a.confidence for a in result.alternates)]:
        assert value == round(value, 2)


@pytest.mark.asyncio
async def test_batch_rejects_unknown_category(resolver):
    with pytest.raises(InputError, match="Must be one of"):
        await resolver.validate_terms(["termies"], categories=["vehicles"])


@pytest.mark.asyncio
async def test_batch_requires_list(resolver):
    with pytest.raises(InputError):
        await resolver.validate_terms("termies")


# ── resolve_term ──────────────────────────────────


@pytest.mark.asyncio
async def test_faction_hint_disambiguates_cartel(resolver):
    resolution = await resolver.resolve_term("cartel", ["Drukhari"], "")
    assert resolution.ambiguous is False
    assert resolution.recommendation == "Kabalite Cartel"
    top, *rest = resolution.candidates
    assert top.relevance == 1.0
    # a weaker candidate from another faction still clears the 0.4 floor
    assert any(c.name == "Cortex" and c.relevance < config.CATEGORIZATION_CONFIDENCE for c in rest)


def _scoped_cartel_aliases(fake_aliases):
    fake_aliases.add(AliasMapping(
        alias="cartel", canonical_name="Guilliman", entity_type=Category.UNIT,
    ))
    fake_aliases.add(AliasMapping(
        alias="cartel", canonical_name="Kabalite Cartel",
        entity_type=Category.DETACHMENT, faction_id="drukhari",
    ))


@pytest.mark.asyncio
async def test_faction_hint_selects_scoped_learned_alias(resolver, fake_aliases):
    _scoped_cartel_aliases(fake_aliases)

    resolution = await resolver.resolve_term("cartel", ["Drukhari"], "")
    top = resolution.candidates[0]
    assert top.name == "Kabalite Cartel"
    assert top.confidence == config.USER_ALIAS_CONFIDENCE
    assert all(c.name != "Guilliman" for c in resolution.candidates)


@pytest.mark.asyncio
async def test_each_faction_hint_scope_is_tried(resolver, fake_aliases):
    _scoped_cartel_aliases(fake_aliases)

    resolution = await resolver.resolve_term("cartel", ["Necrons", "Drukhari"], "")
    assert resolution.recommendation == "Kabalite Cartel"
    assert resolution.candidates[0].confidence == config.USER_ALIAS_CONFIDENCE


@pytest.mark.asyncio
async def test_unmatched_hint_falls_back_to_agnostic_alias(resolver, fake_aliases):
    _scoped_cartel_aliases(fake_aliases)

    resolution = await resolver.resolve_term("cartel", ["Necrons"], "")
    guilliman = next(c for c in resolution.candidates if c.name == "Guilliman")
    assert guilliman.confidence == config.USER_ALIAS_CONFIDENCE


@pytest.mark.asyncio
async def test_batch_with_several_factions_uses_scoped_alias(resolver, fake_aliases):
    _scoped_cartel_aliases(fake_aliases)

    batch = await resolver.validate_terms(
        ["cartel"], factions=["Adeptus Astartes", "Drukhari"], categories=["detachment"],
    )
    assert batch.results[0].match == "Kabalite Cartel"
    assert batch.results[0].confidence == config.USER_ALIAS_CONFIDENCE


@pytest.mark.asyncio
async def test_resolve_skips_keywords(resolver):
    resolution = await resolver.resolve_term("dreadnought")
    assert all(c.category != Category.KEYWORD for c in resolution.candidates)


@pytest.mark.asyncio
async def test_two_confident_candidates_are_ambiguous(resolver):
    candidates = [
        CandidateEntity(name="Kabalite Warriors", category=Category.UNIT, faction="Drukhari"),
        CandidateEntity(name="Kabalite Warriors", category=Category.UNIT, faction="Dark Eldar"),
    ]
    resolution = await resolver.resolve_term("kabalite warrior", candidates=candidates)
    assert resolution.ambiguous is True


@pytest.mark.asyncio
async def test_context_snippet_boosts_faction(resolver):
    candidates = [
        CandidateEntity(name="Kabalite Warriors", category=Category.UNIT, faction="Dark Eldar"),
        CandidateEntity(name="Kabalite Warriors", category=Category.UNIT, faction="Drukhari"),
    ]
    resolution = await resolver.resolve_term(
        "kabalite warrior",
        context_snippet="The Drukhari player moves up",
        candidates=candidates,
    )
    top = resolution.candidates[0]
    assert top.faction == "Drukhari"
    assert top.relevance == pytest.approx(min(1.0, round(1 - 1 / 17 + 0.15, 2)))
    assert resolution.candidates[1].relevance == pytest.approx(round(1 - 1 / 17, 2))


@pytest.mark.asyncio
async def test_hint_matches_substring_either_way(resolver):
    candidates = [
        CandidateEntity(name="Crisis Battlesuits", category=Category.UNIT, faction="T'au Empire"),
    ]
    resolution = await resolver.resolve_term("crisis battlesuit", ["T'au"], candidates=candidates)
    assert resolution.candidates[0].relevance == 1.0


@pytest.mark.asyncio
async def test_resolve_requires_term(resolver):
    with pytest.raises(InputError, match="term is required"):
        await resolver.resolve_term("  ")


@pytest.mark.asyncio
async def test_resolve_without_match(resolver):
    resolution = await resolver.resolve_term("xyz123")
    assert resolution.candidates == []
    assert resolution.recommendation is None
    assert resolution.ambiguous is False


# ── Helpers ───────────────────────────────────────


def test_resolve_alias():
    assert resolve_alias("Termies") == "Terminator Squad"
    assert resolve_alias("T.S.O.N.S.") is None
    assert resolve_alias("unknown") is None


def test_is_match():
    assert is_match("termies", "Terminator Squad")
    assert is_match("kabalite warrior", "Kabalite Warriors")
    assert not is_match("xyz", "Guilliman")
    assert not is_match("gilman", "Guilliman", min_confidence=0.8)
