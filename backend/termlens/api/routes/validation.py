"""Term validation endpoints: batch validate, valid names, fuzzy search, resolve."""

from fastapi import APIRouter, HTTPException, Query

from termlens.api.schemas.terms import ResolveTermRequest, ValidateTermsRequest
from termlens.infra import config
from termlens.infra.errors import InputError
from termlens.models.terms import parse_categories, parse_category
from termlens.services import feedback_service
from termlens.services.term_resolver import get_term_resolver
from termlens.utils.game_terms import BUILTIN_ALIASES

router = APIRouter(prefix="/api", tags=["validation"])

_SEARCH_DEFAULT_LIMIT = 5
_SEARCH_MAX_LIMIT = 20


@router.post("/validate-terms")
async def validate_terms(req: ValidateTermsRequest):
    """Validate a batch of caption terms against the canonical entity store."""
    try:
        batch = await get_term_resolver().validate_terms(
            req.terms,
            factions=req.factions,
            categories=req.categories,
            min_confidence=req.min_confidence,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if req.record_feedback:
        factions = [f for f in req.factions or [] if f.strip()]
        await feedback_service.record_low_confidence(
            batch.results,
            parse_categories(req.categories),
            faction_id=factions[0] if len(factions) == 1 else None,
        )
    return batch.model_dump(by_alias=True, mode="json")


@router.get("/valid-names/{category}")
async def valid_names(
    category: str,
    faction: str | None = None,
    include_aliases: bool = Query(False, alias="includeAliases"),
):
    """List canonical names for one category, optionally with built-in aliases."""
    try:
        parsed = parse_category(category)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    candidates = await get_term_resolver().candidate_index.load_candidates(
        [parsed], [faction] if faction else []
    )
    names = sorted({c.name for c in candidates}, key=str.casefold)
    result = {
        "category": parsed.value,
        "faction": faction,
        "names": names,
        "count": len(names),
    }
    if include_aliases:
        listed = set(names)
        result["aliases"] = {
            alias: canonical
            for alias, (canonical, _) in sorted(BUILTIN_ALIASES.items())
            if canonical in listed
        }
    return result


@router.get("/fuzzy-search")
async def fuzzy_search(
    query: str = "",
    categories: str | None = None,
    faction: str | None = None,
    limit: int = _SEARCH_DEFAULT_LIMIT,
):
    """Exploratory search with a low confidence floor."""
    if len(query.strip()) < 2:
        raise HTTPException(status_code=400, detail="query must be at least 2 characters")
    wanted = [c for c in (categories or "").split(",") if c.strip()]
    try:
        scope = parse_categories(wanted)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    limit = max(1, min(limit, _SEARCH_MAX_LIMIT))

    resolver = get_term_resolver()
    candidates = await resolver.candidate_index.load_candidates(
        scope, [faction] if faction else []
    )
    matches = await resolver.find_best_matches(
        query,
        candidates,
        min_confidence=config.SEARCH_MIN_CONFIDENCE,
        limit=limit,
        entity_type=scope[0] if len(scope) == 1 else None,
        faction_id=faction,
    )
    return {
        "query": query,
        "results": [
            m.model_copy(update={"confidence": round(m.confidence, 2)})
            .model_dump(by_alias=True, mode="json")
            for m in matches
        ],
    }


@router.post("/resolve-term")
async def resolve_term(req: ResolveTermRequest):
    """Resolve one term across categories, boosted by faction hints and context."""
    try:
        resolution = await get_term_resolver().resolve_term(
            req.term,
            faction_hints=req.faction_hints,
            context_snippet=req.context_snippet,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return resolution.model_dump(by_alias=True, mode="json")


@router.post("/candidates/invalidate")
async def invalidate_candidates():
    """Drop cached candidates after the entity store was reseeded."""
    get_term_resolver().candidate_index.invalidate()
    return {"ok": True}
