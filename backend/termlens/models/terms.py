"""Game-term models shared by the resolution engine, stores and API."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from termlens.infra.errors import InputError


class Category(str, Enum):
    UNIT = "unit"
    STRATAGEM = "stratagem"
    ABILITY = "ability"
    FACTION = "faction"
    DETACHMENT = "detachment"
    ENHANCEMENT = "enhancement"
    KEYWORD = "keyword"


ALL_CATEGORIES: tuple[Category, ...] = tuple(Category)


def parse_category(value: str | Category) -> Category:
    """Accept singular or plural category names, case-insensitive."""
    if isinstance(value, Category):
        return value
    key = str(value).strip().lower()
    if key.endswith("ies"):
        key = key[:-3] + "y"
    elif key.endswith("s"):
        key = key[:-1]
    try:
        return Category(key)
    except ValueError:
        valid = ", ".join(c.value for c in Category)
        raise InputError(f"Invalid category {value!r}. Must be one of: {valid}") from None


def parse_categories(values: list[str] | None) -> list[Category]:
    if not values:
        return list(ALL_CATEGORIES)
    return [parse_category(v) for v in values]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidateEntity(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    category: Category
    faction: str | None = None


class MatchResult(_CamelModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    category: Category
    faction: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    source: str = "fuzzy"  # alias / builtin / phonetic / fuzzy
    alias_id: int | None = Field(default=None, exclude=True)


class AliasMapping(_CamelModel):
    id: int | None = None
    alias: str
    canonical_name: str
    entity_type: Category
    faction_id: str | None = None
    created_at: datetime | None = None
    usage_count: int = 1


class Suggestion(_CamelModel):
    name: str
    confidence: float = Field(ge=0.0, le=1.0)


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    IGNORED = "ignored"


class FeedbackItem(_CamelModel):
    id: str
    original_token: str
    entity_type: Category
    faction_id: str | None = None
    player_index: int | None = None
    transcript_context: str | None = None
    video_id: str | None = None
    video_timestamp: float | None = None
    confidence_score: float = Field(ge=0.0, le=1.0)
    suggestions: list[Suggestion] = []
    status: FeedbackStatus = FeedbackStatus.PENDING
    resolved_to: str | None = None
    created_at: datetime | None = None


class Alternate(_CamelModel):
    name: str
    confidence: float


class ValidateResult(_CamelModel):
    input: str
    match: str | None = None
    category: Category | None = None
    faction: str | None = None
    confidence: float = 0.0
    source: str | None = None
    # confident enough for callers to apply without review
    auto_apply: bool = False
    alternates: list[Alternate] = []


class ScoredCandidate(_CamelModel):
    name: str
    category: Category
    faction: str | None = None
    confidence: float
    relevance: float


class TermResolution(_CamelModel):
    term: str
    ambiguous: bool
    candidates: list[ScoredCandidate] = []
    recommendation: str | None = None


class ValidateBatch(_CamelModel):
    results: list[ValidateResult] = []
    processed: int = 0
    matched: int = 0
    received: int = 0
    truncated: bool = False
