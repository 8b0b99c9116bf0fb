"""Pydantic request schemas for the terminology endpoints (camelCase on the wire)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from termlens.models.terms import AliasMapping, Suggestion


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidateTermsRequest(_Request):
    terms: list[Any]
    factions: list[str] | None = None
    categories: list[str] | None = None
    min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    record_feedback: bool = False


class ResolveTermRequest(_Request):
    term: str | None = None
    faction_hints: list[str] = []
    context_snippet: str = ""


class FeedbackCreateRequest(_Request):
    original_token: str
    entity_type: str
    confidence_score: float = 0.0
    suggestions: list[Suggestion] = []
    faction_id: str | None = None
    player_index: int | None = None
    transcript_context: str | None = None
    video_id: str | None = None
    video_timestamp: float | None = None


class FeedbackResolveRequest(_Request):
    canonical_name: str
    persist_mapping: bool = True


class AliasImportRequest(_Request):
    mappings: list[AliasMapping]
