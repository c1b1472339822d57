from __future__ import annotations

from pydantic import BaseModel, Field


class SuggestedText(BaseModel):
    position: int = 0
    original: str = ""
    suggested: str = ""


class EntrySuggestion(BaseModel):
    # Index of the entry in the provider output, before empty entries were dropped.
    position: int
    id: str | None = None
    fields: dict[str, SuggestedText] = Field(default_factory=dict)
    bullets: list[SuggestedText] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    section_name: str = ""
    type: str = "other"
    entries: list[EntrySuggestion] = Field(default_factory=list)
    fallback: bool = False
