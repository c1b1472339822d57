from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from .render import TemplateMeta
from .resume import Section
from .scores import KeywordCoverage, KeywordSet, ScoreType

ItemAction = Literal["accept", "reject", "edit", "accept_all"]


class ResumeCreateRequest(BaseModel):
    name: str = Field(default="Untitled resume", min_length=1, max_length=200)
    parsed_resume: dict[str, Any]


class ResumeResponse(BaseModel):
    resume_id: str
    name: str
    sections: list[Section] = Field(default_factory=list)
    created_at: str
    updated_at: str


class SectionTextResponse(BaseModel):
    heading: str
    job_id: str | None = None
    text: str


class SectionTextUpdateRequest(BaseModel):
    text: str = Field(max_length=60000)
    job_id: str | None = Field(default=None, min_length=1, max_length=200)


class SectionStateResponse(BaseModel):
    resume_id: str
    heading: str
    job_id: str | None = None
    section: Section
    has_suggestions: bool
    has_edits: bool


class ItemActionRequest(BaseModel):
    action: ItemAction
    item_id: str | None = Field(default=None, min_length=1, max_length=64)
    text: str | None = Field(default=None, max_length=5000)
    job_id: str | None = Field(default=None, min_length=1, max_length=200)

    @model_validator(mode="after")
    def _check_fields(self) -> "ItemActionRequest":
        if self.action != "accept_all" and not self.item_id:
            raise ValueError("item_id is required for this action.")
        if self.action == "edit" and self.text is None:
            raise ValueError("text is required when action is 'edit'.")
        return self


class TailorRequest(BaseModel):
    job_id: str = Field(min_length=1, max_length=200)
    job_description: str = Field(min_length=30, max_length=60000)
    keywords: KeywordSet | None = None


class KeywordExtractRequest(BaseModel):
    job_description: str = Field(min_length=30, max_length=60000)


class JobScoreRequest(BaseModel):
    job_id: str = Field(min_length=1, max_length=200)
    job_description: str = Field(min_length=30, max_length=60000)
    keywords: KeywordSet | None = None


class StoredScoreResponse(BaseModel):
    resume_id: str
    job_id: str | None = None
    score_type: ScoreType
    overall_score: int
    breakdown: dict[str, Any]
    suggestions: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)
    keyword_coverage: KeywordCoverage | None = None
    comparison_score: int | None = None
    updated_at: str


class ExportRequest(BaseModel):
    template_id: str = Field(min_length=1, max_length=64)


class TemplateListResponse(BaseModel):
    templates: list[TemplateMeta] = Field(default_factory=list)
