from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ScoreType = Literal["generic", "job_specific"]
MatchType = Literal["exact", "partial", "missing"]


class ScoreBreakdown(BaseModel):
    score: float = Field(ge=0.0)
    max_score: int = Field(gt=0)
    details: list[str] = Field(default_factory=list)
    weighted: bool = False


class GenericScoreBreakdown(BaseModel):
    ats_optimization: ScoreBreakdown
    content_quality: ScoreBreakdown
    structure_completeness: ScoreBreakdown
    formatting_quality: ScoreBreakdown
    action_verbs_usage: ScoreBreakdown

    def categories(self) -> list[tuple[str, ScoreBreakdown]]:
        return [(name, getattr(self, name)) for name in type(self).model_fields]


class GenericResumeScore(BaseModel):
    score_type: ScoreType = "generic"
    overall_score: int = Field(ge=0, le=100)
    breakdown: GenericScoreBreakdown
    suggestions: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)


class KeywordCategory(BaseModel):
    category: str
    keywords: list[str] = Field(default_factory=list)


class KeywordSet(BaseModel):
    categories: list[KeywordCategory] = Field(default_factory=list)

    def all_keywords(self) -> list[str]:
        seen: set[str] = set()
        ordered: list[str] = []
        for category in self.categories:
            for keyword in category.keywords:
                key = keyword.strip().lower()
                if key and key not in seen:
                    seen.add(key)
                    ordered.append(keyword.strip())
        return ordered


class KeywordMatch(BaseModel):
    keyword: str
    category: str
    matched: bool
    occurrences: int = 0
    match_type: MatchType = "missing"
    locations: list[str] = Field(default_factory=list)


class KeywordCoverage(BaseModel):
    total_keywords: int = 0
    matched_keywords: int = 0
    unmatched_keywords: list[str] = Field(default_factory=list)
    keyword_details: list[KeywordMatch] = Field(default_factory=list)


class JobScoreBreakdown(BaseModel):
    keyword_match: ScoreBreakdown
    content_quality: ScoreBreakdown
    experience_relevance: ScoreBreakdown
    tailoring_effectiveness: ScoreBreakdown
    ats_optimization: ScoreBreakdown

    def categories(self) -> list[tuple[str, ScoreBreakdown]]:
        return [(name, getattr(self, name)) for name in type(self).model_fields]


class JobSpecificScore(BaseModel):
    score_type: ScoreType = "job_specific"
    overall_score: int = Field(ge=0, le=100)
    breakdown: JobScoreBreakdown
    keyword_coverage: KeywordCoverage
    baseline_score: int | None = None
    suggestions: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)
