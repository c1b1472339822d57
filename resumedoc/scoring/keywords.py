from __future__ import annotations

import re
from typing import Any, Mapping

from resumedoc.core.config.scoring import lookup_value
from resumedoc.schemas.scores import KeywordCoverage, KeywordMatch, KeywordSet, MatchType, ScoreBreakdown
from resumedoc.scoring.common import FAIL, OK, WARN, breakdown

_TECHNICAL_MARKERS = ("technical", "skill", "tool", "technolog")
_HARD_MARKERS = ("hard", "methodolog")


def category_weight(category: str, config: Mapping[str, Any] | None = None) -> float:
    """Weight for a keyword category name; soft beats hard beats technical when names overlap."""
    name = category.lower()
    weights = lookup_value(config, "job_specific.keywords.category_weights", {}) or {}
    if "soft" in name:
        return float(weights.get("soft", 1.0))
    if any(marker in name for marker in _HARD_MARKERS):
        return float(weights.get("hard", 1.3))
    if any(marker in name for marker in _TECHNICAL_MARKERS):
        return float(weights.get("technical", 1.5))
    return float(weights.get("default", 1.0))


def _exact_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![A-Za-z0-9]){re.escape(keyword)}(?![A-Za-z0-9])", re.IGNORECASE)


def _partial_pattern(keyword: str) -> re.Pattern[str] | None:
    tokens = keyword.split()
    # Single words stay whole-word only: "java" must not match inside "javascript".
    if len(tokens) < 2:
        return None
    return re.compile(r"\s*".join(re.escape(token) for token in tokens), re.IGNORECASE)


def find_keyword(keyword: str, text: str) -> tuple[MatchType, int]:
    """Whole-word match first, then a whitespace-tolerant match for multi-word terms."""
    term = keyword.strip()
    if not term or not text:
        return "missing", 0
    hits = len(_exact_pattern(term).findall(text))
    if hits:
        return "exact", hits
    partial = _partial_pattern(term)
    if partial is not None:
        hits = len(partial.findall(text))
        if hits:
            return "partial", hits
    return "missing", 0


def _locations(keyword: str, section_texts: list[tuple[str, str]]) -> list[str]:
    return [heading for heading, text in section_texts if find_keyword(keyword, text)[0] != "missing"]


def match_keywords(
    keywords: KeywordSet,
    full_text: str,
    section_texts: list[tuple[str, str]],
    config: Mapping[str, Any] | None = None,
) -> tuple[ScoreBreakdown, KeywordCoverage]:
    bonus_per_hit = float(lookup_value(config, "job_specific.keywords.frequency_bonus", 0.5))
    max_bonus_hits = int(lookup_value(config, "job_specific.keywords.max_bonus_occurrences", 2))
    max_listed = int(lookup_value(config, "job_specific.keywords.max_missing_listed", 20))

    details: list[KeywordMatch] = []
    seen: set[str] = set()
    possible = 0.0
    earned = 0.0
    for category in keywords.categories:
        weight = category_weight(category.category, config)
        for raw in category.keywords:
            keyword = raw.strip()
            if not keyword or keyword.lower() in seen:
                continue
            seen.add(keyword.lower())
            possible += weight
            match_type, occurrences = find_keyword(keyword, full_text)
            matched = match_type != "missing"
            if matched:
                earned += weight + min(occurrences - 1, max_bonus_hits) * bonus_per_hit
            details.append(
                KeywordMatch(
                    keyword=keyword,
                    category=category.category,
                    matched=matched,
                    occurrences=occurrences,
                    match_type=match_type,
                    locations=_locations(keyword, section_texts) if matched else [],
                )
            )

    missing = [item.keyword for item in details if not item.matched]
    coverage = KeywordCoverage(
        total_keywords=len(details),
        matched_keywords=len(details) - len(missing),
        unmatched_keywords=missing,
        keyword_details=details,
    )

    if not details:
        lines = [f"{FAIL} No job keywords available - extract keywords from the job description"]
        return breakdown(0, 35, lines, weighted=True), coverage

    ratio = earned / possible if possible else 0.0
    found = coverage.matched_keywords
    summary = f"{found}/{len(details)} keywords matched ({min(ratio, 1.0):.0%} weighted)"
    if ratio >= 0.8:
        lines = [f"{OK} Excellent keyword coverage: {summary}"]
    elif ratio >= 0.6:
        lines = [f"{OK} Good keyword coverage: {summary}"]
    elif ratio >= 0.4:
        lines = [f"{WARN} Moderate keyword coverage: {summary}"]
    else:
        lines = [f"{FAIL} Low keyword coverage: {summary}"]
    if missing:
        lines.append(f"Missing: {', '.join(missing[:max_listed])}")
    return breakdown(min(ratio * 35, 35), 35, lines, weighted=True), coverage
