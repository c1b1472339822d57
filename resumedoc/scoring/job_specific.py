from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from resumedoc.core.config.scoring import lookup_value
from resumedoc.schemas.resume import OpaqueBody, Section
from resumedoc.schemas.scores import JobScoreBreakdown, JobSpecificScore, KeywordSet, ScoreBreakdown
from resumedoc.scoring.common import (
    FAIL,
    INFO,
    OK,
    WARN,
    breakdown,
    find_section_index,
    has_quantified_content,
    has_section,
    total_score,
    word_count,
)
from resumedoc.scoring.extractor import EditsMap, extract_resume, extract_section_text
from resumedoc.scoring.keywords import find_keyword, match_keywords

logger = logging.getLogger(__name__)

_JD_ACTION_VERBS = (
    "develop", "design", "implement", "manage", "lead", "create", "build", "analyze",
    "optimize", "collaborate", "coordinate", "deliver", "maintain", "support", "drive",
    "improve", "plan", "test",
)
_STANDARD_HEADINGS = (
    (("experience", "work", "employment"), ("experience",)),
    (("education",), ("education",)),
    (("skill",), ("skills",)),
    (("summary", "objective", "profile"), ("summary",)),
)
_PLACEMENT_SECTIONS = (("experience", "work"), ("skill",), ("summary", "objective", "profile"))
_TITLE_LINE_LIMIT = 5
_LONG_WORD_RE = re.compile(r"[a-z][a-z0-9+#.-]{4,}")


def _long_words(text: str) -> set[str]:
    return {word.rstrip(".") for word in _LONG_WORD_RE.findall(text.lower())}


def _content_quality(
    sections: list[Section],
    job_description: str,
    full_text: str,
    bullets: list[str],
    edits: EditsMap | None,
    config: Mapping[str, Any] | None,
) -> ScoreBreakdown:
    score = 0.0
    details: list[str] = []

    quantified = [bullet for bullet in bullets if has_quantified_content(bullet)]
    score += min(len(quantified) / 3 * 8, 8)
    if quantified:
        details.append(f"{OK} {len(quantified)} quantified achievement(s)")
    else:
        details.append(f"{FAIL} Missing quantified achievements - add numbers and metrics")

    jd_lower = job_description.lower()
    resume_lower = full_text.lower()
    shared_verbs = [
        verb for verb in _JD_ACTION_VERBS
        if re.search(rf"\b{verb}", jd_lower) and re.search(rf"\b{verb}", resume_lower)
    ]
    score += min(len(shared_verbs), 5)
    if shared_verbs:
        details.append(f"{OK} Uses the job's action language: {', '.join(shared_verbs[:5])}")
    else:
        details.append(f"{WARN} Mirror the action verbs used in the job description")

    common = _long_words(job_description) & _long_words(full_text)
    score += min(len(common) / 20 * 4, 4)
    details.append(f"{INFO} {len(common)} terms shared with the job description")

    detailed = lookup_value(config, "job_specific.content.detailed_experience_words", 300)
    adequate = lookup_value(config, "job_specific.content.adequate_experience_words", 150)
    index = find_section_index(sections, ("experience", "work"), ("experience",))
    words = word_count(extract_section_text(sections[index], edits)) if index >= 0 else 0
    if words >= detailed:
        score += 3
        details.append(f"{OK} Detailed experience descriptions")
    elif words >= adequate:
        score += 2
        details.append(f"{WARN} Experience descriptions could be more detailed")
    else:
        details.append(f"{FAIL} Experience section is too brief for this role")

    return breakdown(score, 20, details)


def _job_title_words(job_description: str) -> set[str]:
    lines = [line.strip() for line in job_description.splitlines() if line.strip()]
    return _long_words(" ".join(lines[:_TITLE_LINE_LIMIT])[:200])


def _experience_relevance(
    sections: list[Section],
    job_description: str,
    keywords: KeywordSet,
    edits: EditsMap | None,
) -> ScoreBreakdown:
    if not job_description.strip():
        return breakdown(0, 15, [f"{FAIL} No job description provided"])

    score = 0.0
    details: list[str] = []
    index = find_section_index(sections, ("experience", "work", "employment"), ("experience",))
    experience_text = extract_section_text(sections[index], edits) if index >= 0 else ""

    title_words = _job_title_words(job_description)
    if title_words:
        overlap = title_words & _long_words(experience_text)
        score += len(overlap) / len(title_words) * 5
        if overlap:
            details.append(f"{OK} Experience echoes the job title ({len(overlap)}/{len(title_words)} terms)")
        else:
            details.append(f"{WARN} Experience does not mention the target role's title terms")

    if index >= 0:
        score += 5
        details.append(f"{OK} Experience section present")
    else:
        details.append(f"{FAIL} No experience section found")

    all_keywords = keywords.all_keywords()
    if all_keywords and experience_text:
        found = [kw for kw in all_keywords if find_keyword(kw, experience_text)[0] != "missing"]
        score += len(found) / len(all_keywords) * 5
        details.append(f"{INFO} {len(found)}/{len(all_keywords)} keywords appear in your experience")
    elif not all_keywords:
        details.append(f"{INFO} No keywords available to check against experience")

    return breakdown(score, 15, details)


def calculate_tailoring_effectiveness(
    baseline: int | None,
    current: float,
    config: Mapping[str, Any] | None = None,
) -> ScoreBreakdown:
    """Improvement over the first recorded job score; neutral when no baseline exists."""
    if baseline is None:
        neutral = float(lookup_value(config, "job_specific.tailoring.neutral_score", 7.5))
        return breakdown(neutral, 15, [f"{INFO} No baseline yet - this score becomes the baseline"])

    span = float(lookup_value(config, "job_specific.tailoring.improvement_span", 20))
    max_points = float(lookup_value(config, "job_specific.tailoring.max_improvement_points", 10))
    threshold = float(lookup_value(config, "job_specific.tailoring.high_score_threshold", 80))
    bonus = float(lookup_value(config, "job_specific.tailoring.high_score_bonus", 5))

    score = 0.0
    details: list[str] = []
    improvement = current - baseline
    if improvement > 0:
        score += min(improvement / span * max_points, max_points)
        details.append(f"{OK} Improved {improvement:.0f} points over baseline ({baseline})")
    else:
        details.append(f"{WARN} No improvement over baseline ({baseline}) yet")
    if current >= threshold:
        score += bonus
        details.append(f"{OK} Strong overall match ({current:.0f})")
    return breakdown(score, 15, details)


def _ats_optimization(sections: list[Section], keywords: KeywordSet, edits: EditsMap | None) -> ScoreBreakdown:
    score = 0.0
    details: list[str] = []

    present = sum(1 for markers, kinds in _STANDARD_HEADINGS if has_section(sections, markers, kinds))
    score += present / len(_STANDARD_HEADINGS) * 5
    status = OK if present == len(_STANDARD_HEADINGS) else WARN
    details.append(f"{status} Standard section headings ({present}/{len(_STANDARD_HEADINGS)})")

    placement_text = "\n".join(
        extract_section_text(sections[index], edits)
        for index in (find_section_index(sections, markers) for markers in _PLACEMENT_SECTIONS)
        if index >= 0
    )
    placed = [kw for kw in keywords.all_keywords() if find_keyword(kw, placement_text)[0] != "missing"]
    if placed:
        score += 5
        details.append(f"{OK} Keywords placed in experience, skills or summary")
    else:
        details.append(f"{WARN} Place job keywords in your experience, skills and summary")

    opaque = [section.heading for section in sections if isinstance(section.body, OpaqueBody)]
    if not opaque:
        score += 5
        details.append(f"{OK} Every section parses into structured content")
    else:
        details.append(f"{WARN} Unstructured sections may confuse ATS parsers: {', '.join(opaque[:3])}")

    return breakdown(score, 15, details)


_IMPROVEMENT_ADVICE = {
    "keyword_match": ("Keyword Match", "Add the missing job keywords where they truthfully apply"),
    "content_quality": ("Content Quality", "Quantify achievements and mirror the job's action verbs"),
    "experience_relevance": ("Experience Relevance", "Highlight experience that matches the target role"),
    "tailoring_effectiveness": ("Tailoring", "Accept tailored suggestions to raise your match score"),
    "ats_optimization": ("ATS Optimization", "Use standard headings and keep sections structured"),
}


def calculate_job_specific_score(
    sections: list[Section],
    job_description: str,
    keywords: KeywordSet,
    edits: EditsMap | None = None,
    *,
    baseline_score: int | None = None,
    config: Mapping[str, Any] | None = None,
) -> JobSpecificScore:
    """0-100 match against one job: keywords 35, content 20, relevance 15, tailoring 15, ATS 15."""
    extract = extract_resume(sections, edits)
    keyword_part, coverage = match_keywords(keywords, extract.text, extract.section_texts, config)
    content_part = _content_quality(sections, job_description, extract.text, extract.bullets, edits, config)
    relevance_part = _experience_relevance(sections, job_description, keywords, edits)
    ats_part = _ats_optimization(sections, keywords, edits)

    # The tailoring term measures the rest of the score, so the provisional total uses the neutral value.
    provisional = calculate_tailoring_effectiveness(None, 0, config)
    current = sum(part.score for part in (keyword_part, content_part, relevance_part, provisional, ats_part))
    tailoring_part = calculate_tailoring_effectiveness(baseline_score, current, config)

    parts = JobScoreBreakdown(
        keyword_match=keyword_part,
        content_quality=content_part,
        experience_relevance=relevance_part,
        tailoring_effectiveness=tailoring_part,
        ats_optimization=ats_part,
    )
    overall = total_score(part for _, part in parts.categories())

    threshold = lookup_value(config, "job_specific.improvement_threshold", 0.7)
    suggestions: list[str] = []
    areas: list[str] = []
    for name, part in parts.categories():
        if part.score < part.max_score * threshold:
            area, tip = _IMPROVEMENT_ADVICE[name]
            areas.append(area)
            suggestions.append(tip)
    if coverage.unmatched_keywords:
        suggestions.append(f"Consider adding: {', '.join(coverage.unmatched_keywords[:5])}")

    logger.debug(
        "job_score_calculated sections=%s keywords=%s overall=%s baseline=%s",
        len(sections),
        coverage.total_keywords,
        overall,
        baseline_score,
    )
    return JobSpecificScore(
        overall_score=overall,
        breakdown=parts,
        keyword_coverage=coverage,
        baseline_score=baseline_score,
        suggestions=suggestions,
        improvement_areas=areas,
    )
