from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from resumedoc.core.config.scoring import lookup_value
from resumedoc.schemas.render import ContactInfo
from resumedoc.schemas.resume import OpaqueBody, Section
from resumedoc.schemas.scores import GenericResumeScore, GenericScoreBreakdown, ScoreBreakdown
from resumedoc.scoring.common import (
    FAIL,
    IMPACT_STARTERS,
    INFO,
    OK,
    WARN,
    breakdown,
    count_verb_usage,
    find_section_index,
    has_quantified_content,
    has_section,
    total_score,
    word_count,
)
from resumedoc.scoring.extractor import EditsMap, extract_resume, extract_section_text

logger = logging.getLogger(__name__)

_STANDARD_HEADING_GROUPS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("Contact", ("contact", "header"), ("contact",)),
    ("Summary", ("summary", "objective", "profile"), ("summary",)),
    ("Experience", ("experience", "work", "employment"), ("experience",)),
    ("Education", ("education",), ("education",)),
    ("Skills", ("skill",), ("skills",)),
)
_CORE_SECTIONS = (
    ("experience", ("experience", "work")),
    ("education", ("education",)),
    ("skills", ("skill",)),
    ("summary", ("summary", "objective")),
)
_ESSENTIAL_SECTIONS = (
    ("Contact", ("contact", "header"), ("contact",)),
    ("Summary", ("summary", "objective"), ("summary",)),
    ("Experience", ("experience", "work"), ("experience",)),
    ("Education", ("education",), ("education",)),
)
_ADDITIONAL_SECTIONS = (
    ("skill",),
    ("certif", "license"),
    ("project",),
)
_UNPROFESSIONAL_PHRASES = ("i think", "i believe", "i feel", "hopefully", "kind of", "sort of")
_SHOUTING_RE = re.compile(r"\b[A-Z]{2,}(?:\s+[A-Z]{2,}){3,}\b")
_LONG_BULLET_WORDS = 40
_WORD_TOKEN_RE = re.compile(r"\S+")


def _ats_optimization(sections: list[Section], full_text: str, contact: ContactInfo) -> ScoreBreakdown:
    score = 0.0
    details: list[str] = []

    matched = [
        label for label, markers, kinds in _STANDARD_HEADING_GROUPS if has_section(sections, markers, kinds)
    ]
    heading_score = len(matched) / len(_STANDARD_HEADING_GROUPS) * 5
    score += heading_score
    status = OK if heading_score > 4 else WARN
    details.append(f"{status} Standard section headings ({len(matched)}/{len(_STANDARD_HEADING_GROUPS)})")

    if contact.email and contact.phone:
        score += 5
        details.append(f"{OK} Complete contact information")
    elif contact.email or contact.phone:
        score += 2.5
        details.append(f"{WARN} Partial contact information (add {'phone' if contact.email else 'email'})")
    else:
        details.append(f"{FAIL} Missing contact information")

    score += 5
    details.append(f"{OK} Plain-text content without tables or graphics")

    opaque = [section.heading for section in sections if isinstance(section.body, OpaqueBody)]
    if not opaque:
        score += 5
        details.append(f"{OK} All sections parse into structured content")
    else:
        score += 2.5
        details.append(f"{WARN} {len(opaque)} section(s) could not be parsed into entries: {', '.join(opaque[:3])}")

    words = [word for word in _WORD_TOKEN_RE.findall(full_text.lower()) if len(word) > 2]
    diversity = len(set(words)) / len(words) if words else 0.0
    if diversity > 0.3:
        score += 5
        details.append(f"{OK} Good keyword diversity")
    elif diversity > 0.2:
        score += 3
        details.append(f"{WARN} Moderate keyword diversity")
    else:
        details.append(f"{FAIL} Low keyword diversity - vary your wording")

    present = [name for name, markers in _CORE_SECTIONS if has_section(sections, markers)]
    score += len(present) * 1.25
    if len(present) == len(_CORE_SECTIONS):
        details.append(f"{OK} Experience, education, skills and summary sections present")
    else:
        missing = [name for name, _ in _CORE_SECTIONS if name not in present]
        details.append(f"{WARN} Missing sections: {', '.join(missing)}")

    return breakdown(score, 30, details)


def _content_quality(
    sections: list[Section],
    full_text: str,
    bullets: list[str],
    edits: EditsMap | None,
    config: Mapping[str, Any] | None,
) -> ScoreBreakdown:
    score = 0.0
    details: list[str] = []

    quantified = [bullet for bullet in bullets if has_quantified_content(bullet)]
    score += min(len(quantified) / 3 * 10, 10)
    if len(quantified) >= 3:
        details.append(f"{OK} Strong quantified achievements ({len(quantified)} bullets)")
    elif quantified:
        details.append(f"{WARN} Some quantified achievements ({len(quantified)} bullets) - add more metrics")
    else:
        details.append(f"{FAIL} Missing quantified achievements - add numbers and metrics")

    low, high = lookup_value(config, "generic.experience_word_range", [200, 800])
    minimum = lookup_value(config, "generic.min_experience_words", 50)
    index = find_section_index(sections, ("experience", "work"), ("experience",))
    if index >= 0:
        words = word_count(extract_section_text(sections[index], edits))
        if low <= words <= high:
            score += 5
            details.append(f"{OK} Experience section has good detail ({words} words)")
        elif words > minimum:
            score += 3
            details.append(f"{WARN} Experience section length could be improved ({words} words)")
        else:
            details.append(f"{FAIL} Experience section is too brief ({words} words)")
    else:
        details.append(f"{FAIL} No experience section found")

    lowered = full_text.lower()
    found = [phrase for phrase in _UNPROFESSIONAL_PHRASES if phrase in lowered]
    if not found:
        score += 5
        details.append(f"{OK} Professional language")
    else:
        score += 2
        details.append(f"{WARN} Avoid tentative phrases: {', '.join(found)}")

    impact = [bullet for bullet in bullets if bullet.lower().startswith(IMPACT_STARTERS)]
    score += min(len(impact) / 5 * 5, 5)
    if len(impact) >= 5:
        details.append(f"{OK} Strong impact-focused content ({len(impact)} action-oriented bullets)")
    elif impact:
        details.append(f"{WARN} Some impact-focused bullets ({len(impact)}) - start more bullets with strong verbs")
    else:
        details.append(f"{FAIL} No bullets open with an action verb - add action verbs to start each bullet")

    return breakdown(score, 25, details)


def _structure_completeness(sections: list[Section]) -> ScoreBreakdown:
    score = 0.0
    details: list[str] = []

    indices = {
        label: find_section_index(sections, markers, kinds) for label, markers, kinds in _ESSENTIAL_SECTIONS
    }
    present = [label for label, index in indices.items() if index >= 0]
    score += len(present) / len(_ESSENTIAL_SECTIONS) * 10
    if len(present) == len(_ESSENTIAL_SECTIONS):
        details.append(f"{OK} All essential sections present")
    else:
        missing = [label for label in indices if label not in present]
        details.append(f"{WARN} Missing essential sections: {', '.join(missing)}")

    order_score = 5
    labels = [label for label, _, _ in _ESSENTIAL_SECTIONS]
    for earlier, later in zip(labels, labels[1:]):
        if indices[earlier] > -1 and indices[later] > -1 and indices[earlier] > indices[later]:
            order_score -= 1
    score += order_score
    if order_score == 5:
        details.append(f"{OK} Sections follow logical order")
    else:
        details.append(f"{WARN} Section order could be improved (Contact, Summary, Experience, Education)")

    additional = sum(1 for markers in _ADDITIONAL_SECTIONS if has_section(sections, markers))
    score += min(additional * 1.67, 5)
    if additional:
        details.append(f"{OK} {additional} additional section(s) (skills, certifications, projects)")
    else:
        details.append(f"{INFO} Consider adding Skills, Certifications or Projects sections")

    return breakdown(score, 20, details)


def _formatting_quality(sections: list[Section], section_texts: list[tuple[str, str]], bullets: list[str]) -> ScoreBreakdown:
    score = 0.0
    details: list[str] = []

    if bullets:
        long_bullets = [bullet for bullet in bullets if len(bullet.split()) > _LONG_BULLET_WORDS]
        share = len(long_bullets) / len(bullets)
        if share <= 0.2:
            score += 5
            details.append(f"{OK} Concise bullet points")
        elif share <= 0.5:
            score += 3
            details.append(f"{WARN} {len(long_bullets)} bullet(s) exceed {_LONG_BULLET_WORDS} words")
        else:
            score += 1
            details.append(f"{FAIL} Most bullets are too long - split them up")
    else:
        score += 2.5
        details.append(f"{WARN} No bullet points detected")

    empty = [heading for heading, text in section_texts if not text.strip()]
    score += max(5 - 1.25 * len(empty), 0)
    if empty:
        details.append(f"{WARN} Empty sections: {', '.join(empty[:3])}")
    else:
        details.append(f"{OK} Every section has content")

    shouting = [heading for heading, text in section_texts if _SHOUTING_RE.search(text)]
    if shouting:
        score += 3
        details.append(f"{WARN} Avoid long all-caps phrases")
    else:
        score += 5
        details.append(f"{OK} Consistent professional capitalization")

    return breakdown(score, 15, details)


def _action_verbs_usage(bullets: list[str]) -> ScoreBreakdown:
    counts = count_verb_usage(" ".join(bullets))
    total = sum(counts.values())
    unique = len(counts)
    usage = f"({total} uses, {unique} unique verbs)"

    if total == 0:
        return breakdown(0, 10, [f"{FAIL} No action verbs found - add action verbs to start bullet points"])
    if total >= 12 and unique >= 8:
        return breakdown(10, 10, [f"{OK} Excellent action verb usage {usage}"])
    if (total >= 8 and unique >= 6) or (total >= 10 and unique >= 5):
        return breakdown(8, 10, [f"{OK} Very good action verb usage {usage}"])
    if (total >= 6 and unique >= 5) or (total >= 8 and unique >= 4):
        return breakdown(6, 10, [f"{OK} Good action verb usage {usage}"])
    if (total >= 4 and unique >= 4) or (total >= 6 and unique >= 3):
        return breakdown(4, 10, [f"{WARN} Fair action verb usage {usage} - add more variety"])
    if total >= 2 and unique >= 2:
        return breakdown(2, 10, [f"{WARN} Limited action verb usage {usage} - add action verbs to more bullets"])
    return breakdown(0, 10, [f"{FAIL} Very weak action verb usage {usage} - add action verbs to start bullet points"])


_IMPROVEMENT_ADVICE = {
    "ats_optimization": (
        "ATS Optimization",
        [
            "Ensure all standard sections (Contact, Summary, Experience, Education) are present",
            "Complete contact information (email, phone, LinkedIn)",
        ],
    ),
    "content_quality": (
        "Content Quality",
        [
            "Add quantified achievements with numbers and metrics",
            "Use impact-focused language and strong action verbs",
            "Ensure experience section has sufficient detail (200-800 words)",
        ],
    ),
    "structure_completeness": (
        "Structure",
        [
            "Add missing essential sections",
            "Organize sections in logical order (Contact, Summary, Experience, Education)",
        ],
    ),
    "formatting_quality": (
        "Formatting",
        ["Keep bullets short and make sure every section has content"],
    ),
    "action_verbs_usage": (
        "Language",
        [
            "Replace weak verbs with strong action verbs (achieved, improved, led)",
            "Start bullet points with action verbs",
        ],
    ),
}


def _advice(parts: GenericScoreBreakdown, overall: int, threshold: float) -> tuple[list[str], list[str]]:
    suggestions: list[str] = []
    areas: list[str] = []
    for name, part in parts.categories():
        if part.score < part.max_score * threshold:
            area, tips = _IMPROVEMENT_ADVICE[name]
            areas.append(area)
            suggestions.extend(tips)
    if overall < 70:
        suggestions.append("Accept AI suggestions to improve your resume score")
    return suggestions, areas


def calculate_generic_score(
    sections: list[Section],
    edits: EditsMap | None = None,
    *,
    config: Mapping[str, Any] | None = None,
) -> GenericResumeScore:
    """Job-agnostic 0-100 score: ATS 30, content 25, structure 20, formatting 15, verbs 10."""
    extract = extract_resume(sections, edits)
    parts = GenericScoreBreakdown(
        ats_optimization=_ats_optimization(sections, extract.text, extract.contact),
        content_quality=_content_quality(sections, extract.text, extract.bullets, edits, config),
        structure_completeness=_structure_completeness(sections),
        formatting_quality=_formatting_quality(sections, extract.section_texts, extract.bullets),
        action_verbs_usage=_action_verbs_usage(extract.bullets),
    )
    overall = total_score(part for _, part in parts.categories())
    suggestions, areas = _advice(parts, overall, lookup_value(config, "generic.improvement_threshold", 0.7))
    logger.debug("generic_score_calculated sections=%s overall=%s", len(sections), overall)
    return GenericResumeScore(
        overall_score=overall,
        breakdown=parts,
        suggestions=suggestions,
        improvement_areas=areas,
    )
