from __future__ import annotations

import math
import re
from typing import Iterable

from resumedoc.schemas.resume import Section
from resumedoc.schemas.scores import ScoreBreakdown

OK = "✅"
WARN = "⚠️"
FAIL = "❌"
INFO = "ℹ️"

STRONG_ACTION_VERBS = (
    "achieved", "improved", "increased", "reduced", "led", "managed", "developed",
    "implemented", "created", "designed", "built", "launched", "optimized",
    "streamlined", "enhanced", "delivered", "executed", "established", "initiated",
    "facilitated", "coordinated", "collaborated", "analyzed", "evaluated", "resolved",
    "exceeded", "transformed", "modernized", "automated", "innovated",
)
IMPACT_STARTERS = STRONG_ACTION_VERBS[:19]

_QUANTIFIED_PATTERNS = (
    re.compile(r"\d+[KMB]\b"),
    re.compile(r"\d+%"),
    re.compile(r"\$\d+"),
    re.compile(r"\d+\+"),
    re.compile(r"\d+\s*(?:years?|months?|days?)", re.IGNORECASE),
    re.compile(r"(?:increased|decreased|improved|reduced|boosted|grew|raised|lowered)\s+by\s+[\d,]+[KMB%]?", re.IGNORECASE),
)
_IMPROVEMENT_WORDS = ("improved", "increased", "decreased", "reduced")
_WORD_RE = re.compile(r"\S+")


def has_quantified_content(text: str) -> bool:
    if any(pattern.search(text) for pattern in _QUANTIFIED_PATTERNS):
        return True
    lowered = text.lower()
    return bool(re.search(r"\d", text)) and any(word in lowered for word in _IMPROVEMENT_WORDS)


def word_count(text: str) -> int:
    return len(_WORD_RE.findall(text))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def breakdown(score: float, max_score: int, details: list[str], *, weighted: bool = False) -> ScoreBreakdown:
    bounded = min(max(score, 0.0), float(max_score))
    return ScoreBreakdown(score=round(bounded, 2), max_score=max_score, details=details, weighted=weighted)


def total_score(parts: Iterable[ScoreBreakdown]) -> int:
    return min(max(round_half_up(sum(part.score for part in parts)), 0), 100)


def heading_matches(section: Section, markers: Iterable[str]) -> bool:
    heading = section.heading.lower()
    return any(marker in heading for marker in markers)


def find_section_index(sections: list[Section], markers: Iterable[str], kinds: Iterable[str] = ()) -> int:
    marker_list = tuple(markers)
    kind_set = set(kinds)
    for index, section in enumerate(sections):
        if section.kind in kind_set or heading_matches(section, marker_list):
            return index
    return -1


def has_section(sections: list[Section], markers: Iterable[str], kinds: Iterable[str] = ()) -> bool:
    return find_section_index(sections, markers, kinds) >= 0


def count_verb_usage(text: str, verbs: Iterable[str] = STRONG_ACTION_VERBS) -> dict[str, int]:
    lowered = text.lower()
    counts: dict[str, int] = {}
    for verb in verbs:
        hits = len(re.findall(rf"\b{re.escape(verb)}\w*", lowered))
        if hits:
            counts[verb] = hits
    return counts
