from __future__ import annotations

import json
from typing import Any

from resumedoc.projection.text import to_raw_body
from resumedoc.schemas.resume import Section
from resumedoc.schemas.scores import KeywordSet
from resumedoc.suggestions.merge import source_text, suggestion_slots

RESPONSE_SCHEMA_TEXT = """{
  "sectionName": "<section heading>",
  "type": "<section kind>",
  "entries": [
    {
      "id": "entry-0",
      "metadata": {"<field key>": {"original": "<unchanged original>", "suggested": "<improved value>"}},
      "bullets": [{"id": "bullet-0-0", "original": "<unchanged original>", "suggested": "<improved bullet>"}]
    }
  ]
}"""

REVIEW_SYSTEM_PROMPT = (
    "You are an expert resume reviewer. Improve clarity, impact and ATS readability of one resume section. "
    "Never invent employers, dates, degrees or metrics that are not in the input. "
    "Return JSON only, matching this schema exactly:\n"
    f"{RESPONSE_SCHEMA_TEXT}\n"
    "Rules: keep one output entry per input entry and one output bullet per input bullet, in the same order. "
    "Echo every original value unchanged in 'original'. "
    "List metadata fields in exactly the order given by each entry's fieldOrder."
)

TAILOR_SYSTEM_PROMPT = (
    "You are an expert resume writer tailoring one resume section to a specific job description. "
    "Work from the ORIGINAL content only, weave in the provided keywords where they are truthful, "
    "and never invent experience. Return JSON only, matching this schema exactly:\n"
    f"{RESPONSE_SCHEMA_TEXT}\n"
    "Rules: keep one output entry per input entry and one output bullet per input bullet, in the same order. "
    "Echo every original value unchanged in 'original'. "
    "List metadata fields in exactly the order given by each entry's fieldOrder."
)

KEYWORD_SYSTEM_PROMPT = (
    "You extract ATS keywords from job descriptions. Return JSON only: "
    '{"categories": [{"category": "<name>", "keywords": ["<keyword>", ...]}]}. '
    "Use the categories 'Technical Skills', 'Hard Skills', 'Soft Skills' and, when useful, "
    "'Certifications' or 'Tools'. Keywords must appear in or be clearly implied by the job description; "
    "prefer the exact wording used there. At most 15 keywords per category."
)

_SKILLS_RULE = (
    "Skills section rule: lines shaped like 'Category: item, item' map to metadata fields "
    "'category' and 'name'; keep the category label and suggest only the item list."
)


def build_suggestion_request(section: Section) -> dict[str, Any]:
    """The section in the provider schema, with positional ids and original values."""
    entries: list[dict[str, Any]] = []
    for index, slot in enumerate(suggestion_slots(section)):
        entries.append(
            {
                "id": f"entry-{index}",
                "fieldOrder": [item.key for item in slot.fields],
                "metadata": {item.key: {"original": source_text(item)} for item in slot.fields},
                "bullets": [
                    {"id": f"bullet-{index}-{position}", "original": source_text(bullet)}
                    for position, bullet in enumerate(slot.bullets)
                ],
            }
        )
    return {"sectionName": section.heading, "type": section.kind, "entries": entries}


def _field_order_instruction(request: dict[str, Any]) -> str:
    lines = []
    for entry in request["entries"]:
        if entry["fieldOrder"]:
            lines.append(f"- {entry['id']}: {', '.join(entry['fieldOrder'])}")
    if not lines:
        return "This section has no metadata fields; return bullets only."
    return "Preserve this fieldOrder for each entry's metadata:\n" + "\n".join(lines)


def _section_payload(section: Section) -> str:
    raw = section.raw_body if section.raw_body is not None else to_raw_body(section)
    return json.dumps(raw, ensure_ascii=False, indent=2)


def _section_rules(section: Section) -> str:
    return _SKILLS_RULE if section.kind == "skills" else ""


def build_review_prompt(section: Section) -> str:
    request = build_suggestion_request(section)
    parts = [
        f"Section heading: {section.heading}",
        f"Section type: {section.kind}",
        "Raw section payload:",
        _section_payload(section),
        "Section to review (respond with the same entries and bullets):",
        json.dumps(request, ensure_ascii=False, indent=2),
        _field_order_instruction(request),
        _section_rules(section),
    ]
    return "\n\n".join(part for part in parts if part)


def _keyword_lines(keywords: KeywordSet | None) -> str:
    if keywords is None or not keywords.categories:
        return "No keyword list was provided; infer the important terms from the job description."
    lines = [
        f"- {category.category}: {', '.join(category.keywords)}"
        for category in keywords.categories
        if category.keywords
    ]
    return "Target keywords:\n" + "\n".join(lines)


def build_tailor_prompt(section: Section, job_description: str, keywords: KeywordSet | None = None) -> str:
    request = build_suggestion_request(section)
    parts = [
        "Job description:",
        job_description.strip(),
        _keyword_lines(keywords),
        f"Section heading: {section.heading}",
        f"Section type: {section.kind}",
        "Raw section payload (original content):",
        _section_payload(section),
        "Section to tailor (respond with the same entries and bullets):",
        json.dumps(request, ensure_ascii=False, indent=2),
        _field_order_instruction(request),
        _section_rules(section),
    ]
    return "\n\n".join(part for part in parts if part)


def build_keyword_prompt(job_description: str) -> str:
    return f"Job description:\n\n{job_description.strip()}"
