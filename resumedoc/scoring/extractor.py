from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from resumedoc.normalize.raw_payload import normalize_section
from resumedoc.normalize.utils import is_bullet_like, normalize_line, split_lines, strip_bullet_prefix
from resumedoc.projection.text import section_to_text
from resumedoc.schemas.render import ContactInfo
from resumedoc.schemas.resume import BulletsBody, EntriesBody, OpaqueBody, Section, role_key

# Committed edits keyed by section heading: a working Section or a raw body payload.
EditsMap = Mapping[str, Any]

_EMAIL_RE = re.compile(r"[\w\.-]+@[\w\.-]+\.\w+")
_PHONE_RE = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_LINKEDIN_RE = re.compile(r"linkedin\.com/in/[\w-]+", re.IGNORECASE)
_WEBSITE_RE = re.compile(r"(?:https?://|www\.)[^\s,|]+", re.IGNORECASE)
_CONTACT_MARKERS = ("contact", "header", "personal")
_CONTACT_FIELD_ALIASES = {
    "name": ("name", "fullname"),
    "email": ("email", "emailaddress", "mail"),
    "phone": ("phone", "phonenumber", "mobile", "telephone"),
    "linkedin": ("linkedin", "linkedinurl"),
    "address": ("address", "location", "city"),
    "website": ("website", "portfolio", "url", "github"),
}


@dataclass(slots=True)
class EntryView:
    fields: dict[str, str] = field(default_factory=dict)
    bullets: list[str] = field(default_factory=list)
    entry_type: str = "other"


@dataclass(slots=True)
class ResumeExtract:
    text: str
    section_texts: list[tuple[str, str]]
    bullets: list[str]
    contact: ContactInfo


def resolve_section(section: Section, edits: EditsMap | None = None) -> Section:
    """The section as scored: a committed edit for its heading wins outright."""
    if edits is None:
        return section
    edit = edits.get(section.heading)
    if edit is None:
        return section
    if isinstance(edit, Section):
        return edit
    if isinstance(edit, Mapping) and isinstance(edit.get("body"), Mapping) and "layout" in edit["body"]:
        return Section.model_validate(edit)
    return normalize_section(section.heading, edit, section_id=section.id)


def _resolved_text(section: Section) -> str:
    if isinstance(section.body, OpaqueBody):
        item = section.body.bullets[0]
        overlaid = item.final is not None or item.suggested is not None
        if not overlaid and section.body_text.strip():
            return section.body_text.strip()
    return section_to_text(section)


def extract_section_text(section: Section, edits: EditsMap | None = None) -> str:
    return _resolved_text(resolve_section(section, edits))


def extract_resume_text(sections: Iterable[Section], edits: EditsMap | None = None) -> str:
    blocks = []
    for section in sections:
        text = extract_section_text(section, edits)
        blocks.append(f"{section.heading}\n{text}".strip())
    return "\n\n".join(block for block in blocks if block)


def extract_section_text_by_heading(
    sections: Iterable[Section],
    heading: str,
    edits: EditsMap | None = None,
) -> str:
    """Text of every section whose heading contains `heading` (case-insensitive)."""
    needle = heading.strip().lower()
    texts = [
        extract_section_text(section, edits)
        for section in sections
        if needle and needle in section.heading.lower()
    ]
    return "\n\n".join(text for text in texts if text)


def _structured_bullets(section: Section) -> list[str]:
    body = section.body
    if isinstance(body, BulletsBody):
        return [item.effective for item in body.bullets]
    if isinstance(body, EntriesBody):
        texts = [item.effective for item in body.summary]
        for entry in body.entries:
            texts.extend(item.effective for item in entry.bullets)
        return texts
    return []


def extract_all_bullets(sections: Iterable[Section], edits: EditsMap | None = None) -> list[str]:
    """Bullets from the structured path plus any bullet-marked text lines, without duplicates."""
    bullets: list[str] = []
    seen: set[str] = set()

    def _add(text: str) -> None:
        clean = normalize_line(text)
        if clean and clean not in seen:
            seen.add(clean)
            bullets.append(clean)

    for section in sections:
        if section.kind == "contact":
            continue
        resolved = resolve_section(section, edits)
        for text in _structured_bullets(resolved):
            _add(text)
        for line in split_lines(_resolved_text(resolved)):
            if is_bullet_like(line):
                _add(strip_bullet_prefix(line))
    return bullets


def extract_structured_entries(section: Section, edits: EditsMap | None = None) -> list[EntryView]:
    resolved = resolve_section(section, edits)
    if not isinstance(resolved.body, EntriesBody):
        return []
    return [
        EntryView(
            fields={key: value for key, value in entry.values().items() if value.strip()},
            bullets=[item.effective for item in entry.bullets if item.effective.strip()],
            entry_type=entry.type,
        )
        for entry in resolved.body.entries
    ]


def _find_contact_section(sections: list[Section]) -> Section | None:
    for section in sections:
        if section.kind == "contact":
            return section
    for section in sections:
        if any(marker in section.heading.lower() for marker in _CONTACT_MARKERS):
            return section
    return None


def _structured_contact(entries: list[EntryView]) -> dict[str, str]:
    values: dict[str, str] = {}
    for entry in entries:
        normalized = {role_key(key): value for key, value in entry.fields.items()}
        for target, aliases in _CONTACT_FIELD_ALIASES.items():
            if target in values:
                continue
            for alias in aliases:
                if normalized.get(alias, "").strip():
                    values[target] = normalized[alias].strip()
                    break
    return values


def _guess_name(lines: list[str]) -> str | None:
    for line in lines[:3]:
        if _EMAIL_RE.search(line) or _PHONE_RE.search(line) or _WEBSITE_RE.search(line) or "linkedin" in line.lower():
            continue
        if 1 < len(line.split()) <= 5 and not any(char.isdigit() for char in line):
            return line
    return None


def extract_contact_info(sections: Iterable[Section], edits: EditsMap | None = None) -> ContactInfo:
    """Best-effort contact fields; structured values override regex matches."""
    ordered = list(sections)
    contact_section = _find_contact_section(ordered)
    if contact_section is not None:
        text = extract_section_text(contact_section, edits)
        structured = _structured_contact(extract_structured_entries(contact_section, edits))
    else:
        text = extract_resume_text(ordered, edits)
        structured = {}

    found: dict[str, str | None] = {
        "email": _match(_EMAIL_RE, text),
        "phone": _match(_PHONE_RE, text),
        "linkedin": _match(_LINKEDIN_RE, text),
        "website": _match(_WEBSITE_RE, text),
        "name": _guess_name(split_lines(text)) if contact_section is not None else None,
        "address": None,
    }
    found.update(structured)
    return ContactInfo(**found)


def _match(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(0).strip() if match else None


def extract_resume(sections: Iterable[Section], edits: EditsMap | None = None) -> ResumeExtract:
    ordered = list(sections)
    return ResumeExtract(
        text=extract_resume_text(ordered, edits),
        section_texts=[(section.heading, extract_section_text(section, edits)) for section in ordered],
        bullets=extract_all_bullets(ordered, edits),
        contact=extract_contact_info(ordered, edits),
    )
