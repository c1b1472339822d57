from __future__ import annotations

import logging
import re
from typing import Any, Iterable

from resumedoc.core.errors import ResumeParseError
from resumedoc.normalize.utils import (
    is_blank_value,
    is_numeric_key,
    normalize_line,
    parse_json_text,
    sanitize_payload,
    sanitize_text,
    split_lines,
    strip_bullet_prefix,
    stringify,
)
from resumedoc.projection.text import format_raw_body_text
from resumedoc.schemas.resume import (
    BulletPoint,
    BulletsBody,
    EntriesBody,
    Entry,
    EntryField,
    EntryType,
    OpaqueBody,
    Section,
    SectionBody,
    SectionKind,
    role_key,
)

logger = logging.getLogger(__name__)

_KIND_MARKERS: tuple[tuple[SectionKind, tuple[str, ...]], ...] = (
    ("contact", ("contact", "personal info", "personal details", "header")),
    ("summary", ("summary", "objective", "profile", "about")),
    ("experience", ("experience", "work", "employment")),
    ("education", ("education", "academic")),
    ("skills", ("skill",)),
    ("projects", ("project",)),
    ("certifications", ("certif", "licen")),
)

_KEY_ALIASES = {
    "school": "institution",
    "university": "institution",
    "college": "institution",
    "role": "title",
    "position": "title",
    "jobtitle": "title",
    "date": "dates",
    "graduationdate": "dates",
    "period": "dates",
    "major": "degree",
    "projectname": "name",
}
_BULLET_KEYS = {"bullets", "achievements", "highlights", "responsibilities", "details", "summary"}
_SPLIT_BULLET_KEYS = {"description"}
_SKIP_KEYS = {"fieldorder", "fields", "entries"}
_LABELED_LINE_RE = re.compile(r"^\s*([^:]{1,60}?)\s*:\s*(.+?)\s*$")
_DEFAULT_HEADING = "Untitled Section"


def determine_section_kind(heading: str) -> SectionKind:
    lowered = heading.strip().lower()
    for kind, markers in _KIND_MARKERS:
        if any(marker in lowered for marker in markers):
            return kind
    return "other"


def canonical_field_key(key: str) -> str:
    return _KEY_ALIASES.get(role_key(key), key.strip())


def _infer_entry_type(keys: Iterable[str], kind: SectionKind) -> EntryType:
    normalized = {role_key(key) for key in keys}
    if normalized & {"company", "employer"}:
        return "job"
    if normalized & {"institution", "degree"}:
        return "education"
    if normalized & {"issuer", "credentialid"}:
        return "certification"
    if normalized & {"technologies", "techstack", "link", "url"}:
        return "project"
    return {
        "experience": "job",
        "education": "education",
        "projects": "project",
        "certifications": "certification",
    }.get(kind, "other")


def _bullet_texts(value: Any) -> list[str]:
    if isinstance(value, str):
        return [strip_bullet_prefix(line) or line for line in split_lines(value)]
    if not isinstance(value, list):
        return []
    texts: list[str] = []
    for item in value:
        if isinstance(item, dict):
            text = stringify(item.get("text") or item.get("original") or item.get("value") or "")
            if not text.strip():
                text = stringify(item)
        else:
            text = stringify(item)
        if not is_blank_value(text):
            texts.append(text.strip())
    return texts


def _field_text(value: Any) -> str:
    if isinstance(value, list) and all(not isinstance(item, (dict, list)) for item in value):
        return ", ".join(stringify(item).strip() for item in value if stringify(item).strip())
    return stringify(value).strip()


def _add_field(fields: dict[str, EntryField], stored: dict[str, str], key: Any, value: Any) -> None:
    """Store one field and record, in `stored`, the key each raw key landed under."""
    if is_numeric_key(key):
        return
    raw_key = str(key).strip()
    if not raw_key:
        return
    text = _field_text(value)
    if is_blank_value(text):
        return
    canonical = canonical_field_key(raw_key)
    if canonical in fields:
        canonical = raw_key
    if canonical in fields:
        return
    fields[canonical] = EntryField(key=canonical, original=text)
    stored.setdefault(raw_key, canonical)


def _ordered_keys(order: Any, fields: dict[str, EntryField], stored: dict[str, str]) -> list[str]:
    if not isinstance(order, list):
        return list(fields)
    keys: list[str] = []
    for key in order:
        if is_numeric_key(key) or not isinstance(key, str):
            continue
        name = key.strip()
        # A raw key that collided with an alias keeps its own slot.
        candidates = (stored[name],) if name in stored else (canonical_field_key(name), name)
        for candidate in candidates:
            if candidate in fields and candidate not in keys:
                keys.append(candidate)
                break
    return keys


def normalize_entry(raw: dict[str, Any], kind: SectionKind = "other") -> Entry | None:
    """Build one entry from a flat field map or an explicit {fieldOrder, fields, bullets} shape."""
    fields: dict[str, EntryField] = {}
    stored: dict[str, str] = {}
    bullets: list[str] = []

    if isinstance(raw.get("fields"), list):
        for item in raw["fields"]:
            if isinstance(item, dict) and "key" in item:
                _add_field(fields, stored, item.get("key"), item.get("value"))
        bullets.extend(_bullet_texts(raw.get("bullets")))
    else:
        for key, value in raw.items():
            if is_numeric_key(key):
                continue
            lowered = role_key(str(key))
            if lowered in _SKIP_KEYS:
                continue
            if lowered in _BULLET_KEYS and isinstance(value, list):
                bullets.extend(_bullet_texts(value))
            elif lowered in _SPLIT_BULLET_KEYS and isinstance(value, (str, list)):
                bullets.extend(_bullet_texts(value))
            else:
                _add_field(fields, stored, key, value)

    if not fields and not bullets:
        return None

    return Entry(
        type=_infer_entry_type(fields, kind),
        fields=list(fields.values()),
        field_order=_ordered_keys(raw.get("fieldOrder"), fields, stored),
        bullets=[BulletPoint(original=text) for text in bullets],
    )


def _split_labeled_lines(lines: list[str]) -> tuple[list[str], list[Entry]]:
    remaining: list[str] = []
    entries: list[Entry] = []
    for line in lines:
        match = _LABELED_LINE_RE.match(line)
        if not match:
            remaining.append(line)
            continue
        entries.append(
            Entry(
                fields=[
                    EntryField(key="category", original=match.group(1).strip()),
                    EntryField(key="name", original=match.group(2).strip()),
                ],
                field_order=["category", "name"],
            )
        )
    return remaining, entries


def _summary_lines(value: Any) -> list[str]:
    if isinstance(value, str):
        return split_lines(value)
    if isinstance(value, list):
        lines = [stringify(item).strip() for item in value if not isinstance(item, (dict, list))]
        return [line for line in lines if not is_blank_value(line)]
    return []


def _opaque(value: Any) -> OpaqueBody:
    text = value if isinstance(value, str) else stringify(value)
    return OpaqueBody(bullets=[BulletPoint(original=text.strip())])


def _from_items(
    items: list[Any],
    kind: SectionKind,
    *,
    leading_summary: list[str],
    split_labeled: bool,
) -> SectionBody:
    summary = list(leading_summary)
    entries: list[Entry] = []
    for item in items:
        if isinstance(item, dict):
            entry = normalize_entry(item, kind)
            if entry is not None:
                entries.append(entry)
        elif isinstance(item, list):
            summary.extend(_summary_lines(item))
        elif not is_blank_value(stringify(item)):
            summary.append(stringify(item).strip())

    if split_labeled:
        summary, labeled = _split_labeled_lines(summary)
        entries = labeled + entries

    if entries:
        return EntriesBody(summary=[BulletPoint(original=line) for line in summary], entries=entries)
    if summary:
        return BulletsBody(bullets=[BulletPoint(original=line) for line in summary])
    return _opaque("")


def _is_flat_scalar_map(value: dict[str, Any]) -> bool:
    return bool(value) and all(not isinstance(item, (dict, list)) for item in value.values())


def normalize_raw_body(
    body: Any,
    kind: SectionKind = "other",
    *,
    split_labeled_lines: bool | None = None,
    heading: str = "",
) -> SectionBody:
    """Turn an arbitrary parser payload into a section body. Never raises."""
    split_labeled = kind == "skills" if split_labeled_lines is None else split_labeled_lines

    if isinstance(body, list):
        return _from_items(body, kind, leading_summary=[], split_labeled=split_labeled)

    if isinstance(body, dict):
        entries = body.get("entries")
        summary = body.get("summary")
        if isinstance(entries, list):
            return _from_items(entries, kind, leading_summary=_summary_lines(summary), split_labeled=split_labeled)
        if isinstance(summary, (list, str)):
            return _from_items(_summary_lines(summary), kind, leading_summary=[], split_labeled=split_labeled)
        if kind == "contact" and _is_flat_scalar_map(body):
            entry = normalize_entry(body, kind)
            if entry is not None:
                return EntriesBody(entries=[entry])

    if body is not None and not isinstance(body, str):
        logger.warning(
            "normalizer_opaque_fallback heading=%s shape=%s",
            heading or "-",
            type(body).__name__,
        )
    return _opaque(body)


def normalize_section(
    heading: str,
    body: Any,
    *,
    body_text: str | None = None,
    section_id: str | None = None,
    split_labeled_lines: bool | None = None,
) -> Section:
    clean_heading = normalize_line(sanitize_text(heading or "")) or _DEFAULT_HEADING
    clean_body = sanitize_payload(body)
    kind = determine_section_kind(clean_heading)
    text = sanitize_text(body_text).strip() if isinstance(body_text, str) else ""
    section = Section(
        heading=clean_heading,
        kind=kind,
        body=normalize_raw_body(
            clean_body,
            kind,
            split_labeled_lines=split_labeled_lines,
            heading=clean_heading,
        ),
        body_text=text or format_raw_body_text(clean_body, kind),
        raw_body=clean_body,
    )
    if section_id:
        section.id = section_id
    return section


def _unique_heading(heading: str, seen: dict[str, int]) -> str:
    key = heading.lower()
    count = seen.get(key, 0)
    seen[key] = count + 1
    if not count:
        return heading
    candidate = f"{heading} ({count + 1})"
    while candidate.lower() in seen:
        count += 1
        candidate = f"{heading} ({count + 1})"
    seen[candidate.lower()] = 1
    return candidate


def normalize_resume_payload(payload: Any) -> list[Section]:
    """Normalize a parser payload {"sections": [{"heading", "body"}]} into sections.

    Headings are made unique within the resume; side tables are keyed by heading.
    Raises ResumeParseError when no sections can be recovered.
    """
    data = payload
    if isinstance(payload, (str, bytes)):
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        try:
            data = parse_json_text(text)
        except ValueError as exc:
            raise ResumeParseError("Resume payload is not valid JSON.") from exc

    raw_sections = data.get("sections") if isinstance(data, dict) else None
    if not isinstance(raw_sections, list):
        raise ResumeParseError("Resume payload must be an object with a 'sections' array.")

    sections: list[Section] = []
    seen: dict[str, int] = {}
    for index, item in enumerate(raw_sections):
        if not isinstance(item, dict):
            logger.warning("normalizer_section_skipped index=%s shape=%s", index, type(item).__name__)
            continue
        heading = stringify(item.get("heading")).strip()
        body = item.get("body")
        if not heading and body in (None, "", [], {}):
            continue
        body_text = item.get("text") if isinstance(item.get("text"), str) else None
        section = normalize_section(heading, body, body_text=body_text)
        section.heading = _unique_heading(section.heading, seen)
        sections.append(section)

    if not sections:
        raise ResumeParseError("Resume payload contained no usable sections.")
    return sections
