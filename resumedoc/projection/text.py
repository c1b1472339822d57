from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from resumedoc.normalize.utils import is_numeric_key, normalize_line, split_lines, stringify
from resumedoc.schemas.resume import (
    BulletPoint,
    EditableText,
    EntriesBody,
    Entry,
    EntryField,
    OpaqueBody,
    Section,
    SectionKind,
)

_LABEL_RE = re.compile(r"^([•\-\*]?\s*)([A-Za-z][A-Za-z0-9 &'()/\-]{2,40}):\s*")
_MAX_LABEL_PASSES = 3


@dataclass(slots=True)
class EntrySlots:
    entry: Entry
    fields: list[EntryField] = field(default_factory=list)
    bullets: list[BulletPoint] = field(default_factory=list)


@dataclass(slots=True)
class TextSlots:
    """The editable items a plain-text projection emits, in emission order."""

    summary: list[BulletPoint] = field(default_factory=list)
    entries: list[EntrySlots] = field(default_factory=list)


def _has_text(item: EditableText) -> bool:
    return bool(item.effective.strip())


def text_slots(section: Section) -> TextSlots:
    body = section.body
    if isinstance(body, EntriesBody):
        return TextSlots(
            summary=[bullet for bullet in body.summary if _has_text(bullet)],
            entries=[
                EntrySlots(
                    entry=entry,
                    fields=[item for item in entry.ordered_fields() if _has_text(item)],
                    bullets=[bullet for bullet in entry.bullets if _has_text(bullet)],
                )
                for entry in body.entries
            ],
        )
    return TextSlots(summary=[bullet for bullet in body.bullets if _has_text(bullet)])


def section_lines(section: Section, *, include_heading: bool = False) -> list[str]:
    """Plain-text lines for a section; blank strings separate entries."""
    lines: list[str] = [section.heading] if include_heading else []

    if isinstance(section.body, OpaqueBody):
        lines.extend(section.body.bullets[0].effective.strip().splitlines())
        return lines

    slots = text_slots(section)
    blocks: list[list[str]] = []
    if slots.summary:
        blocks.append([normalize_line(item.effective) for item in slots.summary])
    for entry_slots in slots.entries:
        block = [normalize_line(item.effective) for item in entry_slots.fields]
        block.extend(normalize_line(item.effective) for item in entry_slots.bullets)
        if block:
            blocks.append(block)

    for index, block in enumerate(blocks):
        if index:
            lines.append("")
        lines.extend(block)
    return lines


def section_to_text(section: Section, *, include_heading: bool = False) -> str:
    return "\n".join(section_lines(section, include_heading=include_heading)).strip()


def strip_field_labels(line: str) -> str:
    cleaned = line
    for _ in range(_MAX_LABEL_PASSES):
        match = _LABEL_RE.match(cleaned)
        if not match:
            break
        remainder = cleaned[match.end() :]
        if not remainder.strip():
            break
        cleaned = f"{match.group(1)}{remainder}"
    return cleaned


def clean_body_text(text: str, kind: SectionKind) -> str:
    if kind == "contact":
        return text
    return "\n".join(strip_field_labels(line) for line in text.splitlines())


def _title_key(key: str) -> str:
    spaced = re.sub(r"(?<=[a-z])(?=[A-Z])", " ", key).replace("_", " ")
    return spaced.strip().title()


def _format_value(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return split_lines(value)
    if isinstance(value, list):
        lines: list[str] = []
        for item in value:
            if isinstance(item, (dict, list)):
                if lines:
                    lines.append("")
                lines.extend(_format_value(item))
            elif stringify(item).strip():
                lines.append(f"• {stringify(item).strip()}")
        return lines
    if isinstance(value, dict):
        if isinstance(value.get("fields"), list):
            lines = [
                f"{_title_key(str(item.get('key', '')))}: {stringify(item.get('value')).strip()}"
                for item in value["fields"]
                if isinstance(item, dict) and stringify(item.get("value")).strip()
            ]
            lines.extend(_format_value(value.get("bullets")))
            return lines
        lines = []
        for key, item in value.items():
            if is_numeric_key(key) or str(key).lower() == "fieldorder":
                continue
            if isinstance(item, (list, dict)):
                lines.extend(_format_value(item))
            elif stringify(item).strip():
                lines.append(f"{_title_key(str(key))}: {stringify(item).strip()}")
        return lines
    return [stringify(value)]


def format_raw_body_text(value: Any, kind: SectionKind) -> str:
    """Readable text for an arbitrary raw body, used as the plain-body fallback."""
    return clean_body_text("\n".join(_format_value(value)).strip(), kind)


def _entry_to_raw(entry: Entry) -> dict[str, Any]:
    return {
        "fieldOrder": list(entry.field_order),
        "fields": [{"key": item.key, "value": item.effective} for item in entry.ordered_fields()],
        "bullets": [bullet.effective for bullet in entry.bullets if bullet.effective.strip()],
    }


def to_raw_body(section: Section) -> Any:
    """Serialize effective values back to the parser's raw body shapes."""
    body = section.body
    if isinstance(body, EntriesBody):
        payload: dict[str, Any] = {"entries": [_entry_to_raw(entry) for entry in body.entries]}
        summary = [bullet.effective for bullet in body.summary if bullet.effective.strip()]
        if summary:
            payload["summary"] = summary
        return payload
    if isinstance(body, OpaqueBody):
        return body.bullets[0].effective
    return {"summary": [bullet.effective for bullet in body.bullets if bullet.effective.strip()]}
