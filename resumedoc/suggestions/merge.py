from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from resumedoc.core.errors import ProviderFormatError
from resumedoc.normalize.raw_payload import canonical_field_key
from resumedoc.normalize.utils import is_blank_value, is_numeric_key, normalize_line, parse_json_text, stringify
from resumedoc.schemas.resume import BulletPoint, EditableText, EntriesBody, Entry, EntryField, Section
from resumedoc.schemas.suggestions import EntrySuggestion, SuggestedText, SuggestionResponse

logger = logging.getLogger(__name__)

_MD_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_MD_EMPHASIS_RE = re.compile(r"(\*\*|__)(.+?)\1")
_MD_ITALIC_RE = re.compile(r"(?<![\w*])([*_])(?!\s)(.+?)(?<!\s)\1(?![\w*])")
_MD_CODE_RE = re.compile(r"`([^`]*)`")
_MD_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+", re.MULTILINE)


@dataclass(slots=True)
class SuggestionSlot:
    """One positional unit exchanged with the provider: a summary block or an entry."""

    entry: Entry | None
    fields: list[EntryField] = field(default_factory=list)
    bullets: list[BulletPoint] = field(default_factory=list)


def suggestion_slots(section: Section) -> list[SuggestionSlot]:
    body = section.body
    if isinstance(body, EntriesBody):
        slots = [SuggestionSlot(entry=None, bullets=body.summary)] if body.summary else []
        slots.extend(
            SuggestionSlot(entry=entry, fields=entry.ordered_fields(), bullets=entry.bullets)
            for entry in body.entries
        )
        return slots
    return [SuggestionSlot(entry=None, bullets=body.bullets)]


def source_text(item: EditableText) -> str:
    return item.original if item.original.strip() else item.effective


def strip_markdown(text: str) -> str:
    cleaned = _MD_LINK_RE.sub(r"\1", text)
    cleaned = _MD_EMPHASIS_RE.sub(r"\2", cleaned)
    cleaned = _MD_ITALIC_RE.sub(r"\2", cleaned)
    cleaned = _MD_CODE_RE.sub(r"\1", cleaned)
    cleaned = _MD_HEADING_RE.sub("", cleaned)
    return cleaned.strip()


def extract_string(value: Any) -> str:
    """Resolve a provider value to text: suggested, then original, then JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (bool, int, float)):
        return stringify(value)
    if isinstance(value, dict):
        for key in ("suggested", "original", "text", "value"):
            if key in value:
                text = extract_string(value[key])
                if not is_blank_value(text):
                    return text
        return json.dumps(value, ensure_ascii=False) if value else ""
    if isinstance(value, list):
        if all(not isinstance(item, (dict, list)) for item in value):
            return ", ".join(text for text in (extract_string(item) for item in value) if text)
        return json.dumps(value, ensure_ascii=False)
    return stringify(value)


def _echoed_original(value: Any) -> str:
    if isinstance(value, dict):
        return extract_string(value.get("original"))
    return ""


def _suggested_text(position: int, value: Any) -> SuggestedText | None:
    original = _echoed_original(value)
    suggested = extract_string(value)
    if is_blank_value(suggested) and is_blank_value(original):
        return None
    if is_blank_value(suggested):
        suggested = original
    return SuggestedText(position=position, original=original, suggested=suggested)


def _provider_fields(raw: dict[str, Any]) -> dict[str, Any]:
    metadata = raw.get("metadata")
    if isinstance(metadata, dict):
        return metadata
    fields = raw.get("fields")
    if isinstance(fields, dict):
        return fields
    if isinstance(fields, list):
        return {
            str(item["key"]): item.get("value")
            for item in fields
            if isinstance(item, dict) and item.get("key") is not None
        }
    return {}


def _parse_entry(position: int, raw: Any) -> EntrySuggestion | None:
    if not isinstance(raw, dict):
        return None

    fields: dict[str, SuggestedText] = {}
    for key, value in _provider_fields(raw).items():
        if is_numeric_key(key):
            continue
        text = _suggested_text(0, value)
        if text is not None:
            fields[str(key).strip()] = text

    bullets: list[SuggestedText] = []
    raw_bullets = raw.get("bullets")
    if isinstance(raw_bullets, list):
        for index, value in enumerate(raw_bullets):
            text = _suggested_text(index, value)
            if text is not None:
                bullets.append(text)

    if not fields and not bullets:
        return None
    entry_id = raw.get("id")
    return EntrySuggestion(
        position=position,
        id=str(entry_id) if entry_id is not None else None,
        fields=fields,
        bullets=bullets,
    )


def parse_suggestion_response(payload: Any) -> SuggestionResponse:
    """Validate a provider payload (dict or raw text). Raises ProviderFormatError."""
    data = payload
    if isinstance(payload, str):
        try:
            data = parse_json_text(payload)
        except ValueError as exc:
            raise ProviderFormatError("Suggestion response is not valid JSON.") from exc

    if not isinstance(data, dict):
        raise ProviderFormatError("Suggestion response must be a JSON object.")
    entries = data.get("entries")
    if not isinstance(entries, list):
        raise ProviderFormatError("Suggestion response is missing the 'entries' array.")

    parsed = [entry for entry in (_parse_entry(index, raw) for index, raw in enumerate(entries)) if entry]
    return SuggestionResponse(
        section_name=extract_string(data.get("sectionName")),
        type=extract_string(data.get("type")) or "other",
        entries=parsed,
    )


def build_fallback_response(section: Section) -> SuggestionResponse:
    """Provider-shaped response that suggests every value unchanged."""
    entries: list[EntrySuggestion] = []
    for position, slot in enumerate(suggestion_slots(section)):
        entries.append(
            EntrySuggestion(
                position=position,
                fields={
                    item.key: SuggestedText(original=item.original, suggested=item.original)
                    for item in slot.fields
                },
                bullets=[
                    SuggestedText(position=index, original=bullet.original, suggested=bullet.original)
                    for index, bullet in enumerate(slot.bullets)
                ],
            )
        )
    return SuggestionResponse(section_name=section.heading, type=section.kind, entries=entries, fallback=True)


def resolve_suggestion_response(section: Section, payload: Any) -> SuggestionResponse:
    try:
        return parse_suggestion_response(payload)
    except ProviderFormatError as exc:
        logger.warning("suggestion_response_fallback section=%s reason=%s", section.heading, exc)
        return build_fallback_response(section)


def _check_echo(heading: str, item: EditableText, echoed: str) -> None:
    if is_blank_value(echoed):
        return
    if normalize_line(echoed) != normalize_line(source_text(item)):
        logger.info("suggestion_original_mismatch section=%s item=%s", heading, item.id)


def _clean_suggestion(text: str, fallback: str) -> str:
    cleaned = strip_markdown(text)
    return fallback if is_blank_value(cleaned) else cleaned


def _take_field(provided: dict[str, SuggestedText], key: str) -> SuggestedText | None:
    if key in provided:
        return provided.pop(key)
    for provider_key in list(provided):
        if canonical_field_key(provider_key) == key:
            return provided.pop(provider_key)
    return None


def _merge_slot(heading: str, slot: SuggestionSlot, suggestion: EntrySuggestion | None) -> None:
    provided = dict(suggestion.fields) if suggestion else {}
    for item in slot.fields:
        match = _take_field(provided, item.key)
        if match is None:
            item.suggested = item.original
            continue
        _check_echo(heading, item, match.original)
        item.suggested = _clean_suggestion(match.suggested, item.original)

    if slot.entry is not None:
        for key, match in provided.items():
            canonical = canonical_field_key(key)
            if slot.entry.field(canonical) is not None or is_blank_value(match.suggested):
                continue
            slot.entry.add_field(EntryField(key=canonical, suggested=strip_markdown(match.suggested)))

    by_position = {item.position: item for item in suggestion.bullets} if suggestion else {}
    for index, bullet in enumerate(slot.bullets):
        match = by_position.get(index)
        if match is None:
            bullet.suggested = bullet.original
            continue
        _check_echo(heading, bullet, match.original)
        bullet.suggested = _clean_suggestion(match.suggested, bullet.original)


def merge_suggestions(section: Section, response: SuggestionResponse) -> Section:
    """Overlay suggestions on a copy of the section.

    Entries and bullets match by position; fields follow the section's own
    field order, with unknown provider fields appended. `original` and
    `final` are never touched.
    """
    merged = section.model_copy(deep=True)
    slots = suggestion_slots(merged)
    by_position = {entry.position: entry for entry in response.entries}
    for index, slot in enumerate(slots):
        _merge_slot(merged.heading, slot, by_position.get(index))

    ignored = [position for position in by_position if position >= len(slots)]
    if ignored:
        logger.debug("suggestion_entries_ignored section=%s count=%s", merged.heading, len(ignored))
    return merged


def apply_provider_suggestions(section: Section, payload: Any) -> Section:
    return merge_suggestions(section, resolve_suggestion_response(section, payload))
