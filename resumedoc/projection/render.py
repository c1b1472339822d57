from __future__ import annotations

from resumedoc.normalize.utils import normalize_line, split_lines
from resumedoc.projection.line_classifier import parse_text_block
from resumedoc.projection.text import clean_body_text
from resumedoc.schemas.render import RenderableEntry, RenderableSection
from resumedoc.schemas.resume import (
    PRIMARY_KEYS,
    SECONDARY_KEYS,
    META_KEYS,
    EntriesBody,
    Entry,
    OpaqueBody,
    Section,
    role_key,
)

_SUMMARY_ONLY_MARKERS = ("summary", "objective", "profile", "about", "overview", "introduction")
_ROLE_KEYS = set(PRIMARY_KEYS) | set(SECONDARY_KEYS) | set(META_KEYS) | {"meta"}


def _label(key: str) -> str:
    return key.replace("_", " ").strip().title()


def _is_summary_only(section: Section) -> bool:
    heading = section.heading.lower()
    return section.kind == "summary" or any(marker in heading for marker in _SUMMARY_ONLY_MARKERS)


def _render_entry(entry: Entry) -> RenderableEntry:
    roles = entry.roles()
    bullets = [normalize_line(bullet.effective) for bullet in entry.bullets if bullet.effective.strip()]
    extras = [
        f"{_label(item.key)}: {normalize_line(item.effective)}"
        for item in entry.ordered_fields()
        if role_key(item.key) not in _ROLE_KEYS and item.effective.strip()
    ]
    return RenderableEntry(
        primary=roles.primary,
        secondary=roles.secondary,
        meta=roles.meta,
        bullets=extras + bullets,
    )


def _category_line(entry: Entry) -> str | None:
    values = entry.values()
    if list(values) != ["category", "name"]:
        return None
    category, name = values["category"].strip(), values["name"].strip()
    if not name:
        return None
    return f"{category}: {name}" if category else name


def _render_text(section: Section, text: str) -> RenderableSection:
    cleaned = clean_body_text(text, section.kind)
    if _is_summary_only(section):
        return RenderableSection(heading=section.heading, kind=section.kind, summary=split_lines(cleaned))

    block = parse_text_block(cleaned)
    return RenderableSection(
        heading=section.heading,
        kind=section.kind,
        summary=block.summary,
        entries=[
            RenderableEntry(primary=entry.primary, secondary=entry.secondary, meta=entry.meta, bullets=entry.bullets)
            for entry in block.entries
        ],
    )


def to_renderable(section: Section) -> RenderableSection:
    """Layout shape for the rendering collaborator.

    Structured bodies map directly; opaque bodies fall back to the line classifier.
    """
    body = section.body
    if isinstance(body, OpaqueBody):
        item = body.bullets[0]
        overlaid = item.final is not None or item.suggested is not None
        return _render_text(section, item.effective if overlaid else (section.body_text or item.original))

    if isinstance(body, EntriesBody):
        summary = [normalize_line(item.effective) for item in body.summary if item.effective.strip()]
        entries: list[RenderableEntry] = []
        for entry in body.entries:
            category_line = _category_line(entry)
            if category_line is not None:
                summary.append(category_line)
                continue
            rendered = _render_entry(entry)
            if rendered.primary or rendered.secondary or rendered.meta or rendered.bullets:
                entries.append(rendered)
        return RenderableSection(heading=section.heading, kind=section.kind, summary=summary, entries=entries)

    return RenderableSection(
        heading=section.heading,
        kind=section.kind,
        summary=[normalize_line(item.effective) for item in body.bullets if item.effective.strip()],
    )
