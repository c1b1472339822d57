from __future__ import annotations

import logging
from collections import deque

from resumedoc.normalize.utils import normalize_line, split_lines, strip_leading_glyph
from resumedoc.projection.text import text_slots
from resumedoc.schemas.resume import (
    BulletPoint,
    BulletsBody,
    EditableText,
    Entry,
    OpaqueBody,
    Section,
)

logger = logging.getLogger(__name__)


def _assign(item: EditableText, line: str, *, bullet: bool) -> None:
    if normalize_line(line) == normalize_line(item.effective):
        return
    item.final = strip_leading_glyph(line) if bullet else line.strip()


def _new_bullet(line: str) -> BulletPoint:
    return BulletPoint(original="", final=strip_leading_glyph(line))


def _replace_bullets(existing: list[BulletPoint], lines: list[str]) -> list[BulletPoint]:
    emitted = [bullet for bullet in existing if bullet.effective.strip()]
    updated: list[BulletPoint] = []
    for index, line in enumerate(lines):
        if index < len(emitted):
            _assign(emitted[index], line, bullet=True)
            updated.append(emitted[index])
        else:
            updated.append(_new_bullet(line))
    return updated


def reconcile_section_text(section: Section, text: str) -> Section:
    """Absorb an edited plain-text block into a copy of the section.

    Lines are consumed positionally in projection order so entry, field and
    bullet ids survive; changed lines become user `final` values. Slots left
    without a line are cleared and surplus lines extend the last entry.
    """
    updated = section.model_copy(deep=True)
    lines = split_lines(text)
    body = updated.body

    if isinstance(body, OpaqueBody):
        joined = "\n".join(lines)
        if joined != "\n".join(split_lines(body.bullets[0].effective)):
            body.bullets[0].final = joined
        return updated

    if isinstance(body, BulletsBody):
        body.bullets = _replace_bullets(body.bullets, lines)
        return updated

    slots = text_slots(updated)
    queue = deque(lines)

    filled_summary: list[BulletPoint] = []
    for item in slots.summary:
        if not queue:
            break
        _assign(item, queue.popleft(), bullet=True)
        filled_summary.append(item)
    body.summary = filled_summary

    unset = 0
    for entry_slots in slots.entries:
        for item in entry_slots.fields:
            if queue:
                _assign(item, queue.popleft(), bullet=False)
            else:
                item.final = ""
                unset += 1
        dropped: set[str] = set()
        for bullet in entry_slots.bullets:
            if queue:
                _assign(bullet, queue.popleft(), bullet=True)
            else:
                dropped.add(bullet.id)
        if dropped:
            unset += len(dropped)
            entry_slots.entry.bullets = [bullet for bullet in entry_slots.entry.bullets if bullet.id not in dropped]

    if unset:
        logger.debug("reconciler_slots_cleared section=%s count=%s", updated.heading, unset)

    if queue:
        extra = [_new_bullet(line) for line in queue]
        if body.entries:
            body.entries[-1].bullets.extend(extra)
        else:
            body.entries.append(Entry(bullets=extra))
        logger.info("reconciler_leftover_lines section=%s count=%s", updated.heading, len(extra))

    return updated
