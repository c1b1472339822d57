from __future__ import annotations

from typing import Iterable

from resumedoc.projection.render import to_renderable
from resumedoc.schemas.render import ExportPayload
from resumedoc.schemas.resume import Section
from resumedoc.scoring.extractor import EditsMap, extract_contact_info, resolve_section


def build_export_payload(
    sections: Iterable[Section],
    edits: EditsMap | None = None,
    *,
    template_id: str,
) -> ExportPayload:
    """Contact block plus renderable sections; the contact section itself is not repeated."""
    ordered = list(sections)
    rendered = [
        to_renderable(resolve_section(section, edits))
        for section in ordered
        if section.kind != "contact"
    ]
    return ExportPayload(
        template_id=template_id,
        contact=extract_contact_info(ordered, edits),
        sections=[section for section in rendered if section.summary or section.entries],
    )
