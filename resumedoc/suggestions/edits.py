from __future__ import annotations

from resumedoc.core.errors import ItemNotFoundError
from resumedoc.schemas.resume import EditableText, Section


def _locate(section: Section, item_id: str) -> EditableText:
    item = section.find_item(item_id)
    if item is None:
        raise ItemNotFoundError(f"No bullet or field '{item_id}' in section '{section.heading}'.")
    return item


def accept_suggestion(section: Section, item_id: str) -> Section:
    updated = section.model_copy(deep=True)
    item = _locate(updated, item_id)
    if item.suggested is not None:
        item.final = item.suggested
        item.suggested = None
    return updated


def reject_suggestion(section: Section, item_id: str) -> Section:
    updated = section.model_copy(deep=True)
    _locate(updated, item_id).suggested = None
    return updated


def edit_item(section: Section, item_id: str, text: str) -> Section:
    updated = section.model_copy(deep=True)
    item = _locate(updated, item_id)
    item.final = text.strip()
    item.suggested = None
    return updated


def accept_all_suggestions(section: Section) -> Section:
    updated = section.model_copy(deep=True)
    for item in updated.iter_items():
        if item.has_suggestion:
            item.final = item.suggested
        item.suggested = None
    return updated
