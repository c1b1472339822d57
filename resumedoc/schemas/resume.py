from __future__ import annotations

import uuid
from typing import Annotated, Any, Iterator, Literal, Union

from pydantic import BaseModel, Field, model_validator

SectionKind = Literal[
    "contact",
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "certifications",
    "other",
]
EntryType = Literal["job", "education", "project", "certification", "other"]

# Role lookup keys are compared lowercased with "_" removed.
PRIMARY_KEYS = ("company", "employer", "organization", "institution", "name", "projectname", "primary")
SECONDARY_KEYS = ("title", "degree", "secondary")
META_KEYS = ("dates", "location", "gpa")


def new_id() -> str:
    return uuid.uuid4().hex


def role_key(key: str) -> str:
    return key.strip().lower().replace("_", "").replace(" ", "")


class EditableText(BaseModel):
    id: str = Field(default_factory=new_id)
    original: str = ""
    suggested: str | None = None
    final: str | None = None

    @property
    def effective(self) -> str:
        if self.final is not None:
            return self.final
        if self.suggested is not None:
            return self.suggested
        return self.original

    @property
    def has_suggestion(self) -> bool:
        return self.suggested is not None and self.suggested != self.original

    @property
    def has_edit(self) -> bool:
        return self.final is not None


class BulletPoint(EditableText):
    pass


class EntryField(EditableText):
    key: str


class EntryRoles(BaseModel):
    primary: str = ""
    secondary: str = ""
    meta: str = ""


class Entry(BaseModel):
    id: str = Field(default_factory=new_id)
    type: EntryType = "other"
    fields: list[EntryField] = Field(default_factory=list)
    field_order: list[str] = Field(default_factory=list)
    bullets: list[BulletPoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def _reconcile_field_order(self) -> "Entry":
        keys = [field.key for field in self.fields]
        order = [key for key in dict.fromkeys(self.field_order) if key in keys]
        order.extend(key for key in keys if key not in order)
        self.field_order = order
        return self

    def field(self, key: str) -> EntryField | None:
        for field in self.fields:
            if field.key == key:
                return field
        return None

    def ordered_fields(self) -> list[EntryField]:
        by_key = {field.key: field for field in self.fields}
        return [by_key[key] for key in self.field_order if key in by_key]

    def add_field(self, field: EntryField) -> None:
        self.fields.append(field)
        if field.key not in self.field_order:
            self.field_order.append(field.key)

    def values(self) -> dict[str, str]:
        return {field.key: field.effective for field in self.ordered_fields()}

    def roles(self) -> EntryRoles:
        values = {role_key(key): value.strip() for key, value in self.values().items() if value.strip()}
        primary = next((values[key] for key in PRIMARY_KEYS if key in values), "")
        secondary = next((values[key] for key in SECONDARY_KEYS if key in values), "")
        meta_parts: list[str] = []
        for key in META_KEYS:
            value = values.get(key)
            if not value:
                continue
            meta_parts.append(f"GPA: {value}" if key == "gpa" else value)
        meta = " | ".join(meta_parts) or values.get("meta", "")
        return EntryRoles(primary=primary, secondary=secondary, meta=meta)


class BulletsBody(BaseModel):
    layout: Literal["bullets"] = "bullets"
    bullets: list[BulletPoint] = Field(default_factory=list)


class EntriesBody(BaseModel):
    layout: Literal["entries"] = "entries"
    summary: list[BulletPoint] = Field(default_factory=list)
    entries: list[Entry] = Field(default_factory=list)


class OpaqueBody(BaseModel):
    layout: Literal["opaque"] = "opaque"
    bullets: list[BulletPoint] = Field(default_factory=lambda: [BulletPoint()], min_length=1, max_length=1)


SectionBody = Annotated[Union[BulletsBody, EntriesBody, OpaqueBody], Field(discriminator="layout")]


class Section(BaseModel):
    id: str = Field(default_factory=new_id)
    heading: str
    kind: SectionKind = "other"
    body: SectionBody
    body_text: str = ""
    raw_body: Any = None

    @property
    def layout(self) -> str:
        return self.body.layout

    def iter_items(self) -> Iterator[EditableText]:
        body = self.body
        if isinstance(body, EntriesBody):
            yield from body.summary
            for entry in body.entries:
                yield from entry.ordered_fields()
                yield from entry.bullets
            return
        yield from body.bullets

    def find_item(self, item_id: str) -> EditableText | None:
        for item in self.iter_items():
            if item.id == item_id:
                return item
        return None

    @property
    def has_suggestions(self) -> bool:
        return any(item.has_suggestion for item in self.iter_items())

    @property
    def has_edits(self) -> bool:
        return any(item.has_edit for item in self.iter_items())
