from __future__ import annotations

from pydantic import BaseModel, Field

from .resume import SectionKind


class RenderableEntry(BaseModel):
    primary: str = ""
    secondary: str = ""
    meta: str = ""
    bullets: list[str] = Field(default_factory=list)


class RenderableSection(BaseModel):
    heading: str
    kind: SectionKind = "other"
    summary: list[str] = Field(default_factory=list)
    entries: list[RenderableEntry] = Field(default_factory=list)


class ContactInfo(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    address: str | None = None
    website: str | None = None


class TemplateMeta(BaseModel):
    id: str
    name: str
    description: str = ""
    columns: int = Field(default=1, ge=1, le=2)
    ats_friendly: bool = True
    tags: list[str] = Field(default_factory=list)


class ExportPayload(BaseModel):
    template_id: str
    contact: ContactInfo
    sections: list[RenderableSection] = Field(default_factory=list)
