from .render import ContactInfo, ExportPayload, RenderableEntry, RenderableSection, TemplateMeta
from .resume import BulletPoint, BulletsBody, EditableText, EntriesBody, Entry, EntryField, OpaqueBody, Section
from .scores import (
    GenericResumeScore,
    JobSpecificScore,
    KeywordCategory,
    KeywordCoverage,
    KeywordSet,
    ScoreBreakdown,
)
from .suggestions import EntrySuggestion, SuggestedText, SuggestionResponse

__all__ = [
    "EditableText",
    "BulletPoint",
    "EntryField",
    "Entry",
    "BulletsBody",
    "EntriesBody",
    "OpaqueBody",
    "Section",
    "ScoreBreakdown",
    "GenericResumeScore",
    "JobSpecificScore",
    "KeywordCategory",
    "KeywordSet",
    "KeywordCoverage",
    "SuggestedText",
    "EntrySuggestion",
    "SuggestionResponse",
    "RenderableEntry",
    "RenderableSection",
    "ContactInfo",
    "TemplateMeta",
    "ExportPayload",
]
