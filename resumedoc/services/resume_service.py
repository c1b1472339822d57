from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from resumedoc.core.errors import ItemNotFoundError, WorkspaceNotFoundError
from resumedoc.core.workspace_store import WorkspaceStore, get_workspace_store
from resumedoc.export.payload import build_export_payload
from resumedoc.export.templates import TemplateCatalog
from resumedoc.normalize.raw_payload import normalize_resume_payload
from resumedoc.projection.reconcile import reconcile_section_text
from resumedoc.projection.text import section_to_text, to_raw_body
from resumedoc.schemas.api import (
    ItemActionRequest,
    JobScoreRequest,
    ResumeCreateRequest,
    ResumeResponse,
    SectionStateResponse,
    SectionTextResponse,
    StoredScoreResponse,
    TailorRequest,
)
from resumedoc.schemas.render import ExportPayload
from resumedoc.schemas.resume import Section
from resumedoc.schemas.scores import GenericResumeScore, JobSpecificScore, KeywordSet
from resumedoc.scoring.generic import calculate_generic_score
from resumedoc.scoring.job_specific import calculate_job_specific_score
from resumedoc.services import llm
from resumedoc.suggestions.edits import accept_all_suggestions, accept_suggestion, edit_item, reject_suggestion

logger = logging.getLogger(__name__)


def _store(store: WorkspaceStore | None) -> WorkspaceStore:
    return store if store is not None else get_workspace_store()


def _load_record(store: WorkspaceStore, resume_id: str) -> dict[str, Any]:
    record = store.get_resume(resume_id)
    if record is None:
        raise WorkspaceNotFoundError(f"Resume '{resume_id}' not found.")
    return record


def _load_sections(store: WorkspaceStore, resume_id: str) -> list[Section]:
    return [Section.model_validate(item) for item in _load_record(store, resume_id)["sections"]]


def _find_section(sections: list[Section], heading: str) -> Section:
    """Match on heading first, then on the section id."""
    for section in sections:
        if section.heading == heading:
            return section
    for section in sections:
        if section.id == heading:
            return section
    raise ItemNotFoundError(f"Section '{heading}' not found.")


def _committed(section: Section) -> Section:
    """Copy without pending suggestions: only originals and accepted or edited finals."""
    copy = section.model_copy(deep=True)
    for item in copy.iter_items():
        item.suggested = None
    return copy


def _edits(store: WorkspaceStore, resume_id: str, job_id: str | None = None) -> dict[str, Any]:
    edits = store.list_final_updates(resume_id, None)
    if job_id is not None:
        edits.update(store.list_final_updates(resume_id, job_id))
    return edits


def _working_section(store: WorkspaceStore, resume_id: str, heading: str, job_id: str | None) -> Section:
    base = _find_section(_load_sections(store, resume_id), heading)
    state = store.get_section_state(resume_id, base.heading, job_id)
    if state and state.get("ai_suggestions"):
        return Section.model_validate(state["ai_suggestions"])
    return base


def _state_response(resume_id: str, section: Section, job_id: str | None) -> SectionStateResponse:
    return SectionStateResponse(
        resume_id=resume_id,
        heading=section.heading,
        job_id=job_id,
        section=section,
        has_suggestions=section.has_suggestions,
        has_edits=section.has_edits,
    )


def _save_working(
    store: WorkspaceStore,
    resume_id: str,
    section: Section,
    job_id: str | None,
    *,
    commit: bool,
) -> None:
    store.save_section_state(
        resume_id,
        section.heading,
        job_id,
        ai_suggestions=section.model_dump(mode="json"),
        final_updated=to_raw_body(_committed(section)) if commit else None,
        raw_data=section.raw_body,
    )


def create_resume(payload: ResumeCreateRequest, store: WorkspaceStore | None = None) -> ResumeResponse:
    store = _store(store)
    sections = normalize_resume_payload(payload.parsed_resume)
    resume_id = uuid.uuid4().hex
    store.create_resume(
        resume_id=resume_id,
        name=payload.name.strip(),
        sections=[section.model_dump(mode="json") for section in sections],
    )
    logger.info("resume_created resume_id=%s sections=%s", resume_id, len(sections))
    return get_resume(resume_id, store)


def get_resume(resume_id: str, store: WorkspaceStore | None = None) -> ResumeResponse:
    record = _load_record(_store(store), resume_id)
    return ResumeResponse(
        resume_id=record["resume_id"],
        name=record["name"],
        sections=[Section.model_validate(item) for item in record["sections"]],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


def delete_resume(resume_id: str, store: WorkspaceStore | None = None) -> None:
    if not _store(store).soft_delete_resume(resume_id):
        raise WorkspaceNotFoundError(f"Resume '{resume_id}' not found.")
    logger.info("resume_removed resume_id=%s", resume_id)


def get_section_text(
    resume_id: str,
    heading: str,
    job_id: str | None = None,
    store: WorkspaceStore | None = None,
) -> SectionTextResponse:
    section = _working_section(_store(store), resume_id, heading, job_id)
    return SectionTextResponse(heading=section.heading, job_id=job_id, text=section_to_text(section))


def update_section_text(
    resume_id: str,
    heading: str,
    text: str,
    job_id: str | None = None,
    store: WorkspaceStore | None = None,
) -> SectionStateResponse:
    store = _store(store)
    reconciled = reconcile_section_text(_working_section(store, resume_id, heading, job_id), text)
    _save_working(store, resume_id, reconciled, job_id, commit=True)
    return _state_response(resume_id, reconciled, job_id)


def get_section_state(
    resume_id: str,
    heading: str,
    job_id: str | None = None,
    store: WorkspaceStore | None = None,
) -> SectionStateResponse:
    return _state_response(resume_id, _working_section(_store(store), resume_id, heading, job_id), job_id)


def apply_item_action(
    resume_id: str,
    heading: str,
    request: ItemActionRequest,
    store: WorkspaceStore | None = None,
) -> SectionStateResponse:
    store = _store(store)
    section = _working_section(store, resume_id, heading, request.job_id)
    if request.action == "accept_all":
        updated = accept_all_suggestions(section)
    elif request.action == "accept":
        updated = accept_suggestion(section, request.item_id or "")
    elif request.action == "reject":
        updated = reject_suggestion(section, request.item_id or "")
    else:
        updated = edit_item(section, request.item_id or "", request.text or "")
    _save_working(store, resume_id, updated, request.job_id, commit=True)
    return _state_response(resume_id, updated, request.job_id)


def review_section(resume_id: str, heading: str, store: WorkspaceStore | None = None) -> SectionStateResponse:
    store = _store(store)
    reviewed = llm.review_section(_working_section(store, resume_id, heading, None))
    _save_working(store, resume_id, reviewed, None, commit=False)
    return _state_response(resume_id, reviewed, None)


def tailor_section(
    resume_id: str,
    heading: str,
    request: TailorRequest,
    store: WorkspaceStore | None = None,
) -> SectionStateResponse:
    store = _store(store)
    section = _working_section(store, resume_id, heading, request.job_id)
    tailored = llm.tailor_section(section, request.job_description, request.keywords)
    _save_working(store, resume_id, tailored, request.job_id, commit=False)
    return _state_response(resume_id, tailored, request.job_id)


def extract_keywords(job_description: str) -> KeywordSet:
    return llm.extract_keywords(job_description)


def calculate_generic(
    resume_id: str,
    config: Mapping[str, Any] | None = None,
    store: WorkspaceStore | None = None,
) -> GenericResumeScore:
    store = _store(store)
    sections = _load_sections(store, resume_id)
    result = calculate_generic_score(sections, _edits(store, resume_id), config=config)
    store.save_score(
        resume_id,
        None,
        score_type=result.score_type,
        overall_score=result.overall_score,
        breakdown=result.breakdown.model_dump(mode="json"),
        suggestions=result.suggestions,
        improvement_areas=result.improvement_areas,
    )
    logger.info("generic_score_saved resume_id=%s overall=%s", resume_id, result.overall_score)
    return result


def calculate_job_specific(
    resume_id: str,
    request: JobScoreRequest,
    config: Mapping[str, Any] | None = None,
    store: WorkspaceStore | None = None,
) -> JobSpecificScore:
    store = _store(store)
    sections = _load_sections(store, resume_id)
    keywords = request.keywords if request.keywords is not None else llm.extract_keywords(request.job_description)

    existing = store.get_score(resume_id, request.job_id)
    baseline = existing["comparison_score"] if existing is not None else None
    result = calculate_job_specific_score(
        sections,
        request.job_description,
        keywords,
        _edits(store, resume_id, request.job_id),
        baseline_score=baseline,
        config=config,
    )
    store.save_score(
        resume_id,
        request.job_id,
        score_type=result.score_type,
        overall_score=result.overall_score,
        breakdown=result.breakdown.model_dump(mode="json"),
        suggestions=result.suggestions,
        improvement_areas=result.improvement_areas,
        keyword_coverage=result.keyword_coverage.model_dump(mode="json"),
        comparison_score=baseline if baseline is not None else result.overall_score,
    )
    logger.info(
        "job_score_saved resume_id=%s job_id=%s overall=%s baseline=%s",
        resume_id,
        request.job_id,
        result.overall_score,
        baseline,
    )
    return result


def get_stored_score(
    resume_id: str,
    job_id: str | None = None,
    store: WorkspaceStore | None = None,
) -> StoredScoreResponse:
    store = _store(store)
    _load_record(store, resume_id)
    record = store.get_score(resume_id, job_id)
    if record is None:
        raise ItemNotFoundError("No score has been calculated yet.")
    return StoredScoreResponse(
        resume_id=resume_id,
        job_id=job_id,
        score_type=record["score_type"],
        overall_score=record["overall_score"],
        breakdown=record["breakdown"] or {},
        suggestions=record["suggestions"],
        improvement_areas=record["improvement_areas"],
        keyword_coverage=record["keyword_coverage"],
        comparison_score=record["comparison_score"],
        updated_at=record["updated_at"],
    )


def export_resume(
    resume_id: str,
    template_id: str,
    catalog: TemplateCatalog,
    store: WorkspaceStore | None = None,
) -> ExportPayload:
    store = _store(store)
    if catalog.find(template_id) is None:
        raise ItemNotFoundError(f"Template '{template_id}' not found.")
    sections = _load_sections(store, resume_id)
    return build_export_payload(sections, _edits(store, resume_id), template_id=template_id)
