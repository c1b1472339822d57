from fastapi import APIRouter, Request, Response, status

from resumedoc.api.errors import raise_http_error
from resumedoc.core.errors import (
    ItemNotFoundError,
    LLMError,
    ResumeParseError,
    WorkspaceNotFoundError,
)
from resumedoc.core.rate_limit import rate_limit
from resumedoc.schemas.api import (
    ExportRequest,
    ItemActionRequest,
    ResumeCreateRequest,
    ResumeResponse,
    SectionStateResponse,
    SectionTextResponse,
    SectionTextUpdateRequest,
    TailorRequest,
)
from resumedoc.schemas.render import ExportPayload
from resumedoc.services import resume_service

router = APIRouter()


@router.post("/resumes", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
@rate_limit()
async def create_resume(request: Request, payload: ResumeCreateRequest):
    try:
        return resume_service.create_resume(payload)
    except ResumeParseError as exc:
        raise_http_error(exc)


@router.get("/resumes/{resume_id}", response_model=ResumeResponse)
@rate_limit()
async def get_resume(request: Request, resume_id: str):
    try:
        return resume_service.get_resume(resume_id)
    except WorkspaceNotFoundError as exc:
        raise_http_error(exc)


@router.delete("/resumes/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
@rate_limit()
async def delete_resume(request: Request, resume_id: str):
    try:
        resume_service.delete_resume(resume_id)
    except WorkspaceNotFoundError as exc:
        raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Suffixed section routes stay registered before the bare section route.
@router.get("/resumes/{resume_id}/sections/{heading:path}/text", response_model=SectionTextResponse)
@rate_limit()
async def get_section_text(request: Request, resume_id: str, heading: str, job_id: str | None = None):
    try:
        return resume_service.get_section_text(resume_id, heading, job_id)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)


@router.put("/resumes/{resume_id}/sections/{heading:path}/text", response_model=SectionStateResponse)
@rate_limit()
async def update_section_text(request: Request, resume_id: str, heading: str, payload: SectionTextUpdateRequest):
    try:
        return resume_service.update_section_text(resume_id, heading, payload.text, payload.job_id)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)


@router.post("/resumes/{resume_id}/sections/{heading:path}/items", response_model=SectionStateResponse)
@rate_limit()
async def apply_item_action(request: Request, resume_id: str, heading: str, payload: ItemActionRequest):
    try:
        return resume_service.apply_item_action(resume_id, heading, payload)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)


@router.post("/resumes/{resume_id}/sections/{heading:path}/review", response_model=SectionStateResponse)
@rate_limit("ai")
async def review_section(request: Request, resume_id: str, heading: str):
    try:
        return resume_service.review_section(resume_id, heading)
    except (WorkspaceNotFoundError, ItemNotFoundError, LLMError) as exc:
        raise_http_error(exc)


@router.post("/resumes/{resume_id}/sections/{heading:path}/tailor", response_model=SectionStateResponse)
@rate_limit("ai")
async def tailor_section(request: Request, resume_id: str, heading: str, payload: TailorRequest):
    try:
        return resume_service.tailor_section(resume_id, heading, payload)
    except (WorkspaceNotFoundError, ItemNotFoundError, LLMError) as exc:
        raise_http_error(exc)


@router.get("/resumes/{resume_id}/sections/{heading:path}", response_model=SectionStateResponse)
@rate_limit()
async def get_section(request: Request, resume_id: str, heading: str, job_id: str | None = None):
    try:
        return resume_service.get_section_state(resume_id, heading, job_id)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)


@router.post("/resumes/{resume_id}/export", response_model=ExportPayload)
@rate_limit()
async def export_resume(request: Request, resume_id: str, payload: ExportRequest):
    try:
        return resume_service.export_resume(resume_id, payload.template_id, request.app.state.template_catalog)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)
