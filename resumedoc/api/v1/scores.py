from fastapi import APIRouter, Request

from resumedoc.api.errors import raise_http_error
from resumedoc.core.errors import ItemNotFoundError, LLMError, WorkspaceNotFoundError
from resumedoc.core.rate_limit import rate_limit
from resumedoc.schemas.api import JobScoreRequest, StoredScoreResponse
from resumedoc.schemas.scores import GenericResumeScore, JobSpecificScore
from resumedoc.services import resume_service

router = APIRouter()


@router.post("/resumes/{resume_id}/scores/generic", response_model=GenericResumeScore)
@rate_limit()
async def calculate_generic_score(request: Request, resume_id: str):
    try:
        return resume_service.calculate_generic(resume_id, request.app.state.scoring_config.get())
    except WorkspaceNotFoundError as exc:
        raise_http_error(exc)


@router.get("/resumes/{resume_id}/scores/generic", response_model=StoredScoreResponse)
@rate_limit()
async def get_generic_score(request: Request, resume_id: str):
    try:
        return resume_service.get_stored_score(resume_id, None)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)


@router.post("/resumes/{resume_id}/scores/job", response_model=JobSpecificScore)
@rate_limit("ai")
async def calculate_job_score(request: Request, resume_id: str, payload: JobScoreRequest):
    try:
        return resume_service.calculate_job_specific(resume_id, payload, request.app.state.scoring_config.get())
    except (WorkspaceNotFoundError, LLMError) as exc:
        raise_http_error(exc)


@router.get("/resumes/{resume_id}/scores/job/{job_id}", response_model=StoredScoreResponse)
@rate_limit()
async def get_job_score(request: Request, resume_id: str, job_id: str):
    try:
        return resume_service.get_stored_score(resume_id, job_id)
    except (WorkspaceNotFoundError, ItemNotFoundError) as exc:
        raise_http_error(exc)
