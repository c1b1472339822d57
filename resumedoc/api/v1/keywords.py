from fastapi import APIRouter, Request

from resumedoc.api.errors import raise_http_error
from resumedoc.core.errors import LLMError
from resumedoc.core.rate_limit import rate_limit
from resumedoc.schemas.api import KeywordExtractRequest
from resumedoc.schemas.scores import KeywordSet
from resumedoc.services import resume_service

router = APIRouter()


@router.post("/keywords/extract", response_model=KeywordSet)
@rate_limit("ai")
async def extract_keywords(request: Request, payload: KeywordExtractRequest):
    try:
        return resume_service.extract_keywords(payload.job_description)
    except LLMError as exc:
        raise_http_error(exc)
