from fastapi import APIRouter, Request

from resumedoc.core.rate_limit import rate_limit
from resumedoc.schemas.api import TemplateListResponse

router = APIRouter()


@router.get("/templates", response_model=TemplateListResponse)
@rate_limit()
async def list_templates(request: Request):
    return TemplateListResponse(templates=request.app.state.template_catalog.get())
