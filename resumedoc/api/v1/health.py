from fastapi import APIRouter, Request

from resumedoc.services.llm import llm_enabled

router = APIRouter()


@router.get("/health", summary="Health Check", description="Service status, AI availability and template count.")
async def health_check(request: Request):
    catalog = getattr(request.app.state, "template_catalog", None)
    return {
        "status": "healthy",
        "ai_enabled": llm_enabled(),
        "templates": len(catalog.get()) if catalog is not None else 0,
    }
