import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from resumedoc.api.v1.health import router as health_router
from resumedoc.api.v1.keywords import router as keywords_router
from resumedoc.api.v1.resumes import router as resumes_router
from resumedoc.api.v1.scores import router as scores_router
from resumedoc.api.v1.templates import router as templates_router
from resumedoc.core.rate_limit import limiter
from resumedoc.core.config import settings
from dotenv import load_dotenv
from resumedoc.core.lifespan import lifespan

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Resume Workspace API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(resumes_router, prefix="/v1", tags=["Resumes"])
app.include_router(scores_router, prefix="/v1", tags=["Scores"])
app.include_router(keywords_router, prefix="/v1", tags=["Keywords"])
app.include_router(templates_router, prefix="/v1", tags=["Templates"])
