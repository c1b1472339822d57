from __future__ import annotations

from fastapi import HTTPException, status

from resumedoc.core.errors import (
    ItemNotFoundError,
    LLMError,
    ProviderFormatError,
    ResumeParseError,
    WorkspaceNotFoundError,
)


def raise_http_error(exc: Exception) -> None:
    if isinstance(exc, (WorkspaceNotFoundError, ItemNotFoundError)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ResumeParseError):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    if isinstance(exc, ProviderFormatError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if isinstance(exc, LLMError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE if exc.code == "llm_disabled" else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=str(exc)) from exc
    raise exc
