from __future__ import annotations

import logging
import os
import time
import uuid
from functools import lru_cache

from openai import OpenAI

from resumedoc.analytics.db import log_ai_analysis_run
from resumedoc.core.errors import LLMError, ProviderFormatError
from resumedoc.normalize.utils import parse_json_text
from resumedoc.schemas.resume import Section
from resumedoc.schemas.scores import KeywordCategory, KeywordSet
from resumedoc.suggestions.merge import apply_provider_suggestions, build_fallback_response, merge_suggestions
from resumedoc.suggestions.prompts import (
    KEYWORD_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    TAILOR_SYSTEM_PROMPT,
    build_keyword_prompt,
    build_review_prompt,
    build_tailor_prompt,
)

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def llm_enabled() -> bool:
    if not _env_bool("RESUMEDOC_LLM_ENABLED", True):
        return False
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    if not api_key or _looks_like_placeholder(api_key):
        return False
    return True


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(os.getenv("OPENAI_API_KEY") or "").strip(),
        base_url=(os.getenv("OPENAI_BASE_URL") or None),
        timeout=float(os.getenv("RESUMEDOC_LLM_TIMEOUT_S", "30")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2")),
    )


def _model() -> str:
    return (os.getenv("OPENAI_MODEL") or "gpt-4o-mini").strip()


def _log_ai_run(
    *,
    run_id: str,
    operation: str,
    section_heading: str | None,
    schema_valid: bool,
    status: str,
    latency_ms: int | None,
    error_code: str | None = None,
) -> None:
    try:
        log_ai_analysis_run(
            run_id=run_id,
            operation=operation,
            section_heading=section_heading,
            model=_model(),
            schema_valid=schema_valid,
            status=status,
            error_code=error_code,
            latency_ms=latency_ms,
        )
    except Exception:  # pragma: no cover - analytics must not break AI responses
        logger.debug("ai_run_logging_failed", exc_info=True)


def complete_json_text(
    *,
    system_prompt: str,
    user_prompt: str,
    operation: str,
    section_heading: str | None = None,
    temperature: float = 0.3,
    max_output_tokens: int = 2000,
) -> str:
    """Raw JSON text from the provider. Raises LLMError when disabled or on transport failure."""
    run_id = uuid.uuid4().hex
    started = time.perf_counter()
    if not llm_enabled():
        _log_ai_run(
            run_id=run_id,
            operation=operation,
            section_heading=section_heading,
            schema_valid=False,
            status="skipped",
            error_code="llm_disabled",
            latency_ms=0,
        )
        raise LLMError("AI suggestions are not configured.", code="llm_disabled")

    try:
        response = _client().chat.completions.create(
            model=_model(),
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
            max_tokens=max_output_tokens,
        )
    except Exception as exc:  # noqa: BLE001 - surfaced as a provider failure
        logger.warning("resume_llm_request_failed operation=%s model=%s: %s", operation, _model(), exc)
        _log_ai_run(
            run_id=run_id,
            operation=operation,
            section_heading=section_heading,
            schema_valid=False,
            status="error",
            error_code="llm_exception",
            latency_ms=int((time.perf_counter() - started) * 1000),
        )
        raise LLMError("The AI provider could not be reached. Try again.") from exc

    content = response.choices[0].message.content if response.choices else ""
    _log_ai_run(
        run_id=run_id,
        operation=operation,
        section_heading=section_heading,
        schema_valid=bool(content),
        status="success" if content else "empty",
        error_code=None if content else "empty_response",
        latency_ms=int((time.perf_counter() - started) * 1000),
    )
    return content or ""


def review_section(section: Section) -> Section:
    """Section with AI review suggestions merged in; unchanged suggestions when AI is off."""
    if not llm_enabled():
        logger.info("resume_review_fallback section=%s reason=llm_disabled", section.heading)
        return merge_suggestions(section, build_fallback_response(section))
    content = complete_json_text(
        system_prompt=REVIEW_SYSTEM_PROMPT,
        user_prompt=build_review_prompt(section),
        operation="review",
        section_heading=section.heading,
    )
    return apply_provider_suggestions(section, content)


def tailor_section(section: Section, job_description: str, keywords: KeywordSet | None = None) -> Section:
    if not llm_enabled():
        logger.info("resume_tailor_fallback section=%s reason=llm_disabled", section.heading)
        return merge_suggestions(section, build_fallback_response(section))
    content = complete_json_text(
        system_prompt=TAILOR_SYSTEM_PROMPT,
        user_prompt=build_tailor_prompt(section, job_description, keywords),
        operation="tailor",
        section_heading=section.heading,
    )
    return apply_provider_suggestions(section, content)


def parse_keyword_response(content: str) -> KeywordSet:
    try:
        data = parse_json_text(content)
    except ValueError as exc:
        raise ProviderFormatError("Keyword response is not valid JSON.") from exc
    if not isinstance(data, dict) or not isinstance(data.get("categories"), list):
        raise ProviderFormatError("Keyword response is missing the 'categories' array.")

    categories: list[KeywordCategory] = []
    for raw in data["categories"]:
        if not isinstance(raw, dict):
            continue
        name = str(raw.get("category") or "").strip()
        keywords = raw.get("keywords")
        if not name or not isinstance(keywords, list):
            continue
        clean = [str(item).strip() for item in keywords if isinstance(item, (str, int, float)) and str(item).strip()]
        if clean:
            categories.append(KeywordCategory(category=name, keywords=clean))
    if not categories:
        raise ProviderFormatError("Keyword response contained no keywords.")
    return KeywordSet(categories=categories)


def extract_keywords(job_description: str) -> KeywordSet:
    """Categorized keywords for a job description. Any provider problem is an error here."""
    content = complete_json_text(
        system_prompt=KEYWORD_SYSTEM_PROMPT,
        user_prompt=build_keyword_prompt(job_description),
        operation="keywords",
        temperature=0.1,
        max_output_tokens=900,
    )
    return parse_keyword_response(content)
