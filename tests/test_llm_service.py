import json
import sys
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.core.errors import LLMError, ProviderFormatError  # noqa: E402
from resumedoc.normalize.raw_payload import normalize_section  # noqa: E402
from resumedoc.services import llm  # noqa: E402


def _response(content: str):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _fake_client(content: str | None = None, error: Exception | None = None):
    def create(**kwargs):
        if error is not None:
            raise error
        return _response(content or "")

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _experience():
    return normalize_section(
        "Experience",
        [{"company": "Acme", "title": "Engineer", "bullets": ["Built APIs"]}],
    )


class ProviderTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("resumedoc.services.llm.log_ai_analysis_run")
        self.log_run = patcher.start()
        self.addCleanup(patcher.stop)

    def test_enabled_requires_real_key(self):
        with patch.dict("os.environ", {"RESUMEDOC_LLM_ENABLED": "1", "OPENAI_API_KEY": "your_openai_api_key"}):
            self.assertFalse(llm.llm_enabled())
        with patch.dict("os.environ", {"RESUMEDOC_LLM_ENABLED": "1", "OPENAI_API_KEY": "sk-test"}):
            self.assertTrue(llm.llm_enabled())
        with patch.dict("os.environ", {"RESUMEDOC_LLM_ENABLED": "0", "OPENAI_API_KEY": "sk-test"}):
            self.assertFalse(llm.llm_enabled())

    def test_disabled_completion_raises(self):
        with patch("resumedoc.services.llm.llm_enabled", return_value=False):
            with self.assertRaises(LLMError) as ctx:
                llm.extract_keywords("Senior engineer with Python and Kubernetes experience.")
        self.assertEqual(ctx.exception.code, "llm_disabled")
        self.assertEqual(self.log_run.call_args.kwargs["status"], "skipped")

    def test_review_merges_provider_suggestions(self):
        payload = {
            "entries": [
                {
                    "metadata": {"company": "Acme", "title": "Senior Engineer"},
                    "bullets": ["Built REST APIs serving 2M requests a day"],
                }
            ]
        }
        with patch("resumedoc.services.llm.llm_enabled", return_value=True), patch(
            "resumedoc.services.llm._client", return_value=_fake_client(json.dumps(payload))
        ):
            reviewed = llm.review_section(_experience())

        entry = reviewed.body.entries[0]
        self.assertEqual(entry.field("title").suggested, "Senior Engineer")
        self.assertEqual(entry.bullets[0].suggested, "Built REST APIs serving 2M requests a day")
        self.assertEqual(entry.bullets[0].original, "Built APIs")
        self.assertEqual(self.log_run.call_args.kwargs["status"], "success")

    def test_review_without_provider_keeps_originals(self):
        with patch("resumedoc.services.llm.llm_enabled", return_value=False):
            reviewed = llm.review_section(_experience())

        self.assertFalse(reviewed.has_suggestions)
        self.assertEqual(reviewed.body.entries[0].bullets[0].suggested, "Built APIs")

    def test_transport_failure_surfaces(self):
        with patch("resumedoc.services.llm.llm_enabled", return_value=True), patch(
            "resumedoc.services.llm._client", return_value=_fake_client(error=TimeoutError("slow"))
        ):
            with self.assertRaises(LLMError) as ctx:
                llm.tailor_section(_experience(), "Senior engineer building payment APIs in Python.")
        self.assertEqual(ctx.exception.code, "llm_unavailable")

    def test_keyword_extraction(self):
        content = json.dumps(
            {
                "categories": [
                    {"category": "Technical Skills", "keywords": ["Python", " ", "Kubernetes"]},
                    {"category": "", "keywords": ["ignored"]},
                    {"category": "Soft Skills", "keywords": "not a list"},
                ]
            }
        )
        with patch("resumedoc.services.llm.llm_enabled", return_value=True), patch(
            "resumedoc.services.llm._client", return_value=_fake_client(content)
        ):
            keywords = llm.extract_keywords("Senior engineer with Python and Kubernetes experience.")

        self.assertEqual(len(keywords.categories), 1)
        self.assertEqual(keywords.all_keywords(), ["Python", "Kubernetes"])

    def test_keyword_format_errors_are_hard_errors(self):
        with self.assertRaises(ProviderFormatError):
            llm.parse_keyword_response("not json at all")
        with self.assertRaises(ProviderFormatError):
            llm.parse_keyword_response('{"keywords": ["Python"]}')
        with self.assertRaises(ProviderFormatError):
            llm.parse_keyword_response('{"categories": []}')


if __name__ == "__main__":
    unittest.main()
