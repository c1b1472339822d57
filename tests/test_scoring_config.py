import tempfile
import unittest
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.core.config.scoring import ScoringConfigCache, lookup_value  # noqa: E402


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        cache = ScoringConfigCache()
        config = cache.get()
        self.assertIsInstance(config, dict)
        self.assertEqual(cache.value("job_specific.tailoring.neutral_score"), 7.5)
        self.assertEqual(lookup_value(config, "job_specific.keywords.category_weights.hard"), 1.3)
        self.assertEqual(lookup_value(config, "job_specific.missing.path", "fallback"), "fallback")
        self.assertIsNone(lookup_value(None, "generic.improvement_threshold"))

    def test_invalidate_reloads_from_disk(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scoring.yaml"
            path.write_text("generic:\n  improvement_threshold: 0.5\n", encoding="utf-8")
            cache = ScoringConfigCache(path)
            self.assertEqual(cache.value("generic.improvement_threshold"), 0.5)

            path.write_text("generic:\n  improvement_threshold: 0.9\n", encoding="utf-8")
            self.assertEqual(cache.value("generic.improvement_threshold"), 0.5)
            cache.invalidate()
            self.assertEqual(cache.value("generic.improvement_threshold"), 0.9)

    def test_missing_or_invalid_file_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(RuntimeError):
                ScoringConfigCache(Path(tmp) / "absent.yaml").get()

            path = Path(tmp) / "list.yaml"
            path.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(RuntimeError):
                ScoringConfigCache(path).get()


if __name__ == "__main__":
    unittest.main()
