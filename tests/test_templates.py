import json
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.export.templates import TemplateCatalog  # noqa: E402


class TemplateCatalogTests(unittest.TestCase):
    def test_bundled_catalog(self):
        catalog = TemplateCatalog()
        templates = catalog.get()

        self.assertEqual([template.id for template in templates], ["classic", "modern", "sidebar"])
        self.assertEqual(catalog.find("sidebar").columns, 2)
        self.assertFalse(catalog.find("sidebar").ats_friendly)
        self.assertIsNone(catalog.find("unknown"))

    def test_invalidate_reloads(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "templates.json"
            path.write_text(json.dumps({"templates": [{"id": "one", "name": "One"}]}), encoding="utf-8")
            catalog = TemplateCatalog(path)
            self.assertEqual(len(catalog.get()), 1)

            path.write_text(
                json.dumps({"templates": [{"id": "one", "name": "One"}, {"id": "two", "name": "Two"}]}),
                encoding="utf-8",
            )
            self.assertEqual(len(catalog.get()), 1)
            catalog.invalidate()
            self.assertEqual(catalog.find("two").name, "Two")

    def test_invalid_catalog_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "templates.json"
            path.write_text('{"templates": [{"name": "No id"}]}', encoding="utf-8")
            with self.assertRaises(RuntimeError):
                TemplateCatalog(path).get()

            path.write_text("not json", encoding="utf-8")
            with self.assertRaises(RuntimeError):
                TemplateCatalog(path).get()

            with self.assertRaises(RuntimeError):
                TemplateCatalog(Path(tmp) / "missing.json").get()


if __name__ == "__main__":
    unittest.main()
