import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.core.errors import ItemNotFoundError  # noqa: E402
from resumedoc.normalize.raw_payload import normalize_section  # noqa: E402
from resumedoc.suggestions.edits import (  # noqa: E402
    accept_all_suggestions,
    accept_suggestion,
    edit_item,
    reject_suggestion,
)


def _reviewed():
    section = normalize_section("Summary", {"summary": ["Backend engineer.", "Mentor."]})
    section.body.bullets[0].suggested = "Backend engineer with 8 years in payments."
    section.body.bullets[1].suggested = "Mentor to junior developers."
    return section


class EditTests(unittest.TestCase):
    def test_accept_moves_suggestion_to_final(self):
        section = _reviewed()
        item_id = section.body.bullets[0].id
        updated = accept_suggestion(section, item_id)

        bullet = updated.body.bullets[0]
        self.assertEqual(bullet.final, "Backend engineer with 8 years in payments.")
        self.assertIsNone(bullet.suggested)
        self.assertEqual(bullet.original, "Backend engineer.")
        self.assertIsNone(section.body.bullets[0].final)

    def test_reject_clears_suggestion(self):
        section = _reviewed()
        updated = reject_suggestion(section, section.body.bullets[1].id)

        self.assertIsNone(updated.body.bullets[1].suggested)
        self.assertEqual(updated.body.bullets[1].effective, "Mentor.")

    def test_edit_sets_final(self):
        section = _reviewed()
        updated = edit_item(section, section.body.bullets[1].id, "  Mentor and interviewer.  ")

        self.assertEqual(updated.body.bullets[1].final, "Mentor and interviewer.")
        self.assertTrue(updated.has_edits)

    def test_accept_all(self):
        updated = accept_all_suggestions(_reviewed())

        self.assertEqual(
            [bullet.effective for bullet in updated.body.bullets],
            ["Backend engineer with 8 years in payments.", "Mentor to junior developers."],
        )
        self.assertFalse(updated.has_suggestions)

    def test_unknown_item_raises(self):
        with self.assertRaises(ItemNotFoundError):
            accept_suggestion(_reviewed(), "missing")


if __name__ == "__main__":
    unittest.main()
