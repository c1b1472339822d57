import sys
import unittest
from pathlib import Path

from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.schemas.resume import BulletPoint, Entry, EntryField, OpaqueBody, Section  # noqa: E402


class ResumeModelTests(unittest.TestCase):
    def test_effective_value_precedence(self):
        item = BulletPoint(original="a")
        self.assertEqual(item.effective, "a")
        item.suggested = "b"
        self.assertEqual(item.effective, "b")
        self.assertTrue(item.has_suggestion)
        item.final = ""
        self.assertEqual(item.effective, "")
        self.assertTrue(item.has_edit)

    def test_suggestion_equal_to_original_is_not_pending(self):
        item = BulletPoint(original="a", suggested="a")
        self.assertFalse(item.has_suggestion)

    def test_field_order_is_reconciled_with_fields(self):
        entry = Entry(
            fields=[EntryField(key="a", original="1"), EntryField(key="b", original="2")],
            field_order=["b", "missing", "b"],
        )

        self.assertEqual(entry.field_order, ["b", "a"])
        self.assertEqual([item.key for item in entry.ordered_fields()], ["b", "a"])
        self.assertEqual(list(entry.values()), ["b", "a"])

    def test_roles_compose_meta(self):
        entry = Entry(
            fields=[
                EntryField(key="institution", original="MIT"),
                EntryField(key="degree", original="BSc"),
                EntryField(key="dates", original="2011 - 2015"),
                EntryField(key="location", original="Boston"),
                EntryField(key="gpa", original="3.9"),
            ]
        )

        roles = entry.roles()
        self.assertEqual(roles.primary, "MIT")
        self.assertEqual(roles.secondary, "BSc")
        self.assertEqual(roles.meta, "2011 - 2015 | Boston | GPA: 3.9")

    def test_layout_discriminator(self):
        section = Section.model_validate(
            {"heading": "Notes", "body": {"layout": "opaque", "bullets": [{"original": "hello"}]}}
        )

        self.assertIsInstance(section.body, OpaqueBody)
        self.assertEqual(section.layout, "opaque")

        with self.assertRaises(ValidationError):
            Section.model_validate(
                {"heading": "Notes", "body": {"layout": "opaque", "bullets": [{"original": "a"}, {"original": "b"}]}}
            )

    def test_find_item_and_flags(self):
        entry = Entry(fields=[EntryField(key="company", original="Acme")], bullets=[BulletPoint(original="Built")])
        section = Section.model_validate({"heading": "Experience", "body": {"layout": "entries", "entries": [entry.model_dump()]}})

        bullet_id = section.body.entries[0].bullets[0].id
        self.assertIsNotNone(section.find_item(bullet_id))
        self.assertIsNone(section.find_item("nope"))
        self.assertFalse(section.has_suggestions)
        self.assertFalse(section.has_edits)


if __name__ == "__main__":
    unittest.main()
