import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.normalize.raw_payload import normalize_section  # noqa: E402
from resumedoc.projection.reconcile import reconcile_section_text  # noqa: E402
from resumedoc.projection.text import section_to_text  # noqa: E402
from resumedoc.schemas.resume import BulletPoint, EntriesBody, Section  # noqa: E402


def _experience():
    return normalize_section(
        "Experience",
        [
            {"company": "Acme", "title": "Engineer", "bullets": ["Built APIs", "Reduced latency by 30%"]},
            {"company": "Beta", "title": "Intern", "bullets": ["Wrote tests"]},
        ],
    )


def _counts(section):
    return [(len(entry.fields), len(entry.bullets)) for entry in section.body.entries]


class ReconcilerTests(unittest.TestCase):
    def test_round_trip_keeps_counts_and_ids(self):
        section = _experience()
        reconciled = reconcile_section_text(section, section_to_text(section))

        self.assertEqual(_counts(reconciled), _counts(section))
        self.assertEqual(
            [item.id for item in reconciled.iter_items()],
            [item.id for item in section.iter_items()],
        )
        self.assertFalse(reconciled.has_edits)

    def test_round_trip_for_skills_and_summary(self):
        skills = normalize_section("Skills", {"summary": ["Languages: Python, Go", "Tools: Docker"]})
        summary = normalize_section("Summary", {"summary": ["Backend engineer.", "Mentor."]})

        for section in (skills, summary):
            reconciled = reconcile_section_text(section, section_to_text(section))
            self.assertEqual(len(list(reconciled.iter_items())), len(list(section.iter_items())))
            self.assertFalse(reconciled.has_edits)

    def test_changed_line_becomes_final(self):
        section = _experience()
        text = section_to_text(section).replace("Built APIs", "- Built REST APIs")
        reconciled = reconcile_section_text(section, text)

        bullet = reconciled.body.entries[0].bullets[0]
        self.assertEqual(bullet.original, "Built APIs")
        self.assertEqual(bullet.final, "Built REST APIs")
        self.assertEqual(section.body.entries[0].bullets[0].final, None)

    def test_surplus_lines_extend_last_entry(self):
        section = _experience()
        reconciled = reconcile_section_text(section, section_to_text(section) + "\nShipped v2\nOn-call lead")

        last = reconciled.body.entries[-1]
        self.assertEqual([bullet.effective for bullet in last.bullets], ["Wrote tests", "Shipped v2", "On-call lead"])
        self.assertEqual(last.bullets[1].original, "")

    def test_missing_lines_leave_slots_unset(self):
        section = _experience()
        reconciled = reconcile_section_text(section, "Acme\nEngineer\nBuilt APIs")

        first, second = reconciled.body.entries
        self.assertEqual([bullet.effective for bullet in first.bullets], ["Built APIs"])
        self.assertEqual([item.effective for item in second.ordered_fields()], ["", ""])
        self.assertEqual(second.bullets, [])

    def test_bullets_section_lines_replace_summary(self):
        section = normalize_section("Summary", {"summary": ["Backend engineer."]})
        reconciled = reconcile_section_text(section, "Backend engineer.\nOpen-source maintainer.")

        self.assertEqual([item.effective for item in reconciled.body.bullets], ["Backend engineer.", "Open-source maintainer."])
        self.assertEqual(reconciled.body.bullets[0].id, section.body.bullets[0].id)

    def test_opaque_section_takes_text_as_final(self):
        section = normalize_section("Notes", "First line\nSecond line")

        unchanged = reconcile_section_text(section, "First line\n\nSecond line")
        self.assertIsNone(unchanged.body.bullets[0].final)

        changed = reconcile_section_text(section, "First line\nThird line")
        self.assertEqual(changed.body.bullets[0].final, "First line\nThird line")

    def test_new_entry_created_when_none_exist(self):
        section = Section(
            heading="Projects",
            kind="projects",
            body=EntriesBody(summary=[BulletPoint(original="Open-source work")]),
        )
        reconciled = reconcile_section_text(section, "Open-source work\nSide project")

        self.assertEqual(len(reconciled.body.entries), 1)
        self.assertEqual(reconciled.body.entries[0].bullets[0].final, "Side project")
        self.assertEqual(section.body.entries, [])


if __name__ == "__main__":
    unittest.main()
