import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.export.payload import build_export_payload  # noqa: E402
from resumedoc.normalize.raw_payload import normalize_resume_payload  # noqa: E402


def _resume():
    return normalize_resume_payload(
        {
            "sections": [
                {"heading": "Contact", "body": {"name": "Jane Doe", "email": "jane@example.com"}},
                {"heading": "Summary", "body": {"summary": ["Backend engineer."]}},
                {
                    "heading": "Experience",
                    "body": [
                        {
                            "company": "Acme",
                            "title": "Engineer",
                            "dates": "2019 - 2021",
                            "location": "Berlin",
                            "bullets": ["Built APIs"],
                        }
                    ],
                },
                {"heading": "Skills", "body": {"summary": ["Languages: Python, Go"]}},
                {"heading": "Awards", "body": ""},
            ]
        }
    )


class ExportPayloadTests(unittest.TestCase):
    def test_contact_is_lifted_out_of_sections(self):
        payload = build_export_payload(_resume(), template_id="classic")

        self.assertEqual(payload.template_id, "classic")
        self.assertEqual(payload.contact.name, "Jane Doe")
        self.assertEqual(payload.contact.email, "jane@example.com")
        self.assertNotIn("Contact", [section.heading for section in payload.sections])

    def test_empty_sections_are_dropped(self):
        payload = build_export_payload(_resume(), template_id="classic")

        self.assertEqual([section.heading for section in payload.sections], ["Summary", "Experience", "Skills"])

    def test_entry_roles_and_skill_lines(self):
        payload = build_export_payload(_resume(), template_id="modern")
        summary, experience, skills = payload.sections

        self.assertEqual(summary.summary, ["Backend engineer."])
        entry = experience.entries[0]
        self.assertEqual((entry.primary, entry.secondary), ("Acme", "Engineer"))
        self.assertIn("2019 - 2021", entry.meta)
        self.assertIn("Built APIs", entry.bullets)
        self.assertEqual(skills.summary, ["Languages: Python, Go"])

    def test_committed_edits_are_rendered(self):
        edits = {"Summary": {"summary": ["Staff engineer focused on payments."]}}
        payload = build_export_payload(_resume(), edits, template_id="classic")

        self.assertEqual(payload.sections[0].summary, ["Staff engineer focused on payments."])


if __name__ == "__main__":
    unittest.main()
