import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.normalize.raw_payload import normalize_resume_payload, normalize_section  # noqa: E402
from resumedoc.scoring.extractor import (  # noqa: E402
    extract_all_bullets,
    extract_contact_info,
    extract_resume_text,
    extract_section_text,
    extract_section_text_by_heading,
    extract_structured_entries,
)


def _resume():
    return normalize_resume_payload(
        {
            "sections": [
                {"heading": "Contact", "body": {"name": "Jane Doe", "email": "jane@example.com", "phone": "555-123-4567"}},
                {"heading": "Highlights", "body": {"summary": ["Built APIs"]}},
                {
                    "heading": "Experience",
                    "body": [{"company": "Acme", "title": "Engineer", "bullets": ["Built APIs", "Shipped releases"]}],
                },
                {"heading": "Projects", "body": "• Built APIs\n- Wrote a compiler\n1. Ran a meetup"},
            ]
        }
    )


class ExtractorTests(unittest.TestCase):
    def test_bullets_are_deduplicated_across_paths(self):
        bullets = extract_all_bullets(_resume())

        self.assertEqual(bullets, ["Built APIs", "Shipped releases", "Wrote a compiler", "Ran a meetup"])
        self.assertEqual(len(bullets), len(set(bullets)))

    def test_committed_edit_wins_for_its_heading(self):
        sections = _resume()
        edits = {"Experience": {"summary": ["Rewrote the billing system"]}}

        self.assertEqual(extract_section_text(sections[2], edits), "Rewrote the billing system")
        self.assertIn("Rewrote the billing system", extract_resume_text(sections, edits))
        self.assertNotIn("Shipped releases", extract_resume_text(sections, edits))

    def test_resume_text_includes_headings(self):
        text = extract_resume_text(_resume())

        self.assertTrue(text.startswith("Contact\nJane Doe"))
        self.assertIn("\n\nExperience\nAcme\nEngineer", text)

    def test_section_text_by_heading(self):
        self.assertIn("Wrote a compiler", extract_section_text_by_heading(_resume(), "project"))
        self.assertEqual(extract_section_text_by_heading(_resume(), "awards"), "")

    def test_structured_entries(self):
        entries = extract_structured_entries(_resume()[2])

        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].fields, {"company": "Acme", "title": "Engineer"})
        self.assertEqual(entries[0].entry_type, "job")
        self.assertEqual(extract_structured_entries(_resume()[3]), [])

    def test_structured_contact_fields(self):
        contact = extract_contact_info(_resume())

        self.assertEqual(contact.name, "Jane Doe")
        self.assertEqual(contact.email, "jane@example.com")
        self.assertEqual(contact.phone, "555-123-4567")

    def test_contact_from_plain_text(self):
        sections = [
            normalize_section("Contact", "Jane Doe\njane@example.com | (555) 123-4567\nlinkedin.com/in/janedoe"),
        ]
        contact = extract_contact_info(sections)

        self.assertEqual(contact.name, "Jane Doe")
        self.assertEqual(contact.email, "jane@example.com")
        self.assertEqual(contact.phone, "(555) 123-4567")
        self.assertEqual(contact.linkedin, "linkedin.com/in/janedoe")


if __name__ == "__main__":
    unittest.main()
