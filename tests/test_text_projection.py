import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.normalize.raw_payload import normalize_section  # noqa: E402
from resumedoc.projection.render import to_renderable  # noqa: E402
from resumedoc.projection.text import (  # noqa: E402
    clean_body_text,
    format_raw_body_text,
    section_lines,
    section_to_text,
    strip_field_labels,
    to_raw_body,
)


def _experience():
    return normalize_section(
        "Experience",
        {
            "entries": [
                {
                    "fieldOrder": ["title", "company", "dates"],
                    "fields": [
                        {"key": "company", "value": "Acme"},
                        {"key": "dates", "value": "2020 - 2023"},
                        {"key": "title", "value": "Engineer"},
                    ],
                    "bullets": ["Built APIs", "Reduced latency by 30%"],
                },
                {"company": "Beta", "title": "Intern", "bullets": ["Wrote tests"]},
            ]
        },
    )


class TextProjectionTests(unittest.TestCase):
    def test_plain_text_follows_field_order(self):
        lines = section_lines(_experience())

        self.assertEqual(
            lines,
            ["Engineer", "Acme", "2020 - 2023", "Built APIs", "Reduced latency by 30%", "", "Beta", "Intern", "Wrote tests"],
        )

    def test_heading_is_optional(self):
        text = section_to_text(_experience(), include_heading=True)
        self.assertTrue(text.startswith("Experience\nEngineer"))

    def test_effective_values_are_projected(self):
        section = _experience()
        section.body.entries[0].bullets[0].final = "Built REST APIs"

        self.assertIn("Built REST APIs", section_to_text(section))
        self.assertNotIn("Built APIs\n", section_to_text(section))

    def test_strip_field_labels(self):
        self.assertEqual(strip_field_labels("• Company: Acme"), "• Acme")
        self.assertEqual(strip_field_labels("Title: Role: Engineer"), "Engineer")
        self.assertEqual(strip_field_labels("Note:"), "Note:")
        self.assertEqual(strip_field_labels("Built 3 services"), "Built 3 services")

    def test_contact_sections_keep_labels(self):
        self.assertEqual(clean_body_text("Email: jane@example.com", "contact"), "Email: jane@example.com")
        self.assertEqual(clean_body_text("Email: jane@example.com", "other"), "jane@example.com")

    def test_format_raw_body_text(self):
        text = format_raw_body_text([{"company": "Acme", "bullets": ["Built APIs"]}], "experience")
        self.assertEqual(text, "Acme\n• Built APIs")

    def test_to_raw_body_uses_effective_values(self):
        section = _experience()
        section.body.entries[0].fields[0].final = "Acme Corp"

        raw = to_raw_body(section)
        first = raw["entries"][0]
        self.assertEqual(first["fieldOrder"], ["title", "company", "dates"])
        self.assertEqual(first["fields"][1], {"key": "company", "value": "Acme Corp"})
        self.assertEqual(first["bullets"], ["Built APIs", "Reduced latency by 30%"])

    def test_renderable_entries(self):
        rendered = to_renderable(_experience())

        self.assertEqual(rendered.entries[0].primary, "Acme")
        self.assertEqual(rendered.entries[0].secondary, "Engineer")
        self.assertEqual(rendered.entries[0].meta, "2020 - 2023")
        self.assertEqual(rendered.entries[1].bullets, ["Wrote tests"])

    def test_renderable_skills_become_summary_lines(self):
        rendered = to_renderable(normalize_section("Skills", {"summary": ["Languages: Python, Go"]}))

        self.assertEqual(rendered.summary, ["Languages: Python, Go"])
        self.assertEqual(rendered.entries, [])

    def test_renderable_opaque_uses_line_classifier(self):
        text = "Acme Corp — Senior Engineer\n2019 - 2021\n• Built APIs"
        rendered = to_renderable(normalize_section("Experience", text))

        self.assertEqual(len(rendered.entries), 1)
        self.assertEqual(rendered.entries[0].primary, "Acme Corp")
        self.assertEqual(rendered.entries[0].bullets, ["Built APIs"])


if __name__ == "__main__":
    unittest.main()
