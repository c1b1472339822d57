import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.projection.line_classifier import (  # noqa: E402
    LineClass,
    LineClassifier,
    ParserState,
    classify_line,
    parse_text_block,
)


class LineClassifierTests(unittest.TestCase):
    def test_token_classes(self):
        self.assertIs(classify_line("").cls, LineClass.BLANK)
        self.assertIs(classify_line("2019 - 2021").cls, LineClass.DATE_RANGE)
        self.assertIs(classify_line("Jan 2020 to Present").cls, LineClass.DATE_RANGE)
        self.assertIs(classify_line("Acme Corp").cls, LineClass.SHORT_NAME)
        self.assertIs(
            classify_line("Experienced engineer who enjoys building reliable systems.").cls,
            LineClass.TEXT,
        )

        bullet = classify_line("• Built APIs")
        self.assertIs(bullet.cls, LineClass.BULLET)
        self.assertEqual(bullet.text, "Built APIs")

        header = classify_line("Acme Corp — Senior Engineer")
        self.assertIs(header.cls, LineClass.HEADER_PAIR)
        self.assertEqual(header.parts, ("Acme Corp", "Senior Engineer"))

    def test_header_pair_with_dates(self):
        token = classify_line("Acme Corp | Engineer | 2019 - 2021")

        self.assertIs(token.cls, LineClass.HEADER_PAIR)
        self.assertEqual(token.parts, ("Acme Corp", "Engineer"))
        self.assertEqual(token.dates, "2019 - 2021")

    def test_state_transitions(self):
        classifier = LineClassifier()
        self.assertIs(classifier.state, ParserState.SEEKING_ENTRY)

        classifier.feed(classify_line("Acme Corp — Engineer"))
        self.assertIs(classifier.state, ParserState.IN_ENTRY_HEADER)

        classifier.feed(classify_line("• Built APIs"))
        self.assertIs(classifier.state, ParserState.IN_BULLETS)

        classifier.feed(classify_line("Beta LLC — Intern"))
        self.assertIs(classifier.state, ParserState.IN_ENTRY_HEADER)
        self.assertEqual(len(classifier.block.entries), 2)

    def test_bullets_before_any_header_open_one_entry(self):
        classifier = LineClassifier()
        classifier.feed(classify_line("• Built APIs"))
        self.assertIs(classifier.state, ParserState.IN_BULLETS)
        classifier.feed(classify_line("• Led a team of 4"))

        self.assertEqual(len(classifier.block.entries), 1)
        entry = classifier.block.entries[0]
        self.assertEqual(entry.primary, "")
        self.assertEqual(entry.bullets, ["Built APIs", "Led a team of 4"])

    def test_groups_lines_into_entries(self):
        block = parse_text_block(
            "\n".join(
                [
                    "Acme Corp — Senior Engineer",
                    "2019 - 2021",
                    "• Built APIs",
                    "• Led migrations",
                    "",
                    "Beta LLC",
                    "Engineer",
                    "2017 - 2019",
                    "• Wrote tests",
                ]
            )
        )

        self.assertEqual(len(block.entries), 2)
        first, second = block.entries
        self.assertEqual((first.primary, first.secondary, first.meta), ("Acme Corp", "Senior Engineer", "2019 - 2021"))
        self.assertEqual(first.bullets, ["Built APIs", "Led migrations"])
        self.assertEqual((second.primary, second.secondary, second.meta), ("Beta LLC", "Engineer", "2017 - 2019"))
        self.assertEqual(second.bullets, ["Wrote tests"])

    def test_leading_prose_is_summary(self):
        block = parse_text_block("Backend engineer focused on reliability.\n• Built APIs")

        self.assertEqual(block.summary, ["Backend engineer focused on reliability."])
        self.assertEqual(len(block.entries), 1)
        self.assertEqual(block.entries[0].bullets, ["Built APIs"])


if __name__ == "__main__":
    unittest.main()
