import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resumedoc.normalize.raw_payload import normalize_resume_payload  # noqa: E402
from resumedoc.scoring.common import count_verb_usage, has_quantified_content, round_half_up  # noqa: E402
from resumedoc.scoring.generic import calculate_generic_score  # noqa: E402


def _rich_resume():
    return normalize_resume_payload(
        {
            "sections": [
                {
                    "heading": "Contact",
                    "body": {"name": "Jane Doe", "email": "jane@example.com", "phone": "555-123-4567"},
                },
                {"heading": "Summary", "body": {"summary": ["Backend engineer with 8 years in payments."]}},
                {
                    "heading": "Experience",
                    "body": [
                        {
                            "company": "Acme",
                            "title": "Senior Engineer",
                            "dates": "2019 - 2024",
                            "bullets": [
                                "Led a team of 6 engineers to rebuild the billing platform",
                                "Reduced checkout latency by 35% across 4 regions",
                                "Built a fraud detection service processing $2M daily",
                                "Automated release tooling and improved deploy frequency",
                                "Designed the event pipeline used by 12 product teams",
                            ],
                        },
                        {
                            "company": "Beta",
                            "title": "Engineer",
                            "dates": "2016 - 2019",
                            "bullets": [
                                "Developed internal APIs for the onboarding flow",
                                "Implemented monitoring dashboards and resolved incidents",
                                "Collaborated with design on a new account settings page",
                            ],
                        },
                    ],
                },
                {
                    "heading": "Education",
                    "body": [{"institution": "State University", "degree": "BSc Computer Science", "dates": "2016"}],
                },
                {"heading": "Skills", "body": {"summary": ["Languages: Python, Go, SQL", "Tools: Docker, Kubernetes"]}},
                {
                    "heading": "Projects",
                    "body": [{"name": "ledgerlite", "description": "Created an open-source double-entry ledger"}],
                },
            ]
        }
    )


def _weak_resume():
    return normalize_resume_payload(
        {
            "sections": [
                {"heading": "Contact", "body": {"name": "Sam Lee", "email": "sam@example.com"}},
                {
                    "heading": "Experience",
                    "body": [
                        {
                            "company": "Gamma",
                            "title": "Support Engineer",
                            "bullets": [
                                "Worked on the billing dashboard with the team",
                                "Handled customer tickets for the support desk",
                            ],
                        }
                    ],
                },
            ]
        }
    )


class GenericScoreTests(unittest.TestCase):
    def test_overall_matches_subscores(self):
        score = calculate_generic_score(_rich_resume())

        parts = [part for _, part in score.breakdown.categories()]
        self.assertEqual([part.max_score for part in parts], [30, 25, 20, 15, 10])
        for part in parts:
            self.assertGreaterEqual(part.score, 0)
            self.assertLessEqual(part.score, part.max_score)
        self.assertLessEqual(abs(sum(part.score for part in parts) - score.overall_score), 0.5)
        self.assertEqual(score.overall_score, round_half_up(sum(part.score for part in parts)))

    def test_rich_resume_structure(self):
        score = calculate_generic_score(_rich_resume())

        self.assertAlmostEqual(score.breakdown.structure_completeness.score, 18.34, places=2)
        self.assertEqual(score.breakdown.content_quality.details[0][0], "✅")
        self.assertGreaterEqual(score.breakdown.action_verbs_usage.score, 8)

    def test_weak_resume_without_action_verbs(self):
        score = calculate_generic_score(_weak_resume())

        verbs = score.breakdown.action_verbs_usage
        self.assertEqual(verbs.score, 0)
        self.assertIn("add action verbs", verbs.details[0])

        content_details = " ".join(score.breakdown.content_quality.details)
        self.assertIn("Missing quantified achievements", content_details)
        self.assertIn("add action verbs", content_details)

        self.assertLess(score.overall_score, 70)
        self.assertIn("Accept AI suggestions to improve your resume score", score.suggestions)
        self.assertIn("Language", score.improvement_areas)

    def test_committed_edits_are_scored(self):
        sections = _weak_resume()
        edits = {
            "Experience": {
                "entries": [
                    {
                        "company": "Gamma",
                        "title": "Support Engineer",
                        "bullets": [
                            "Resolved 40+ customer tickets per week",
                            "Improved first response time by 25%",
                            "Automated triage and reduced backlog by 30%",
                        ],
                    }
                ]
            }
        }

        before = calculate_generic_score(sections)
        after = calculate_generic_score(sections, edits)

        self.assertGreater(after.breakdown.action_verbs_usage.score, before.breakdown.action_verbs_usage.score)
        self.assertGreater(after.breakdown.content_quality.score, before.breakdown.content_quality.score)
        self.assertGreater(after.overall_score, before.overall_score)

    def test_quantified_patterns(self):
        self.assertTrue(has_quantified_content("Grew revenue to $3M"))
        self.assertTrue(has_quantified_content("Cut costs 20%"))
        self.assertTrue(has_quantified_content("Mentored 10+ engineers"))
        self.assertTrue(has_quantified_content("Improved uptime from 97 to 99.9"))
        self.assertFalse(has_quantified_content("Maintained the build system"))

    def test_verb_usage_counts_prefix_forms(self):
        counts = count_verb_usage("Led the rollout. Built tools, built dashboards.")

        self.assertEqual(counts, {"led": 1, "built": 2})


if __name__ == "__main__":
    unittest.main()
