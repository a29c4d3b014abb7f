# =============================================================================
# tests/test_helpers.py - Rounding, reminder subjects and fallback feedback
# =============================================================================

import pytest

from studentpath.services.email_service import reminder_subject
from studentpath.services.resume_feedback import fallback_feedback
from studentpath.utils.rounding import round_half_up


class TestRoundHalfUp:

    @pytest.mark.parametrize("value, ndigits, expected", [
        (2.5, 0, 3),
        (0.5, 0, 1),
        (2.4, 0, 2),
        (0.625, 2, 0.63),
        (33.333, 2, 33.33),
    ])
    def test_halves_round_up(self, value, ndigits, expected):
        assert round_half_up(value, ndigits) == expected

    def test_whole_numbers_are_ints(self):
        assert isinstance(round_half_up(7.6), int)


class TestReminderSubject:

    def test_singular(self):
        assert reminder_subject(1).startswith("⚡ 1 Task Pending Today")

    def test_plural(self):
        assert "3 Tasks Pending Today" in reminder_subject(3)


class TestFallbackFeedback:

    def test_shape(self):
        ats = {
            "totalScore": 54,
            "missingSkills": ["Docker", "Kubernetes", "AWS", "Go"],
            "missingKeywords": ["microservices"],
        }

        feedback = fallback_feedback(ats, {"company_name": "Acme"})

        assert len(feedback["rejectionReasons"]) == 3
        assert feedback["rejectionReasons"][0]["reason"] == "Missing required skill: Docker"
        assert [g["skill"] for g in feedback["skillGapAnalysis"]] == ats["missingSkills"]
        assert [s["priority"] for s in feedback["improvementSteps"]] == [1, 2, 3]
        assert feedback["bulletSuggestions"] == []
        assert feedback["overallVerdict"].startswith("Your resume scores 54/100 for Acme.")
