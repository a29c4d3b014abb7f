# =============================================================================
# tests/test_ats_scorer.py - Rule-based ATS scoring
# =============================================================================

import pytest

from studentpath.services.ats_scorer import calculate_ats_score, normalize_text, text_contains


STRONG_RESUME = """
Jane Doe | jane@example.com | Phone: 9999999999 | linkedin.com/in/jane | github.com/jane

EDUCATION
B.Tech in Computer Science, XYZ University, CGPA 8.7

SKILLS
Python, React.js, Node.js, PostgreSQL, Docker

EXPERIENCE
Software Intern, Acme Corp, Jun 2024 - Aug 2024
- Developed REST APIs, optimized queries and deployed services to AWS

PROJECTS
- Built a chat app using React serving 500 users
- Developed a recommendation engine with Python, improved by 30%

CERTIFICATIONS
AWS Cloud Practitioner
"""


class TestNormalization:

    def test_strips_dots_dashes_underscores(self):
        assert normalize_text("Node.js  and_React-Native") == "nodejs andreactnative"

    def test_direct_substring_match(self):
        assert text_contains(normalize_text("I use Python daily"), "python")

    def test_variation_group_match(self):
        # "js" is in the javascript group
        assert text_contains(normalize_text("Expert in JavaScript"), "JS")

    def test_unknown_term_missing(self):
        assert not text_contains(normalize_text("Java developer"), "Kotlin")


class TestCalculateAtsScore:

    def test_section_maxima_sum_to_100(self):
        result = calculate_ats_score("anything", {"required_skills": ["x"], "keywords": ["y"]})
        assert sum(s["maxScore"] for s in result["sectionScores"]) == 100

    def test_empty_requirements_give_full_match_points(self):
        result = calculate_ats_score("hello world", {"required_skills": [], "keywords": []})
        scores = {s["name"]: s["score"] for s in result["sectionScores"]}

        assert scores["Skills Match"] == 30
        assert scores["Keywords"] == 20
        assert scores["Projects"] == 0
        assert scores["Experience"] == 0
        assert scores["Structure"] == 0
        assert result["totalScore"] == 50

    def test_partial_skill_match_uses_half_up_rounding(self):
        # 1 of 4 skills -> 7.5 -> 8
        result = calculate_ats_score(
            "python",
            {"required_skills": ["Python", "Go", "Rust", "Haskell"], "keywords": []},
        )
        skills = result["sectionScores"][0]

        assert skills["score"] == 8
        assert result["matchedSkills"] == ["Python"]
        assert result["missingSkills"] == ["Go", "Rust", "Haskell"]

    def test_strong_resume_scores_every_section(self):
        result = calculate_ats_score(
            STRONG_RESUME,
            {"required_skills": ["Python", "React", "PostgreSQL"], "keywords": ["REST API", "Docker"]},
        )
        scores = {s["name"]: s["score"] for s in result["sectionScores"]}

        assert scores["Skills Match"] == 30
        assert scores["Keywords"] == 20
        assert scores["Projects"] == 20
        assert scores["Experience"] == 15
        assert scores["Structure"] == 15
        assert result["totalScore"] == 100

    @pytest.mark.parametrize("contact, expected", [
        ("", 0),
        ("reach me at someone@example.com", 2),
        ("email a@b.com phone 123 github.com/me", 4),
    ])
    def test_contact_points(self, contact, expected):
        result = calculate_ats_score(contact, {"required_skills": [], "keywords": []})
        structure = result["sectionScores"][4]
        # No education/skills/section words in these strings
        assert structure["score"] == expected
