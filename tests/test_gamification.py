# =============================================================================
# tests/test_gamification.py - XP, streak, progress and task seeding rules
# =============================================================================

from datetime import date, timedelta

import pytest

from studentpath.services.gamification import (
    REWARD_TIERS, XP_RULES, build_task_rows, difficulty_for_rate, next_streak, progress_percent, week_number,
    tiers_reached, xp_for_completion,
)

TODAY = date(2025, 3, 10)


class TestStreak:

    def test_first_completion_starts_streak(self):
        assert next_streak(None, 0, TODAY) == 1

    def test_yesterday_extends_streak(self):
        assert next_streak(TODAY - timedelta(days=1), 4, TODAY) == 5

    def test_same_day_keeps_streak(self):
        assert next_streak(TODAY, 4, TODAY) == 4

    def test_gap_resets_streak(self):
        assert next_streak(TODAY - timedelta(days=3), 9, TODAY) == 1


class TestXp:

    def test_plain_completion(self):
        assert xp_for_completion(XP_RULES["medium"], 3) == 40

    @pytest.mark.parametrize("streak", [7, 14, 21])
    def test_every_seventh_day_adds_bonus(self, streak):
        assert xp_for_completion(XP_RULES["hard"], streak) == 60 + XP_RULES["streak_bonus"]

    def test_tiers_reached(self):
        assert tiers_reached(499) == []
        assert [t["badge"] for t in tiers_reached(1500)] == ["Beginner Achiever", "Consistency King"]
        assert len(tiers_reached(10_000)) == len(REWARD_TIERS)


class TestProgressAndDifficulty:

    def test_progress_two_decimals(self):
        assert progress_percent(1, 3) == 33.33
        assert progress_percent(2, 3) == 66.67

    def test_progress_with_no_tasks(self):
        assert progress_percent(0, 0) == 0

    @pytest.mark.parametrize("rate, expected", [
        (95, "hard"),
        (90, "hard"),
        (89.9, "medium"),
        (50, "medium"),
        (49, "easy"),
    ])
    def test_difficulty_for_rate(self, rate, expected):
        assert difficulty_for_rate(rate) == expected


class TestBuildTaskRows:

    def test_tasks_paired_per_day(self):
        milestones = [{"week": 1, "title": "Arrays", "tasks": ["a", "b", "c", "d"], "targetSkills": ["DSA"]}]

        rows = build_task_rows(milestones, "easy", start_date=TODAY)

        assert len(rows) == 2
        assert rows[0]["morning_task"] == "a"
        assert rows[0]["evening_task"] == "b"
        assert rows[1]["task_date"] == TODAY + timedelta(days=1)
        assert all(r["skill_focus"] == "DSA" and r["xp"] == 20 for r in rows)

    def test_odd_task_repeats_as_evening(self):
        rows = build_task_rows([{"week": 1, "tasks": ["a", "b", "c"]}], start_date=TODAY)
        assert rows[-1]["morning_task"] == "c"
        assert rows[-1]["evening_task"] == "c"

    def test_week_offsets_dates(self):
        rows = build_task_rows([{"week": 3, "tasks": ["x"]}], start_date=TODAY)
        assert rows[0]["task_date"] == TODAY + timedelta(days=14)
        assert rows[0]["week_number"] == 3

    def test_skill_focus_falls_back_to_title(self):
        rows = build_task_rows([{"week": 1, "title": "Focus: SQL", "tasks": ["x"]}], start_date=TODAY)
        assert rows[0]["skill_focus"] == "Focus: SQL"

    def test_milestone_without_tasks_adds_nothing(self):
        assert build_task_rows([{"week": 1, "tasks": []}], start_date=TODAY) == []

    def test_week_label_text_is_parsed(self):
        rows = build_task_rows([{"week": "Week 3", "tasks": ["x"]}], start_date=TODAY)
        assert rows[0]["week_number"] == 3
        assert rows[0]["task_date"] == TODAY + timedelta(days=14)

    def test_unreadable_week_uses_milestone_position(self):
        milestones = [
            {"week": 1, "tasks": ["a"]},
            {"week": "final stretch", "tasks": ["b"]},
            {"tasks": ["c"]},
        ]
        rows = build_task_rows(milestones, start_date=TODAY)
        assert [r["week_number"] for r in rows] == [1, 2, 3]
        assert rows[2]["task_date"] == TODAY + timedelta(days=14)

    @pytest.mark.parametrize("value,expected", [(4, 4), ("4", 4), ("Week 04", 4), ("", 2), (None, 2), ("0", 2)])
    def test_week_number(self, value, expected):
        assert week_number(value, 2) == expected
