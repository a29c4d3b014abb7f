"""
Career Plan Gamification

The LLM drafts a plan once. Everything after that is deterministic and
lives here: seeding daily tasks from milestones, XP, streaks, badges,
progress, weekly difficulty adjustment, skill radar and the leaderboard.

Pure helpers (next_streak, xp_for_completion, ...) hold the rules; the
database functions below only load state, apply a helper and persist.
"""

import logging
import re
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import text

from studentpath.core.exceptions import NotFoundError, TaskAlreadyCompletedError
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


XP_RULES = {
    "easy": 20,
    "medium": 40,
    "hard": 60,
    "weekly_challenge": 150,
    "streak_bonus": 100,
}

REWARD_TIERS = [
    {"xp": 500, "badge": "Beginner Achiever", "icon": "🌱", "description": "You've taken your first steps!"},
    {"xp": 1500, "badge": "Consistency King", "icon": "🔥", "description": "Showing up every day!"},
    {"xp": 3000, "badge": "Placement Warrior", "icon": "⚔️", "description": "Halfway to the top!"},
    {"xp": 5000, "badge": "Elite Candidate", "icon": "👑", "description": "You're in the top tier!"},
]

STREAK_BONUS_EVERY = 7


# ============================================================
# RULES (pure)
# ============================================================

def next_streak(last_completed_date: Optional[date], current_streak: int, today: date) -> int:
    """Yesterday extends the streak, today keeps it, anything older restarts at 1."""
    if last_completed_date is None:
        return 1
    if last_completed_date == today - timedelta(days=1):
        return current_streak + 1
    if last_completed_date == today:
        return current_streak
    return 1


def xp_for_completion(task_xp: int, new_streak: int) -> int:
    if new_streak > 0 and new_streak % STREAK_BONUS_EVERY == 0:
        return task_xp + XP_RULES["streak_bonus"]
    return task_xp


def progress_percent(done: int, total: int) -> float:
    return round_half_up(done / max(total, 1) * 100, 2)


def tiers_reached(total_xp: int) -> List[dict]:
    return [tier for tier in REWARD_TIERS if total_xp >= tier["xp"]]


def difficulty_for_rate(rate: float) -> str:
    if rate >= 90:
        return "hard"
    if rate < 50:
        return "easy"
    return "medium"


def week_number(value, position: int) -> int:
    """Week from values like 3, "3" or "Week 3"; the milestone position otherwise."""
    match = re.search(r"\d+", str(value or ""))
    if match and int(match.group()) > 0:
        return int(match.group())
    return position


def build_task_rows(milestones: List[dict], difficulty: str = "medium", start_date: date = None) -> List[dict]:
    """
    Turn plan milestones into daily task rows.

    Tasks of a week are paired (morning, evening), one pair per day starting
    on day 1 of that week. An odd task out repeats as its own evening task.
    """
    start_date = start_date or date.today()
    xp = XP_RULES[difficulty]
    rows = []

    for position, milestone in enumerate(milestones, start=1):
        week = week_number(milestone.get("week"), position)
        tasks = milestone.get("tasks") or []
        target_skills = milestone.get("targetSkills") or []
        skill_focus = target_skills[0] if target_skills else milestone.get("title", "")

        for day_index, i in enumerate(range(0, len(tasks), 2)):
            morning = tasks[i] or ""
            evening = (tasks[i + 1] if i + 1 < len(tasks) else "") or morning
            rows.append({
                "week_number": week,
                "task_date": start_date + timedelta(days=(week - 1) * 7 + day_index),
                "skill_focus": skill_focus,
                "morning_task": morning,
                "evening_task": evening,
                "difficulty": difficulty,
                "xp": xp,
            })

    return rows


# ============================================================
# PLANS
# ============================================================

def find_plan_for_target(student_id: int, target_id: str) -> Optional[int]:
    with get_db_session() as db:
        row = db.execute(
            text("SELECT id FROM career_plans WHERE student_id = :sid AND target_id = :tid"),
            {"sid": student_id, "tid": target_id}
        ).fetchone()
    return row.id if row else None


def find_plan_for_student(plan_id: int, student_id: int) -> bool:
    with get_db_session() as db:
        row = db.execute(
            text("SELECT id FROM career_plans WHERE id = :pid AND student_id = :sid AND is_active = TRUE"),
            {"pid": plan_id, "sid": student_id}
        ).fetchone()
    return row is not None


def add_plan(
    student_id: int,
    target_id: str,
    target_name: str,
    milestones: List[dict],
    track_type: str = "placement",
    difficulty: str = "medium",
) -> int:
    """Insert a plan and seed its tasks in one transaction. Returns the plan id."""
    with get_db_session() as db:
        plan_id = db.execute(
            text("""
                INSERT INTO career_plans
                    (student_id, target_id, target_name, track_type, difficulty_level, is_active)
                VALUES (:sid, :tid, :tname, :track, :difficulty, TRUE)
                RETURNING id
            """),
            {
                "sid": student_id,
                "tid": target_id,
                "tname": target_name,
                "track": track_type,
                "difficulty": difficulty,
            }
        ).scalar()

        rows = build_task_rows(milestones, difficulty)
        for row in rows:
            db.execute(
                text("""
                    INSERT INTO career_tasks
                        (plan_id, week_number, task_date, skill_focus, morning_task, evening_task, difficulty, xp)
                    VALUES
                        (:plan_id, :week_number, :task_date, :skill_focus, :morning_task, :evening_task, :difficulty, :xp)
                """),
                {"plan_id": plan_id, **row}
            )

    logger.info(f"Plan {plan_id} created for student {student_id} with {len(rows)} tasks")
    return plan_id


def delete_plan(plan_id: int, student_id: int) -> bool:
    """Hard delete; tasks and rewards go with it (ON DELETE CASCADE)."""
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM career_plans WHERE id = :pid AND student_id = :sid"),
            {"pid": plan_id, "sid": student_id}
        )
        return result.rowcount > 0


def get_plan_with_tasks(plan_id: int, student_id: int) -> Optional[dict]:
    with get_db_session() as db:
        plan = db.execute(
            text("SELECT * FROM career_plans WHERE id = :pid AND student_id = :sid AND is_active = TRUE"),
            {"pid": plan_id, "sid": student_id}
        ).fetchone()
        if not plan:
            return None

        tasks = db.execute(
            text("SELECT * FROM career_tasks WHERE plan_id = :pid ORDER BY week_number, id"),
            {"pid": plan_id}
        ).fetchall()

        rewards = db.execute(
            text("""
                SELECT * FROM career_rewards
                WHERE plan_id = :pid AND student_id = :sid
                ORDER BY xp_threshold
            """),
            {"pid": plan_id, "sid": student_id}
        ).fetchall()

    return {
        "plan": row_to_dict(plan),
        "tasks": [row_to_dict(t) for t in tasks],
        "rewards": [row_to_dict(r) for r in rewards],
    }


def get_student_plans(student_id: int) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT * FROM career_plans
                WHERE student_id = :sid AND is_active = TRUE
                ORDER BY created_at DESC
            """),
            {"sid": student_id}
        ).fetchall()
    return [row_to_dict(r) for r in rows]


# ============================================================
# TASK COMPLETION
# ============================================================

def complete_task(task_id: int, plan_id: int, student_id: int, today: date = None) -> dict:
    """
    Complete a task and apply XP, streak, progress and badge rules.

    Raises:
        TaskAlreadyCompletedError: task missing from the plan or already done
        NotFoundError: plan does not belong to the student
    """
    today = today or date.today()

    with get_db_session() as db:
        task = db.execute(
            text("""
                SELECT * FROM career_tasks
                WHERE id = :tid AND plan_id = :pid AND is_completed = FALSE
            """),
            {"tid": task_id, "pid": plan_id}
        ).fetchone()
        if not task:
            raise TaskAlreadyCompletedError(task_id)

        db.execute(
            text("UPDATE career_tasks SET is_completed = TRUE, completed_at = NOW() WHERE id = :tid"),
            {"tid": task_id}
        )

        plan = db.execute(
            text("SELECT * FROM career_plans WHERE id = :pid AND student_id = :sid"),
            {"pid": plan_id, "sid": student_id}
        ).fetchone()
        if not plan:
            raise NotFoundError("Plan not found")

        new_streak = next_streak(plan.last_completed_date, plan.current_streak or 0, today)
        new_xp = (plan.total_xp or 0) + xp_for_completion(task.xp, new_streak)

        counts = db.execute(
            text("""
                SELECT COUNT(*) AS total,
                       COUNT(*) FILTER (WHERE is_completed) AS done
                FROM career_tasks WHERE plan_id = :pid
            """),
            {"pid": plan_id}
        ).fetchone()
        new_progress = progress_percent(counts.done or 0, counts.total or 0)

        db.execute(
            text("""
                UPDATE career_plans
                SET total_xp = :xp, current_streak = :streak,
                    last_completed_date = :today, progress = :progress
                WHERE id = :pid
            """),
            {"xp": new_xp, "streak": new_streak, "today": today, "progress": new_progress, "pid": plan_id}
        )

        # RETURNING only yields rows that were actually inserted, i.e. new badges
        new_rewards = []
        for tier in tiers_reached(new_xp):
            inserted = db.execute(
                text("""
                    INSERT INTO career_rewards (student_id, plan_id, badge_name, badge_icon, xp_threshold)
                    VALUES (:sid, :pid, :badge, :icon, :xp)
                    ON CONFLICT (student_id, plan_id, badge_name) DO NOTHING
                    RETURNING *
                """),
                {"sid": student_id, "pid": plan_id, "badge": tier["badge"], "icon": tier["icon"], "xp": tier["xp"]}
            ).fetchone()
            if inserted:
                new_rewards.append(row_to_dict(inserted))

    if new_rewards:
        logger.info(f"Student {student_id} unlocked {[r['badge_name'] for r in new_rewards]}")

    return {
        "newXp": new_xp,
        "newStreak": new_streak,
        "newRewards": new_rewards,
        "newProgress": new_progress,
    }


# ============================================================
# DIFFICULTY, RADAR, LEADERBOARD
# ============================================================

def adjust_difficulty(plan_id: int) -> str:
    """Re-rate the plan from the completion rate of the last 7 days of tasks."""
    with get_db_session() as db:
        counts = db.execute(
            text("""
                SELECT COUNT(*) AS total,
                       COUNT(*) FILTER (WHERE is_completed) AS done
                FROM career_tasks
                WHERE plan_id = :pid AND task_date >= CURRENT_DATE - INTERVAL '7 days'
            """),
            {"pid": plan_id}
        ).fetchone()

        total = counts.total or 0
        rate = (counts.done or 0) / total * 100 if total > 0 else 50
        difficulty = difficulty_for_rate(rate)

        db.execute(
            text("UPDATE career_plans SET difficulty_level = :difficulty WHERE id = :pid"),
            {"difficulty": difficulty, "pid": plan_id}
        )
    return difficulty


def get_skill_radar(plan_id: int) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT skill_focus,
                       COUNT(*) AS total,
                       COUNT(*) FILTER (WHERE is_completed) AS completed,
                       ROUND(COUNT(*) FILTER (WHERE is_completed) * 100.0 / COUNT(*), 1) AS completion_rate
                FROM career_tasks
                WHERE plan_id = :pid AND skill_focus IS NOT NULL AND skill_focus != ''
                GROUP BY skill_focus
                ORDER BY completion_rate DESC
            """),
            {"pid": plan_id}
        ).fetchall()

    return [
        {
            "skill": r.skill_focus,
            "completion_rate": float(r.completion_rate or 0),
            "completed": r.completed or 0,
            "total": r.total or 0,
        }
        for r in rows
    ]


def get_leaderboard(limit: int = 10) -> List[dict]:
    safe_limit = max(1, min(100, int(limit)))
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT s.student_id,
                       s.first_name || ' ' || s.last_name AS name,
                       SUM(cp.total_xp) AS total_xp
                FROM students s
                JOIN career_plans cp ON s.student_id = cp.student_id
                WHERE cp.is_active = TRUE
                GROUP BY s.student_id, s.first_name, s.last_name
                ORDER BY total_xp DESC
                LIMIT :limit
            """),
            {"limit": safe_limit}
        ).fetchall()

    return [
        {"student_id": r.student_id, "name": r.name, "total_xp": int(r.total_xp or 0), "rank": idx + 1}
        for idx, r in enumerate(rows)
    ]


def get_student_rank(student_id: int) -> dict:
    with get_db_session() as db:
        total_xp = db.execute(
            text("""
                SELECT COALESCE(SUM(total_xp), 0) FROM career_plans
                WHERE student_id = :sid AND is_active = TRUE
            """),
            {"sid": student_id}
        ).scalar() or 0

        rank = db.execute(
            text("""
                SELECT COUNT(*) + 1 FROM (
                    SELECT student_id, SUM(total_xp) AS total_xp
                    FROM career_plans WHERE is_active = TRUE
                    GROUP BY student_id
                ) ranked
                WHERE total_xp > :xp
            """),
            {"xp": total_xp}
        ).scalar() or 1

    return {"total_xp": int(total_xp), "rank": int(rank)}


# ============================================================
# REMINDERS
# ============================================================

def get_pending_reminders() -> List[dict]:
    """Students with incomplete tasks dated today, one row per (student, target)."""
    with get_db_session() as db:
        rows = db.execute(text("""
            SELECT s.email,
                   s.first_name || ' ' || s.last_name AS name,
                   cp.target_name,
                   COUNT(ct.id) AS pending_count
            FROM students s
            JOIN career_plans cp ON s.student_id = cp.student_id
            JOIN career_tasks ct ON cp.id = ct.plan_id
            WHERE ct.task_date = CURRENT_DATE
              AND ct.is_completed = FALSE
              AND cp.is_active = TRUE
            GROUP BY s.email, s.first_name, s.last_name, cp.target_name
        """)).fetchall()
    return [row_to_dict(r) for r in rows]
