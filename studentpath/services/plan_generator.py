"""
Career Plan Generator

1. Build a prompt from the student's skill levels vs the target's required skills
2. Ask the LLM for a week-by-week plan in strict JSON
3. Parse the answer into the plan shape the client renders

If the answer cannot be parsed, a rule-based plan is returned instead
(largest skill gaps first), so the student always gets a plan.
"""

import json
import logging
import re
from typing import Dict, List, Optional

import openai
from pydantic import BaseModel

from studentpath.core.exceptions import ExternalServiceError, RateLimitExceededError
from studentpath.services.llm_client import get_llm_client
from studentpath.services.mongo_service import GeneratedPlanStore, safe_write

logger = logging.getLogger(__name__)

MAX_PROFICIENCY = 5

SYSTEM_PROMPT = (
    "You are an expert career counselor specializing in engineering student career guidance in India. "
    "You create detailed, actionable preparation plans. Always respond with valid JSON only."
)


class PlanRequest(BaseModel):
    track_type: str
    target_id: str
    target_name: str
    required_skills: List[str]
    student_skills: Dict[str, int]  # skill -> proficiency 1-5
    semester: int = 6
    time_remaining_weeks: int = 12
    additional_context: Optional[str] = None

    @property
    def is_placement(self) -> bool:
        return self.track_type == "placement"


def _skill_gaps(request: PlanRequest) -> List[dict]:
    return [
        {"skill": skill, "current": request.student_skills.get(skill) or 0, "required": MAX_PROFICIENCY}
        for skill in request.required_skills
    ]


# ============================================================
# PROMPT
# ============================================================

def build_plan_prompt(request: PlanRequest) -> str:
    gap_lines = []
    for skill in request.required_skills:
        current = request.student_skills.get(skill) or 0
        gap = max(MAX_PROFICIENCY - current, 0)
        gap_lines.append(f"- {skill}: Current Level {current}/5, Gap: {gap} levels")

    bonus_lines = [
        f"- {skill}: Level {level}/5"
        for skill, level in request.student_skills.items()
        if skill not in request.required_skills
    ]

    plan_kind = "placement preparation" if request.is_placement else "exam preparation"
    target_line = f"Target Company: {request.target_name}" if request.is_placement else f"Target Exam: {request.target_name}"
    bonus_section = "## Bonus Skills (student already has)\n" + "\n".join(bonus_lines) if bonus_lines else ""
    context_section = f"## Additional Context\n{request.additional_context}" if request.additional_context else ""
    newline = "\n"

    return f"""You are an expert career counselor and study planner for engineering students in India.

A student needs a personalized {plan_kind} plan.

## Student Profile
- Current Semester: {request.semester}
- Time Available: {request.time_remaining_weeks} weeks
- {target_line}

## Skill Gap Analysis
Required skills and current proficiency (scale 1-5):
{newline.join(gap_lines)}

{bonus_section}

{context_section}

## Instructions
Generate a detailed {request.time_remaining_weeks}-week preparation plan in the following JSON format.
Be very specific with tasks and resources. Include real resource names (websites, books, platforms).

Respond ONLY with valid JSON in this exact format:
{{
  "summary": "Brief 2-3 sentence overview of the plan",
  "milestones": [
    {{
      "week": 1,
      "title": "Week title/theme",
      "tasks": ["Specific task 1", "Specific task 2", "Specific task 3"],
      "resources": ["Resource name/link 1", "Resource name/link 2"],
      "targetSkills": ["Skill being developed"]
    }}
  ],
  "dailySchedule": "Recommended daily study schedule (e.g., '2 hours morning DSA + 1 hour evening practice')",
  "tips": ["Tip 1", "Tip 2", "Tip 3"]
}}

Important rules:
- Each week should have 3-5 specific, actionable tasks
- Include real resource names (LeetCode, GeeksforGeeks, specific book names, YouTube channels etc.)
- Prioritize skills with the largest gaps first
- If time is limited (< 8 weeks), focus on highest-impact areas only
- Make the plan realistic and achievable for a college student
- Include practice tests/mock interviews in the final weeks"""


# ============================================================
# PARSING
# ============================================================

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _parse_plan_json(response: str, request: PlanRequest) -> Optional[dict]:
    try:
        match = _FENCED_JSON.search(response)
        json_str = match.group(1) if match else response
        parsed = json.loads(json_str.strip())

        return {
            "trackType": request.track_type,
            "targetName": request.target_name,
            "totalWeeks": request.time_remaining_weeks,
            "summary": parsed.get("summary") or "Your personalized preparation plan is ready.",
            "skillGaps": _skill_gaps(request),
            "milestones": parsed.get("milestones") or [],
            "dailySchedule": parsed.get("dailySchedule") or "2 hours morning + 1 hour evening",
            "tips": parsed.get("tips") or [],
        }
    except (ValueError, AttributeError) as e:
        logger.error(f"Failed to parse plan response: {e}")
        return None


def parse_plan_response(response: str, request: PlanRequest) -> dict:
    """Parse the LLM answer; any failure yields fallback_plan(request)."""
    return _parse_plan_json(response, request) or fallback_plan(request)


def fallback_plan(request: PlanRequest) -> dict:
    skill_gaps = _skill_gaps(request)
    sorted_gaps = sorted(skill_gaps, key=lambda g: g["current"] - g["required"])
    weeks = request.time_remaining_weeks

    milestones = []
    for week in range(1, min(weeks, 12) + 1):
        focus = sorted_gaps[(week - 1) % len(sorted_gaps)]["skill"] if sorted_gaps else request.target_name
        milestones.append({
            "week": week,
            "title": f"Focus: {focus}",
            "tasks": [
                f"Study {focus} fundamentals (2 hours)",
                f"Practice {focus} problems (1.5 hours)",
                "Review and revise previous week's topics",
                "Take a mock test" if week > weeks - 3 else f"Build a small project using {focus}",
            ],
            "resources": ["GeeksforGeeks", "LeetCode", f"YouTube: {focus} tutorials"],
            "targetSkills": [focus],
        })

    return {
        "trackType": request.track_type,
        "targetName": request.target_name,
        "totalWeeks": weeks,
        "summary": (
            f"A {weeks}-week preparation plan for {request.target_name} focusing on your skill gaps. "
            "Prioritized by the largest gaps first."
        ),
        "skillGaps": skill_gaps,
        "milestones": milestones,
        "dailySchedule": "Morning: 2 hours focused study | Afternoon: 1 hour practice | Evening: 30 min revision",
        "tips": [
            "Consistency is more important than intensity. Study daily.",
            "Track your progress weekly and adjust the plan as needed.",
            "Practice under timed conditions to simulate real scenarios.",
            "Join online communities for peer support and motivation.",
        ],
    }


# ============================================================
# GENERATION
# ============================================================

def generate_plan(request: PlanRequest, user_id: int = None) -> dict:
    """
    Generate a plan through the LLM.

    Raises:
        RateLimitExceededError: the LLM provider is rate limiting us
        ExternalServiceError: the LLM failed or returned nothing
    """
    try:
        content = get_llm_client()._call_api(
            SYSTEM_PROMPT,
            build_plan_prompt(request),
            max_tokens=3000,
            temperature=0.7,
        )
    except openai.RateLimitError:
        raise RateLimitExceededError()
    except openai.AuthenticationError:
        raise ExternalServiceError("llm", "API key configuration error. Please contact support.", status_code=500)
    except openai.OpenAIError as e:
        logger.error(f"Error generating plan: {e}")
        raise ExternalServiceError("llm", "Failed to generate plan. Please try again.", status_code=500)

    if not content:
        raise ExternalServiceError("llm", "No response from AI. Please try again.", status_code=500)

    plan = _parse_plan_json(content, request)
    used_fallback = plan is None
    if used_fallback:
        plan = fallback_plan(request)

    safe_write(
        lambda: GeneratedPlanStore().insert(request.target_id, plan, used_fallback, user_id),
        f"generated plan for {request.target_id}",
    )
    return plan
