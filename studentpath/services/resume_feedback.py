"""
AI Resume Feedback

The ATS score is rule-based (ats_scorer). The LLM only explains it:
rejection reasons, skill gaps, prioritised improvement steps and bullet
rewrites. When the LLM is unavailable or answers with the wrong shape, a
deterministic fallback is built from the ATS result alone.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from studentpath.services.llm_client import get_llm_client

logger = logging.getLogger(__name__)


class StudentContext(BaseModel):
    name: str
    year: Optional[int] = None
    program: Optional[str] = None
    gpa: Optional[float] = None
    technical_skills: List[str] = []
    college: Optional[str] = None


SYSTEM_PROMPT = """You are an expert ATS (Applicant Tracking System) resume analyst working for a career guidance platform. Your task is to analyze a student's resume against a specific company and role, then provide actionable, specific feedback.

RULES:
1. You MUST return ONLY valid JSON. No markdown, no code fences, no explanation text outside JSON.
2. Be specific and actionable. Never give vague advice like "improve your resume".
3. Reference the actual company's hiring patterns and culture.
4. Consider the student's current year and experience level.
5. Be honest about rejection risks but always constructive.
6. Prioritize feedback by impact, most impactful improvements first.
7. For bullet suggestions, pick weak bullets from the resume text and show improved versions.

RESPONSE FORMAT (strict JSON):
{
  "rejectionReasons": [
    {"reason": "specific reason why ATS/recruiter would reject", "severity": "critical|major|minor", "fix": "specific fix for this issue"}
  ],
  "skillGapAnalysis": [
    {"skill": "skill name", "importance": "must-have|good-to-have|bonus", "currentLevel": "missing|basic|intermediate", "recommendation": "specific recommendation"}
  ],
  "improvementSteps": [
    {"priority": 1, "area": "area of improvement", "action": "specific action to take", "expectedImpact": "expected score improvement", "timeEstimate": "e.g. 1 week, 1 month"}
  ],
  "bulletSuggestions": [
    {"original": "weak bullet from resume", "improved": "improved version with metrics and action verbs", "reason": "why this is better"}
  ],
  "overallVerdict": "1-2 sentence overall assessment with encouragement"
}"""

REQUIRED_KEYS = ("rejectionReasons", "skillGapAnalysis", "improvementSteps")


def build_user_prompt(resume_text: str, ats_result: dict, requirements: dict, student: StudentContext) -> str:
    company = requirements["company_name"]
    sections = "\n".join(
        f"- {s['name']}: {s['score']}/{s['maxScore']} ({s['details']})"
        for s in ats_result["sectionScores"]
    )
    return f"""ANALYZE THIS RESUME for {company}, {requirements['role']} position.

=== STUDENT PROFILE ===
Name: {student.name}
College: {student.college or "Not specified"}
Program: {student.program or "Not specified"}
Year: {f"Year {student.year}" if student.year else "Not specified"}
CGPA: {student.gpa or "Not specified"}
Known Skills: {", ".join(student.technical_skills) or "Not specified"}

=== TARGET COMPANY & ROLE ===
Company: {company}
Role: {requirements['role']}
Required Skills: {", ".join(requirements.get('required_skills') or [])}
Important Keywords: {", ".join(requirements.get('keywords') or [])}
Project Expectations: {requirements.get('project_expectations') or "Standard project work expected"}
Min Experience: {requirements.get('min_experience_months') or 0} months

=== ATS SCORE BREAKDOWN (rule-based, already calculated) ===
Total Score: {ats_result['totalScore']}/100
{sections}

Skills Matched: {", ".join(ats_result['matchedSkills']) or "None"}
Skills Missing: {", ".join(ats_result['missingSkills']) or "None"}
Keywords Matched: {", ".join(ats_result['matchedKeywords']) or "None"}
Keywords Missing: {", ".join(ats_result['missingKeywords']) or "None"}

=== RESUME TEXT ===
{resume_text[:4000]}

=== INSTRUCTIONS ===
1. Provide 3-5 specific rejection reasons ranked by severity.
2. Analyze each missing skill: how important is it for {company}?
3. Give 5-7 prioritized improvement steps with time estimates.
4. Pick 2-3 weak bullet points from the resume and rewrite them with metrics and strong verbs.
5. Provide an encouraging overall verdict.

Return ONLY the JSON object described in the system prompt. No other text."""


def generate_ai_feedback(resume_text: str, ats_result: dict, requirements: dict, student: StudentContext) -> dict:
    """LLM feedback for an ATS result; falls back to rule-derived feedback."""
    try:
        parsed = get_llm_client().complete_json(
            SYSTEM_PROMPT,
            build_user_prompt(resume_text, ats_result, requirements, student),
            max_tokens=2000,
            temperature=0.7,
            json_mode=True,
        )
        if not all(parsed.get(key) is not None for key in REQUIRED_KEYS):
            raise ValueError("Invalid response structure from LLM")
        parsed.setdefault("bulletSuggestions", [])
        parsed.setdefault("overallVerdict", "")
        return parsed
    except Exception as e:
        logger.error(f"AI feedback failed, using fallback: {e}")
        return fallback_feedback(ats_result, requirements)


def fallback_feedback(ats_result: dict, requirements: dict) -> dict:
    missing_skills = ats_result["missingSkills"]
    missing_keywords = ats_result["missingKeywords"]

    rejection_reasons = [
        {
            "reason": f"Missing required skill: {skill}",
            "severity": "major",
            "fix": f"Add {skill} to your resume. Consider building a project using {skill}.",
        }
        for skill in missing_skills[:3]
    ]

    skill_gaps = [
        {
            "skill": skill,
            "importance": "must-have",
            "currentLevel": "missing",
            "recommendation": f"Learn {skill} through online courses or projects. "
                              "Add it to your skills section once proficient.",
        }
        for skill in missing_skills
    ]

    improvement_steps = [
        {
            "priority": 1,
            "area": "Skills",
            "action": f"Add missing skills: {', '.join(missing_skills)}",
            "expectedImpact": "Could improve score by 10-15 points",
            "timeEstimate": "1-2 weeks",
        },
        {
            "priority": 2,
            "area": "Keywords",
            "action": f"Include these keywords naturally: {', '.join(missing_keywords)}",
            "expectedImpact": "Could improve score by 5-10 points",
            "timeEstimate": "1 day",
        },
        {
            "priority": 3,
            "area": "Projects",
            "action": "Add quantified outcomes to your project descriptions (e.g., '40% faster', '1000+ users')",
            "expectedImpact": "Could improve score by 5-10 points",
            "timeEstimate": "1 day",
        },
    ]

    return {
        "rejectionReasons": rejection_reasons,
        "skillGapAnalysis": skill_gaps,
        "improvementSteps": improvement_steps,
        "bulletSuggestions": [],
        "overallVerdict": (
            f"Your resume scores {ats_result['totalScore']}/100 for {requirements['company_name']}. "
            "Focus on adding missing skills and quantifying your achievements to improve significantly."
        ),
    }
