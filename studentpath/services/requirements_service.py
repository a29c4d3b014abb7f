"""
Company Resume Requirements

Requirements drive ATS scoring: which skills and keywords a company/role
expects. They come from three places, in order of preference:
1. Rows seeded from the static catalog (off-campus companies, on-campus programs)
2. Rows cached from earlier LLM generations (company_id = custom_<slug>)
3. A fresh LLM generation (cached for next time), or generic defaults
"""

import json
import logging
import re
from typing import Optional

from sqlalchemy import text

from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.services.catalog import OFF_CAMPUS_COMPANIES, ON_CAMPUS_PROGRAMS
from studentpath.services.llm_client import get_llm_client

logger = logging.getLogger(__name__)


# Keywords ATS systems typically scan for, per role
ROLE_KEYWORDS = {
    "SDE": [
        "data structures", "algorithms", "system design", "object oriented",
        "REST API", "microservices", "git", "agile", "CI/CD", "testing",
        "scalable", "performance", "debugging", "code review", "clean code",
    ],
    "Analyst": [
        "data analysis", "SQL", "Excel", "visualization", "reporting",
        "business intelligence", "tableau", "power bi", "statistics",
        "problem solving", "stakeholder", "requirements gathering",
    ],
    "Associate Software Engineer": [
        "programming", "data structures", "algorithms", "databases",
        "web development", "problem solving", "teamwork", "agile",
        "testing", "debugging", "version control",
    ],
    "Member Technical Staff": [
        "programming", "data structures", "algorithms", "C",
        "problem solving", "logic", "system design", "debugging",
        "optimization", "clean code",
    ],
    "System Engineer": [
        "programming", "databases", "SQL", "problem solving",
        "communication", "teamwork", "agile", "testing", "debugging",
    ],
    "Systems Engineer": [
        "programming", "databases", "SQL", "problem solving",
        "communication", "teamwork", "agile", "testing",
    ],
    "Project Engineer": [
        "programming", "databases", "SQL", "problem solving",
        "communication", "aptitude", "teamwork",
    ],
    "Programmer Analyst": [
        "programming", "data structures", "databases", "SQL",
        "problem solving", "algorithms", "web development", "agile",
    ],
    "default": [
        "programming", "data structures", "algorithms", "problem solving",
        "communication", "teamwork", "databases", "web development",
    ],
}

ROLE_PROJECT_EXPECTATIONS = {
    "SDE": "Expects 2-3 well-documented projects showcasing system design, scalability, and clean code practices. Projects should use modern frameworks and include quantified outcomes.",
    "Analyst": "Expects 1-2 data-driven projects demonstrating SQL proficiency, data visualization, and business insight generation.",
    "default": "Expects at least 2 projects showing practical application of programming skills with clear descriptions and tech stack details.",
}

DEFAULT_SECTIONS = ["Education", "Skills", "Projects", "Experience"]

GENERIC_REQUIREMENTS = {
    "required_skills": ["data structures", "algorithms", "problem solving", "programming"],
    "keywords": ["programming", "data structures", "algorithms", "databases", "web development"],
    "project_expectations": "Strong project work with measurable outcomes",
    "min_experience_months": 0,
    "preferred_sections": DEFAULT_SECTIONS,
}

_INSERT_REQUIREMENTS = text("""
    INSERT INTO company_resume_requirements
        (company_id, company_name, role, required_skills, keywords,
         project_expectations, min_experience_months, preferred_sections)
    VALUES
        (:company_id, :company_name, :role, CAST(:required_skills AS JSONB), CAST(:keywords AS JSONB),
         :project_expectations, :min_experience_months, CAST(:preferred_sections AS JSONB))
    ON CONFLICT (company_id, role) DO NOTHING
""")


def custom_company_id(company_name: str) -> str:
    """"Goldman Sachs" -> "custom_goldman_sachs"."""
    return "custom_" + re.sub(r"[^a-z0-9]", "_", company_name.lower())


def _requirement_params(company_id, company_name, role, skills, keywords, projects, months, sections) -> dict:
    return {
        "company_id": company_id,
        "company_name": company_name,
        "role": role,
        "required_skills": json.dumps(skills),
        "keywords": json.dumps(keywords),
        "project_expectations": projects,
        "min_experience_months": months,
        "preferred_sections": json.dumps(sections),
    }


def seed_company_requirements() -> int:
    """
    Seed requirements from the static catalog.
    Runs only when the table is empty; returns the number of rows attempted.
    """
    with get_db_session() as db:
        count = db.execute(text("SELECT COUNT(*) FROM company_resume_requirements")).scalar()
        if count:
            return 0

        logger.info("Seeding company resume requirements...")
        seeded = 0

        for company in OFF_CAMPUS_COMPANIES:
            role = company["roleType"]
            db.execute(_INSERT_REQUIREMENTS, _requirement_params(
                company["id"], company["name"], role,
                company["requiredSkills"],
                ROLE_KEYWORDS.get(role, ROLE_KEYWORDS["default"]),
                ROLE_PROJECT_EXPECTATIONS.get(role, ROLE_PROJECT_EXPECTATIONS["default"]),
                0,  # Fresh graduates
                DEFAULT_SECTIONS + ["Certifications"],
            ))
            seeded += 1

        for program in ON_CAMPUS_PROGRAMS:
            role = program["roleTitle"]
            db.execute(_INSERT_REQUIREMENTS, _requirement_params(
                program["id"], program["companyName"], role,
                program["requiredSkills"],
                ROLE_KEYWORDS.get(role, ROLE_KEYWORDS["default"]),
                ROLE_PROJECT_EXPECTATIONS["default"],
                0,
                DEFAULT_SECTIONS,
            ))
            seeded += 1

    logger.info(f"Seeded {seeded} company resume requirements")
    return seeded


def _normalize_row(row: dict, role: Optional[str] = None) -> dict:
    """JSONB columns come back decoded; older rows may hold JSON strings."""
    def as_list(value):
        if isinstance(value, str):
            return json.loads(value)
        return value or []

    return {
        "company_id": row["company_id"],
        "company_name": row["company_name"],
        "role": role or row["role"],
        "required_skills": as_list(row.get("required_skills")),
        "keywords": as_list(row.get("keywords")),
        "project_expectations": row.get("project_expectations") or "",
        "min_experience_months": row.get("min_experience_months") or 0,
        "preferred_sections": as_list(row.get("preferred_sections")),
    }


def get_company_requirements(company_id: str, role: str) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            text("SELECT * FROM company_resume_requirements WHERE company_id = :cid AND role = :role LIMIT 1"),
            {"cid": company_id, "role": role}
        ).fetchone()
    return _normalize_row(row_to_dict(row)) if row else None


def get_any_role_requirements(company_id: str, role: str) -> Optional[dict]:
    """Requirements for the company under any role, relabelled with `role`."""
    with get_db_session() as db:
        row = db.execute(
            text("SELECT * FROM company_resume_requirements WHERE company_id = :cid LIMIT 1"),
            {"cid": company_id}
        ).fetchone()
    return _normalize_row(row_to_dict(row), role) if row else None


REQUIREMENTS_SYSTEM_PROMPT = """You are an expert ATS/hiring analyst. Generate the ATS requirements for a specific company and role. Return ONLY valid JSON with no extra text.

Response format:
{
  "required_skills": ["skill1", "skill2", ...],
  "keywords": ["keyword1", "keyword2", ...],
  "project_expectations": "description of what projects are expected",
  "min_experience_months": 0,
  "preferred_sections": ["Education", "Skills", "Projects", "Experience"]
}

Rules:
- required_skills: List 8-15 specific technical skills this company looks for in this role
- keywords: List 10-15 industry/role keywords that ATS systems scan for
- project_expectations: What kind of projects does this company value?
- min_experience_months: Typical minimum experience (0 for fresh grads)
- preferred_sections: What resume sections matter most for this company"""


def _string_list(value) -> list:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int, float))]


def generate_company_requirements(company_name: str, role: str) -> dict:
    """
    Ask the LLM for requirements of an arbitrary company/role and cache them.
    Falls back to GENERIC_REQUIREMENTS when the LLM call or parsing fails.
    """
    company_id = custom_company_id(company_name)
    generic = {"company_id": company_id, "company_name": company_name, "role": role, **GENERIC_REQUIREMENTS}

    try:
        parsed = get_llm_client().complete_json(
            REQUIREMENTS_SYSTEM_PROMPT,
            f"Generate ATS requirements for: Company: {company_name}, Role: {role}. "
            "Consider this company's actual hiring patterns, tech stack, and culture. Return only the JSON.",
            max_tokens=800,
            temperature=0.5,
            json_mode=True,
        )
    except Exception as e:
        logger.error(f"AI requirements generation failed for {company_name}/{role}: {e}")
        return generic

    if not isinstance(parsed, dict):
        logger.error(f"AI requirements for {company_name}/{role} were not a JSON object")
        return generic

    try:
        min_months = int(parsed.get("min_experience_months") or 0)
    except (TypeError, ValueError):
        min_months = 0

    requirements = {
        "company_id": company_id,
        "company_name": company_name,
        "role": role,
        "required_skills": _string_list(parsed.get("required_skills")),
        "keywords": _string_list(parsed.get("keywords")),
        "project_expectations": str(parsed.get("project_expectations") or ""),
        "min_experience_months": min_months,
        "preferred_sections": _string_list(parsed.get("preferred_sections")) or DEFAULT_SECTIONS,
    }

    try:
        with get_db_session() as db:
            db.execute(_INSERT_REQUIREMENTS, _requirement_params(
                company_id, company_name, role,
                requirements["required_skills"],
                requirements["keywords"],
                requirements["project_expectations"],
                requirements["min_experience_months"],
                requirements["preferred_sections"],
            ))
    except Exception as e:
        logger.warning(f"Could not cache AI-generated requirements: {e}")

    return requirements


def resolve_requirements(company_id: Optional[str], company_name: Optional[str], role: str) -> dict:
    """
    Find requirements for a resume analysis target.

    Order: exact (company, role) row -> any-role row -> on-campus placement
    (placement_<id>) via LLM -> LLM generation by name.
    """
    if company_id and company_id != "custom":
        requirements = get_company_requirements(company_id, role)
        if requirements:
            return {**requirements, "role": role}
        requirements = get_any_role_requirements(company_id, role)
        if requirements:
            return requirements

    if company_id and company_id.startswith("placement_"):
        with get_db_session() as db:
            placement = db.execute(
                text("SELECT company_name, role FROM placements WHERE id = :id"),
                {"id": _placement_id(company_id)}
            ).fetchone()
        if placement:
            return generate_company_requirements(
                company_name or placement.company_name,
                role or placement.role or "SDE",
            )

    return generate_company_requirements(company_name or company_id or "Unknown Company", role)


def _placement_id(company_id: str) -> int:
    try:
        return int(company_id[len("placement_"):])
    except ValueError:
        return -1
