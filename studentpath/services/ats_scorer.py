"""
ATS Scoring Engine

Rule-based resume scoring against company-specific requirements.
Scoring breakdown (100 points total):
  - Skills Match: 30 pts  required skills found in resume
  - Keywords:     20 pts  role-specific keywords detected
  - Projects:     20 pts  project section, tech mentions, quantified outcomes
  - Experience:   15 pts  experience section, durations, action verbs
  - Structure:    15 pts  essential sections present (Education, Skills, ...)

No LLM involved: the same text and requirements always give the same score.
"""

import re
from typing import Dict, List, Tuple

from studentpath.utils.rounding import round_half_up


# ============================================================
# MATCHING
# ============================================================

# Terms in the same group count as the same skill
SKILL_VARIATIONS: Dict[str, List[str]] = {
    "javascript": ["js", "javascript", "ecmascript"],
    "typescript": ["ts", "typescript"],
    "python": ["python", "py"],
    "nodejs": ["nodejs", "node", "expressjs", "express"],
    "reactjs": ["react", "reactjs", "nextjs"],
    "mongodb": ["mongodb", "mongo"],
    "postgresql": ["postgresql", "postgres", "psql"],
    "mysql": ["mysql", "sql"],
    "cplusplus": ["c++", "cpp", "cplusplus"],
    "csharp": ["c#", "csharp"],
    "machinelearning": ["machine learning", "ml", "deep learning", "dl"],
    "datastructures": ["data structures", "dsa", "algorithms"],
    "systemdesign": ["system design", "hld", "lld", "architecture"],
    "restapis": ["rest api", "restful", "api development"],
    "amazonwebservices": ["aws", "amazon web services"],
    "googlecloudplatform": ["gcp", "google cloud"],
    "microsoftazure": ["azure", "microsoft azure"],
    "objectoriented": ["oop", "object oriented", "oops"],
    "problemsolving": ["problem solving", "competitive programming", "cp"],
    "communication": ["communication", "soft skills", "interpersonal"],
}

_STRIP_CHARS = re.compile(r"[.\-_]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, drop . - _ and collapse whitespace ("Node.js" -> "nodejs")."""
    return _WHITESPACE.sub(" ", _STRIP_CHARS.sub("", text.lower()))


def text_contains(resume_normalized: str, term: str) -> bool:
    """True if `term` (or a known variation of it) appears in the resume."""
    normalized_term = normalize_text(term)
    if normalized_term in resume_normalized:
        return True

    for alts in SKILL_VARIATIONS.values():
        if any(normalize_text(a) == normalized_term for a in alts):
            return any(normalize_text(a) in resume_normalized for a in alts)

    return False


def _match_terms(resume_normalized: str, terms: List[str]) -> Tuple[List[str], List[str]]:
    matched, missing = [], []
    for term in terms:
        (matched if text_contains(resume_normalized, term) else missing).append(term)
    return matched, missing


# ============================================================
# SECTION SCORERS
# ============================================================

PROJECT_HEADERS = ["projects", "project work", "personal projects", "academic projects", "key projects"]

TECH_INDICATORS = [
    "built with", "developed using", "tech stack", "technologies used",
    "implemented", "using react", "using python", "using java", "using node",
    "built a", "developed a", "created a", "designed a",
]

QUANTIFIERS = re.compile(
    r"\d+%|\d+x|\d+ users|\d+ requests|\d+k|\d+ transactions|\d+ downloads"
    r"|reduced by|improved by|increased by|scaled to"
)

PROJECT_MENTIONS = re.compile(r"(?:project|built|developed|created|designed)\s+(?:a\s+)?")

EXPERIENCE_HEADERS = [
    "experience", "work experience", "professional experience",
    "internship", "internships", "employment",
]

DURATION_PATTERN = re.compile(
    r"\d{4}\s*[-–]\s*(?:\d{4}|present|current|ongoing)"
    r"|(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\w*\s+\d{4}"
    r"|\d+\s*(?:months?|years?)",
    re.IGNORECASE,
)

ACTION_VERBS = [
    "developed", "implemented", "designed", "managed", "led", "optimized",
    "built", "architected", "deployed", "automated", "collaborated", "mentored",
    "analyzed", "integrated", "resolved", "delivered", "spearheaded",
]

# Compared against normalized text, so dotted forms ("b.tech") are covered
# by their undotted spelling.
EDUCATION_INDICATORS = [
    "education", "bachelor", "master", "btech", "mtech",
    "degree", "university", "college", "cgpa", "gpa", "percentage",
]

SKILL_SECTION_INDICATORS = [
    "skills", "technical skills", "core competencies", "proficiencies",
    "technologies", "tools", "frameworks",
]

CONTACT_INDICATORS = ["email", "phone", "linkedin", "github", "@"]

RESUME_SECTIONS = ["education", "experience", "skills", "projects", "certifications", "achievements"]


def _section(name: str, score: int, max_score: int, details: List[str]) -> dict:
    return {"name": name, "score": score, "maxScore": max_score, "details": "; ".join(details)}


def score_projects(resume_normalized: str) -> dict:
    score = 0
    details = []

    if any(h in resume_normalized for h in PROJECT_HEADERS):
        score += 5
        details.append("Project section found")
    else:
        details.append("No dedicated project section detected")

    if any(t in resume_normalized for t in TECH_INDICATORS):
        score += 5
        details.append("Tech stack mentioned in projects")
    else:
        details.append("No tech stack details in projects")

    if QUANTIFIERS.search(resume_normalized):
        score += 5
        details.append("Quantified outcomes found")
    else:
        details.append("No quantified outcomes (add metrics like '30% improvement')")

    project_count = len(PROJECT_MENTIONS.findall(resume_normalized))
    if project_count >= 2:
        score += 5
        details.append(f"{project_count} projects detected")
    else:
        details.append("Consider adding more projects (aim for 2-3)")

    return _section("Projects", score, 20, details)


def score_experience(resume_normalized: str) -> dict:
    score = 0
    details = []

    if any(h in resume_normalized for h in EXPERIENCE_HEADERS):
        score += 5
        details.append("Experience section found")
    else:
        details.append("No experience/internship section detected")

    if DURATION_PATTERN.search(resume_normalized):
        score += 5
        details.append("Duration/dates mentioned")
    else:
        details.append("No work durations found (add dates)")

    found_verbs = [v for v in ACTION_VERBS if v in resume_normalized]
    if len(found_verbs) >= 3:
        score += 5
        details.append(f"Strong action verbs used ({len(found_verbs)} found)")
    elif found_verbs:
        score += 2
        details.append(f"Few action verbs ({len(found_verbs)}). Use more: led, optimized, built...")
    else:
        details.append("No action verbs found. Start bullets with: Developed, Led, Built...")

    return _section("Experience", score, 15, details)


def score_structure(resume_normalized: str) -> dict:
    score = 0
    details = []

    if any(e in resume_normalized for e in EDUCATION_INDICATORS):
        score += 4
        details.append("Education section found")
    else:
        details.append("No education section detected")

    if any(s in resume_normalized for s in SKILL_SECTION_INDICATORS):
        score += 4
        details.append("Skills section found")
    else:
        details.append("No dedicated skills section")

    contact_count = sum(1 for c in CONTACT_INDICATORS if c in resume_normalized)
    if contact_count >= 3:
        score += 4
        details.append("Contact information present")
    elif contact_count >= 1:
        score += 2
        details.append("Partial contact info (add LinkedIn/GitHub)")
    else:
        details.append("No contact information detected")

    found_sections = [s for s in RESUME_SECTIONS if s in resume_normalized]
    if len(found_sections) >= 4:
        score += 3
        details.append(f"Well-structured ({len(found_sections)} sections)")
    elif len(found_sections) >= 2:
        score += 1
        details.append(f"Basic structure ({len(found_sections)} sections). Add more sections.")
    else:
        details.append("Poor structure. Add clear section headings.")

    return _section("Structure", score, 15, details)


# ============================================================
# MAIN ENTRY
# ============================================================

def calculate_ats_score(resume_text: str, requirements: dict) -> dict:
    """
    Score a resume against company requirements.

    Args:
        resume_text: Plain text extracted from the resume
        requirements: dict with at least required_skills and keywords lists

    Returns:
        {totalScore, sectionScores, matchedSkills, missingSkills,
         matchedKeywords, missingKeywords}
    """
    resume_normalized = normalize_text(resume_text or "")
    required_skills = requirements.get("required_skills") or []
    keywords = requirements.get("keywords") or []

    matched_skills, missing_skills = _match_terms(resume_normalized, required_skills)
    skills_score = round_half_up(len(matched_skills) / len(required_skills) * 30) if required_skills else 30

    matched_keywords, missing_keywords = _match_terms(resume_normalized, keywords)
    keywords_score = round_half_up(len(matched_keywords) / len(keywords) * 20) if keywords else 20

    section_scores = [
        {
            "name": "Skills Match",
            "score": skills_score,
            "maxScore": 30,
            "details": f"Matched {len(matched_skills)}/{len(required_skills)} required skills",
        },
        {
            "name": "Keywords",
            "score": keywords_score,
            "maxScore": 20,
            "details": f"Matched {len(matched_keywords)}/{len(keywords)} keywords",
        },
        score_projects(resume_normalized),
        score_experience(resume_normalized),
        score_structure(resume_normalized),
    ]

    return {
        "totalScore": sum(s["score"] for s in section_scores),
        "sectionScores": section_scores,
        "matchedSkills": matched_skills,
        "missingSkills": missing_skills,
        "matchedKeywords": matched_keywords,
        "missingKeywords": missing_keywords,
    }
