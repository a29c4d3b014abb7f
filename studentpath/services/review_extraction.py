"""
Interview Review Extraction

Turns free-text placement reviews into structured interview data:
skills tested, interview rounds, difficulty and a confidence score.

Each review is extracted on its own by the LLM, then the per-review
results are merged by majority vote (aggregate_extractions) and written
to the AI columns of the placement row.
"""

import json
import logging
import math
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import text

from studentpath.core.exceptions import ExternalServiceError, ValidationFailedError
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.services.llm_client import get_llm_client
from studentpath.services.mongo_service import ReviewExtractionStore, safe_write
from studentpath.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

DIFFICULTY_LEVELS = ("Easy", "Medium", "Hard")

EXTRACTION_SYSTEM_PROMPT = "You are a data extraction assistant. Return only valid JSON, no markdown formatting."


def build_extraction_prompt(review: Dict[str, Any]) -> str:
    return f"""You are an AI assistant that extracts structured information from student placement interview reviews.

Analyze the following review and extract:
1. Technical and soft skills mentioned (e.g., DSA, DBMS, Communication, Problem Solving)
2. Interview round names and types (e.g., {{"name": "Aptitude Test", "type": "Written"}})
3. Total number of rounds
4. Difficulty level (Easy/Medium/Hard) based on the student's experience

Review Data:
Rating: {review.get("rating")}/5
Comment: {review.get("comment") or ""}
Interview Experience: {review.get("interview_experience") or ""}
Questions Asked: {review.get("questions_asked") or ""}
Preparation Tips: {review.get("preparation_tips") or ""}
Overall Experience: {review.get("overall_experience") or ""}

Return ONLY a valid JSON object with this exact structure:
{{
  "skills": ["skill1", "skill2"],
  "rounds": [{{"name": "Round Name", "type": "Technical/HR/Aptitude/Group Discussion"}}],
  "totalRounds": 3,
  "difficultyLevel": "Easy|Medium|Hard",
  "confidenceScore": 0.85
}}

Rules:
- Extract only skills explicitly mentioned
- Infer round types from context (Technical, HR, Aptitude, Group Discussion, Case Study)
- Difficulty: Easy (rating 4-5, positive tone), Medium (rating 3, mixed), Hard (rating 1-2, negative)
- Confidence score: 0.0-1.0 based on how clear the information is
- Return valid JSON only, no markdown or explanations"""


def _coerce(kind, value, default):
    """kind(value), or `default` when the value is missing or not numeric."""
    if not value or isinstance(value, bool):
        return default
    try:
        return kind(value)
    except (TypeError, ValueError):
        return default


def extract_from_review(review: Dict[str, Any], placement_id: int = None) -> dict:
    """
    Extract structured interview data from a single review.

    Raises:
        ExternalServiceError: the LLM call failed or returned invalid JSON
    """
    try:
        extracted = get_llm_client().complete_json(
            EXTRACTION_SYSTEM_PROMPT,
            build_extraction_prompt(review),
            max_tokens=500,
            temperature=0.3,
        )
    except Exception as e:
        logger.error(f"Error extracting from review: {e}")
        raise ExternalServiceError("llm", "Failed to extract data from review")

    if not isinstance(extracted, dict):
        logger.error(f"Review extraction returned {type(extracted).__name__}, expected an object")
        raise ExternalServiceError("llm", "Failed to extract data from review")

    skills = extracted.get("skills")
    rounds = extracted.get("rounds")
    difficulty = extracted.get("difficultyLevel")
    result = {
        "skills": [s for s in skills if isinstance(s, str)] if isinstance(skills, list) else [],
        "rounds": [r for r in rounds if isinstance(r, dict)] if isinstance(rounds, list) else [],
        "totalRounds": _coerce(int, extracted.get("totalRounds"), 0),
        "difficultyLevel": difficulty if isinstance(difficulty, str) and difficulty else "Medium",
        "confidenceScore": _coerce(float, extracted.get("confidenceScore"), 0.5),
    }

    safe_write(
        lambda: ReviewExtractionStore().insert(result, placement_id=placement_id, review_id=review.get("id")),
        f"review extraction for placement {placement_id}",
    )
    return result


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def aggregate_extractions(extractions: List[dict]) -> dict:
    """
    Merge per-review extractions.

    Skills and rounds survive when mentioned by at least 20% of the
    reviews (minimum one), most frequent first. Difficulty is a vote
    weighted by each extraction's confidence.
    """
    if not extractions:
        return {
            "skills": [],
            "rounds": [],
            "totalRounds": 0,
            "difficultyLevel": "Medium",
            "confidenceScore": 0,
        }

    threshold = max(1, math.ceil(len(extractions) * 0.2))

    skill_counts = Counter()
    for ext in extractions:
        for skill in ext["skills"]:
            skill_counts[str(skill).strip().lower()] += 1

    # Counter keeps first-seen order and sorted() is stable, so ties stay in mention order
    skills = [
        _capitalize(skill)
        for skill, count in sorted(skill_counts.items(), key=lambda item: -item[1])
        if count >= threshold
    ]

    round_counts = Counter()
    round_types = {}
    for ext in extractions:
        for rnd in ext["rounds"]:
            key = str(rnd.get("name", "")).lower()
            round_counts[key] += 1
            round_types.setdefault(key, rnd.get("type"))

    rounds = [
        {"name": _capitalize(name), "type": round_types[name]}
        for name, count in sorted(round_counts.items(), key=lambda item: -item[1])
        if count >= threshold
    ]

    total_rounds = round_half_up(sum(ext["totalRounds"] for ext in extractions) / len(extractions))

    votes = {level: 0.0 for level in DIFFICULTY_LEVELS}
    for ext in extractions:
        if ext["difficultyLevel"] in votes:
            votes[ext["difficultyLevel"]] += ext["confidenceScore"]

    difficulty = DIFFICULTY_LEVELS[0]
    for level in DIFFICULTY_LEVELS[1:]:
        # Ties go to the later level
        if not votes[difficulty] > votes[level]:
            difficulty = level

    confidence = sum(ext["confidenceScore"] for ext in extractions) / len(extractions)

    return {
        "skills": skills,
        "rounds": rounds,
        "totalRounds": total_rounds,
        "difficultyLevel": difficulty,
        "confidenceScore": round_half_up(confidence, 2),
    }


def extract_from_reviews(reviews: List[dict], placement_id: int = None) -> dict:
    return aggregate_extractions([extract_from_review(r, placement_id) for r in reviews])


def get_reviews_for_extraction(placement_id: int) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT id, rating, comment, interview_experience, questions_asked,
                       preparation_tips, overall_experience
                FROM placement_reviews
                WHERE placement_id = :pid
                ORDER BY created_at DESC
            """),
            {"pid": placement_id}
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def save_extraction(placement_id: int, extracted: dict) -> None:
    with get_db_session() as db:
        db.execute(
            text("""
                UPDATE placements SET
                    extracted_skills = CAST(:skills AS JSONB),
                    extracted_rounds = CAST(:rounds AS JSONB),
                    difficulty_level = :difficulty,
                    total_rounds = :total_rounds,
                    ai_confidence_score = :confidence,
                    last_ai_update = :now
                WHERE id = :pid
            """),
            {
                "skills": json.dumps(extracted["skills"]),
                "rounds": json.dumps(extracted["rounds"]),
                "difficulty": extracted["difficultyLevel"],
                "total_rounds": extracted["totalRounds"],
                "confidence": extracted["confidenceScore"],
                "now": datetime.utcnow(),
                "pid": placement_id,
            }
        )


def run_placement_extraction(placement_id: int) -> dict:
    """
    Extract and aggregate every review of a placement, then store the
    result on the placement row.

    Raises:
        ValidationFailedError: the placement has no reviews
    """
    reviews = get_reviews_for_extraction(placement_id)
    logger.info(f"Found {len(reviews)} reviews for placement {placement_id}")

    if not reviews:
        raise ValidationFailedError("No reviews available for extraction")

    extracted = extract_from_reviews(reviews, placement_id)
    logger.info(
        f"Extraction complete for placement {placement_id}: "
        f"{len(extracted['skills'])} skills, {len(extracted['rounds'])} rounds, "
        f"difficulty {extracted['difficultyLevel']}, confidence {extracted['confidenceScore']}"
    )

    save_extraction(placement_id, extracted)
    return extracted


def run_extraction_in_background(placement_id: int) -> None:
    """Background-task entry point: failures are logged, never raised."""
    try:
        run_placement_extraction(placement_id)
    except Exception:
        logger.exception(f"Background AI extraction failed for placement {placement_id}")
