"""
MongoDB Service - CRUD operations for document collections.

Collections in this database:
1. raw_resumes        - Text extracted from each uploaded resume
2. review_extractions - LLM extraction output for each placement review
3. generated_plans    - Every career-plan draft the LLM produced
4. resume_feedback    - Full AI feedback document per resume analysis

Writes here are best-effort: callers use `safe_write` so a MongoDB outage
never fails the HTTP request that produced the document.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pymongo.collection import Collection

from studentpath.db import mongodb

logger = logging.getLogger(__name__)


# ============================================================
# HELPERS
# ============================================================

def safe_write(action: Callable[[], Any], description: str) -> Optional[Any]:
    """Run a Mongo write, logging (not raising) on failure."""
    try:
        return action()
    except Exception:
        logger.exception(f"MongoDB write failed: {description}")
        return None


# ============================================================
# RAW RESUMES COLLECTION
# ============================================================

class RawResumeService:
    """
    Original text extracted from uploaded resumes, keyed by the
    PostgreSQL resume id.
    """

    def __init__(self):
        self.collection: Collection = mongodb.get_collection(mongodb.RAW_RESUMES)

    def upsert(self, resume_id: int, student_id: int, resume_text: str, filename: str = None) -> None:
        self.collection.update_one(
            {"resume_id": resume_id},
            {"$set": {
                "student_id": student_id,
                "resume_text": resume_text,
                "filename": filename,
                "uploaded_at": datetime.utcnow(),
            }},
            upsert=True
        )


# ============================================================
# REVIEW EXTRACTIONS COLLECTION
# ============================================================

class ReviewExtractionStore:
    """Per-review LLM output, kept for auditing the aggregated result."""

    def __init__(self):
        self.collection: Collection = mongodb.get_collection(mongodb.REVIEW_EXTRACTIONS)

    def insert(self, extraction: Dict[str, Any], placement_id: int = None, review_id: int = None) -> str:
        doc = {
            "placement_id": placement_id,
            "review_id": review_id,
            "extraction": extraction,
            "extracted_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)


# ============================================================
# GENERATED PLANS COLLECTION
# ============================================================

class GeneratedPlanStore:
    """LLM plan drafts (accepted or not)."""

    def __init__(self):
        self.collection: Collection = mongodb.get_collection(mongodb.GENERATED_PLANS)

    def insert(self, target_id: str, plan: Dict[str, Any], used_fallback: bool, user_id: int = None) -> str:
        doc = {
            "target_id": target_id,
            "user_id": user_id,
            "plan": plan,
            "used_fallback": used_fallback,
            "created_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)


# ============================================================
# RESUME FEEDBACK COLLECTION
# ============================================================

class ResumeFeedbackStore:

    def __init__(self):
        self.collection: Collection = mongodb.get_collection(mongodb.RESUME_FEEDBACK)

    def insert(self, analysis_id: int, student_id: int, feedback: Dict[str, Any]) -> str:
        doc = {
            "analysis_id": analysis_id,
            "student_id": student_id,
            "feedback": feedback,
            "created_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)
