"""
MongoDB access.

PostgreSQL keeps the relational records; MongoDB keeps the large,
loosely-shaped documents that hang off them:

    raw_resumes         text extracted from an upload, by resume_id
    review_extractions  LLM output for one placement review
    generated_plans     every career-plan draft the LLM produced
    resume_feedback     full AI feedback for one resume analysis
"""
import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from studentpath.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

RAW_RESUMES = "raw_resumes"
REVIEW_EXTRACTIONS = "review_extractions"
GENERATED_PLANS = "generated_plans"
RESUME_FEEDBACK = "resume_feedback"

# collection -> [(keys, options)]
INDEXES = {
    RAW_RESUMES: [
        ([("student_id", ASCENDING)], {}),
        ([("resume_id", ASCENDING)], {"unique": True}),
    ],
    REVIEW_EXTRACTIONS: [
        ([("placement_id", ASCENDING), ("review_id", ASCENDING)], {}),
    ],
    GENERATED_PLANS: [
        ([("target_id", ASCENDING), ("created_at", DESCENDING)], {}),
    ],
    RESUME_FEEDBACK: [
        ([("analysis_id", ASCENDING)], {}),
    ],
}

_client: Optional[MongoClient] = None


def get_mongo_client() -> MongoClient:
    """Shared client; pymongo pools connections behind it."""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    return get_mongo_client()[settings.mongodb_db]


def get_collection(name: str) -> Collection:
    return get_mongo_db()[name]


def init_mongo_indexes() -> None:
    """Idempotent; create_index is a no-op for an existing index."""
    db = get_mongo_db()
    for name, indexes in INDEXES.items():
        for keys, options in indexes:
            db[name].create_index(keys, **options)
    logger.info(f"MongoDB indexes ensured on {len(INDEXES)} collections")


def mongo_is_reachable() -> bool:
    try:
        get_mongo_client().admin.command("ping")
        return True
    except Exception as e:
        logger.error(f"MongoDB unreachable: {e}")
        return False
