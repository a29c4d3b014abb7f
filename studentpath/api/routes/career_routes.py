"""
Career Tracks Routes

Companies & reviews:
GET /career-tracks/companies - On-campus placements of the user's college
GET/POST/DELETE /career-tracks/companies/{id}/reviews - Interview reviews
POST /career-tracks/companies/{id}/extract - AI extraction over all reviews
GET /career-tracks/exams - Competitive exam catalog

Plans:
POST /career-tracks/generate-plan - AI preparation plan (not stored)
POST /career-tracks/my-plan/add - Save a plan and seed its daily tasks
GET /career-tracks/my-plan/list, GET/DELETE /career-tracks/my-plan/{planId}
POST /career-tracks/my-plan/complete-task
POST /career-tracks/my-plan/{planId}/adjust-difficulty
GET /career-tracks/leaderboard

Maintenance:
POST /career-tracks/cron/task-reminder - Email today's pending tasks
POST /career-tracks/init-db - Create tables
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query
from sqlalchemy import text

from studentpath.core.auth import get_current_student, get_current_user
from studentpath.core.config import get_settings
from studentpath.core.exceptions import ExternalServiceError
from studentpath.db.postgres import get_db_session
from studentpath.db.schema import init_schema
from studentpath.schemas.schemas import (
    AddPlanRequest, AuthUser, CompleteTaskRequest, GeneratePlanRequest, MessageResponse, ReviewCreate,
    TrackType,
)
from studentpath.services import gamification, placement_service
from studentpath.services.catalog import (
    COMPETITIVE_EXAMS, OFF_CAMPUS_COMPANIES, ON_CAMPUS_PROGRAMS, exams_by_category, find_exam,
)
from studentpath.services.email_service import send_task_reminder_email
from studentpath.services.plan_generator import PlanRequest, generate_plan
from studentpath.services.review_extraction import run_extraction_in_background, run_placement_extraction

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/career-tracks", tags=["Career Tracks"])

CAREER_TABLES = ("career_plans", "career_tasks", "career_rewards")


# ============================================================
# COMPANIES
# ============================================================

@router.get("/companies")
async def get_companies(
    source: Optional[str] = Query(None),
    user: AuthUser = Depends(get_current_user),
):
    if source == "static":
        return {
            "success": True,
            "data": {"onCampus": ON_CAMPUS_PROGRAMS, "offCampus": OFF_CAMPUS_COMPANIES},
        }

    placements = placement_service.list_placements(user.college_id)
    logger.info(f"Companies for {user.email} (college {user.college_id}): {len(placements)} placements")

    return {
        "success": True,
        "data": {
            "onCampus": [placement_service.to_on_campus_card(p) for p in placements],
            "offCampus": [],
        },
    }


@router.get("/companies/{placement_id}/reviews")
async def get_company_reviews(placement_id: int, user: AuthUser = Depends(get_current_user)):
    return {"success": True, "data": placement_service.get_company_reviews(placement_id)}


@router.post("/companies/{placement_id}/reviews", response_model=MessageResponse)
async def add_company_review(
    placement_id: int,
    review: ReviewCreate,
    background_tasks: BackgroundTasks,
    user: AuthUser = Depends(get_current_student),
):
    """Store the review, then refresh the placement's AI data in the background."""
    if not review.rating or not review.comment:
        raise HTTPException(status_code=400, detail="Rating and comment are required")

    placement_service.add_company_review(placement_id, user.id, review.model_dump())
    background_tasks.add_task(run_extraction_in_background, placement_id)

    return MessageResponse(message="Review added successfully")


@router.delete("/companies/{placement_id}/reviews", response_model=MessageResponse)
async def delete_company_review(
    placement_id: int,
    review_id: int = Query(None, alias="reviewId"),
    user: AuthUser = Depends(get_current_student),
):
    if not review_id:
        raise HTTPException(status_code=400, detail="Invalid review ID")

    placement_service.delete_review(review_id, user.id)
    return MessageResponse(message="Review deleted successfully")


@router.post("/companies/{placement_id}/extract")
async def extract_company_data(placement_id: int, user: AuthUser = Depends(get_current_user)):
    extracted = run_placement_extraction(placement_id)
    return {
        "success": True,
        "data": extracted,
        "message": "AI extraction completed successfully",
    }


@router.get("/exams")
async def get_exams(
    exam_id: Optional[str] = Query(None, alias="id"),
    category: Optional[str] = Query(None),
):
    if exam_id:
        exam = find_exam(exam_id)
        if not exam:
            raise HTTPException(status_code=404, detail="Exam not found")
        return {"success": True, "data": exam}

    exams = exams_by_category(category) if category else COMPETITIVE_EXAMS
    return {"success": True, "data": exams}


# ============================================================
# PLAN GENERATION
# ============================================================

@router.post("/generate-plan")
async def generate_career_plan(request: GeneratePlanRequest, user: AuthUser = Depends(get_current_user)):
    if (
        not request.track_type
        or not request.target_id
        or not request.target_name
        or not request.required_skills
        or request.student_skills is None
    ):
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: trackType, targetId, targetName, requiredSkills, studentSkills"
        )

    if request.track_type not in {t.value for t in TrackType}:
        raise HTTPException(status_code=400, detail="trackType must be 'placement' or 'higher-studies'")

    plan = generate_plan(PlanRequest(**request.model_dump()), user.id)
    return {"success": True, "data": plan}


# ============================================================
# MY PLANS
# ============================================================

@router.post("/my-plan/add")
async def add_plan(request: AddPlanRequest, user: AuthUser = Depends(get_current_student)):
    if not request.target_id or not request.target_name or not request.milestones:
        raise HTTPException(status_code=400, detail="Missing required fields")

    existing = gamification.find_plan_for_target(user.id, request.target_id)
    if existing:
        return {
            "success": True,
            "planId": existing,
            "message": "Plan already exists",
            "alreadyExists": True,
        }

    plan_id = gamification.add_plan(
        user.id,
        request.target_id,
        request.target_name,
        request.milestones,
        track_type=(request.track_type or TrackType.placement).value,
        difficulty=request.difficulty.value if request.difficulty else "medium",
    )
    return {
        "success": True,
        "planId": plan_id,
        "message": "Plan added successfully",
        "alreadyExists": False,
    }


@router.get("/my-plan/list")
async def list_plans(user: AuthUser = Depends(get_current_student)):
    return {"success": True, "data": gamification.get_student_plans(user.id)}


@router.post("/my-plan/complete-task")
async def complete_task(request: CompleteTaskRequest, user: AuthUser = Depends(get_current_student)):
    if not request.task_id or not request.plan_id:
        raise HTTPException(status_code=400, detail="taskId and planId are required")

    result = gamification.complete_task(request.task_id, request.plan_id, user.id)
    return {"success": True, "data": result}


@router.get("/my-plan/{plan_id}")
async def get_plan(plan_id: int, user: AuthUser = Depends(get_current_student)):
    data = gamification.get_plan_with_tasks(plan_id, user.id)
    if not data:
        raise HTTPException(status_code=404, detail="Plan not found")

    data["radarData"] = gamification.get_skill_radar(plan_id)
    return {"success": True, "data": data}


@router.delete("/my-plan/{plan_id}", response_model=MessageResponse)
async def delete_plan(plan_id: int, user: AuthUser = Depends(get_current_student)):
    if not gamification.delete_plan(plan_id, user.id):
        raise HTTPException(status_code=404, detail="Plan not found or already deleted")
    return MessageResponse(message="Plan deleted successfully")


@router.post("/my-plan/{plan_id}/adjust-difficulty")
async def adjust_plan_difficulty(plan_id: int, user: AuthUser = Depends(get_current_student)):
    if not gamification.find_plan_for_student(plan_id, user.id):
        raise HTTPException(status_code=404, detail="Plan not found")

    difficulty = gamification.adjust_difficulty(plan_id)
    return {"success": True, "difficulty": difficulty}


@router.get("/leaderboard")
async def leaderboard(user: AuthUser = Depends(get_current_student)):
    me = gamification.get_student_rank(user.id)
    return {
        "success": True,
        "data": {
            "leaderboard": gamification.get_leaderboard(10),
            "currentUser": {
                "student_id": user.id,
                "name": user.name,
                "total_xp": me["total_xp"],
                "rank": me["rank"],
            },
        },
    }


# ============================================================
# MAINTENANCE
# ============================================================

@router.post("/cron/task-reminder")
async def send_task_reminders(authorization: Optional[str] = Header(None)):
    """Email every student with incomplete tasks dated today, one mail per plan target."""
    if settings.cron_secret and authorization != f"Bearer {settings.cron_secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")

    rows = gamification.get_pending_reminders()
    sent = 0
    failed = 0
    for row in rows:
        try:
            send_task_reminder_email(row["email"], row["name"], int(row["pending_count"]), row["target_name"])
            sent += 1
        except ExternalServiceError:
            logger.error(f"Failed to send reminder to {row['email']}")
            failed += 1

    logger.info(f"Task reminders: {sent} sent, {failed} failed")
    return {
        "success": True,
        "message": f"Reminders sent: {sent}, failed: {failed}",
        "total": len(rows),
    }


@router.post("/init-db")
async def init_db():
    init_schema()

    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT table_name FROM information_schema.tables
                WHERE table_schema = current_schema() AND table_name = ANY(:names)
            """),
            {"names": list(CAREER_TABLES)}
        ).fetchall()

    found = [r.table_name for r in rows]
    return {
        "success": True,
        "message": "Database initialized successfully",
        "careerTablesFound": found,
        "allTablesCreated": len(found) == len(CAREER_TABLES),
    }
