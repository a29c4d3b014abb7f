"""
Student Directory Routes

GET /student/list - Students of the logged-in college
GET /student/data - One student's full profile, authorised by a college token
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from studentpath.core.auth import get_current_college
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import AuthUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student", tags=["Students"])

# JSONB profile columns and the empty value used when a column is NULL
JSON_DEFAULTS = {
    "academic_interests": [],
    "career_quiz_answers": {},
    "technical_skills": {},
    "soft_skills": {},
    "language_skills": {},
    "industry_focus": [],
}


@router.get("/list")
async def list_students(user: AuthUser = Depends(get_current_college)):
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT student_id, first_name, last_name, email, phone, college, department,
                       program, current_year, current_semester, current_gpa, gender,
                       enrollment_year, date_of_birth, location_preference, industry_focus,
                       intensity_level, is_active, created_at, updated_at
                FROM students
                WHERE college_id = :cid
                ORDER BY created_at DESC
            """),
            {"cid": user.id}
        ).fetchall()

    return {"success": True, "students": [row_to_dict(r) for r in rows]}


@router.get("/data")
async def get_student_data(
    student_id: int = Query(None, alias="studentId"),
    token: str = Query(None),
):
    """
    Read a student's profile with a college token instead of a session.

    The token must be active and the student must belong to the token's college.
    """
    if not student_id or not token:
        raise HTTPException(status_code=400, detail="Student ID and token are required")

    with get_db_session() as db:
        college = db.execute(
            text("""
                SELECT c.id, c.college_name
                FROM colleges c
                JOIN college_tokens ct ON c.id = ct.college_id
                WHERE ct.token = :token AND ct.is_active = TRUE
            """),
            {"token": token}
        ).fetchone()

        if not college:
            raise HTTPException(status_code=401, detail="Invalid token")

        row = db.execute(
            text("""
                SELECT s.student_id, s.first_name, s.last_name, s.email, s.phone, s.college,
                       s.program, s.current_year, s.current_semester, s.current_gpa,
                       s.academic_interests, s.career_quiz_answers, s.technical_skills,
                       s.soft_skills, s.language_skills, s.primary_goal, s.secondary_goal,
                       s.timeline, s.location_preference, s.industry_focus,
                       c.college_name, c.college_type, c.city, c.state, c.country
                FROM students s
                JOIN colleges c ON s.college_id = c.id
                WHERE s.student_id = :id AND s.college_id = :cid AND s.is_active = TRUE
            """),
            {"id": student_id, "cid": college.id}
        ).fetchone()

    if not row:
        raise HTTPException(status_code=404, detail="Student not found")

    student = row_to_dict(row)
    for field, empty in JSON_DEFAULTS.items():
        if student.get(field) is None:
            student[field] = empty

    return {"success": True, "student": student}
