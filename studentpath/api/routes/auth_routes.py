"""
Authentication Routes

POST /auth/register-student - Full student signup (optional college token)
POST /auth/register-basic - Minimal student signup
POST /auth/register-college - College signup, issues a college token
POST /auth/login - Student login (email + password + college token)
POST /auth/login-college - College admin login
POST /auth/logout - Clear session cookie
GET /auth/me - Current session user
GET /auth/validate-token - Check a college token before signup
POST /auth/forgot-password - Email a reset link
POST /auth/reset-password - Set a new password from a reset link
POST /auth/complete-profile - Fill in the academic/career profile after signup
"""

import hashlib
import json
import logging
import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import text

from studentpath.core.auth import (
    clear_session_cookie, create_access_token, get_current_user, hash_password,
    set_session_cookie, verify_password,
)
from studentpath.core.config import get_settings
from studentpath.core.exceptions import ExternalServiceError
from studentpath.core.rate_limit import rate_limit
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import (
    AuthUser, CollegeRegisterRequest, CompleteProfileRequest, ForgotPasswordRequest,
    LoginRequest, MessageResponse, ResetPasswordRequest, StudentRegisterRequest,
)
from studentpath.services.email_service import send_password_reset_email

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Authentication"])

USER_TYPES = {"student", "college", "professional"}
RESET_TOKEN_MINUTES = 15
RESET_LINK_MESSAGE = "If an account with this email exists, you will receive a password reset link."

register_limit = rate_limit(settings.register_rate_limit, message="Too many registration attempts")


def _json(value, default):
    return json.dumps(value if value is not None else default)


def _profile_params(data) -> dict:
    """Academic and career columns shared by register-student and complete-profile."""
    return {
        "program": data.program,
        "current_year": data.current_year,
        "current_semester": data.current_semester,
        "enrollment_year": data.enrollment_year,
        "current_gpa": data.current_gpa,
        "academic_interests": _json(data.academic_interests, []),
        "career_quiz_answers": _json(data.career_quiz_answers, {}),
        "technical_skills": _json(data.technical_skills, {}),
        "soft_skills": _json(data.soft_skills, {}),
        "language_skills": _json(data.language_skills, {}),
        "primary_goal": data.primary_goal,
        "secondary_goal": data.secondary_goal,
        "timeline": data.timeline,
        "location_preference": data.location_preference,
        "industry_focus": _json(data.industry_focus, []),
        "intensity_level": data.intensity_level or "moderate",
    }


# ============================================================
# REGISTRATION
# ============================================================

@router.post("/register-student", dependencies=[Depends(register_limit)])
async def register_student(request: StudentRegisterRequest):
    """
    Register a student with their full profile.

    A college token, when given, links the student to that college and
    counts against the token's usage limit.
    """
    if not request.first_name or not request.last_name or not request.email or not request.password:
        raise HTTPException(status_code=400, detail="Missing required fields")

    with get_db_session() as db:
        college_id = None
        if request.college_token:
            token_row = db.execute(
                text("""
                    SELECT c.id, ct.usage_count, ct.max_usage
                    FROM colleges c
                    JOIN college_tokens ct ON c.id = ct.college_id
                    WHERE ct.token = :token AND ct.is_active = TRUE AND c.is_active = TRUE
                """),
                {"token": request.college_token}
            ).fetchone()
            if not token_row:
                raise HTTPException(status_code=400, detail="Invalid or expired college token")
            if token_row.usage_count >= token_row.max_usage:
                raise HTTPException(status_code=400, detail="College token usage limit exceeded")
            college_id = token_row.id

        existing = db.execute(
            text("SELECT student_id FROM students WHERE email = :email"),
            {"email": request.email}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail="Student with this email already exists")

        if request.college_token:
            db.execute(
                text("UPDATE college_tokens SET usage_count = usage_count + 1 WHERE token = :token"),
                {"token": request.college_token}
            )

        params = {
            "first_name": request.first_name,
            "last_name": request.last_name,
            "email": request.email,
            "phone": request.phone,
            "password_hash": hash_password(request.password),
            "date_of_birth": request.date_of_birth or None,
            "gender": request.gender,
            "country": request.country,
            "college_id": college_id,
            "college_token": request.college_token,
            "college": request.college,
            "department": request.department,
            **_profile_params(request),
        }
        row = db.execute(
            text("""
                INSERT INTO students (
                    first_name, last_name, email, phone, password_hash, date_of_birth, gender,
                    country, college_id, college_token, college, program, department,
                    current_year, current_semester, enrollment_year, current_gpa,
                    academic_interests, career_quiz_answers, technical_skills, soft_skills,
                    language_skills, primary_goal, secondary_goal, timeline,
                    location_preference, industry_focus, intensity_level
                ) VALUES (
                    :first_name, :last_name, :email, :phone, :password_hash, :date_of_birth, :gender,
                    :country, :college_id, :college_token, :college, :program, :department,
                    :current_year, :current_semester, :enrollment_year, :current_gpa,
                    CAST(:academic_interests AS JSONB), CAST(:career_quiz_answers AS JSONB),
                    CAST(:technical_skills AS JSONB), CAST(:soft_skills AS JSONB),
                    CAST(:language_skills AS JSONB), :primary_goal, :secondary_goal, :timeline,
                    :location_preference, CAST(:industry_focus AS JSONB), :intensity_level
                )
                RETURNING student_id
            """),
            params
        ).fetchone()

    logger.info(f"Student {row.student_id} registered (college {college_id})")
    return {
        "success": True,
        "message": "Student registered successfully",
        "studentId": row.student_id,
        "collegeId": college_id,
    }


@router.post("/register-basic")
async def register_basic(request: StudentRegisterRequest):
    """Minimal signup. The academic profile is completed later via /complete-profile."""
    if not request.first_name or not request.last_name or not request.email or not request.password:
        raise HTTPException(status_code=400, detail="Please provide all required fields")

    with get_db_session() as db:
        existing = db.execute(
            text("SELECT student_id FROM students WHERE email = :email"),
            {"email": request.email}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail="User with this email already exists")

        row = db.execute(
            text("""
                INSERT INTO students (
                    first_name, last_name, email, phone, password_hash,
                    date_of_birth, gender, country, college_token
                ) VALUES (
                    :first_name, :last_name, :email, :phone, :password_hash,
                    :date_of_birth, :gender, :country, :college_token
                )
                RETURNING student_id, first_name, last_name, email, phone,
                          date_of_birth, gender, country, college_token
            """),
            {
                "first_name": request.first_name,
                "last_name": request.last_name,
                "email": request.email,
                "phone": request.phone,
                "password_hash": hash_password(request.password),
                "date_of_birth": request.date_of_birth or None,
                "gender": request.gender,
                "country": request.country,
                "college_token": request.college_token,
            }
        ).fetchone()

    user = row_to_dict(row)
    return {
        "message": "Student registered successfully",
        "userId": user["student_id"],
        "user": user,
    }


@router.post("/register-college", dependencies=[Depends(register_limit)])
async def register_college(request: CollegeRegisterRequest):
    """Register a college. Students join it with the returned token."""
    if (not request.college_name or not request.email or not request.password
            or not request.country or not request.city):
        raise HTTPException(status_code=400, detail="Missing required fields")

    college_token = request.college_token or secrets.token_hex(8).upper()

    with get_db_session() as db:
        existing = db.execute(
            text("SELECT id FROM colleges WHERE email = :email"),
            {"email": request.email}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail="College with this email already exists")

        row = db.execute(
            text("""
                INSERT INTO colleges (
                    college_name, email, phone, country, state, city, address, website,
                    established_year, college_type, accreditation, password_hash, college_token,
                    contact_person, contact_person_email, contact_person_phone, total_students, programs
                ) VALUES (
                    :college_name, :email, :phone, :country, :state, :city, :address, :website,
                    :established_year, :college_type, :accreditation, :password_hash, :college_token,
                    :contact_person, :contact_person_email, :contact_person_phone, :total_students,
                    CAST(:programs AS JSONB)
                )
                RETURNING id
            """),
            {
                "college_name": request.college_name,
                "email": request.email,
                "phone": request.phone,
                "country": request.country,
                "state": request.state,
                "city": request.city,
                "address": request.address,
                "website": request.website,
                "established_year": request.established_year,
                "college_type": request.college_type,
                "accreditation": request.accreditation,
                "password_hash": hash_password(request.password),
                "college_token": college_token,
                "contact_person": request.contact_person,
                "contact_person_email": request.contact_person_email,
                "contact_person_phone": request.contact_person_phone,
                "total_students": request.total_students,
                "programs": _json(request.programs, []),
            }
        ).fetchone()

        db.execute(
            text("INSERT INTO college_tokens (college_id, token, max_usage) VALUES (:college_id, :token, 1000)"),
            {"college_id": row.id, "token": college_token}
        )

    logger.info(f"College {row.id} registered")
    return {
        "success": True,
        "message": "College registered successfully",
        "collegeId": row.id,
        "token": college_token,
    }


# ============================================================
# LOGIN / SESSION
# ============================================================

@router.post(
    "/login",
    dependencies=[Depends(rate_limit(
        settings.login_rate_limit, message="Too many login attempts. Please try again later."
    ))],
)
async def login(request: LoginRequest, response: Response):
    """Student login. The college token must match the one the student registered with."""
    if not request.email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    if not request.password:
        raise HTTPException(status_code=400, detail="Password is required")
    if not request.college_token:
        raise HTTPException(status_code=400, detail="College token is required")

    with get_db_session() as db:
        student = db.execute(
            text("""
                SELECT student_id, password_hash, college_token
                FROM students
                WHERE email = :email AND is_active = TRUE
            """),
            {"email": request.email}
        ).fetchone()

    if not student:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if student.college_token != request.college_token:
        raise HTTPException(status_code=403, detail="Invalid college token")

    if not verify_password(request.password, student.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"id": student.student_id, "role": "student"})
    set_session_cookie(response, token)

    return {"success": True, "message": "Login successful", "redirectTo": "/dashboard"}


@router.post(
    "/login-college",
    dependencies=[Depends(rate_limit(settings.login_rate_limit, message="Too many attempts"))],
)
async def login_college(request: LoginRequest, response: Response):
    if not request.email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    if not request.password:
        raise HTTPException(status_code=400, detail="Password is required")

    with get_db_session() as db:
        college = db.execute(
            text("""
                SELECT id, college_name, email, password_hash, college_token, is_active
                FROM colleges WHERE email = :email
            """),
            {"email": request.email}
        ).fetchone()

    if not college:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not college.is_active:
        raise HTTPException(status_code=403, detail="College account is inactive")

    if not verify_password(request.password, college.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"id": college.id, "role": "college"})
    set_session_cookie(response, token)

    return {
        "success": True,
        "college": {
            "id": college.id,
            "name": college.college_name,
            "email": college.email,
            "token": college.college_token,
        },
    }


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AuthUser)
async def get_me(user: AuthUser = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return user


@router.get("/validate-token")
async def validate_token(token: str = Query(None)):
    """Check a college token during student signup."""
    if not token:
        raise HTTPException(status_code=400, detail="Token is required")

    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT c.id, c.college_name, c.college_type, c.city, c.state, c.country,
                       ct.usage_count, ct.max_usage, ct.expires_at
                FROM colleges c
                JOIN college_tokens ct ON c.id = ct.college_id
                WHERE ct.token = :token AND ct.is_active = TRUE AND c.is_active = TRUE
            """),
            {"token": token}
        ).fetchone()

    if not row:
        raise HTTPException(status_code=404, detail="Invalid or expired token")

    if row.usage_count >= row.max_usage:
        raise HTTPException(status_code=400, detail="Token usage limit exceeded")

    if row.expires_at and row.expires_at < datetime.utcnow():
        raise HTTPException(status_code=400, detail="Token has expired")

    return {
        "valid": True,
        "college": {
            "id": row.id,
            "name": row.college_name,
            "type": row.college_type,
            "location": f"{row.city}, {row.state}, {row.country}",
            "usageCount": row.usage_count,
            "maxUsage": row.max_usage,
        },
    }


# ============================================================
# PASSWORD RESET
# ============================================================

def _find_account(db, email: str, user_type: str):
    """Return (id, display name) of an active account, or None."""
    if user_type == "college":
        row = db.execute(
            text("SELECT id, college_name FROM colleges WHERE email = :email AND is_active = TRUE"),
            {"email": email}
        ).fetchone()
        return (row.id, row.college_name) if row else None

    if user_type == "professional":
        sql = "SELECT id, first_name, last_name FROM professionals WHERE email = :email AND is_active = TRUE"
    else:
        sql = "SELECT student_id AS id, first_name, last_name FROM students WHERE email = :email AND is_active = TRUE"
    row = db.execute(text(sql), {"email": email}).fetchone()
    return (row.id, f"{row.first_name} {row.last_name}") if row else None


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


@router.post("/forgot-password")
async def forgot_password(request: ForgotPasswordRequest):
    """
    Email a password reset link.
    The answer is the same whether or not the account exists.
    """
    if not request.email or not request.user_type:
        raise HTTPException(status_code=400, detail="Email and user type are required")
    if request.user_type not in USER_TYPES:
        raise HTTPException(status_code=400, detail="Invalid user type")

    with get_db_session() as db:
        account = _find_account(db, request.email, request.user_type)
        if not account:
            return {"success": True, "message": RESET_LINK_MESSAGE}

        user_id, name = account
        reset_token = secrets.token_hex(32)
        db.execute(
            text("""
                INSERT INTO password_reset_tokens (user_id, user_type, token_hash, expires_at)
                VALUES (:user_id, :user_type, :token_hash, :expires_at)
                ON CONFLICT (user_id, user_type) DO UPDATE SET
                    token_hash = EXCLUDED.token_hash,
                    expires_at = EXCLUDED.expires_at,
                    created_at = NOW(),
                    used = FALSE,
                    used_at = NULL
            """),
            {
                "user_id": user_id,
                "user_type": request.user_type,
                "token_hash": hash_reset_token(reset_token),
                "expires_at": datetime.utcnow() + timedelta(minutes=RESET_TOKEN_MINUTES),
            }
        )

    reset_url = f"{settings.app_url}/reset-password?token={reset_token}&type={request.user_type}"
    try:
        send_password_reset_email(request.email, name, reset_url, request.user_type)
    except ExternalServiceError as e:
        logger.error(f"Password reset email not sent: {e.message}")

    return {"success": True, "message": RESET_LINK_MESSAGE}


RESET_TARGETS = {
    "student": "UPDATE students SET password_hash = :hash, updated_at = NOW() WHERE student_id = :id",
    "college": "UPDATE colleges SET password_hash = :hash, updated_at = NOW() WHERE id = :id",
    "professional": "UPDATE professionals SET password_hash = :hash, updated_at = NOW() WHERE id = :id",
}


@router.post("/reset-password")
async def reset_password(request: ResetPasswordRequest):
    if not request.token or not request.new_password or not request.user_type:
        raise HTTPException(status_code=400, detail="Token, new password, and user type are required")
    if request.user_type not in USER_TYPES:
        raise HTTPException(status_code=400, detail="Invalid user type")
    if len(request.new_password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters long")

    token_hash = hash_reset_token(request.token)

    with get_db_session() as db:
        reset = db.execute(
            text("""
                SELECT user_id FROM password_reset_tokens
                WHERE token_hash = :token_hash AND user_type = :user_type
                  AND used = FALSE AND expires_at > :now
            """),
            {"token_hash": token_hash, "user_type": request.user_type, "now": datetime.utcnow()}
        ).fetchone()
        if not reset:
            raise HTTPException(status_code=400, detail="Invalid or expired reset token")

        db.execute(
            text(RESET_TARGETS[request.user_type]),
            {"hash": hash_password(request.new_password), "id": reset.user_id}
        )
        db.execute(
            text("UPDATE password_reset_tokens SET used = TRUE, used_at = NOW() WHERE token_hash = :token_hash"),
            {"token_hash": token_hash}
        )

    return {"success": True, "message": "Password has been reset successfully"}


# ============================================================
# PROFILE COMPLETION
# ============================================================

@router.post("/complete-profile", response_model=MessageResponse)
async def complete_profile(request: CompleteProfileRequest):
    """Overwrite the academic and career profile of a freshly registered student."""
    if not request.student_id or not request.program or not request.current_year:
        raise HTTPException(
            status_code=400,
            detail="Please provide all required fields: student_id, program, currentYear"
        )

    with get_db_session() as db:
        exists = db.execute(
            text("SELECT student_id FROM students WHERE student_id = :id"),
            {"id": request.student_id}
        ).fetchone()
        if not exists:
            raise HTTPException(status_code=404, detail="Student not found")

        db.execute(
            text("""
                UPDATE students SET
                    program = :program,
                    current_year = :current_year,
                    current_semester = :current_semester,
                    enrollment_year = :enrollment_year,
                    current_gpa = :current_gpa,
                    academic_interests = CAST(:academic_interests AS JSONB),
                    career_quiz_answers = CAST(:career_quiz_answers AS JSONB),
                    technical_skills = CAST(:technical_skills AS JSONB),
                    soft_skills = CAST(:soft_skills AS JSONB),
                    language_skills = CAST(:language_skills AS JSONB),
                    primary_goal = :primary_goal,
                    secondary_goal = :secondary_goal,
                    timeline = :timeline,
                    location_preference = :location_preference,
                    industry_focus = CAST(:industry_focus AS JSONB),
                    intensity_level = :intensity_level,
                    updated_at = NOW()
                WHERE student_id = :student_id
            """),
            {"student_id": request.student_id, **_profile_params(request)}
        )

    return MessageResponse(message="Profile completed successfully")
