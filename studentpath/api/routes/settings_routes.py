"""
Student Settings Routes

GET /settings - Profile + notification/privacy/preference settings
PUT /settings - Update profile fields and settings
DELETE /settings/delete-account - Deactivate account (email confirmation)
POST /settings/upload-avatar - Upload profile picture
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlalchemy import text

from studentpath.core.auth import clear_session_cookie, get_current_student
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import (
    AuthUser, DeleteAccountRequest, MessageResponse, NotificationSettings, PreferenceSettings,
    PrivacySettings, SettingsUpdateRequest,
)
from studentpath.services.storage_service import upload_file
from studentpath.utils.file_upload import AVATAR_CONTENT_TYPES, IMAGE_MAX_BYTES, read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])

SETTINGS_COLUMNS = [
    "email_notifications", "push_notifications", "assignment_reminders", "goal_updates",
    "weekly_reports", "course_updates", "profile_visibility", "progress_sharing",
    "analytics_opt_in", "theme", "language", "timezone",
]


def group_settings(row: dict = None) -> dict:
    """Shape a user_settings row (or defaults when None) into the grouped camelCase form."""
    defaults = {
        **NotificationSettings().model_dump(),
        **PrivacySettings().model_dump(),
        **PreferenceSettings().model_dump(),
    }
    values = {**defaults, **{k: v for k, v in (row or {}).items() if k in defaults and v is not None}}

    def group(model):
        return model(**{field: values[field] for field in model.model_fields}).model_dump(by_alias=True)

    return {
        "notifications": group(NotificationSettings),
        "privacy": group(PrivacySettings),
        "preferences": group(PreferenceSettings),
    }


@router.get("")
async def get_settings_view(user: AuthUser = Depends(get_current_student)):
    with get_db_session() as db:
        student = db.execute(
            text("""
                SELECT s.student_id, s.first_name, s.last_name, s.email, s.phone, s.college_id,
                       s.college, s.program, s.department, s.current_year, s.current_semester,
                       s.current_gpa, s.gender, s.date_of_birth, s.country, s.academic_interests,
                       s.technical_skills, s.soft_skills, s.language_skills, s.primary_goal,
                       s.secondary_goal, s.timeline, s.location_preference, s.industry_focus,
                       s.intensity_level, s.profile_picture, s.created_at, s.updated_at,
                       c.college_name, c.email AS college_email, c.phone AS college_phone,
                       c.city, c.state, c.country AS college_country, c.website,
                       c.established_year, c.college_type, c.accreditation
                FROM students s
                LEFT JOIN colleges c ON s.college_id = c.id
                WHERE s.student_id = :id
            """),
            {"id": user.id}
        ).fetchone()
        if not student:
            raise HTTPException(status_code=404, detail="Student not found")

        settings_row = db.execute(
            text(f"SELECT {', '.join(SETTINGS_COLUMNS)} FROM user_settings WHERE student_id = :id"),
            {"id": user.id}
        ).fetchone()

    s = row_to_dict(student)
    college_details = None
    if s["college_name"]:
        college_details = {
            "name": s["college_name"],
            "email": s["college_email"],
            "phone": s["college_phone"],
            "location": f"{s['city']}, {s['state']}, {s['college_country']}",
            "website": s["website"],
            "established_year": s["established_year"],
            "type": s["college_type"],
            "accreditation": s["accreditation"],
        }

    profile = {
        "student_id": s["student_id"],
        "name": f"{s['first_name']} {s['last_name']}",
        "first_name": s["first_name"],
        "last_name": s["last_name"],
        "email": s["email"],
        "phone": s["phone"] or "",
        "college": s["college_name"] or s["college"] or "Not specified",
        "college_id": s["college_id"],
        "college_details": college_details,
        "program": s["program"] or "",
        "department": s["department"] or "",
        "current_year": s["current_year"] or 1,
        "semester": s["current_semester"] or 1,
        "current_gpa": float(s["current_gpa"]) if s["current_gpa"] is not None else None,
        "gender": s["gender"] or "",
        "date_of_birth": s["date_of_birth"],
        "country": s["country"] or "",
        "profile_picture": s["profile_picture"],
    }
    for field in [
        "academic_interests", "technical_skills", "soft_skills", "language_skills", "primary_goal",
        "secondary_goal", "timeline", "location_preference", "industry_focus", "intensity_level",
        "created_at", "updated_at",
    ]:
        profile[field] = s[field]

    return {
        "success": True,
        "profile": profile,
        "settings": group_settings(row_to_dict(settings_row)),
    }


@router.put("", response_model=MessageResponse)
async def update_settings(request: SettingsUpdateRequest, user: AuthUser = Depends(get_current_student)):
    """Profile fields are updated only when provided; settings groups are upserted."""
    profile_fields = request.profile.model_dump(exclude_unset=True) if request.profile else {}

    settings_values = {}
    for group in (request.notifications, request.privacy, request.preferences):
        if group is not None:
            settings_values.update(group.model_dump())

    with get_db_session() as db:
        if profile_fields:
            assignments = ", ".join(f"{field} = :{field}" for field in profile_fields)
            db.execute(
                text(f"UPDATE students SET {assignments}, updated_at = NOW() WHERE student_id = :id"),
                {**profile_fields, "id": user.id}
            )

        if settings_values:
            columns = list(settings_values)
            db.execute(
                text(f"""
                    INSERT INTO user_settings (student_id, {', '.join(columns)})
                    VALUES (:student_id, {', '.join(':' + c for c in columns)})
                    ON CONFLICT (student_id) DO UPDATE SET
                        {', '.join(f'{c} = EXCLUDED.{c}' for c in columns)},
                        updated_at = NOW()
                """),
                {**settings_values, "student_id": user.id}
            )

    return MessageResponse(message="Settings updated successfully")


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(
    request: DeleteAccountRequest,
    response: Response,
    user: AuthUser = Depends(get_current_student),
):
    """
    Soft-delete the account. Settings and chat history are removed,
    the student row is kept with is_active = FALSE.
    """
    with get_db_session() as db:
        student = db.execute(
            text("SELECT email FROM students WHERE student_id = :id"),
            {"id": user.id}
        ).fetchone()
        if not student:
            raise HTTPException(status_code=404, detail="Student not found")
        if not request.confirm_email or student.email != request.confirm_email:
            raise HTTPException(status_code=400, detail="Email does not match")

        db.execute(text("DELETE FROM user_settings WHERE student_id = :id"), {"id": user.id})
        db.execute(
            text("DELETE FROM chat_context WHERE user_id = :id AND user_type = 'student'"),
            {"id": user.id}
        )
        # messages cascade
        db.execute(
            text("DELETE FROM chat_conversations WHERE user_id = :id AND user_type = 'student'"),
            {"id": user.id}
        )
        db.execute(
            text("UPDATE students SET is_active = FALSE, updated_at = NOW() WHERE student_id = :id"),
            {"id": user.id}
        )

    clear_session_cookie(response)
    logger.info(f"Student {user.id} deactivated their account")
    return MessageResponse(message="Account deleted successfully")


@router.post("/upload-avatar")
async def upload_avatar(
    avatar: UploadFile = File(None),
    user: AuthUser = Depends(get_current_student),
):
    content, _ = await read_upload(
        avatar,
        IMAGE_MAX_BYTES,
        allowed_content_types=AVATAR_CONTENT_TYPES,
        type_error="Invalid file type. Only JPG, PNG, GIF, and WEBP are allowed",
    )

    url = upload_file(content, "student_avatars", f"student_{user.id}", avatar.content_type)

    with get_db_session() as db:
        db.execute(
            text("UPDATE students SET profile_picture = :url, updated_at = NOW() WHERE student_id = :id"),
            {"url": url, "id": user.id}
        )

    return {"success": True, "url": url, "message": "Avatar uploaded successfully"}
