"""
Course Routes (college role)

GET /courses - Courses of the logged-in college
POST /courses - Add a course with its syllabus document
DELETE /courses?id= - Remove a course
"""

import logging
import time

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy import text

from studentpath.core.auth import get_current_college
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import AuthUser, MessageResponse
from studentpath.services.storage_service import upload_file
from studentpath.utils.file_upload import MB, read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["Courses"])

SYLLABUS_MAX_BYTES = 10 * MB


@router.get("")
async def list_courses(user: AuthUser = Depends(get_current_college)):
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT course_id AS id, course_name, year, syllabus_url, created_at
                FROM courses
                WHERE college_id = :cid
                ORDER BY created_at DESC
            """),
            {"cid": user.id}
        ).fetchall()

    return {"courses": [row_to_dict(r) for r in rows]}


@router.post("")
async def create_course(
    course: str = Form(None),
    year: str = Form(None),
    file: UploadFile = File(None),
    user: AuthUser = Depends(get_current_college),
):
    if not course or not year or file is None or not file.filename:
        raise HTTPException(status_code=400, detail="Missing fields")

    content, _ = await read_upload(file, SYLLABUS_MAX_BYTES)
    key = f"{course}_{year}_{int(time.time() * 1000)}".replace(" ", "_")
    url = upload_file(content, "syllabi", key, file.content_type or "application/octet-stream")

    with get_db_session() as db:
        row = db.execute(
            text("""
                INSERT INTO courses (college_id, course_name, year, syllabus_url)
                VALUES (:cid, :name, :year, :url)
                RETURNING course_id
            """),
            {"cid": user.id, "name": course, "year": year, "url": url}
        ).fetchone()

    logger.info(f"College {user.id} added course {row.course_id}")
    return {
        "success": True,
        "course": {"id": row.course_id, "course_name": course, "year": year, "syllabus_url": url},
    }


@router.delete("", response_model=MessageResponse)
async def delete_course(
    course_id: int = Query(None, alias="id"),
    user: AuthUser = Depends(get_current_college),
):
    if not course_id:
        raise HTTPException(status_code=400, detail="Missing course ID")

    with get_db_session() as db:
        deleted = db.execute(
            text("DELETE FROM courses WHERE course_id = :id AND college_id = :cid RETURNING course_id"),
            {"id": course_id, "cid": user.id}
        ).fetchone()

    if not deleted:
        raise HTTPException(status_code=404, detail="Course not found")

    return MessageResponse(message="Course deleted successfully")
