"""
College Admin Routes

GET /admin/college-data - Dashboard numbers for the logged-in college
GET /admin/settings - College profile
PUT /admin/settings - Update college profile
POST /admin/upload-logo - Upload college logo
POST /admin/placements/upload - Import placement records from a spreadsheet
GET /admin/placements - Imported placement records
"""

import json
import logging
import zipfile

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy import text

from studentpath.core.auth import get_current_college
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import AuthUser, CollegeSettingsUpdate, MessageResponse
from studentpath.services.placement_service import insert_placements, list_placements, parse_placement_workbook
from studentpath.services.storage_service import upload_file
from studentpath.utils.file_upload import (
    IMAGE_MAX_BYTES, LOGO_CONTENT_TYPES, MB, PLACEMENT_SHEET_EXTENSIONS, read_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

PLACEMENT_SHEET_MAX_BYTES = 10 * MB

COLLEGE_SETTINGS_COLUMNS = """
    college_name, email, phone, country, state, city, address, website,
    established_year, college_type, accreditation, contact_person,
    contact_person_email, contact_person_phone, total_students, programs, logo_url
"""


@router.get("/college-data")
async def get_college_data(user: AuthUser = Depends(get_current_college)):
    college_id = user.id

    with get_db_session() as db:
        counts = db.execute(
            text("""
                SELECT COUNT(*) AS total,
                       COUNT(*) FILTER (WHERE is_active = TRUE) AS active
                FROM students WHERE college_id = :cid
            """),
            {"cid": college_id}
        ).fetchone()

        programs = db.execute(
            text("""
                SELECT COUNT(DISTINCT program) FROM students
                WHERE college_id = :cid AND program IS NOT NULL AND program <> ''
            """),
            {"cid": college_id}
        ).scalar()

        recent = db.execute(
            text("""
                SELECT student_id, first_name, last_name, email,
                       COALESCE(NULLIF(program, ''), 'Not Set') AS program, created_at
                FROM students WHERE college_id = :cid
                ORDER BY created_at DESC
                LIMIT 10
            """),
            {"cid": college_id}
        ).fetchall()

        month_usage = db.execute(
            text("""
                SELECT COUNT(*) FROM students
                WHERE college_id = :cid AND created_at >= date_trunc('month', NOW())
            """),
            {"cid": college_id}
        ).scalar()

        token_row = db.execute(
            text("""
                SELECT max_usage, is_active FROM college_tokens
                WHERE college_id = :cid
                ORDER BY id DESC LIMIT 1
            """),
            {"cid": college_id}
        ).fetchone()

        departments = db.execute(
            text("""
                SELECT COALESCE(NULLIF(department, ''), 'Not Set') AS department, COUNT(*) AS count
                FROM students WHERE college_id = :cid
                GROUP BY 1
                ORDER BY count DESC
            """),
            {"cid": college_id}
        ).fetchall()

        college = db.execute(
            text("SELECT id, college_name, email, college_token FROM colleges WHERE id = :cid"),
            {"cid": college_id}
        ).fetchone()

    if not college:
        raise HTTPException(status_code=404, detail="College not found")

    max_usage = token_row.max_usage if token_row else 0

    return {
        "success": True,
        "stats": {
            "totalStudents": counts.total,
            "activeStudents": counts.active,
            "totalPrograms": programs or 0,
        },
        "recentRegistrations": [
            {
                "id": r.student_id,
                "name": f"{r.first_name} {r.last_name}",
                "email": r.email,
                "program": r.program,
                "createdAt": r.created_at.isoformat() if r.created_at else None,
            }
            for r in recent
        ],
        "tokenUsage": {
            "usageCount": month_usage or 0,
            "maxUsage": max_usage,
            "remaining": max(max_usage - (month_usage or 0), 0),
            "isActive": bool(token_row.is_active) if token_row else False,
        },
        "departmentStats": [{"department": d.department, "count": d.count} for d in departments],
        "collegeInfo": {
            "id": college.id,
            "name": college.college_name,
            "email": college.email,
            "token": college.college_token,
        },
    }


# ============================================================
# SETTINGS
# ============================================================

@router.get("/settings")
async def get_college_settings(user: AuthUser = Depends(get_current_college)):
    with get_db_session() as db:
        row = db.execute(
            text(f"SELECT {COLLEGE_SETTINGS_COLUMNS} FROM colleges WHERE id = :id"),
            {"id": user.id}
        ).fetchone()

    if not row:
        raise HTTPException(status_code=404, detail="College not found")

    return {"success": True, "settings": row_to_dict(row)}


@router.put("/settings", response_model=MessageResponse)
async def update_college_settings(data: CollegeSettingsUpdate, user: AuthUser = Depends(get_current_college)):
    if not data.college_name or not data.email or not data.country or not data.city:
        raise HTTPException(status_code=400, detail="Missing required fields")

    params = data.model_dump(exclude={"programs"})
    params["id"] = user.id
    # Blank optionals are stored as NULL
    for field, value in params.items():
        if value == "":
            params[field] = None

    programs_sql = ""
    if data.programs is not None:
        programs_sql = ", programs = CAST(:programs AS JSONB)"
        params["programs"] = json.dumps(data.programs)

    with get_db_session() as db:
        db.execute(
            text(f"""
                UPDATE colleges SET
                    college_name = :college_name, email = :email, phone = :phone,
                    country = :country, state = :state, city = :city, address = :address,
                    website = :website, established_year = :established_year,
                    college_type = :college_type, accreditation = :accreditation,
                    contact_person = :contact_person, contact_person_email = :contact_person_email,
                    contact_person_phone = :contact_person_phone, total_students = :total_students
                    {programs_sql},
                    updated_at = NOW()
                WHERE id = :id
            """),
            params
        )

    logger.info(f"College {user.id} updated settings")
    return MessageResponse(message="Settings updated successfully")


@router.post("/upload-logo")
async def upload_logo(
    logo: UploadFile = File(None),
    user: AuthUser = Depends(get_current_college),
):
    content, _ = await read_upload(
        logo,
        IMAGE_MAX_BYTES,
        allowed_content_types=LOGO_CONTENT_TYPES,
        type_error="Invalid file type. Only JPG, PNG, SVG, and WEBP are allowed",
    )

    url = upload_file(content, "college_logos", f"college_{user.id}", logo.content_type)

    with get_db_session() as db:
        db.execute(
            text("UPDATE colleges SET logo_url = :url, updated_at = NOW() WHERE id = :id"),
            {"url": url, "id": user.id}
        )

    return {"success": True, "logoUrl": url, "message": "Logo uploaded successfully"}


# ============================================================
# PLACEMENTS
# ============================================================

@router.post("/placements/upload")
async def upload_placements(
    file: UploadFile = File(None),
    user: AuthUser = Depends(get_current_college),
):
    """
    Import placement drives from an .xlsx/.xls/.csv file.

    Every sheet is parsed and its name becomes the academic year.
    Rows already imported for the same company, role and year are skipped.
    """
    content, _ = await read_upload(
        file,
        PLACEMENT_SHEET_MAX_BYTES,
        allowed_extensions=PLACEMENT_SHEET_EXTENSIONS,
        type_error="Invalid file type. Only .xlsx, .xls and .csv files are allowed",
    )

    try:
        rows = parse_placement_workbook(content, file.filename)
    except (ValueError, zipfile.BadZipFile) as e:
        logger.warning(f"Could not read placement sheet {file.filename}: {e}")
        raise HTTPException(status_code=400, detail="Could not read the uploaded file")

    if not rows:
        raise HTTPException(
            status_code=400,
            detail="No valid records found in the Excel file. Please check column headers."
        )

    file_url = upload_file(content, "placements", f"placements_{user.id}_{file.filename}", file.content_type)
    result = insert_placements(user.id, rows, file_url)

    return {
        "success": True,
        "message": f"{result['inserted']} placement records imported",
        "inserted": result["inserted"],
        "skipped": result["skipped"],
        "recordsInserted": result["inserted"],
    }


@router.get("/placements")
async def get_placements(user: AuthUser = Depends(get_current_college)):
    return {"success": True, "placements": list_placements(user.id)}
