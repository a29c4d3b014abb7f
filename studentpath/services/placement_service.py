"""
Placement records: spreadsheet import, listing and reviews.

Colleges upload their placement history as a workbook with one sheet per
academic year (e.g. "2024-25"). Column names vary from college to college,
so each field is looked up through a list of known header aliases.
"""

import io
import logging
import numbers
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel
from sqlalchemy import text

from studentpath.core.exceptions import NotFoundError, PermissionDeniedError
from studentpath.db.postgres import get_db_session, row_to_dict

logger = logging.getLogger(__name__)


class PlacementRow(BaseModel):
    company_name: str
    package: str = ""
    eligibility: str = ""
    drive_date: Optional[str] = None
    remarks: str = ""
    students_registered: int = 0
    students_selected: int = 0
    location: str = ""
    role: str = ""
    academic_year: Optional[str] = None


COLUMN_ALIASES = {
    "company_name": ["Company Name", "Company", "Name of Company", "Organization", "Employer"],
    "package": ["Package", "CTC", "Salary", "Stipend"],
    "eligibility": ["Branch", "Streams", "Eligibility", "Criteria"],
    "drive_date": ["Interview Date", "Date", "Drive Date"],
    "remarks": ["Remark", "Remarks", "Comments", "Status"],
    "students_registered": ["No. of Students Registred", "Students Registered", "Registered", "Total Students"],
    "students_selected": [
        "No of Students Selected", "Selected", "Placed", "Selects",
        "No of Students Selected for HR Interview",
    ],
    "location": ["Location", "City", "Place"],
    "role": ["Role", "Job Profile", "Position", "Designation"],
}

EXCEL_EPOCH = datetime(1899, 12, 30)
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


# ============================================================
# CELL CONVERSION
# ============================================================

def parse_date(value: Any) -> Optional[str]:
    """
    Normalise a drive-date cell to YYYY-MM-DD.

    Accepts datetime cells, Excel serial numbers, dd/mm/yyyy or dd-mm-yyyy
    strings, and strings already starting with a 4-digit year.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        moment = EXCEL_EPOCH + timedelta(milliseconds=round(value * 86400 * 1000))
        return moment.date().isoformat()
    if isinstance(value, str):
        stripped = value.strip()
        parts = re.split(r"[/-]", stripped)
        if len(parts) == 3:
            if len(parts[0]) == 4:
                return stripped
            day, month, year = parts
            return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return None


def parse_count(value: Any) -> int:
    """Leading integer of the cell ("12 students" -> 12), else 0."""
    if value is None or value == "" or isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Real):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group()) if match else 0


def _cell(row: Dict[str, Any], aliases: List[str]) -> Any:
    """First non-empty value among the alias columns (case-insensitive, trimmed)."""
    for alias in aliases:
        for column, value in row.items():
            if str(column).strip().lower() == alias.lower() and value != "":
                return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ============================================================
# PARSING
# ============================================================

def _read_sheets(content: bytes, filename: str) -> Dict[str, pd.DataFrame]:
    suffix = Path(filename).suffix.lower()
    if suffix == ".csv":
        return {Path(filename).stem: pd.read_csv(io.BytesIO(content), dtype=object)}
    engine = "openpyxl" if suffix == ".xlsx" else None
    return pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object, engine=engine)


def parse_sheet(sheet_name: str, df: pd.DataFrame) -> List[PlacementRow]:
    if df.empty:
        logger.info(f"Skipping empty sheet: {sheet_name}")
        return []

    headers = [str(c).lower() for c in df.columns]
    if not any("company" in h or "name" in h for h in headers):
        logger.info(f"Skipping sheet '{sheet_name}': no company header found")
        return []

    rows = []
    for record in df.astype(object).where(df.notna(), "").to_dict(orient="records"):
        company = _cell(record, COLUMN_ALIASES["company_name"])
        if not company:
            continue

        rows.append(PlacementRow(
            company_name=_text(company).strip(),
            package=_text(_cell(record, COLUMN_ALIASES["package"])),
            eligibility=_text(_cell(record, COLUMN_ALIASES["eligibility"])),
            drive_date=parse_date(_cell(record, COLUMN_ALIASES["drive_date"])),
            remarks=_text(_cell(record, COLUMN_ALIASES["remarks"])),
            students_registered=parse_count(_cell(record, COLUMN_ALIASES["students_registered"])),
            students_selected=parse_count(_cell(record, COLUMN_ALIASES["students_selected"])),
            location=_text(_cell(record, COLUMN_ALIASES["location"])),
            role=_text(_cell(record, COLUMN_ALIASES["role"])),
            academic_year=str(sheet_name),
        ))

    logger.info(f"Extracted {len(rows)} rows from sheet {sheet_name}")
    return rows


def parse_placement_workbook(content: bytes, filename: str) -> List[PlacementRow]:
    """Parse every sheet of an uploaded .xlsx/.xls/.csv into placement rows."""
    sheets = _read_sheets(content, filename)
    logger.info(f"Sheet names: {list(sheets)}")

    rows: List[PlacementRow] = []
    for sheet_name, df in sheets.items():
        rows.extend(parse_sheet(sheet_name, df))

    logger.info(f"Total parsed rows across all sheets: {len(rows)}")
    return rows


# ============================================================
# REPOSITORY
# ============================================================

def insert_placements(college_id: int, rows: List[PlacementRow], file_url: str) -> dict:
    """Insert rows in one transaction, skipping (company, role, year) duplicates."""
    inserted = 0
    skipped = 0

    with get_db_session() as db:
        for p in rows:
            existing = db.execute(
                text("""
                    SELECT id FROM placements
                    WHERE college_id = :cid AND company_name = :company
                      AND role = :role AND academic_year IS NOT DISTINCT FROM :year
                    LIMIT 1
                """),
                {"cid": college_id, "company": p.company_name, "role": p.role or "", "year": p.academic_year}
            ).fetchone()

            if existing:
                skipped += 1
                continue

            db.execute(
                text("""
                    INSERT INTO placements (
                        college_id, company_name, package, eligibility, drive_date,
                        remarks, students_registered, students_selected, location,
                        role, file_url, academic_year
                    ) VALUES (
                        :cid, :company, :package, :eligibility, :drive_date,
                        :remarks, :registered, :selected, :location,
                        :role, :file_url, :year
                    )
                """),
                {
                    "cid": college_id,
                    "company": p.company_name,
                    "package": p.package,
                    "eligibility": p.eligibility,
                    "drive_date": p.drive_date,
                    "remarks": p.remarks or "",
                    "registered": p.students_registered or 0,
                    "selected": p.students_selected or 0,
                    "location": p.location or "",
                    "role": p.role or "",
                    "file_url": file_url,
                    "year": p.academic_year,
                }
            )
            inserted += 1

    logger.info(f"Placements for college {college_id}: {inserted} inserted, {skipped} skipped")
    return {"inserted": inserted, "skipped": skipped}


def list_placements(college_id: Optional[int] = None) -> List[dict]:
    query = """
        SELECT id, college_id, company_name, logo_url, role, package, description,
               eligibility, location, drive_date, deadline, apply_link,
               students_registered, students_selected, remarks, file_url,
               academic_year, created_at, updated_at,
               extracted_skills, extracted_rounds, difficulty_level,
               total_rounds, ai_confidence_score, last_ai_update
        FROM placements
    """
    params = {}
    if college_id:
        query += " WHERE college_id = :cid"
        params["cid"] = college_id
    query += " ORDER BY academic_year DESC, id DESC"

    with get_db_session() as db:
        rows = db.execute(text(query), params).fetchall()
    return [row_to_dict(r) for r in rows]


# ============================================================
# CARDS
# ============================================================

def placement_status(drive_date: Optional[date], today: date = None) -> str:
    today = today or date.today()
    if isinstance(drive_date, datetime):
        drive_date = drive_date.date()
    if drive_date and drive_date < today:
        return "Completed"
    return "Upcoming"


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def to_on_campus_card(row: dict, today: date = None) -> dict:
    """Shape a placement row into the on-campus company card."""
    return {
        "id": row["id"],
        "companyName": row["company_name"],
        "logo": row.get("logo_url") or "🏢",
        "roleTitle": row.get("role") or "Not Specified",
        "package": row.get("package"),
        "eligibilityCriteria": row.get("eligibility"),
        "driveDate": _iso(row.get("drive_date")),
        "registrationDeadline": _iso(row.get("deadline") or row.get("drive_date")),
        "status": placement_status(row.get("drive_date"), today),
        "requiredSkills": row.get("extracted_skills") or [],
        "rounds": row.get("extracted_rounds") or [],
        "difficultyLevel": row.get("difficulty_level"),
        "totalRounds": row.get("total_rounds"),
        "aiConfidenceScore": float(row["ai_confidence_score"]) if row.get("ai_confidence_score") is not None else None,
        "totalApplicants": row.get("students_registered"),
        "academicYear": row.get("academic_year"),
    }


# ============================================================
# REVIEWS
# ============================================================

def get_reviews(placement_id: int) -> List[dict]:
    """Reviews with the author's full name, newest first."""
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT r.*, s.first_name, s.last_name
                FROM placement_reviews r
                JOIN students s ON r.student_id = s.student_id
                WHERE r.placement_id = :pid
                ORDER BY r.created_at DESC
            """),
            {"pid": placement_id}
        ).fetchall()

    reviews = []
    for r in rows:
        review = row_to_dict(r)
        review["student_name"] = f"{review['first_name']} {review['last_name']}"
        reviews.append(review)
    return reviews


def add_review(placement_id: int, student_id: int, rating: int, comment: str) -> int:
    with get_db_session() as db:
        return db.execute(
            text("""
                INSERT INTO placement_reviews (placement_id, student_id, rating, comment)
                VALUES (:pid, :sid, :rating, :comment)
                RETURNING id
            """),
            {"pid": placement_id, "sid": student_id, "rating": rating, "comment": comment}
        ).scalar()


def get_company_reviews(placement_id: int) -> List[dict]:
    """
    Reviews for the career-tracks company sheet. Anonymous reviews keep
    the author's profile hidden; missing student rows still show.
    """
    with get_db_session() as db:
        rows = db.execute(
            text("""
                SELECT pr.*,
                       COALESCE(s.first_name, 'Student') AS first_name,
                       COALESCE(s.last_name, CAST(pr.student_id AS TEXT)) AS last_name,
                       s.current_year,
                       s.program
                FROM placement_reviews pr
                LEFT JOIN students s ON pr.student_id = s.student_id
                WHERE pr.placement_id = :pid
                ORDER BY pr.created_at DESC
            """),
            {"pid": placement_id}
        ).fetchall()

    reviews = []
    for r in rows:
        review = row_to_dict(r)
        if review.get("is_anonymous"):
            review.update({"first_name": "Anonymous", "last_name": "", "current_year": None, "program": None})
        reviews.append(review)
    return reviews


def add_company_review(placement_id: int, student_id: int, review: Dict[str, Any]) -> int:
    with get_db_session() as db:
        return db.execute(
            text("""
                INSERT INTO placement_reviews (
                    placement_id, student_id, rating, comment, is_anonymous,
                    interview_date, offer_received, salary_offered,
                    interview_experience, questions_asked, preparation_tips,
                    overall_experience, would_recommend, rounds_cleared
                ) VALUES (
                    :placement_id, :student_id, :rating, :comment, :is_anonymous,
                    :interview_date, :offer_received, :salary_offered,
                    :interview_experience, :questions_asked, :preparation_tips,
                    :overall_experience, :would_recommend, :rounds_cleared
                )
                RETURNING id
            """),
            {
                "placement_id": placement_id,
                "student_id": student_id,
                "rating": review["rating"],
                "comment": review["comment"],
                "is_anonymous": bool(review.get("is_anonymous")),
                "interview_date": review.get("interview_date") or None,
                "offer_received": review.get("offer_received"),
                "salary_offered": review.get("salary_offered") or None,
                "interview_experience": review.get("interview_experience") or None,
                "questions_asked": review.get("questions_asked") or None,
                "preparation_tips": review.get("preparation_tips") or None,
                "overall_experience": review.get("overall_experience") or None,
                "would_recommend": review.get("would_recommend"),
                "rounds_cleared": review.get("rounds_cleared") or None,
            }
        ).scalar()


def delete_review(review_id: int, student_id: int) -> None:
    """
    Raises:
        NotFoundError: no such review
        PermissionDeniedError: review belongs to another student
    """
    with get_db_session() as db:
        row = db.execute(
            text("SELECT id, student_id FROM placement_reviews WHERE id = :id"),
            {"id": review_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Review not found")
        if row.student_id != student_id:
            raise PermissionDeniedError("You can only delete your own reviews")

        db.execute(text("DELETE FROM placement_reviews WHERE id = :id"), {"id": review_id})
