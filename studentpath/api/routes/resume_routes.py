"""
Resume Analysis Routes (student role)

POST /resume/upload - Upload a PDF/DOCX resume and store its text
POST /resume/analyze - ATS score + AI feedback against a company and role
GET /resume/history - Uploaded resumes with their analyses
GET /resume/compare - All analyses of one resume, best score first
GET /resume/companies - Companies and roles available for analysis
"""

import json
import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy import text

from studentpath.core.auth import get_current_student
from studentpath.core.exceptions import ExternalServiceError
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import AnalyzeResumeRequest, AuthUser
from studentpath.services.ats_scorer import calculate_ats_score
from studentpath.services.catalog import OFF_CAMPUS_COMPANIES, ON_CAMPUS_PROGRAMS, POPULAR_COMPANIES
from studentpath.services.mongo_service import RawResumeService, ResumeFeedbackStore, safe_write
from studentpath.services.requirements_service import resolve_requirements, seed_company_requirements
from studentpath.services.resume_feedback import StudentContext, generate_ai_feedback
from studentpath.services.storage_service import download_file, upload_file
from studentpath.utils.file_upload import (
    RESUME_EXTENSIONS, RESUME_MAX_BYTES, extract_text, extract_text_or_empty, is_text_usable, read_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["Resume"])

PREVIEW_LENGTH = 500

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@router.post("/upload")
async def upload_resume(
    file: UploadFile = File(None),
    user: AuthUser = Depends(get_current_student),
):
    content, ext = await read_upload(
        file,
        RESUME_MAX_BYTES,
        allowed_extensions=RESUME_EXTENSIONS,
        type_error="Invalid file type. Only PDF and DOCX files are accepted.",
    )
    file_type = ext.lstrip(".")
    content_type = "application/pdf" if file_type == "pdf" else DOCX_CONTENT_TYPE

    file_url = upload_file(content, "resumes", f"resume_{user.id}_{int(time.time() * 1000)}", content_type)

    # The file is kept even when parsing fails; analysis re-parses later
    parsed_text = extract_text_or_empty(content, ext)

    with get_db_session() as db:
        row = db.execute(
            text("""
                INSERT INTO resumes (student_id, file_url, file_name, file_type, parsed_text)
                VALUES (:sid, :url, :name, :type, :text)
                RETURNING id, created_at
            """),
            {"sid": user.id, "url": file_url, "name": file.filename, "type": file_type, "text": parsed_text}
        ).fetchone()

    safe_write(
        lambda: RawResumeService().upsert(row.id, user.id, parsed_text, file.filename),
        f"raw text for resume {row.id}",
    )

    logger.info(f"Student {user.id} uploaded resume {row.id} ({len(parsed_text)} chars parsed)")
    return {
        "success": True,
        "resume": {
            "id": row.id,
            "file_url": file_url,
            "file_name": file.filename,
            "file_type": file_type,
            "parsed_text_preview": parsed_text[:PREVIEW_LENGTH],
            "created_at": row.created_at.isoformat() if row.created_at else None,
        },
    }


def _reparse_from_storage(resume: dict) -> str:
    """Download the stored file and parse it again; "" when that fails."""
    try:
        resume_text = extract_text(download_file(resume["file_url"]), resume["file_type"])
    except (ExternalServiceError, ValueError) as e:
        logger.error(f"Re-parse of resume {resume['id']} failed: {e}")
        return ""

    if resume_text.strip():
        with get_db_session() as db:
            db.execute(
                text("UPDATE resumes SET parsed_text = :text WHERE id = :id"),
                {"text": resume_text, "id": resume["id"]}
            )
        logger.info(f"Re-parsed resume {resume['id']}, length {len(resume_text)}")
    return resume_text


def _student_context(user: AuthUser) -> StudentContext:
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT first_name, last_name, current_year, program, current_gpa, technical_skills, college
                FROM students WHERE student_id = :id
            """),
            {"id": user.id}
        ).fetchone()

    profile = row_to_dict(row) or {}
    skills = profile.get("technical_skills") or []
    # Stored as {skill: level} by the profile wizard
    if isinstance(skills, dict):
        skills = list(skills)

    name = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    return StudentContext(
        name=name or user.name or "",
        year=profile.get("current_year"),
        program=profile.get("program"),
        gpa=float(profile["current_gpa"]) if profile.get("current_gpa") is not None else None,
        technical_skills=[str(s) for s in skills] if isinstance(skills, list) else [],
        college=profile.get("college"),
    )


@router.post("/analyze")
async def analyze_resume(request: AnalyzeResumeRequest, user: AuthUser = Depends(get_current_student)):
    """
    Score a stored resume against a company/role.

    Requirements come from the seeded table, the college's placements or
    the LLM. The ATS score is rule-based; the LLM only writes the feedback.
    """
    if not request.resume_id or not request.target_role:
        raise HTTPException(status_code=400, detail="Missing required fields: resumeId, targetRole")
    if not request.company_id and not request.company_name:
        raise HTTPException(status_code=400, detail="Missing required field: companyId or companyName")

    with get_db_session() as db:
        row = db.execute(
            text("SELECT * FROM resumes WHERE id = :id AND student_id = :sid"),
            {"id": request.resume_id, "sid": user.id}
        ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Resume not found")

    resume = row_to_dict(row)
    resume_text = resume.get("parsed_text") or ""
    if not is_text_usable(resume_text):
        logger.info(f"Stored text for resume {resume['id']} is unusable, re-parsing from storage")
        resume_text = _reparse_from_storage(resume) or resume_text

    if not resume_text.strip():
        raise HTTPException(
            status_code=400,
            detail="Resume text could not be extracted. Please re-upload your resume."
        )

    seed_company_requirements()
    requirements = resolve_requirements(request.company_id, request.company_name, request.target_role)

    ats = calculate_ats_score(resume_text, requirements)
    feedback = generate_ai_feedback(resume_text, ats, requirements, _student_context(user))

    with get_db_session() as db:
        analysis_id = db.execute(
            text("""
                INSERT INTO resume_analyses (
                    resume_id, student_id, company_name, company_id, target_role, ats_score,
                    section_scores, feedback_json, rejection_reasons, skill_gaps, improvement_steps
                ) VALUES (
                    :resume_id, :sid, :company_name, :company_id, :role, :score,
                    CAST(:sections AS JSONB), CAST(:feedback AS JSONB), CAST(:reasons AS JSONB),
                    CAST(:gaps AS JSONB), CAST(:steps AS JSONB)
                )
                RETURNING id
            """),
            {
                "resume_id": resume["id"],
                "sid": user.id,
                "company_name": requirements["company_name"],
                "company_id": requirements["company_id"],
                "role": request.target_role,
                "score": ats["totalScore"],
                "sections": json.dumps(ats["sectionScores"]),
                "feedback": json.dumps(feedback),
                "reasons": json.dumps(feedback.get("rejectionReasons")),
                "gaps": json.dumps(feedback.get("skillGapAnalysis")),
                "steps": json.dumps(feedback.get("improvementSteps")),
            }
        ).scalar()

    safe_write(
        lambda: ResumeFeedbackStore().insert(analysis_id, user.id, feedback),
        f"feedback for analysis {analysis_id}",
    )

    logger.info(
        f"Resume {resume['id']} scored {ats['totalScore']} for "
        f"{requirements['company_name']} / {request.target_role}"
    )

    return {
        "success": True,
        "analysis": {
            "id": analysis_id,
            "resume_id": resume["id"],
            "company_name": requirements["company_name"],
            "company_id": requirements["company_id"],
            "target_role": request.target_role,
            "ats_score": ats["totalScore"],
            "section_scores": ats["sectionScores"],
            "matched_skills": ats["matchedSkills"],
            "missing_skills": ats["missingSkills"],
            "matched_keywords": ats["matchedKeywords"],
            "missing_keywords": ats["missingKeywords"],
            "rejection_reasons": feedback.get("rejectionReasons"),
            "skill_gaps": feedback.get("skillGapAnalysis"),
            "improvement_steps": feedback.get("improvementSteps"),
            "bullet_suggestions": feedback.get("bulletSuggestions", []),
            "overall_verdict": feedback.get("overallVerdict", ""),
            "created_at": datetime.utcnow().isoformat(),
        },
    }


# ============================================================
# HISTORY & COMPARISON
# ============================================================

@router.get("/history")
async def resume_history(user: AuthUser = Depends(get_current_student)):
    with get_db_session() as db:
        resumes = db.execute(
            text("""
                SELECT id, file_url, file_name, file_type, created_at
                FROM resumes WHERE student_id = :sid
                ORDER BY created_at DESC
            """),
            {"sid": user.id}
        ).fetchall()

        analyses = db.execute(
            text("""
                SELECT id, resume_id, company_name, company_id, target_role, ats_score,
                       section_scores, feedback_json, rejection_reasons, skill_gaps,
                       improvement_steps, created_at
                FROM resume_analyses WHERE student_id = :sid
                ORDER BY created_at DESC
            """),
            {"sid": user.id}
        ).fetchall()

    by_resume = {}
    for analysis in analyses:
        by_resume.setdefault(analysis.resume_id, []).append(row_to_dict(analysis))

    result = []
    for resume in resumes:
        items = by_resume.get(resume.id, [])
        result.append({
            **row_to_dict(resume),
            "analyses": items,
            "latest_score": items[0]["ats_score"] if items else None,
            "total_analyses": len(items),
        })

    return {"success": True, "resumes": result, "total": len(result)}


@router.get("/compare")
async def compare_resume(
    resume_id: int = Query(None, alias="resumeId"),
    user: AuthUser = Depends(get_current_student),
):
    if not resume_id:
        raise HTTPException(status_code=400, detail="Missing required query parameter: resumeId")

    with get_db_session() as db:
        resume = db.execute(
            text("""
                SELECT id, file_name, file_url, created_at
                FROM resumes WHERE id = :id AND student_id = :sid
            """),
            {"id": resume_id, "sid": user.id}
        ).fetchone()
        if not resume:
            raise HTTPException(status_code=404, detail="Resume not found")

        analyses = db.execute(
            text("""
                SELECT id, company_name, company_id, target_role, ats_score, section_scores,
                       rejection_reasons, skill_gaps, improvement_steps, created_at
                FROM resume_analyses
                WHERE resume_id = :id AND student_id = :sid
                ORDER BY ats_score DESC
            """),
            {"id": resume_id, "sid": user.id}
        ).fetchall()

    comparisons = [row_to_dict(a) for a in analyses]
    return {
        "success": True,
        "resume": row_to_dict(resume),
        "comparisons": comparisons,
        "total": len(comparisons),
    }


@router.get("/companies")
async def resume_companies(user: AuthUser = Depends(get_current_student)):
    seed_company_requirements()

    query = "SELECT id, company_name, role FROM placements"
    params = {}
    if user.college_id:
        query += " WHERE college_id = :cid"
        params["cid"] = user.college_id
    query += " ORDER BY company_name"

    with get_db_session() as db:
        placements = db.execute(text(query), params).fetchall()

    on_campus = [
        {"id": p["id"], "companyName": p["companyName"], "roleTitle": p["roleTitle"], "source": "on-campus-static"}
        for p in ON_CAMPUS_PROGRAMS
    ]
    on_campus += [
        {"id": f"placement_{p.id}", "companyName": p.company_name, "roleTitle": p.role or "SDE", "source": "on-campus"}
        for p in placements
    ]

    return {
        "success": True,
        "data": {
            "offCampus": [
                {
                    "id": c["id"],
                    "name": c["name"],
                    "roleType": c.get("roleType") or "SDE",
                    "logo": c.get("logo"),
                    "source": "off-campus",
                }
                for c in OFF_CAMPUS_COMPANIES
            ],
            "onCampus": on_campus,
            "popular": POPULAR_COMPANIES,
        },
    }
