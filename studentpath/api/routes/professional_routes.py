"""
Professional Routes

POST /professionals/register - Register a working professional
POST /professionals/login - Login, sets the session cookie
GET /professionals/profile - Own profile
PUT /professionals/profile - Update provided fields only
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import text

from studentpath.core.auth import (
    create_access_token, get_current_professional, hash_password, set_session_cookie, verify_password,
)
from studentpath.core.config import get_settings
from studentpath.core.rate_limit import rate_limit
from studentpath.db.postgres import get_db_session, row_to_dict
from studentpath.schemas.schemas import (
    AuthUser, LoginRequest, MessageResponse, ProfessionalRegisterRequest, ProfessionalUpdateRequest,
)

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/professionals", tags=["Professionals"])

PROFILE_COLUMNS = """
    id, first_name, last_name, email, phone, company, designation, industry, experience,
    current_salary, expected_salary, linkedin, github, portfolio, skills, certifications,
    career_goals, preferred_learning_style, profile_picture, is_active, created_at, updated_at
"""


@router.post("/register")
async def register(request: ProfessionalRegisterRequest):
    if not request.first_name or not request.last_name or not request.email or not request.password:
        raise HTTPException(status_code=400, detail="Missing required fields")

    with get_db_session() as db:
        existing = db.execute(
            text("SELECT id FROM professionals WHERE email = :email"),
            {"email": request.email}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail="Professional with this email already exists")

        row = db.execute(
            text("""
                INSERT INTO professionals (
                    first_name, last_name, email, phone, company, designation, industry,
                    experience, current_salary, expected_salary, linkedin, github, portfolio,
                    password_hash, skills, certifications, career_goals, preferred_learning_style
                ) VALUES (
                    :first_name, :last_name, :email, :phone, :company, :designation, :industry,
                    :experience, :current_salary, :expected_salary, :linkedin, :github, :portfolio,
                    :password_hash, CAST(:skills AS JSONB), :certifications, :career_goals,
                    :preferred_learning_style
                )
                RETURNING id
            """),
            {
                **request.model_dump(exclude={"password", "skills"}),
                "password_hash": hash_password(request.password),
                "skills": json.dumps(request.skills or []),
            }
        ).fetchone()

    logger.info(f"Professional {row.id} registered")
    return {
        "success": True,
        "message": "Professional registered successfully",
        "professionalId": row.id,
    }


@router.post(
    "/login",
    dependencies=[Depends(rate_limit(settings.login_rate_limit, message="Too many attempts"))],
)
async def login(request: LoginRequest, response: Response):
    if not request.email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    if not request.password:
        raise HTTPException(status_code=400, detail="Password is required")

    with get_db_session() as db:
        professional = db.execute(
            text("""
                SELECT id, password_hash, first_name, last_name, email, company, designation, is_active
                FROM professionals WHERE email = :email
            """),
            {"email": request.email}
        ).fetchone()

    if not professional:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not professional.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not verify_password(request.password, professional.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"id": professional.id, "role": "professional"})
    set_session_cookie(response, token)

    return {
        "success": True,
        "message": "Login successful",
        "professional": {
            "id": professional.id,
            "firstName": professional.first_name,
            "lastName": professional.last_name,
            "email": professional.email,
            "company": professional.company,
            "designation": professional.designation,
        },
    }


@router.get("/profile")
async def get_profile(user: AuthUser = Depends(get_current_professional)):
    with get_db_session() as db:
        row = db.execute(
            text(f"SELECT {PROFILE_COLUMNS} FROM professionals WHERE id = :id AND is_active = TRUE"),
            {"id": user.id}
        ).fetchone()

    if not row:
        raise HTTPException(status_code=404, detail="Professional not found")

    profile = row_to_dict(row)
    profile["skills"] = profile.get("skills") or []
    profile["stats"] = {"skillsCount": len(profile["skills"])}
    return {"success": True, "data": profile}


@router.put("/profile", response_model=MessageResponse)
async def update_profile(data: ProfessionalUpdateRequest, user: AuthUser = Depends(get_current_professional)):
    """Update professional profile. Only provided fields are updated."""
    fields = data.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updates = []
    params = {"id": user.id}
    for field, value in fields.items():
        if field == "skills":
            updates.append("skills = CAST(:skills AS JSONB)")
            params["skills"] = json.dumps(value or [])
        else:
            updates.append(f"{field} = :{field}")
            params[field] = value

    with get_db_session() as db:
        db.execute(
            text(f"UPDATE professionals SET {', '.join(updates)}, updated_at = NOW() WHERE id = :id"),
            params
        )

    return MessageResponse(message="Profile updated successfully")
