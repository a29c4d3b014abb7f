"""
Authentication Utility - JWT session cookie and password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- Session cookie helpers
- FastAPI dependencies for protected routes
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import text

from studentpath.core.config import get_settings
from studentpath.db.postgres import get_db_session
from studentpath.schemas.schemas import AuthUser, UserRole

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# Bearer header is accepted as a fallback to the session cookie
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in the DB
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token. `data` carries {"id", "role"}."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.session_max_age,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name, path="/")


def _load_user(user_id: int, role: str) -> Optional[dict]:
    """Resolve a token subject to its account row, or None."""
    with get_db_session() as db:
        if role == UserRole.college.value:
            row = db.execute(
                text("""
                    SELECT id, college_name AS name, email, logo_url, is_active
                    FROM colleges WHERE id = :id
                """),
                {"id": user_id}
            ).fetchone()
            if row:
                return {
                    "id": row.id, "role": role, "email": row.email, "name": row.name,
                    "college_id": row.id, "logo_url": row.logo_url, "is_active": row.is_active,
                }
        elif role == UserRole.student.value:
            row = db.execute(
                text("""
                    SELECT student_id, first_name, last_name, email, college_id, is_active
                    FROM students WHERE student_id = :id
                """),
                {"id": user_id}
            ).fetchone()
            if row:
                return {
                    "id": row.student_id, "role": role, "email": row.email,
                    "name": f"{row.first_name} {row.last_name}",
                    "college_id": row.college_id, "is_active": row.is_active,
                }
        elif role == UserRole.professional.value:
            row = db.execute(
                text("""
                    SELECT id, first_name, last_name, email, is_active
                    FROM professionals WHERE id = :id
                """),
                {"id": user_id}
            ).fetchone()
            if row:
                return {
                    "id": row.id, "role": role, "email": row.email,
                    "name": f"{row.first_name} {row.last_name}",
                    "is_active": row.is_active,
                }
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthUser:
    """
    FastAPI dependency - Get current authenticated user.

    Reads the session cookie first, then an Authorization: Bearer header.

    Usage:
        @router.get("/protected")
        async def route(user: AuthUser = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = request.cookies.get(settings.session_cookie_name)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_token(token)
    if not payload:
        raise credentials_exception

    user_id = payload.get("id")
    role = payload.get("role")
    if not user_id or role not in {r.value for r in UserRole}:
        raise credentials_exception

    user = _load_user(int(user_id), role)
    if not user:
        raise credentials_exception

    if not user.pop("is_active"):
        raise HTTPException(status_code=403, detail="Account deactivated")

    return AuthUser(**user)


async def get_current_student(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency - Require student role."""
    if user.role != UserRole.student:
        raise HTTPException(status_code=403, detail="Students only")
    return user


async def get_current_college(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency - Require college (admin) role."""
    if user.role != UserRole.college:
        raise HTTPException(status_code=403, detail="Unauthorized. College access required.")
    return user


async def get_current_professional(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency - Require professional role."""
    if user.role != UserRole.professional:
        raise HTTPException(status_code=403, detail="Unauthorized. Professional access required.")
    return user


async def get_current_chat_user(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency - Chat is available to students and professionals."""
    if user.role == UserRole.college:
        raise HTTPException(status_code=403, detail="Chat is available to students and professionals only")
    return user
