"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from studentpath.api.routes.admin_routes import router as admin_router
from studentpath.api.routes.auth_routes import router as auth_router
from studentpath.api.routes.career_routes import router as career_router
from studentpath.api.routes.chat_routes import professional_router as professional_chat_router
from studentpath.api.routes.chat_routes import router as chat_router
from studentpath.api.routes.course_routes import router as course_router
from studentpath.api.routes.placement_review_routes import router as placement_review_router
from studentpath.api.routes.professional_routes import router as professional_router
from studentpath.api.routes.resume_routes import router as resume_router
from studentpath.api.routes.settings_routes import router as settings_router
from studentpath.api.routes.student_routes import router as student_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(professional_router)
api_router.include_router(settings_router)
api_router.include_router(admin_router)
api_router.include_router(student_router)
api_router.include_router(course_router)
api_router.include_router(career_router)
api_router.include_router(placement_review_router)
api_router.include_router(resume_router)
api_router.include_router(chat_router)
api_router.include_router(professional_chat_router)
