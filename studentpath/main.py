"""
StudentPath - Main Application

FastAPI backend with:
- PostgreSQL for structured data
- MongoDB for documents (resume text, AI drafts)
- OpenAI-compatible LLM for feedback, plans and extraction
- Cookie/JWT sessions for students, colleges and professionals

Run: uvicorn studentpath.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studentpath import __version__
from studentpath.api import api_router
from studentpath.core.config import get_settings
from studentpath.core.exceptions import StudentPathError, studentpath_exception_handler
from studentpath.db.mongodb import init_mongo_indexes, mongo_is_reachable
from studentpath.db.postgres import postgres_is_reachable
from studentpath.db.schema import init_schema

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="StudentPath",
    description="""
    Career platform for students, colleges and working professionals.

    ## Features
    - **Authentication**: cookie sessions, college tokens, password reset
    - **Colleges**: dashboard, settings, courses, placement spreadsheet import
    - **Career Tracks**: company reviews, AI plans, XP, streaks and badges
    - **Resume**: ATS scoring with AI feedback
    - **Chat**: learning assistant and professional career assistant

    ## Databases
    - PostgreSQL: Structured data
    - MongoDB: Raw resume text and AI drafts
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StudentPathError, studentpath_exception_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"},
    )


app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Create tables and MongoDB indexes; a failure is logged, the app still starts."""
    try:
        created = init_schema()
        logger.info(f"PostgreSQL schema ready ({created} statements)")
    except Exception as e:
        logger.error(f"PostgreSQL schema initialization failed: {e}")

    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.error(f"MongoDB index initialization failed: {e}")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "StudentPath", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if postgres_is_reachable() else "disconnected",
        "mongodb": "connected" if mongo_is_reachable() else "disconnected",
    }
