"""
PostgreSQL schema bootstrap.

Statements run in order and are idempotent (IF NOT EXISTS), so init_schema()
is safe on every startup and behind the /career-tracks/init-db endpoint.
"""
import logging

from sqlalchemy import text

from studentpath.db.postgres import get_db_session

logger = logging.getLogger(__name__)


SCHEMA_STATEMENTS = [
    # ==================== ACCOUNTS ====================
    """
    CREATE TABLE IF NOT EXISTS colleges (
        id SERIAL PRIMARY KEY,
        college_name VARCHAR(255) NOT NULL,
        email VARCHAR(255) NOT NULL UNIQUE,
        phone VARCHAR(50),
        country VARCHAR(100) NOT NULL,
        state VARCHAR(100),
        city VARCHAR(100) NOT NULL,
        address TEXT,
        website VARCHAR(255),
        established_year INTEGER,
        college_type VARCHAR(100),
        accreditation VARCHAR(255),
        password_hash VARCHAR(255) NOT NULL,
        college_token VARCHAR(100) UNIQUE,
        contact_person VARCHAR(255),
        contact_person_email VARCHAR(255),
        contact_person_phone VARCHAR(50),
        total_students INTEGER,
        programs JSONB DEFAULT '[]'::jsonb,
        logo_url TEXT,
        is_active BOOLEAN DEFAULT TRUE,
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS college_tokens (
        id SERIAL PRIMARY KEY,
        college_id INTEGER NOT NULL REFERENCES colleges(id) ON DELETE CASCADE,
        token VARCHAR(100) NOT NULL UNIQUE,
        usage_count INTEGER DEFAULT 0,
        max_usage INTEGER DEFAULT 1000,
        is_active BOOLEAN DEFAULT TRUE,
        expires_at TIMESTAMP,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS students (
        student_id SERIAL PRIMARY KEY,
        first_name VARCHAR(100) NOT NULL,
        last_name VARCHAR(100) NOT NULL,
        email VARCHAR(255) NOT NULL UNIQUE,
        phone VARCHAR(50),
        password_hash VARCHAR(255) NOT NULL,
        date_of_birth DATE,
        gender VARCHAR(20),
        country VARCHAR(100),
        college_id INTEGER REFERENCES colleges(id) ON DELETE SET NULL,
        college_token VARCHAR(100),
        college VARCHAR(255),
        program VARCHAR(255),
        department VARCHAR(255),
        current_year INTEGER,
        current_semester INTEGER,
        enrollment_year INTEGER,
        current_gpa NUMERIC(4, 2),
        academic_interests JSONB DEFAULT '[]'::jsonb,
        career_quiz_answers JSONB DEFAULT '{}'::jsonb,
        technical_skills JSONB DEFAULT '{}'::jsonb,
        soft_skills JSONB DEFAULT '{}'::jsonb,
        language_skills JSONB DEFAULT '{}'::jsonb,
        industry_focus JSONB DEFAULT '[]'::jsonb,
        primary_goal VARCHAR(255),
        secondary_goal VARCHAR(255),
        timeline VARCHAR(100),
        location_preference VARCHAR(255),
        intensity_level VARCHAR(50) DEFAULT 'moderate',
        profile_picture TEXT,
        is_active BOOLEAN DEFAULT TRUE,
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS professionals (
        id SERIAL PRIMARY KEY,
        first_name VARCHAR(100) NOT NULL,
        last_name VARCHAR(100) NOT NULL,
        email VARCHAR(255) NOT NULL UNIQUE,
        phone VARCHAR(50),
        company VARCHAR(255),
        designation VARCHAR(255),
        industry VARCHAR(255),
        experience VARCHAR(100),
        current_salary VARCHAR(100),
        expected_salary VARCHAR(100),
        linkedin VARCHAR(255),
        github VARCHAR(255),
        portfolio VARCHAR(255),
        password_hash VARCHAR(255) NOT NULL,
        skills JSONB DEFAULT '[]'::jsonb,
        certifications TEXT,
        career_goals TEXT,
        preferred_learning_style VARCHAR(100),
        profile_picture TEXT,
        is_active BOOLEAN DEFAULT TRUE,
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS password_reset_tokens (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        user_type VARCHAR(20) NOT NULL,
        token_hash VARCHAR(64) NOT NULL,
        expires_at TIMESTAMP NOT NULL,
        used BOOLEAN DEFAULT FALSE,
        used_at TIMESTAMP,
        created_at TIMESTAMP DEFAULT NOW(),
        UNIQUE (user_id, user_type)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_settings (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL UNIQUE REFERENCES students(student_id) ON DELETE CASCADE,
        email_notifications BOOLEAN DEFAULT TRUE,
        push_notifications BOOLEAN DEFAULT TRUE,
        assignment_reminders BOOLEAN DEFAULT TRUE,
        goal_updates BOOLEAN DEFAULT TRUE,
        weekly_reports BOOLEAN DEFAULT FALSE,
        course_updates BOOLEAN DEFAULT TRUE,
        profile_visibility BOOLEAN DEFAULT TRUE,
        progress_sharing BOOLEAN DEFAULT FALSE,
        analytics_opt_in BOOLEAN DEFAULT TRUE,
        theme VARCHAR(20) DEFAULT 'system',
        language VARCHAR(10) DEFAULT 'en',
        timezone VARCHAR(64) DEFAULT 'Asia/Kolkata',
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,

    # ==================== CHAT ====================
    """
    CREATE TABLE IF NOT EXISTS chat_conversations (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        user_type VARCHAR(20) NOT NULL,
        title VARCHAR(255) DEFAULT 'New Conversation',
        is_archived BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_chat_conversations_user
        ON chat_conversations (user_id, user_type)
    """,
    """
    CREATE TABLE IF NOT EXISTS chat_messages (
        id SERIAL PRIMARY KEY,
        conversation_id INTEGER NOT NULL REFERENCES chat_conversations(id) ON DELETE CASCADE,
        role VARCHAR(20) NOT NULL CHECK (role IN ('user', 'assistant', 'system')),
        content TEXT NOT NULL,
        tokens_used INTEGER DEFAULT 0,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chat_context (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL,
        user_type VARCHAR(20) NOT NULL,
        context_data JSONB DEFAULT '{}'::jsonb,
        updated_at TIMESTAMP DEFAULT NOW(),
        UNIQUE (user_id, user_type)
    )
    """,

    # ==================== COURSES & PLACEMENTS ====================
    """
    CREATE TABLE IF NOT EXISTS courses (
        course_id SERIAL PRIMARY KEY,
        college_id INTEGER NOT NULL REFERENCES colleges(id) ON DELETE CASCADE,
        course_name VARCHAR(255) NOT NULL,
        year VARCHAR(20) NOT NULL,
        syllabus_url TEXT,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS placements (
        id SERIAL PRIMARY KEY,
        college_id INTEGER REFERENCES colleges(id) ON DELETE CASCADE,
        company_name VARCHAR(255) NOT NULL,
        logo_url TEXT,
        role VARCHAR(255) DEFAULT '',
        package VARCHAR(100),
        description TEXT,
        eligibility TEXT,
        location VARCHAR(255) DEFAULT '',
        drive_date DATE,
        deadline DATE,
        apply_link TEXT,
        students_registered INTEGER DEFAULT 0,
        students_selected INTEGER DEFAULT 0,
        remarks TEXT DEFAULT '',
        file_url TEXT,
        academic_year VARCHAR(50),
        extracted_skills JSONB,
        extracted_rounds JSONB,
        difficulty_level VARCHAR(10),
        total_rounds INTEGER,
        ai_confidence_score NUMERIC(3, 2),
        last_ai_update TIMESTAMP,
        created_at TIMESTAMP DEFAULT NOW(),
        updated_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS placement_reviews (
        id SERIAL PRIMARY KEY,
        placement_id INTEGER NOT NULL REFERENCES placements(id) ON DELETE CASCADE,
        student_id INTEGER NOT NULL REFERENCES students(student_id) ON DELETE CASCADE,
        rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
        comment TEXT NOT NULL,
        is_anonymous BOOLEAN DEFAULT FALSE,
        interview_date DATE,
        offer_received BOOLEAN,
        salary_offered VARCHAR(100),
        interview_experience TEXT,
        questions_asked TEXT,
        preparation_tips TEXT,
        overall_experience VARCHAR(50),
        would_recommend BOOLEAN,
        rounds_cleared INTEGER,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,

    # ==================== RESUMES ====================
    """
    CREATE TABLE IF NOT EXISTS resumes (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL REFERENCES students(student_id) ON DELETE CASCADE,
        file_url TEXT NOT NULL,
        file_name VARCHAR(255) NOT NULL,
        file_type VARCHAR(10) NOT NULL CHECK (file_type IN ('pdf', 'docx')),
        parsed_text TEXT,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS resume_analyses (
        id SERIAL PRIMARY KEY,
        resume_id INTEGER NOT NULL REFERENCES resumes(id) ON DELETE CASCADE,
        student_id INTEGER NOT NULL,
        company_name VARCHAR(255) NOT NULL,
        company_id VARCHAR(255),
        target_role VARCHAR(255) NOT NULL,
        ats_score INTEGER NOT NULL,
        section_scores JSONB,
        feedback_json JSONB,
        rejection_reasons JSONB,
        skill_gaps JSONB,
        improvement_steps JSONB,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS company_resume_requirements (
        id SERIAL PRIMARY KEY,
        company_id VARCHAR(255) NOT NULL,
        company_name VARCHAR(255) NOT NULL,
        role VARCHAR(255) NOT NULL,
        required_skills JSONB NOT NULL,
        keywords JSONB NOT NULL,
        project_expectations TEXT,
        min_experience_months INTEGER DEFAULT 0,
        preferred_sections JSONB,
        created_at TIMESTAMP DEFAULT NOW(),
        UNIQUE (company_id, role)
    )
    """,

    # ==================== CAREER TRACKS ====================
    """
    CREATE TABLE IF NOT EXISTS career_plans (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL REFERENCES students(student_id) ON DELETE CASCADE,
        target_id VARCHAR(255) NOT NULL,
        target_name VARCHAR(255) NOT NULL,
        track_type VARCHAR(20) NOT NULL DEFAULT 'placement'
            CHECK (track_type IN ('placement', 'higher-studies')),
        total_xp INTEGER DEFAULT 0,
        current_streak INTEGER DEFAULT 0,
        last_completed_date DATE,
        progress NUMERIC(5, 2) DEFAULT 0.00,
        difficulty_level VARCHAR(10) DEFAULT 'medium',
        is_active BOOLEAN DEFAULT TRUE,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS career_tasks (
        id SERIAL PRIMARY KEY,
        plan_id INTEGER NOT NULL REFERENCES career_plans(id) ON DELETE CASCADE,
        week_number INTEGER NOT NULL,
        task_date DATE NOT NULL,
        skill_focus VARCHAR(255),
        morning_task TEXT,
        evening_task TEXT,
        difficulty VARCHAR(10) DEFAULT 'medium',
        xp INTEGER DEFAULT 40,
        is_completed BOOLEAN DEFAULT FALSE,
        completed_at TIMESTAMP
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_career_tasks_plan_date
        ON career_tasks (plan_id, task_date)
    """,
    """
    CREATE TABLE IF NOT EXISTS career_rewards (
        id SERIAL PRIMARY KEY,
        student_id INTEGER NOT NULL,
        plan_id INTEGER NOT NULL REFERENCES career_plans(id) ON DELETE CASCADE,
        badge_name VARCHAR(100) NOT NULL,
        badge_icon VARCHAR(20),
        xp_threshold INTEGER NOT NULL,
        unlocked_at TIMESTAMP DEFAULT NOW(),
        UNIQUE (student_id, plan_id, badge_name)
    )
    """,
]


def init_schema() -> int:
    """
    Create every table and index that does not exist yet.
    Returns the number of statements executed.
    """
    with get_db_session() as db:
        for statement in SCHEMA_STATEMENTS:
            db.execute(text(statement))
    logger.info(f"Schema initialised ({len(SCHEMA_STATEMENTS)} statements)")
    return len(SCHEMA_STATEMENTS)
