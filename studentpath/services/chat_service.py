"""
Chat Assistant Service

Conversation storage (PostgreSQL) and prompt building for the two
assistants:
- the student learning assistant, grounded in the student's academic profile
- the professional career assistant, grounded in the professional's profile

Both assistants share the chat_conversations / chat_messages / chat_context
tables, keyed by (user_id, user_type).
"""

import json
import logging
import re
from typing import Dict, List, Optional

from sqlalchemy import text

from studentpath.db.postgres import execute_raw_sql, get_db_session, row_to_dict
from studentpath.services.llm_client import get_llm_client

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 50

STUDENT_HISTORY_LIMIT = 20
PROFESSIONAL_HISTORY_LIMIT = 10

NO_RESPONSE_MESSAGE = "I apologize, but I couldn't generate a response. Please try again."

REDIRECT_MESSAGE = (
    "I'm your personalized learning assistant focused on your academic journey! "
    "I can help with your syllabus subjects, study planning, career guidance, and skill development. "
    "What would you like to explore?"
)

OFF_TOPIC_KEYWORDS = [
    "trump", "biden", "election", "president", "politician",
    "democrat", "republican", "political party", "vote",
    "war", "military conflict", "terrorism",
    "religion", "religious", "god", "allah", "jesus",
    "celebrity", "movie review", "sports match",
    "stock market", "crypto investment", "buy stocks",
]

# Whole words only, so "software" does not trip "war"
_OFF_TOPIC_PATTERN = re.compile(r"\b(?:" + "|".join(re.escape(k) for k in OFF_TOPIC_KEYWORDS) + r")\b")


# ============================================================
# CONVERSATIONS
# ============================================================

def create_conversation(user_id: int, user_type: str, title: str = None) -> int:
    with get_db_session() as db:
        row = db.execute(
            text("""
                INSERT INTO chat_conversations (user_id, user_type, title)
                VALUES (:user_id, :user_type, :title)
                RETURNING id
            """),
            {"user_id": user_id, "user_type": user_type, "title": title or DEFAULT_TITLE}
        ).fetchone()
    return row.id


def list_conversations(user_id: int, user_type: str, include_archived: bool = False) -> List[dict]:
    archived_clause = "" if include_archived else "AND is_archived = FALSE"
    return execute_raw_sql(f"""
        SELECT id, user_id, user_type, title, is_archived, created_at, updated_at
        FROM chat_conversations
        WHERE user_id = :user_id AND user_type = :user_type {archived_clause}
        ORDER BY updated_at DESC
    """, {"user_id": user_id, "user_type": user_type})


def get_conversation(conversation_id: int, user_id: int, user_type: str) -> Optional[dict]:
    """Return the conversation only if it belongs to the caller."""
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT id, user_id, user_type, title, is_archived, created_at, updated_at
                FROM chat_conversations
                WHERE id = :id AND user_id = :user_id AND user_type = :user_type
            """),
            {"id": conversation_id, "user_id": user_id, "user_type": user_type}
        ).fetchone()
    return row_to_dict(row)


def rename_conversation(conversation_id: int, title: str) -> None:
    with get_db_session() as db:
        db.execute(
            text("UPDATE chat_conversations SET title = :title WHERE id = :id"),
            {"title": title, "id": conversation_id}
        )


def archive_conversation(conversation_id: int, archive: bool = True) -> None:
    with get_db_session() as db:
        db.execute(
            text("UPDATE chat_conversations SET is_archived = :archive WHERE id = :id"),
            {"archive": archive, "id": conversation_id}
        )


def delete_conversation(conversation_id: int, user_id: int, user_type: str) -> bool:
    with get_db_session() as db:
        result = db.execute(
            text("""
                DELETE FROM chat_conversations
                WHERE id = :id AND user_id = :user_id AND user_type = :user_type
            """),
            {"id": conversation_id, "user_id": user_id, "user_type": user_type}
        )
        return result.rowcount > 0


def get_conversation_stats(user_id: int, user_type: str) -> dict:
    rows = execute_raw_sql("""
        SELECT
            COUNT(DISTINCT c.id) AS total_conversations,
            COUNT(m.id) AS total_messages,
            COALESCE(SUM(m.tokens_used), 0) AS total_tokens
        FROM chat_conversations c
        LEFT JOIN chat_messages m ON c.id = m.conversation_id
        WHERE c.user_id = :user_id AND c.user_type = :user_type
    """, {"user_id": user_id, "user_type": user_type})
    if not rows:
        return {"total_conversations": 0, "total_messages": 0, "total_tokens": 0}
    return {key: int(value or 0) for key, value in rows[0].items()}


def generate_conversation_title(first_message: str) -> str:
    title = (first_message or "").strip()
    if len(title) > TITLE_MAX_LENGTH:
        title = title[:TITLE_MAX_LENGTH] + "..."
    return title or DEFAULT_TITLE


# ============================================================
# MESSAGES
# ============================================================

def add_message(conversation_id: int, role: str, content: str, tokens_used: int = 0) -> int:
    """Append a message and bump the conversation's updated_at."""
    with get_db_session() as db:
        row = db.execute(
            text("""
                INSERT INTO chat_messages (conversation_id, role, content, tokens_used)
                VALUES (:conversation_id, :role, :content, :tokens_used)
                RETURNING id
            """),
            {
                "conversation_id": conversation_id,
                "role": role,
                "content": content,
                "tokens_used": tokens_used,
            }
        ).fetchone()
        db.execute(
            text("UPDATE chat_conversations SET updated_at = NOW() WHERE id = :id"),
            {"id": conversation_id}
        )
    return row.id


def get_messages(conversation_id: int) -> List[dict]:
    return execute_raw_sql("""
        SELECT id, conversation_id, role, content, tokens_used, created_at
        FROM chat_messages
        WHERE conversation_id = :id
        ORDER BY created_at ASC, id ASC
    """, {"id": conversation_id})


def get_recent_messages(conversation_id: int, limit: int = 10) -> List[dict]:
    """Last `limit` messages, oldest first."""
    rows = execute_raw_sql("""
        SELECT id, role, content, created_at
        FROM chat_messages
        WHERE conversation_id = :id
        ORDER BY created_at DESC, id DESC
        LIMIT :limit
    """, {"id": conversation_id, "limit": limit})
    return list(reversed(rows))


# ============================================================
# CONTEXT
# ============================================================

def save_context(user_id: int, user_type: str, context_data: dict) -> None:
    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO chat_context (user_id, user_type, context_data)
                VALUES (:user_id, :user_type, CAST(:data AS JSONB))
                ON CONFLICT (user_id, user_type)
                DO UPDATE SET context_data = EXCLUDED.context_data, updated_at = NOW()
            """),
            {"user_id": user_id, "user_type": user_type, "data": json.dumps(context_data)}
        )


def get_context(user_id: int, user_type: str) -> Optional[dict]:
    rows = execute_raw_sql(
        "SELECT context_data FROM chat_context WHERE user_id = :user_id AND user_type = :user_type",
        {"user_id": user_id, "user_type": user_type}
    )
    return rows[0]["context_data"] if rows else None


# ============================================================
# STUDENT ASSISTANT
# ============================================================

STUDENT_SYSTEM_PROMPT = """You are an AI Learning Assistant for StudentPath, a personalized learning platform for students. Your role is to:

1. **Provide Personalized Study Guidance**: Analyze student progress, identify weak areas, and create customized study schedules with specific timelines.

2. **Career Path Recommendations**: Guide students based on their skills, interests, academic subjects, and goals. Connect their current academic subjects to potential career paths.

3. **Timeline Creation**: When asked about learning roadmaps, provide detailed plans that:
   - Align with their academic semester structure
   - Identify gaps between their coursework and career interests
   - Recommend supplementary learning for skills not covered in class

4. **Personalized Advice**: Use the student's academic profile (GPA, interests, skills, goals) to provide tailored recommendations.

5. **Resource Links**: Include relevant links to free learning resources when appropriate.

**RESPONSE GUIDELINES**:
- Be conversational, supportive, and encouraging
- ALWAYS reference the student's profile data when relevant
- Connect theoretical subjects to practical career applications
- Provide actionable next steps
- Use structured formatting with bullet points and sections for longer responses

**CRITICAL RESTRICTIONS**:
⚠️ **YOU MUST ONLY RESPOND TO EDUCATIONAL AND LEARNING-RELATED QUERIES**

**REFUSE to answer questions about**:
- Politics, political figures, elections, or political opinions
- Current events, news, or controversial social topics
- Personal opinions on non-educational matters
- Entertainment, sports, or celebrity gossip
- Religion or religious debates
- Dating, relationships (unless career/professional networking)
- Medical advice or diagnoses
- Legal advice
- Financial investment advice (career salary info is OK)

**If asked an off-topic question, respond with**:
"{redirect}"
""".format(redirect=REDIRECT_MESSAGE)


def is_educational_query(message: str) -> bool:
    """False when the message mentions an off-topic keyword."""
    return _OFF_TOPIC_PATTERN.search(message.lower()) is None


def get_student_profile(student_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT s.first_name, s.last_name, s.email, s.program, s.current_year,
                       s.current_semester, s.current_gpa, s.academic_interests,
                       s.technical_skills, s.primary_goal, s.secondary_goal, s.timeline,
                       c.college_name
                FROM students s
                LEFT JOIN colleges c ON s.college_id = c.id
                WHERE s.student_id = :id
            """),
            {"id": student_id}
        ).fetchone()
    return row_to_dict(row)


def build_student_context(profile: dict) -> str:
    """Profile block appended to the student system prompt."""
    def value(key):
        return profile.get(key) or "Not specified"

    name = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    lines = [
        "",
        "",
        "**STUDENT PROFILE DATA**:",
        f"- Name: {name}",
        f"- College: {value('college_name')}",
        f"- Program: {value('program')}",
        f"- Current Year: {value('current_year')}",
        f"- Current Semester: {value('current_semester')}",
        f"- GPA: {value('current_gpa')}",
    ]

    interests = profile.get("academic_interests") or []
    if interests:
        lines.append(f"- Academic Interests: {', '.join(interests)}")

    skills = profile.get("technical_skills") or {}
    if skills:
        lines.append("- Technical Skills: " + ", ".join(f"{skill} ({level}/5)" for skill, level in skills.items()))

    if profile.get("primary_goal"):
        lines.append(f"- Primary Career Goal: {profile['primary_goal']}")
    if profile.get("secondary_goal"):
        lines.append(f"- Secondary Goal: {profile['secondary_goal']}")
    if profile.get("timeline"):
        lines.append(f"- Timeline: {profile['timeline']}")

    lines.append("")
    lines.append(
        "**IMPORTANT**: Use the above student profile to provide personalized, specific recommendations. "
        "Reference actual subjects, semesters, and career connections where possible."
    )
    return "\n".join(lines) + "\n"


# ============================================================
# PROFESSIONAL ASSISTANT
# ============================================================

PROFESSIONAL_FIELDS = [
    ("phone", "Phone"),
    ("designation", "Current Role"),
    ("company", "Company"),
    ("industry", "Industry"),
    ("experience", "Experience"),
    ("current_salary", "Current Salary"),
    ("expected_salary", "Expected Salary"),
    ("linkedin", "LinkedIn"),
    ("github", "GitHub"),
    ("portfolio", "Portfolio"),
]


def get_professional_profile(professional_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT id, first_name, last_name, email, phone, company, designation,
                       industry, experience, current_salary, expected_salary,
                       linkedin, github, portfolio, skills, certifications,
                       career_goals, preferred_learning_style
                FROM professionals
                WHERE id = :id AND is_active = TRUE
            """),
            {"id": professional_id}
        ).fetchone()
    return row_to_dict(row)


def build_professional_context(profile: dict) -> str:
    parts = [
        "## User Profile",
        f"**Name**: {profile.get('first_name')} {profile.get('last_name')}",
        f"**Email**: {profile.get('email')}",
    ]
    for key, label in PROFESSIONAL_FIELDS:
        if profile.get(key):
            parts.append(f"**{label}**: {profile[key]}")

    skills = profile.get("skills") or []
    if skills:
        parts.append(f"**Skills**: {', '.join(skills)}")

    if profile.get("certifications"):
        parts.append(f"**Certifications**: {profile['certifications']}")
    if profile.get("career_goals"):
        parts.append(f"**Career Goals**: {profile['career_goals']}")
    if profile.get("preferred_learning_style"):
        parts.append(f"**Learning Style**: {profile['preferred_learning_style']}")

    return "\n".join(parts)


def build_professional_system_prompt(profile: dict) -> str:
    skills = profile.get("skills") or []
    return f"""You are an AI career assistant for professionals. You have access to the user's complete professional profile from our database and should provide personalized, actionable advice.

{build_professional_context(profile)}

Your capabilities:
1. **Contextual Analysis**: Use the database profile above for every answer.
2. **Link Handling**: You cannot browse external URLs. If the user shares a link (like a portfolio), acknowledge it and advise based on their known profile.
3. **Company Preparation**: Interview prep and culture analysis.
4. **Educational Guidance**: Recommend certifications and learning paths.
5. **Career Strategy**: Salary, transitions, and resume optimization.

Guidelines:
- **FORMATTING**: Use clean Markdown. Use '##' for main headers, '###' for section titles and '####' for sub-points. Use bullet points or numbered lists for steps.
- **PERSONALIZATION**: Always reference their current role at {profile.get('company') or 'their company'} and {profile.get('experience') or 'experience level'}.
- Provide specific, actionable recommendations.
- Connect advice to their career goals: {profile.get('career_goals') or 'not specified'}.
- Suggest relevant certifications based on: {', '.join(skills) or 'none specified'}.

Be professional and encouraging."""


# ============================================================
# REPLY
# ============================================================

def history_for_llm(messages: List[dict]) -> List[Dict[str, str]]:
    return [{"role": m["role"], "content": m["content"]} for m in messages]


def generate_reply(system_prompt: str, conversation_id: int, history_limit: int) -> tuple:
    """
    Ask the LLM for the next assistant turn of a conversation.
    Returns (content, tokens_used).
    """
    history = history_for_llm(get_recent_messages(conversation_id, history_limit))
    content, tokens = get_llm_client().chat(
        [{"role": "system", "content": system_prompt}] + history,
        max_tokens=1500,
        temperature=0.7,
    )
    logger.info(f"Chat reply for conversation {conversation_id} used {tokens} tokens")
    return content, tokens
