# =============================================================================
# tests/test_chat.py - Chat assistant helpers and routes
# =============================================================================

from unittest.mock import patch

import pytest

from studentpath.schemas.schemas import UserRole
from studentpath.services import chat_service


class TestConversationTitle:

    def test_short_message_kept(self):
        assert chat_service.generate_conversation_title("  How do I learn DSA?  ") == "How do I learn DSA?"

    def test_long_message_truncated(self):
        title = chat_service.generate_conversation_title("x" * 80)
        assert title == "x" * 50 + "..."

    def test_empty_message(self):
        assert chat_service.generate_conversation_title("") == "New Conversation"


class TestEducationalFilter:

    @pytest.mark.parametrize("message", [
        "How do I prepare for a software engineering interview?",
        "Explain hardware interrupts",
        "What is a voter model in statistics?",
    ])
    def test_study_questions_allowed(self, message):
        assert chat_service.is_educational_query(message) is True

    @pytest.mark.parametrize("message", [
        "Who will win the election?",
        "Should I buy stocks now?",
        "Tell me about the WAR",
    ])
    def test_off_topic_blocked(self, message):
        assert chat_service.is_educational_query(message) is False


class TestStudentContext:

    def test_profile_block(self):
        context = chat_service.build_student_context({
            "first_name": "Asha",
            "last_name": "Rao",
            "college_name": "NIT",
            "program": "B.Tech CSE",
            "academic_interests": ["AI", "Databases"],
            "technical_skills": {"Python": 4},
            "primary_goal": "Placement",
        })

        assert "- Name: Asha Rao" in context
        assert "- Current Year: Not specified" in context
        assert "- Academic Interests: AI, Databases" in context
        assert "- Technical Skills: Python (4/5)" in context
        assert "- Primary Career Goal: Placement" in context
        assert "Secondary Goal" not in context


# =============================================================================
# Routes
# =============================================================================

class TestChatRoute:

    def test_empty_message(self, client, login_as):
        login_as(UserRole.student)
        response = client.post("/api/chat", json={"message": "   "})
        assert response.status_code == 400

    def test_off_topic_never_reaches_llm(self, client, login_as):
        login_as(UserRole.student)

        with patch.object(chat_service, "generate_reply") as mock_reply:
            response = client.post("/api/chat", json={"message": "Who should I vote for?", "conversationId": 3})

        body = response.json()
        assert body["filtered"] is True
        assert body["conversationId"] == 3
        assert body["message"] == chat_service.REDIRECT_MESSAGE
        mock_reply.assert_not_called()

    def test_new_conversation_created(self, client, login_as):
        login_as(UserRole.student, user_id=4)

        with patch.object(chat_service, "get_student_profile", return_value={"first_name": "Asha"}), \
             patch.object(chat_service, "create_conversation", return_value=11) as mock_create, \
             patch.object(chat_service, "add_message") as mock_add, \
             patch.object(chat_service, "generate_reply", return_value=("Start with arrays.", 42)):
            response = client.post("/api/chat", json={"message": "How do I start DSA?"})

        assert response.status_code == 200
        assert response.json() == {"message": "Start with arrays.", "conversationId": 11, "tokensUsed": 42}
        mock_create.assert_called_once_with(4, "student", "How do I start DSA?")
        assert mock_add.call_count == 2

    def test_foreign_conversation_is_404(self, client, login_as):
        login_as(UserRole.student)

        with patch.object(chat_service, "get_student_profile", return_value={"first_name": "Asha"}), \
             patch.object(chat_service, "get_conversation", return_value=None):
            response = client.post("/api/chat", json={"message": "Explain recursion", "conversationId": 99})

        assert response.status_code == 404

    def test_professional_uses_own_profile_route(self, client, login_as):
        login_as(UserRole.professional, user_id=2)

        with patch.object(chat_service, "get_professional_profile", return_value=None):
            response = client.post("/api/professionals/chat", json={"message": "Career switch?"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Professional profile not found"
