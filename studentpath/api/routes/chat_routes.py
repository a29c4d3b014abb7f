"""
Chat Assistant Routes

POST /chat - Student learning assistant (students and professionals may call it)
POST /professionals/chat - Professional career assistant

Conversation management, mounted under both /chat and /professionals/chat:
GET /conversations - List own conversations + stats
POST /conversations - Create empty conversation
GET /conversations/{id} - Conversation with messages
PATCH /conversations/{id} - Rename / archive
DELETE /conversations/{id} - Delete
GET /context - Saved assistant context
PUT /context - Replace saved assistant context
"""

import logging

import openai
from fastapi import APIRouter, Depends, HTTPException, Query

from studentpath.core.auth import get_current_chat_user, get_current_professional
from studentpath.core.exceptions import ExternalServiceError, RateLimitExceededError
from studentpath.schemas.schemas import (
    AuthUser, ChatContextUpdate, ChatRequest, ConversationCreate, ConversationUpdate,
    MessageResponse, UserRole,
)
from studentpath.services import chat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])
professional_router = APIRouter(prefix="/professionals/chat", tags=["Chat"])
conversation_router = APIRouter()


def _owned_conversation_id(conversation_id, user: AuthUser):
    """Check the caller owns `conversation_id`. None passes through (a new conversation is started)."""
    if conversation_id:
        if not chat_service.get_conversation(conversation_id, user.id, user.role.value):
            raise HTTPException(status_code=404, detail="Conversation not found or access denied")
        return conversation_id
    return None


def _reply(system_prompt: str, conversation_id: int, history_limit: int) -> tuple:
    try:
        return chat_service.generate_reply(system_prompt, conversation_id, history_limit)
    except openai.RateLimitError:
        raise RateLimitExceededError()
    except openai.OpenAIError as e:
        logger.error(f"Chat completion failed: {e}")
        raise ExternalServiceError("llm", "Failed to generate response", status_code=500)


# ============================================================
# STUDENT ASSISTANT
# ============================================================

@router.post("")
async def chat(request: ChatRequest, user: AuthUser = Depends(get_current_chat_user)):
    """
    Send a message to the learning assistant.

    Off-topic questions get a fixed redirect reply and never reach the LLM.
    """
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    if not chat_service.is_educational_query(request.message):
        return {
            "message": chat_service.REDIRECT_MESSAGE,
            "conversationId": request.conversation_id,
            "filtered": True,
        }

    system_prompt = chat_service.STUDENT_SYSTEM_PROMPT
    if user.role == UserRole.student:
        profile = chat_service.get_student_profile(user.id)
        if not profile:
            raise HTTPException(status_code=500, detail="Could not load student profile")
        system_prompt += chat_service.build_student_context(profile)

    conversation_id = _owned_conversation_id(request.conversation_id, user)
    if not conversation_id:
        conversation_id = chat_service.create_conversation(
            user.id, user.role.value, chat_service.generate_conversation_title(request.message)
        )

    chat_service.add_message(conversation_id, "user", request.message)

    content, tokens_used = _reply(system_prompt, conversation_id, chat_service.STUDENT_HISTORY_LIMIT)
    chat_service.add_message(conversation_id, "assistant", content, tokens_used)

    return {
        "message": content,
        "conversationId": conversation_id,
        "tokensUsed": tokens_used,
    }


# ============================================================
# PROFESSIONAL ASSISTANT
# ============================================================

@professional_router.post("")
async def professional_chat(request: ChatRequest, user: AuthUser = Depends(get_current_professional)):
    """Career assistant grounded in the professional's stored profile."""
    if not request.message:
        raise HTTPException(status_code=400, detail="Missing required field: message")

    profile = chat_service.get_professional_profile(user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Professional profile not found")

    conversation_id = _owned_conversation_id(request.conversation_id, user)
    if not conversation_id:
        conversation_id = chat_service.create_conversation(
            user.id, user.role.value, chat_service.generate_conversation_title(request.message)
        )

    chat_service.add_message(conversation_id, "user", request.message)

    content, tokens_used = _reply(
        chat_service.build_professional_system_prompt(profile),
        conversation_id,
        chat_service.PROFESSIONAL_HISTORY_LIMIT,
    )
    content = content or chat_service.NO_RESPONSE_MESSAGE
    chat_service.add_message(conversation_id, "assistant", content, tokens_used)

    return {
        "success": True,
        "message": content,
        "conversationId": conversation_id,
        "context": {
            "hasProfileData": True,
            "professional": f"{profile['first_name']} {profile['last_name']}",
            "company": profile.get("company"),
            "role": profile.get("designation"),
        },
    }


# ============================================================
# CONVERSATIONS
# ============================================================

@conversation_router.get("/conversations")
async def list_conversations(
    include_archived: bool = Query(False, alias="includeArchived"),
    user: AuthUser = Depends(get_current_chat_user),
):
    return {
        "conversations": chat_service.list_conversations(user.id, user.role.value, include_archived),
        "stats": chat_service.get_conversation_stats(user.id, user.role.value),
    }


@conversation_router.post("/conversations")
async def create_conversation(request: ConversationCreate, user: AuthUser = Depends(get_current_chat_user)):
    conversation_id = chat_service.create_conversation(user.id, user.role.value, request.title)
    return {"conversationId": conversation_id, "message": "Conversation created successfully"}


@conversation_router.get("/conversations/{conversation_id}")
async def get_conversation(conversation_id: int, user: AuthUser = Depends(get_current_chat_user)):
    conversation = chat_service.get_conversation(conversation_id, user.id, user.role.value)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    return {"conversation": conversation, "messages": chat_service.get_messages(conversation_id)}


@conversation_router.patch("/conversations/{conversation_id}", response_model=MessageResponse)
async def update_conversation(
    conversation_id: int,
    request: ConversationUpdate,
    user: AuthUser = Depends(get_current_chat_user),
):
    if not chat_service.get_conversation(conversation_id, user.id, user.role.value):
        raise HTTPException(status_code=404, detail="Conversation not found or access denied")

    if request.title is not None:
        chat_service.rename_conversation(conversation_id, request.title)
    if request.is_archived is not None:
        chat_service.archive_conversation(conversation_id, request.is_archived)

    return MessageResponse(message="Conversation updated successfully")


@conversation_router.delete("/conversations/{conversation_id}", response_model=MessageResponse)
async def delete_conversation(conversation_id: int, user: AuthUser = Depends(get_current_chat_user)):
    if not chat_service.delete_conversation(conversation_id, user.id, user.role.value):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return MessageResponse(message="Conversation deleted successfully")


@conversation_router.get("/context")
async def get_context(user: AuthUser = Depends(get_current_chat_user)):
    return {"context": chat_service.get_context(user.id, user.role.value)}


@conversation_router.put("/context", response_model=MessageResponse)
async def save_context(request: ChatContextUpdate, user: AuthUser = Depends(get_current_chat_user)):
    chat_service.save_context(user.id, user.role.value, request.context_data)
    return MessageResponse(message="Context saved")


router.include_router(conversation_router)
professional_router.include_router(conversation_router)
