"""
Conversation endpoints:
- POST /api/conversations: create for an existing user
- GET /api/conversations?user_id=: list, most recently updated first
- PATCH /api/conversations/{id}: change title and/or model
- GET /api/conversations/{id}/messages: full ordered history
- POST /api/conversations/{id}/messages: send a message, returns the assistant reply
"""
from fastapi import APIRouter, Depends, status

from assistant.dependencies import get_capability_gateway, get_store
from assistant.repositories.entity_store import EntityStore
from assistant.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationUpdate,
    MessageResponse,
    SendMessageRequest,
)
from assistant.services.capability_gateway import CapabilityGateway
from assistant.services.conversation_service import ConversationService

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
def create_conversation(body: ConversationCreate, store: EntityStore = Depends(get_store)):
    return ConversationService(store).create_conversation(body.user_id, body.title, body.model_name)


@router.get("", response_model=list[ConversationResponse])
def list_conversations(user_id: str, store: EntityStore = Depends(get_store)):
    return ConversationService(store).list_conversations(user_id)


@router.patch("/{conversation_id}", response_model=ConversationResponse)
def update_conversation(
    conversation_id: str,
    body: ConversationUpdate,
    store: EntityStore = Depends(get_store),
):
    return ConversationService(store).update_conversation(
        conversation_id, title=body.title, model_name=body.model_name
    )


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
def get_messages(conversation_id: str, store: EntityStore = Depends(get_store)):
    return ConversationService(store).get_messages(conversation_id)


@router.post("/{conversation_id}/messages", response_model=MessageResponse)
def send_message(
    conversation_id: str,
    body: SendMessageRequest,
    store: EntityStore = Depends(get_store),
    gateway: CapabilityGateway = Depends(get_capability_gateway),
):
    """User turn is stored before the AI call; on 502 it stays stored and the client may resend."""
    return ConversationService(store, gateway).send_message(conversation_id, body.content, body.model_name)
