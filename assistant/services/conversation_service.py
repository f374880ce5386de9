"""
Chat orchestration: Conversation + Message persistence around one completion call.
- The user turn is committed before the capability call, so input is never lost.
- If the capability call fails the error propagates and the user turn stays; a conversation
  may therefore end with a user turn that has no reply. Resending is the retry.
- Messages are append-only; created_at is strictly increasing inside a conversation.
"""
import logging
from datetime import timedelta
from typing import Any

from assistant.database import utcnow
from assistant.errors import ValidationError
from assistant.models.conversation import Conversation
from assistant.models.enums import MessageRole
from assistant.models.message import Message
from assistant.models.user import User
from assistant.repositories.entity_store import EntityStore
from assistant.services.capability_gateway import CapabilityGateway
from assistant.services.context_assembler import assemble_context, load_ordered_messages

logger = logging.getLogger(__name__)

TIMESTAMP_STEP = timedelta(microseconds=1)


class ConversationService:
    def __init__(self, store: EntityStore, gateway: CapabilityGateway | None = None):
        self._store = store
        self._gateway = gateway

    # ---- Conversations ----

    def create_conversation(self, user_id: str, title: str, model_name: str) -> Conversation:
        self._store.get(User, user_id)
        if not title.strip():
            raise ValidationError("Conversation title must not be empty")
        if not model_name.strip():
            raise ValidationError("model_name must not be empty")
        return self._store.insert(Conversation(user_id=user_id, title=title, model_name=model_name))

    def list_conversations(self, user_id: str) -> list[Conversation]:
        """User's conversations, most recently updated first."""
        return self._store.list_by_owner(Conversation, "user_id", user_id, order_by="updated_at", direction="desc")

    def update_conversation(
        self,
        conversation_id: str,
        *,
        title: str | None = None,
        model_name: str | None = None,
    ) -> Conversation:
        """Only provided fields change; updated_at is always bumped."""
        self._store.get(Conversation, conversation_id)
        patch: dict[str, Any] = {"updated_at": utcnow()}
        if title is not None:
            patch["title"] = title
        if model_name is not None:
            patch["model_name"] = model_name
        return self._store.update(Conversation, conversation_id, **patch)

    # ---- Messages ----

    def get_messages(self, conversation_id: str) -> list[Message]:
        self._store.get(Conversation, conversation_id)
        return load_ordered_messages(self._store, conversation_id)

    def _next_created_at(self, conversation_id: str):
        """now, or 1µs after the newest message when the clock has not moved past it."""
        now = utcnow()
        last = self._store.newest_by_owner(Message, "conversation_id", conversation_id)
        if last is not None and now <= last.created_at:
            return last.created_at + TIMESTAMP_STEP
        return now

    def append_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        metadata: dict | None = None,
    ) -> Message:
        """Persist one turn and commit. created_at never goes backwards within the conversation."""
        msg = Message(
            conversation_id=conversation_id,
            role=role.value,
            content=content,
            metadata_=metadata,
            created_at=self._next_created_at(conversation_id),
        )
        return self._store.insert(msg)

    def send_message(self, conversation_id: str, content: str, model_name: str) -> Message:
        """
        Persist the user turn, assemble the full ordered context, ask the capability
        for a reply, persist and return the assistant turn.
        """
        if self._gateway is None:
            raise RuntimeError("ConversationService.send_message needs a capability gateway")
        if not content or not content.strip():
            raise ValidationError("Message content must not be empty")

        self._store.get(Conversation, conversation_id)
        self.append_message(conversation_id, MessageRole.USER, content)

        history = assemble_context(self._store, conversation_id)
        logger.info(
            "Conversation %s: requesting completion from %s with %d messages",
            conversation_id, model_name, len(history),
        )
        completion = self._gateway.complete(history, model_name)

        return self.append_message(
            conversation_id,
            MessageRole.ASSISTANT,
            completion.content,
            metadata=completion.metadata or None,
        )
