"""
Conversation context for a completion call: every message of the conversation,
oldest-first, projected to {"role", "content"}. No truncation here; a gateway that
needs to fit a model's context_length applies its own window.
"""
from assistant.models.message import Message
from assistant.repositories.entity_store import EntityStore


def load_ordered_messages(store: EntityStore, conversation_id: str) -> list[Message]:
    """Messages ascending by created_at. Timestamps are strictly increasing per conversation."""
    return store.list_by_owner(Message, "conversation_id", conversation_id, order_by="created_at", direction="asc")


def assemble_context(store: EntityStore, conversation_id: str) -> list[dict]:
    """
    Read after the caller's commit, so the user turn written in the current request is included.
    Returns list of {"role": "user"|"assistant"|"system", "content": "..."}.
    """
    return [{"role": m.role, "content": m.content} for m in load_ordered_messages(store, conversation_id)]
