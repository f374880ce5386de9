from datetime import datetime

import pytest

from assistant.errors import CapabilityUnavailable, NotFound, ValidationError
from assistant.models import Conversation, MediaFile, Message, User
from assistant.models.enums import MessageRole
from assistant.services.context_assembler import assemble_context
from assistant.services.conversation_service import ConversationService


def _messages(db, conversation_id):
    return db.query(Message).filter(Message.conversation_id == conversation_id).order_by(Message.created_at).all()


def test_send_message_stores_user_then_assistant(store, db, conversation, fake_gateway):
    service = ConversationService(store, fake_gateway)

    reply = service.send_message("c1", "Hello, how are you?", "gpt-4")

    stored = _messages(db, "c1")
    assert len(stored) == 2
    assert stored[0].role == "user"
    assert stored[0].content == "Hello, how are you?"
    assert stored[0].metadata_ is None
    assert stored[1].role == "assistant"
    assert stored[1].content
    assert reply.id == stored[1].id
    assert reply.metadata_ == {"model": "gpt-4"}


def test_context_includes_the_turn_just_written(store, conversation, fake_gateway):
    service = ConversationService(store, fake_gateway)
    service.send_message("c1", "first", "gpt-4")
    service.send_message("c1", "second", "gpt-4")

    _, second_history = [c for c in fake_gateway.calls if c[0] == "complete"][1]
    assert [m["role"] for m in second_history] == ["user", "assistant", "user"]
    assert second_history[-1] == {"role": "user", "content": "second"}


def test_missing_conversation_writes_nothing(store, db, user, fake_gateway):
    with pytest.raises(NotFound):
        ConversationService(store, fake_gateway).send_message("missing", "hi", "gpt-4")
    assert db.query(Message).count() == 0
    assert fake_gateway.calls == []


def test_capability_failure_keeps_user_turn(store, db, conversation, gateway_factory):
    gateway = gateway_factory(fail=True)

    with pytest.raises(CapabilityUnavailable):
        ConversationService(store, gateway).send_message("c1", "are you there?", "gpt-4")

    stored = _messages(db, "c1")
    assert [(m.role, m.content) for m in stored] == [("user", "are you there?")]


def test_resend_after_failure_leaves_unanswered_turn(store, db, conversation, gateway_factory):
    gateway = gateway_factory(fail=True)
    service = ConversationService(store, gateway)
    with pytest.raises(CapabilityUnavailable):
        service.send_message("c1", "ping", "gpt-4")

    gateway.fail = False
    service.send_message("c1", "ping", "gpt-4")

    assert [m.role for m in _messages(db, "c1")] == ["user", "user", "assistant"]


def test_blank_content_rejected_before_write(store, db, conversation, fake_gateway):
    with pytest.raises(ValidationError):
        ConversationService(store, fake_gateway).send_message("c1", "   ", "gpt-4")
    assert db.query(Message).count() == 0


def test_context_strictly_ascending_with_frozen_clock(store, conversation, fake_gateway, monkeypatch):
    frozen = datetime(2026, 1, 1, 12, 0, 0)
    monkeypatch.setattr("assistant.services.conversation_service.utcnow", lambda: frozen)
    service = ConversationService(store, fake_gateway)

    for text in ("one", "two", "three"):
        service.send_message("c1", text, "gpt-4")

    rows = service.get_messages("c1")
    stamps = [m.created_at for m in rows]
    assert all(a < b for a, b in zip(stamps, stamps[1:]))
    assert [m["content"] for m in assemble_context(store, "c1") if m["role"] == "user"] == ["one", "two", "three"]


def test_system_messages_are_part_of_context(store, conversation, fake_gateway):
    service = ConversationService(store, fake_gateway)
    service.append_message("c1", MessageRole.SYSTEM, "Be brief.")
    service.send_message("c1", "hi", "gpt-4")

    _, history = fake_gateway.calls[0]
    assert history[0] == {"role": "system", "content": "Be brief."}


def test_create_conversation_requires_user(store):
    with pytest.raises(NotFound):
        ConversationService(store).create_conversation("ghost", "Chat", "gpt-4")


def test_update_conversation_changes_only_given_fields(store, conversation):
    before = conversation.updated_at
    updated = ConversationService(store).update_conversation("c1", title="Renamed")

    assert updated.title == "Renamed"
    assert updated.model_name == "gpt-4"
    assert updated.updated_at >= before


def test_update_missing_conversation(store):
    with pytest.raises(NotFound):
        ConversationService(store).update_conversation("nope", title="x")


def test_list_conversations_most_recent_first(store, user):
    service = ConversationService(store)
    older = service.create_conversation(user.id, "Older", "gpt-4")
    newer = service.create_conversation(user.id, "Newer", "gpt-4")
    service.update_conversation(older.id, model_name="claude-3-opus")

    assert [c.id for c in service.list_conversations(user.id)] == [older.id, newer.id]


def test_deleting_user_cascades(store, db, user, conversation, image_file, fake_gateway):
    ConversationService(store, fake_gateway).send_message("c1", "hello", "gpt-4")

    db.delete(db.get(User, user.id))
    db.commit()

    assert db.query(Conversation).count() == 0
    assert db.query(Message).count() == 0
    assert db.query(MediaFile).count() == 0
