"""
Shared fixtures: in-memory SQLite with foreign keys on, seeded user/model rows,
and a scriptable capability gateway for failure injection.
"""
from typing import Any

import google.genai.types  # noqa: F401  # import eagerly: tests patch pathlib.Path before the gateway's lazy import
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from assistant.database import Base, enable_sqlite_foreign_keys
from assistant.errors import CapabilityUnavailable
from assistant.models import AIModel, Conversation, MediaFile, User
from assistant.repositories.entity_store import EntityStore
from assistant.services.capability_gateway import CapabilityGateway, Completion


class FakeGateway(CapabilityGateway):
    """Records calls; `fail` makes every operation raise CapabilityUnavailable."""

    def __init__(self, reply: str = "I'm fine, thanks!", fail: bool = False, media_result: dict | None = None):
        super().__init__()
        self.reply = reply
        self.fail = fail
        self.media_result = media_result
        self.calls: list[tuple[str, Any]] = []

    def complete(self, history, model_name):
        self.calls.append(("complete", [dict(m) for m in history]))
        if self.fail:
            raise CapabilityUnavailable("provider down")
        return Completion(content=self.reply, metadata={"model": model_name})

    def analyze_media(self, file_type, processing_type, file_reference, model_name):
        self.calls.append(("analyze_media", (file_type, processing_type, file_reference, model_name)))
        if self.fail:
            raise CapabilityUnavailable("vision provider down")
        if self.media_result is not None:
            return self.media_result
        return {"objects": [{"label": "cat", "confidence": 0.9}]}

    def search(self, query, search_type):
        self.calls.append(("search", (query, search_type)))
        if self.fail:
            raise CapabilityUnavailable("search provider down")
        return {"query": query, "items": [{"title": "t", "url": "https://example.com"}], "total": 1}


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(eng)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return EntityStore(db)


@pytest.fixture
def user(store):
    return store.insert(User(id="u1", email="u1@example.com", name="User One"))


@pytest.fixture
def gpt4(store):
    return store.insert(
        AIModel(
            name="gpt-4",
            provider="openai",
            description="test model",
            context_length=8192,
            pricing_input=3000,
            pricing_output=6000,
            is_active=True,
        )
    )


@pytest.fixture
def conversation(store, user):
    return store.insert(Conversation(id="c1", user_id=user.id, title="Chat", model_name="gpt-4"))


@pytest.fixture
def image_file(store, user):
    return store.insert(
        MediaFile(
            id="m1",
            user_id=user.id,
            filename="m1.png",
            original_filename="holiday.png",
            file_type="image",
            file_size=2048,
            file_path="/uploads/m1.png",
        )
    )


@pytest.fixture
def video_file(store, user):
    return store.insert(
        MediaFile(
            id="v1",
            user_id=user.id,
            filename="v1.mp4",
            original_filename="talk.mp4",
            file_type="video",
            file_size=10_000,
            file_path="/uploads/v1.mp4",
        )
    )


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def gateway_factory():
    return FakeGateway
