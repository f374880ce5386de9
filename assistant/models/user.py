import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from assistant.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    conversations = relationship("Conversation", cascade="all, delete-orphan", passive_deletes=True)
    media_files = relationship("MediaFile", cascade="all, delete-orphan", passive_deletes=True)
    search_queries = relationship("SearchQuery", cascade="all, delete-orphan", passive_deletes=True)
