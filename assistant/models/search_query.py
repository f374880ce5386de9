import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON
from assistant.database import Base, utcnow
from assistant.models.enums import ProcessingStatus


class SearchQuery(Base):
    __tablename__ = "search_queries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    query = Column(Text, nullable=False)
    search_type = Column(String(16), nullable=False)  # "advanced" | "extended"
    results = Column(JSON, nullable=True)
    status = Column(String(16), nullable=False, default=ProcessingStatus.PENDING.value)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
