"""Selectable model descriptor. Pricing is stored in cents; converted to Decimal only in schemas."""
import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
from assistant.database import Base, utcnow


class AIModel(Base):
    __tablename__ = "ai_models"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), unique=True, nullable=False, index=True)
    provider = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    context_length = Column(Integer, nullable=False)
    pricing_input = Column(Integer, nullable=False)  # cents per 1M tokens
    pricing_output = Column(Integer, nullable=False)  # cents per 1M tokens
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
