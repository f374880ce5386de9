"""Uploaded image/video awaiting AI processing. processing_result is set only once a run finishes."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON
from assistant.database import Base, utcnow
from assistant.models.enums import ProcessingStatus


class MediaFile(Base):
    __tablename__ = "media_files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    file_type = Column(String(16), nullable=False)  # "image" | "video"
    file_size = Column(Integer, nullable=False)  # bytes
    file_path = Column(String(512), nullable=False)
    processing_status = Column(String(16), nullable=False, default=ProcessingStatus.PENDING.value)
    processing_result = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
