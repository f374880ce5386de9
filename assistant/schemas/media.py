from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from assistant.models.enums import FileType, ProcessingStatus


class MediaUploadRequest(BaseModel):
    user_id: str
    filename: str = Field(..., min_length=1, max_length=255)
    original_filename: str = Field(..., min_length=1, max_length=255)
    file_type: FileType
    file_size: int = Field(..., ge=0, description="Size in bytes")
    file_path: str = Field(..., min_length=1, max_length=512)


class ProcessMediaRequest(BaseModel):
    processing_type: str = Field(..., min_length=1, description="analysis | enhancement | transcription")
    model_name: str = Field(..., min_length=1, max_length=100)


class MediaFileResponse(BaseModel):
    id: str
    user_id: str
    filename: str
    original_filename: str
    file_type: FileType
    file_size: int
    file_path: str
    processing_status: ProcessingStatus
    processing_result: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
