from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from assistant.models.enums import MessageRole


class ConversationCreate(BaseModel):
    user_id: str
    title: str = Field(..., min_length=1, max_length=255)
    model_name: str = Field(..., min_length=1, max_length=100)


class ConversationUpdate(BaseModel):
    """Only fields that are sent are changed."""
    title: str | None = Field(None, min_length=1, max_length=255)
    model_name: str | None = Field(None, min_length=1, max_length=100)


class ConversationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    model_name: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---- Messages ----

class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=32000)
    model_name: str = Field(..., min_length=1, max_length=100)


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    role: MessageRole
    content: str
    metadata: dict[str, Any] | None = Field(None, validation_alias="metadata_")
    created_at: datetime

    class Config:
        from_attributes = True
