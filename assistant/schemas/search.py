from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from assistant.models.enums import ProcessingStatus, SearchType


class SearchRequest(BaseModel):
    user_id: str
    query: str = Field(..., min_length=1, max_length=2000)
    search_type: SearchType


class SearchQueryResponse(BaseModel):
    id: str
    user_id: str
    query: str
    search_type: SearchType
    results: dict[str, Any] | None = None
    status: ProcessingStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
