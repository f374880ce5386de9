from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ---- Think ----

class ThinkRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=8000)
    model_name: str = Field(..., min_length=1, max_length=100)
    show_reasoning: bool = False


class ThinkResponse(BaseModel):
    reasoning: str
    conclusion: str


# ---- Models ----

class AIModelResponse(BaseModel):
    """Pricing in dollars; stored as integer cents."""
    id: str
    name: str
    provider: str
    description: str | None = None
    context_length: int
    pricing_input: Decimal
    pricing_output: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime
