"""
AI endpoints:
- POST /api/ai/think: step-by-step reasoning on one question
- GET /api/ai/models: active models with pricing in dollars
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from assistant.database import get_db
from assistant.dependencies import get_capability_gateway
from assistant.schemas.ai import AIModelResponse, ThinkRequest, ThinkResponse
from assistant.services.capability_gateway import CapabilityGateway
from assistant.services.model_catalog import cents_to_decimal, list_active_models
from assistant.services.think_service import ThinkService

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/think", response_model=ThinkResponse)
def ai_think(body: ThinkRequest, gateway: CapabilityGateway = Depends(get_capability_gateway)):
    result = ThinkService(gateway).think(body.query, body.model_name, body.show_reasoning)
    return ThinkResponse(**result)


@router.get("/models", response_model=list[AIModelResponse])
def ai_models(db: Session = Depends(get_db)):
    return [
        AIModelResponse(
            id=m.id,
            name=m.name,
            provider=m.provider,
            description=m.description,
            context_length=m.context_length,
            pricing_input=cents_to_decimal(m.pricing_input),
            pricing_output=cents_to_decimal(m.pricing_output),
            is_active=m.is_active,
            created_at=m.created_at,
            updated_at=m.updated_at,
        )
        for m in list_active_models(db)
    ]
