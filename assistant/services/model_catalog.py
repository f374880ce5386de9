"""Read-only access to the AI model catalog. Only active models are selectable."""
from decimal import Decimal

from sqlalchemy.orm import Session

from assistant.models.ai_model import AIModel

CENTS = Decimal(100)


def cents_to_decimal(cents: int) -> Decimal:
    """Presentation-boundary conversion: 250 -> Decimal('2.50')."""
    return (Decimal(cents) / CENTS).quantize(Decimal("0.01"))


def list_active_models(db: Session) -> list[AIModel]:
    return db.query(AIModel).filter(AIModel.is_active.is_(True)).order_by(AIModel.name).all()


def get_model(db: Session, name: str) -> AIModel | None:
    return db.query(AIModel).filter(AIModel.name == name).first()


def get_active_model(db: Session, name: str) -> AIModel | None:
    """Resolver handed to capability gateways: None for unknown or inactive models."""
    model = get_model(db, name)
    if model is None or not model.is_active:
        return None
    return model
