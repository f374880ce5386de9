"""Request-scoped dependencies shared by the routers. One Session per request."""
from fastapi import Depends
from sqlalchemy.orm import Session

from assistant.database import SessionLocal, get_db
from assistant.repositories.entity_store import EntityStore
from assistant.services.capability_gateway import CapabilityGateway, build_capability_gateway


def get_store(db: Session = Depends(get_db)) -> EntityStore:
    return EntityStore(db)


def get_capability_gateway(db: Session = Depends(get_db)) -> CapabilityGateway:
    """Provider chosen by settings; tests override this dependency with a fake."""
    return build_capability_gateway(db)


def get_session_factory():
    """Session source for work that outlives the request, such as background tasks."""
    return SessionLocal


def get_gateway_factory():
    return build_capability_gateway
