from fastapi import APIRouter, Depends, status

from assistant.dependencies import get_store
from assistant.repositories.entity_store import EntityStore
from assistant.schemas.user import UserCreate, UserResponse
from assistant.services.user_service import create_user

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(body: UserCreate, store: EntityStore = Depends(get_store)):
    return create_user(store, body.email, body.name)
