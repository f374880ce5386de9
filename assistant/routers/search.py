from fastapi import APIRouter, BackgroundTasks, Depends, status

from assistant.config import get_settings
from assistant.dependencies import get_capability_gateway, get_gateway_factory, get_session_factory, get_store
from assistant.repositories.entity_store import EntityStore
from assistant.schemas.search import SearchQueryResponse, SearchRequest
from assistant.services.capability_gateway import CapabilityGateway
from assistant.services.search_service import SearchService, execute_search_in_background

router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("", response_model=SearchQueryResponse, status_code=status.HTTP_201_CREATED)
def submit_search(
    body: SearchRequest,
    background_tasks: BackgroundTasks,
    store: EntityStore = Depends(get_store),
    session_factory=Depends(get_session_factory),
    gateway_factory=Depends(get_gateway_factory),
):
    """
    Always returns the query in `pending` state. With search_auto_execute on, execution is
    scheduled after the response is sent; otherwise call POST /api/search/{id}/execute.
    """
    search = SearchService(store).submit_search(body.user_id, body.query, body.search_type.value)
    response = SearchQueryResponse.model_validate(search)
    if get_settings().search_auto_execute:
        background_tasks.add_task(execute_search_in_background, search.id, session_factory, gateway_factory)
    return response


@router.get("", response_model=list[SearchQueryResponse])
def search_history(user_id: str, store: EntityStore = Depends(get_store)):
    return SearchService(store).search_history(user_id)


@router.post("/{search_id}/execute", response_model=SearchQueryResponse)
def execute_search(
    search_id: str,
    store: EntityStore = Depends(get_store),
    gateway: CapabilityGateway = Depends(get_capability_gateway),
):
    return SearchService(store, gateway).execute_search(search_id)
