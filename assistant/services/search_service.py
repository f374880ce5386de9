"""
Search jobs. submit_search only records the query in `pending` state; execute_search is the
explicit trigger that moves it through the status lifecycle with the capability's search.
Whoever schedules execution (HTTP background task, worker, manual call) is outside this module.
"""
import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from assistant.database import SessionLocal
from assistant.errors import AssistantError, ValidationError
from assistant.models.enums import SearchType
from assistant.models.search_query import SearchQuery
from assistant.models.user import User
from assistant.repositories.entity_store import EntityStore
from assistant.services.capability_gateway import CapabilityGateway, build_capability_gateway
from assistant.services.lifecycle import SEARCH_JOB, StatusLifecycle

logger = logging.getLogger(__name__)


class SearchService:
    def __init__(self, store: EntityStore, gateway: CapabilityGateway | None = None):
        self._store = store
        self._gateway = gateway
        self._lifecycle = StatusLifecycle(store)

    def submit_search(self, user_id: str, query: str, search_type: str) -> SearchQuery:
        if not query or not query.strip():
            raise ValidationError("Search query must not be empty")
        try:
            kind = SearchType(search_type)
        except ValueError:
            raise ValidationError(f"Unsupported search_type {search_type!r}") from None
        self._store.get(User, user_id)
        return self._store.insert(SearchQuery(user_id=user_id, query=query, search_type=kind.value))

    def execute_search(self, search_id: str) -> SearchQuery:
        if self._gateway is None:
            raise RuntimeError("SearchService.execute_search needs a capability gateway")

        def operation(job: SearchQuery) -> dict:
            return self._gateway.search(job.query, job.search_type)

        return self._lifecycle.run(SearchQuery, search_id, SEARCH_JOB, operation)

    def search_history(self, user_id: str) -> list[SearchQuery]:
        return self._store.list_by_owner(SearchQuery, "user_id", user_id, order_by="created_at", direction="desc")


def execute_search_in_background(
    search_id: str,
    session_factory: Callable[[], Session] = SessionLocal,
    gateway_factory: Callable[[Session], CapabilityGateway] = build_capability_gateway,
) -> None:
    """
    Background-task entry point. Uses its own session: the request-scoped one is closed
    by the time this runs. Failures are already recorded on the row, so only log here.
    """
    db = session_factory()
    try:
        service = SearchService(EntityStore(db), gateway_factory(db))
        service.execute_search(search_id)
    except AssistantError as e:
        logger.warning("Background search %s failed: %s", search_id, e)
    finally:
        db.close()
