"""
Error kinds surfaced by the orchestration core.
Routers never see SQLAlchemy or provider exceptions directly; main.py maps these to HTTP codes.
"""


class AssistantError(Exception):
    """Base class for all core errors."""


class NotFound(AssistantError):
    """Referenced entity (conversation, media file, search query, user) does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class ValidationError(AssistantError):
    """Malformed input, rejected before anything is persisted."""


class CapabilityUnavailable(AssistantError):
    """External completion/search/analysis failed, or the requested model is unknown or inactive."""


class PersistenceError(AssistantError):
    """Entity store write or read failed."""
