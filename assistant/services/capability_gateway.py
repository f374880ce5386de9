"""
Boundary to external reasoning, search and media-analysis capabilities.
The core only calls these operations; providers live behind this interface.
All operations may be slow and may fail; failures surface as CapabilityUnavailable.
There is no retry here: callers re-invoke the whole operation if they want one.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from assistant.config import get_settings
from assistant.database import utcnow
from assistant.errors import CapabilityUnavailable
from assistant.models.ai_model import AIModel
from assistant.services.model_catalog import get_active_model

logger = logging.getLogger(__name__)

ModelResolver = Callable[[str], AIModel | None]


@dataclass
class Completion:
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


class CapabilityGateway(ABC):
    """
    resolve_model: name -> active AIModel or None. When given, unknown/inactive models
    are rejected with CapabilityUnavailable before any provider call.
    """

    def __init__(self, resolve_model: ModelResolver | None = None):
        self._resolve_model = resolve_model

    def require_model(self, model_name: str) -> AIModel | None:
        if self._resolve_model is None:
            return None
        model = self._resolve_model(model_name)
        if model is None:
            raise CapabilityUnavailable(f"Model {model_name!r} is unknown or inactive")
        return model

    @abstractmethod
    def complete(self, history: list[dict], model_name: str) -> Completion:
        """history: ordered list of {"role", "content"}; returns the assistant reply."""

    @abstractmethod
    def analyze_media(
        self, file_type: str, processing_type: str, file_reference: str, model_name: str
    ) -> dict[str, Any]:
        """Raw analysis result for one media file."""

    @abstractmethod
    def search(self, query: str, search_type: str) -> dict[str, Any]:
        """Raw search result map."""


class SimulatedCapabilityGateway(CapabilityGateway):
    """
    Deterministic offline provider. Useful for development and demos without provider
    credentials; outputs have the same shape a real provider adapter returns.
    """

    MEDIA_RESULTS: dict[tuple[str, str], dict[str, Any]] = {
        ("image", "analysis"): {
            "objects": [
                {"label": "person", "confidence": 0.95},
                {"label": "car", "confidence": 0.87},
                {"label": "building", "confidence": 0.92},
            ],
        },
        ("image", "enhancement"): {
            "improvements": ["noise_reduction", "color_correction", "sharpening"],
            "quality_score": 9.2,
        },
        ("video", "analysis"): {
            "duration": 120,
            "scenes": 5,
            "key_frames": [10, 35, 67, 89, 115],
        },
        ("video", "transcription"): {
            "text": "This is a sample transcription of the video content.",
            "segments": [{"start": 0, "end": 30, "text": "First segment"}],
        },
    }

    def complete(self, history: list[dict], model_name: str) -> Completion:
        self.require_model(model_name)
        last_user = next((m for m in reversed(history) if m.get("role") == "user"), None)
        if last_user is None:
            raise CapabilityUnavailable("Completion needs at least one user message")
        content = f'AI response to: "{last_user["content"]}" using model {model_name}'
        return Completion(
            content=content,
            metadata={
                "model": model_name,
                "timestamp": utcnow().isoformat(),
                "tokens_used": sum(len(m.get("content") or "") for m in history) // 4 + len(content) // 4,
            },
        )

    def analyze_media(
        self, file_type: str, processing_type: str, file_reference: str, model_name: str
    ) -> dict[str, Any]:
        self.require_model(model_name)
        result = self.MEDIA_RESULTS.get((file_type, processing_type))
        if result is None:
            raise CapabilityUnavailable(f"No simulated {processing_type} for {file_type} files")
        return {**result, "source": file_reference}

    def search(self, query: str, search_type: str) -> dict[str, Any]:
        depth = 10 if search_type == "extended" else 5
        return {
            "query": query,
            "search_type": search_type,
            "items": [
                {
                    "title": f"{query}: result {i}",
                    "url": f"https://example.com/search/{i}",
                    "snippet": f"Simulated {search_type} result {i} for {query!r}.",
                }
                for i in range(1, depth + 1)
            ],
            "total": depth,
        }


def build_capability_gateway(db: Session) -> CapabilityGateway:
    """Provider selected by settings.capability_provider; models resolved from the catalog."""
    provider = get_settings().capability_provider.strip().lower()

    def resolve(name: str) -> AIModel | None:
        return get_active_model(db, name)

    if provider == "gemini":
        from assistant.services.gemini_gateway import GeminiCapabilityGateway
        return GeminiCapabilityGateway(resolve)
    if provider != "simulated":
        logger.warning("Unknown capability_provider %r, using simulated provider", provider)
    return SimulatedCapabilityGateway(resolve)
