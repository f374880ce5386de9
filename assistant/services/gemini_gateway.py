"""
Gemini (Vertex AI) capability provider.
Uses google-genai client with Vertex AI. Every SDK or parsing error is logged and
re-raised as CapabilityUnavailable so callers only see the core's error kinds.
"""
import json
import logging
import mimetypes
from pathlib import Path
from typing import Any

from assistant.config import get_settings
from assistant.errors import CapabilityUnavailable
from assistant.models.ai_model import AIModel
from assistant.services.capability_gateway import CapabilityGateway, Completion, ModelResolver

logger = logging.getLogger(__name__)

# Lazy client to avoid import/credentials errors at import time
_gemini_client = None

CHARS_PER_TOKEN = 4

MEDIA_INSTRUCTIONS: dict[tuple[str, str], str] = {
    ("image", "analysis"): (
        'Detect the objects in this image. Reply with JSON only: '
        '{"objects": [{"label": str, "confidence": float between 0 and 1}]}'
    ),
    ("image", "enhancement"): (
        'Suggest enhancements for this image. Reply with JSON only: '
        '{"improvements": [str], "quality_score": float between 0 and 10}'
    ),
    ("video", "analysis"): (
        'Analyze this video. Reply with JSON only: '
        '{"duration": seconds as int, "scenes": int, "key_frames": [offset seconds as int]}'
    ),
    ("video", "transcription"): (
        'Transcribe this video. Reply with JSON only: '
        '{"text": str, "segments": [{"start": int, "end": int, "text": str}]}'
    ),
}

SEARCH_INSTRUCTION = """You are a web research assistant. Use Google Search to answer the query.
For an "advanced" search give a concise answer; for an "extended" search give a thorough, sectioned answer.
Always cite the sources you used."""


def _get_client():
    global _gemini_client
    if _gemini_client is not None:
        return _gemini_client
    try:
        from google import genai
        from google.oauth2 import service_account
    except ImportError as e:
        raise CapabilityUnavailable(
            "Google GenAI not installed. pip install google-genai google-auth"
        ) from e

    settings = get_settings()
    if not settings.vertex_project_id:
        raise CapabilityUnavailable("vertex_project_id is not configured")

    credentials = None
    if settings.vertex_credentials_path:
        path = Path(settings.vertex_credentials_path)
        if path.is_file():
            credentials = service_account.Credentials.from_service_account_file(
                str(path),
                scopes=["https://www.googleapis.com/auth/cloud-platform"],
            )

    _gemini_client = genai.Client(
        vertexai=True,
        project=settings.vertex_project_id,
        location=settings.vertex_location,
        credentials=credentials,
    )
    return _gemini_client


def window_history(history: list[dict], context_length: int | None) -> list[dict]:
    """
    Keep the newest turns whose estimated size (chars / 4) fits context_length.
    The newest turn is always kept, even when it alone exceeds the budget.
    """
    if not context_length:
        return list(history)
    budget = context_length
    kept: list[dict] = []
    for message in reversed(history):
        cost = max(1, len(message.get("content") or "") // CHARS_PER_TOKEN)
        if kept and cost > budget:
            break
        kept.append(message)
        budget -= cost
    kept.reverse()
    return kept


def _response_text(response: Any) -> str:
    if not response or not response.candidates:
        raise ValueError("Empty response from model")
    candidate = response.candidates[0]
    if not candidate.content or not candidate.content.parts:
        raise ValueError("No text in model response")
    return getattr(response, "text", None) or candidate.content.parts[0].text


def _token_count(usage: Any, key: str) -> int:
    """Get token count from usage_metadata (dict or Pydantic model)."""
    if usage is None:
        return 0
    if isinstance(usage, dict):
        return int(usage.get(key) or 0)
    return int(getattr(usage, key, 0) or 0)


def _parse_json_reply(text: str) -> dict[str, Any]:
    """Models sometimes wrap JSON in ```json fences; strip them before parsing."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError("Model reply is not a JSON object")
    return data


class GeminiCapabilityGateway(CapabilityGateway):
    def __init__(self, resolve_model: ModelResolver | None = None):
        super().__init__(resolve_model)
        self._settings = get_settings()

    def _provider_model(self, model: AIModel | None) -> str:
        """Catalog models from provider "google" are called by name; others fall back to gemini_model."""
        if model is not None and model.provider.lower() == "google":
            return model.name
        return self._settings.gemini_model

    def _config(self, **kwargs):
        from google.genai.types import GenerateContentConfig
        return GenerateContentConfig(
            temperature=self._settings.gemini_temperature,
            max_output_tokens=self._settings.gemini_max_output_tokens,
            **kwargs,
        )

    def complete(self, history: list[dict], model_name: str) -> Completion:
        model = self.require_model(model_name)
        client = _get_client()
        from google.genai import types

        windowed = window_history(history, model.context_length if model else None)
        system_parts = [m["content"] for m in windowed if m.get("role") == "system" and m.get("content")]
        contents = []
        for m in windowed:
            role = m.get("role", "user")
            content = (m.get("content") or "").strip()
            if not content or role == "system":
                continue
            contents.append(
                types.Content(
                    role="user" if role == "user" else "model",
                    parts=[types.Part.from_text(text=content)],
                )
            )

        provider_model = self._provider_model(model)
        try:
            response = client.models.generate_content(
                model=provider_model,
                contents=contents,
                config=self._config(system_instruction="\n\n".join(system_parts) or None),
            )
            text = _response_text(response)
        except Exception as e:
            logger.exception("Gemini completion failed")
            raise CapabilityUnavailable("AI service temporarily unavailable.") from e

        usage = getattr(response, "usage_metadata", None)
        return Completion(
            content=text,
            metadata={
                "model": model_name,
                "provider_model": provider_model,
                "input_tokens": _token_count(usage, "prompt_token_count"),
                "output_tokens": _token_count(usage, "candidates_token_count"),
                "history_messages": len(windowed),
            },
        )

    def analyze_media(
        self, file_type: str, processing_type: str, file_reference: str, model_name: str
    ) -> dict[str, Any]:
        model = self.require_model(model_name)
        instruction = MEDIA_INSTRUCTIONS.get((file_type, processing_type))
        if instruction is None:
            raise CapabilityUnavailable(f"Gemini does not support {processing_type} for {file_type} files")
        path = Path(file_reference)
        if not path.is_file():
            raise CapabilityUnavailable(f"Media file is not readable: {file_reference}")
        mime_type = mimetypes.guess_type(path.name)[0] or ("image/png" if file_type == "image" else "video/mp4")

        client = _get_client()
        from google.genai import types

        try:
            parts = [
                types.Part.from_bytes(data=path.read_bytes(), mime_type=mime_type),
                types.Part.from_text(text=instruction),
            ]
            response = client.models.generate_content(
                model=self._provider_model(model),
                contents=[types.Content(role="user", parts=parts)],
                config=self._config(response_mime_type="application/json"),
            )
            return _parse_json_reply(_response_text(response))
        except Exception as e:
            logger.exception("Gemini media %s failed for %s", processing_type, file_reference)
            raise CapabilityUnavailable("AI service temporarily unavailable.") from e

    def search(self, query: str, search_type: str) -> dict[str, Any]:
        client = _get_client()
        from google.genai import types

        try:
            response = client.models.generate_content(
                model=self._settings.gemini_model,
                contents=f"[{search_type} search] {query}",
                config=self._config(
                    system_instruction=SEARCH_INSTRUCTION,
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                ),
            )
            summary = _response_text(response)
        except Exception as e:
            logger.exception("Gemini search failed")
            raise CapabilityUnavailable("Search service temporarily unavailable.") from e

        sources = []
        grounding = getattr(response.candidates[0], "grounding_metadata", None)
        for chunk in getattr(grounding, "grounding_chunks", None) or []:
            web = getattr(chunk, "web", None)
            if web is not None:
                sources.append({"title": getattr(web, "title", None), "url": getattr(web, "uri", None)})
        return {"query": query, "search_type": search_type, "summary": summary, "items": sources, "total": len(sources)}
