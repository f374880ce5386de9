"""
Media jobs: register an uploaded file, then process it through the status lifecycle.

Processing dispatches on (file_type, processing_type) through MEDIA_PROCESSORS; each entry
shapes the capability's raw output into the stored processing_result. Add a combination by
adding an entry. Pairs without an entry are rejected before the job changes state.
"""
import logging
from collections.abc import Callable
from typing import Any

from assistant.errors import CapabilityUnavailable, ValidationError
from assistant.models.enums import FileType
from assistant.models.media_file import MediaFile
from assistant.models.user import User
from assistant.repositories.entity_store import EntityStore
from assistant.services.capability_gateway import CapabilityGateway
from assistant.services.lifecycle import MEDIA_JOB, StatusLifecycle

logger = logging.getLogger(__name__)

ResultBuilder = Callable[[dict[str, Any], str], dict[str, Any]]


def _image_analysis(raw: dict, model_name: str) -> dict:
    objects = raw["objects"]
    if not objects:
        raise ValueError("no objects detected")
    return {
        "analysis": "Image analysis completed",
        "objects_detected": [o["label"] for o in objects],
        "confidence_scores": [float(o["confidence"]) for o in objects],
        "model_used": model_name,
    }


def _image_enhancement(raw: dict, model_name: str) -> dict:
    return {
        "enhancement": "Image enhancement completed",
        "improvements": list(raw["improvements"]),
        "quality_score": float(raw["quality_score"]),
        "model_used": model_name,
    }


def _video_analysis(raw: dict, model_name: str) -> dict:
    return {
        "analysis": "Video analysis completed",
        "duration": int(raw["duration"]),
        "scenes_detected": int(raw["scenes"]),
        "key_frames": [int(offset) for offset in raw["key_frames"]],
        "model_used": model_name,
    }


def _video_transcription(raw: dict, model_name: str) -> dict:
    return {
        "transcription": "Video transcription completed",
        "text": raw["text"],
        "timestamps": [
            {"start": s["start"], "end": s["end"], "text": s["text"]}
            for s in raw.get("segments", [])
        ],
        "model_used": model_name,
    }


MEDIA_PROCESSORS: dict[tuple[FileType, str], ResultBuilder] = {
    (FileType.IMAGE, "analysis"): _image_analysis,
    (FileType.IMAGE, "enhancement"): _image_enhancement,
    (FileType.VIDEO, "analysis"): _video_analysis,
    (FileType.VIDEO, "transcription"): _video_transcription,
}


def supported_processing_types(file_type: FileType) -> list[str]:
    return sorted(p for (ft, p) in MEDIA_PROCESSORS if ft == file_type)


class MediaService:
    def __init__(self, store: EntityStore, gateway: CapabilityGateway | None = None):
        self._store = store
        self._gateway = gateway
        self._lifecycle = StatusLifecycle(store)

    def upload_media(
        self,
        user_id: str,
        filename: str,
        original_filename: str,
        file_type: str,
        file_size: int,
        file_path: str,
    ) -> MediaFile:
        """Register an uploaded file in `pending` state. The bytes themselves are stored elsewhere."""
        try:
            kind = FileType(file_type)
        except ValueError:
            raise ValidationError(f"Unsupported file_type {file_type!r}") from None
        if file_size < 0:
            raise ValidationError("file_size must be non-negative")
        self._store.get(User, user_id)
        return self._store.insert(
            MediaFile(
                user_id=user_id,
                filename=filename,
                original_filename=original_filename,
                file_type=kind.value,
                file_size=file_size,
                file_path=file_path,
            )
        )

    def list_media_files(self, user_id: str) -> list[MediaFile]:
        return self._store.list_by_owner(MediaFile, "user_id", user_id, order_by="created_at", direction="desc")

    def process_media(self, media_id: str, processing_type: str, model_name: str) -> MediaFile:
        """
        Run one processing pass. pending/failed -> processing -> completed|failed.
        Capability errors are recorded on the row, then re-raised.
        """
        if self._gateway is None:
            raise RuntimeError("MediaService.process_media needs a capability gateway")
        media = self._store.get(MediaFile, media_id)
        file_type = FileType(media.file_type)
        builder = MEDIA_PROCESSORS.get((file_type, processing_type))
        if builder is None:
            raise ValidationError(
                f"Unsupported processing_type {processing_type!r} for {file_type.value} files; "
                f"expected one of {supported_processing_types(file_type)}"
            )

        def operation(job: MediaFile) -> dict:
            raw = self._gateway.analyze_media(job.file_type, processing_type, job.file_path, model_name)
            try:
                return builder(raw, model_name)
            except (KeyError, TypeError, ValueError) as e:
                raise CapabilityUnavailable(f"Malformed {processing_type} result: {e}") from e

        logger.info("Processing media %s (%s %s) with %s", media_id, file_type.value, processing_type, model_name)
        return self._lifecycle.run(MediaFile, media_id, MEDIA_JOB, operation)
