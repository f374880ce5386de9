from fastapi import APIRouter, Depends, status

from assistant.dependencies import get_capability_gateway, get_store
from assistant.repositories.entity_store import EntityStore
from assistant.schemas.media import MediaFileResponse, MediaUploadRequest, ProcessMediaRequest
from assistant.services.capability_gateway import CapabilityGateway
from assistant.services.media_service import MediaService

router = APIRouter(prefix="/api/media", tags=["media"])


@router.post("", response_model=MediaFileResponse, status_code=status.HTTP_201_CREATED)
def upload_media(body: MediaUploadRequest, store: EntityStore = Depends(get_store)):
    """Register an already-stored file for processing (status pending)."""
    return MediaService(store).upload_media(
        body.user_id,
        body.filename,
        body.original_filename,
        body.file_type.value,
        body.file_size,
        body.file_path,
    )


@router.get("", response_model=list[MediaFileResponse])
def list_media_files(user_id: str, store: EntityStore = Depends(get_store)):
    return MediaService(store).list_media_files(user_id)


@router.post("/{media_id}/process", response_model=MediaFileResponse)
def process_media(
    media_id: str,
    body: ProcessMediaRequest,
    store: EntityStore = Depends(get_store),
    gateway: CapabilityGateway = Depends(get_capability_gateway),
):
    """Failed jobs can be resubmitted; the failure payload is kept on the row until then."""
    return MediaService(store, gateway).process_media(media_id, body.processing_type, body.model_name)
