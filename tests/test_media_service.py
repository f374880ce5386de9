import pytest

from assistant.errors import CapabilityUnavailable, NotFound, ValidationError
from assistant.models import MediaFile
from assistant.models.enums import FileType
from assistant.services.capability_gateway import SimulatedCapabilityGateway
from assistant.services.media_service import MEDIA_PROCESSORS, MediaService, supported_processing_types


def test_image_analysis_completes_with_detections(store, image_file, gpt4, db):
    from assistant.services.model_catalog import get_active_model

    gateway = SimulatedCapabilityGateway(lambda name: get_active_model(db, name))
    media = MediaService(store, gateway).process_media("m1", "analysis", "gpt-4")

    assert media.processing_status == "completed"
    result = media.processing_result
    assert result["objects_detected"] == ["person", "car", "building"]
    assert result["confidence_scores"] == [0.95, 0.87, 0.92]
    assert result["model_used"] == "gpt-4"


@pytest.mark.parametrize(
    "fixture_name, processing_type, expected_keys",
    [
        ("image_file", "enhancement", {"improvements", "quality_score"}),
        ("video_file", "analysis", {"duration", "scenes_detected", "key_frames"}),
        ("video_file", "transcription", {"text", "timestamps"}),
    ],
)
def test_each_dispatch_entry_shapes_result(request, store, fixture_name, processing_type, expected_keys):
    media = request.getfixturevalue(fixture_name)
    media = MediaService(store, SimulatedCapabilityGateway()).process_media(media.id, processing_type, "any-model")

    assert media.processing_status == "completed"
    assert expected_keys <= set(media.processing_result)


def test_dispatch_table_covers_both_file_types():
    assert supported_processing_types(FileType.IMAGE) == ["analysis", "enhancement"]
    assert supported_processing_types(FileType.VIDEO) == ["analysis", "transcription"]
    assert len(MEDIA_PROCESSORS) == 4


def test_unknown_pair_rejected_without_state_change(store, image_file, fake_gateway):
    with pytest.raises(ValidationError, match="transcription"):
        MediaService(store, fake_gateway).process_media("m1", "transcription", "gpt-4")

    media = store.get(MediaFile, "m1")
    assert media.processing_status == "pending"
    assert media.processing_result is None
    assert fake_gateway.calls == []


def test_missing_media_is_not_found(store, user, fake_gateway):
    with pytest.raises(NotFound):
        MediaService(store, fake_gateway).process_media("nope", "analysis", "gpt-4")


def test_capability_failure_marks_failed_then_retry_completes(store, image_file, gateway_factory):
    gateway = gateway_factory(fail=True)
    service = MediaService(store, gateway)

    with pytest.raises(CapabilityUnavailable):
        service.process_media("m1", "analysis", "gpt-4")
    failed = store.get(MediaFile, "m1")
    assert failed.processing_status == "failed"
    assert failed.processing_result["kind"] == "CapabilityUnavailable"

    gateway.fail = False
    media = service.process_media("m1", "analysis", "gpt-4")
    assert media.processing_status == "completed"
    assert media.processing_result["objects_detected"] == ["cat"]


def test_malformed_capability_output_fails_job(store, image_file, gateway_factory):
    gateway = gateway_factory(media_result={"objects": []})

    with pytest.raises(CapabilityUnavailable, match="Malformed"):
        MediaService(store, gateway).process_media("m1", "analysis", "gpt-4")
    assert store.get(MediaFile, "m1").processing_status == "failed"


def test_inactive_model_fails_job(store, db, image_file, gpt4):
    from assistant.services.model_catalog import get_active_model

    gpt4.is_active = False
    db.commit()
    gateway = SimulatedCapabilityGateway(lambda name: get_active_model(db, name))

    with pytest.raises(CapabilityUnavailable, match="unknown or inactive"):
        MediaService(store, gateway).process_media("m1", "analysis", "gpt-4")
    assert store.get(MediaFile, "m1").processing_status == "failed"


def test_upload_validation(store, user):
    service = MediaService(store)
    with pytest.raises(ValidationError):
        service.upload_media(user.id, "a.gif", "a.gif", "audio", 10, "/tmp/a.gif")
    with pytest.raises(ValidationError):
        service.upload_media(user.id, "a.png", "a.png", "image", -1, "/tmp/a.png")
    with pytest.raises(NotFound):
        service.upload_media("ghost", "a.png", "a.png", "image", 1, "/tmp/a.png")


def test_upload_creates_pending_row(store, user):
    media = MediaService(store).upload_media(user.id, "x.png", "photo.png", "image", 0, "/uploads/x.png")

    assert media.processing_status == "pending"
    assert media.processing_result is None
    assert [m.id for m in MediaService(store).list_media_files(user.id)] == [media.id]
