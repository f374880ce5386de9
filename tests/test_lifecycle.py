import pytest

from assistant.errors import CapabilityUnavailable, NotFound, PersistenceError, ValidationError
from assistant.models import MediaFile, SearchQuery
from assistant.repositories.entity_store import EntityStore
from assistant.services.lifecycle import (
    MEDIA_JOB,
    SEARCH_JOB,
    StatusLifecycle,
    can_transition,
)
from assistant.models.enums import ProcessingStatus


def test_transition_table():
    assert can_transition("pending", ProcessingStatus.PROCESSING)
    assert can_transition("failed", ProcessingStatus.PROCESSING)
    assert can_transition("processing", ProcessingStatus.COMPLETED)
    assert can_transition("processing", ProcessingStatus.FAILED)
    assert not can_transition("pending", ProcessingStatus.COMPLETED)
    assert not can_transition("completed", ProcessingStatus.PROCESSING)
    assert not can_transition("processing", ProcessingStatus.PROCESSING)


def test_success_writes_result_with_completed(store, image_file):
    seen_status = []

    def operation(job):
        # entry transition is committed before the operation runs
        seen_status.append((job.processing_status, job.processing_result))
        return {"ok": True}

    job = StatusLifecycle(store).run(MediaFile, image_file.id, MEDIA_JOB, operation)

    assert seen_status == [("processing", None)]
    assert job.processing_status == "completed"
    assert job.processing_result == {"ok": True}


def test_failure_records_payload_and_reraises(store, image_file):
    def operation(job):
        raise CapabilityUnavailable("provider down")

    with pytest.raises(CapabilityUnavailable, match="provider down"):
        StatusLifecycle(store).run(MediaFile, image_file.id, MEDIA_JOB, operation)

    job = store.get(MediaFile, image_file.id)
    assert job.processing_status == "failed"
    assert job.processing_result["error"] == "Processing failed"
    assert job.processing_result["kind"] == "CapabilityUnavailable"
    assert job.processing_result["detail"] == "provider down"


def test_failed_job_is_reentrant_and_result_cleared_while_processing(store, image_file):
    lifecycle = StatusLifecycle(store)

    def broken(job):
        raise CapabilityUnavailable("x")

    with pytest.raises(CapabilityUnavailable):
        lifecycle.run(MediaFile, image_file.id, MEDIA_JOB, broken)
    assert store.get(MediaFile, image_file.id).processing_status == "failed"

    observed = []

    def operation(job):
        observed.append((job.processing_status, job.processing_result))
        return {"second": "run"}

    job = lifecycle.run(MediaFile, image_file.id, MEDIA_JOB, operation)
    assert observed == [("processing", None)]
    assert job.processing_status == "completed"
    assert job.processing_result == {"second": "run"}


def test_completed_job_cannot_be_rerun(store, image_file):
    lifecycle = StatusLifecycle(store)
    lifecycle.run(MediaFile, image_file.id, MEDIA_JOB, lambda job: {"done": 1})

    with pytest.raises(ValidationError):
        lifecycle.run(MediaFile, image_file.id, MEDIA_JOB, lambda job: {"done": 2})
    assert store.get(MediaFile, image_file.id).processing_result == {"done": 1}


def test_missing_job_is_not_found(store):
    with pytest.raises(NotFound):
        StatusLifecycle(store).run(MediaFile, "nope", MEDIA_JOB, lambda job: {})


def test_none_payload_is_recorded_as_failure(store, image_file):
    with pytest.raises(ValueError):
        StatusLifecycle(store).run(MediaFile, image_file.id, MEDIA_JOB, lambda job: None)

    job = store.get(MediaFile, image_file.id)
    assert job.processing_status == "failed"
    assert job.processing_result is not None


def test_search_job_fields(store, user):
    search = store.insert(SearchQuery(user_id=user.id, query="q", search_type="advanced"))

    job = StatusLifecycle(store).run(SearchQuery, search.id, SEARCH_JOB, lambda job: {"items": []})

    assert job.status == "completed"
    assert job.results == {"items": []}


class FailingFailureStore(EntityStore):
    """Store whose write of the `failed` status blows up."""

    def update(self, model, entity_id, **patch):
        if patch.get("processing_status") == "failed":
            raise PersistenceError("disk full")
        return super().update(model, entity_id, **patch)


def test_secondary_failure_is_logged_not_raised(db, image_file, caplog):
    store = FailingFailureStore(db)

    def operation(job):
        raise CapabilityUnavailable("original")

    with pytest.raises(CapabilityUnavailable, match="original"):
        StatusLifecycle(store).run(MediaFile, image_file.id, MEDIA_JOB, operation)

    assert "Failed to record failed status" in caplog.text


class RejectingCompletionStore(EntityStore):
    """Store that refuses the `completed` write once."""

    def __init__(self, db):
        super().__init__(db)
        self.rejections = 1

    def update(self, model, entity_id, **patch):
        if patch.get("processing_status") == "completed" and self.rejections:
            self.rejections -= 1
            raise PersistenceError("write rejected")
        return super().update(model, entity_id, **patch)


def test_rejected_completion_write_ends_failed_and_can_rerun(db, image_file):
    store = RejectingCompletionStore(db)
    lifecycle = StatusLifecycle(store)

    with pytest.raises(PersistenceError, match="write rejected"):
        lifecycle.run(MediaFile, image_file.id, MEDIA_JOB, lambda job: {"ok": True})

    job = store.get(MediaFile, image_file.id)
    assert job.processing_status == "failed"
    assert job.processing_result["kind"] == "PersistenceError"

    job = lifecycle.run(MediaFile, image_file.id, MEDIA_JOB, lambda job: {"ok": True})
    assert job.processing_status == "completed"
    assert job.processing_result == {"ok": True}
