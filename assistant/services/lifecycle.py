"""
Processing-status lifecycle shared by media jobs and search jobs.

    pending ──> processing ──> completed
       failed ──┘        └──> failed

- The move to `processing` is committed before the operation runs, so a crash mid-run
  leaves a visibly stuck row instead of a silently lost one.
- The result payload and the final status are written in the same update.
- A failure is always recorded with a non-null error payload, then re-raised.
  That includes a completed write the store rejects, so no run ends in `processing`.
  If recording the failure itself fails, that is logged and the original error wins.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from assistant.database import utcnow
from assistant.errors import NotFound, PersistenceError, ValidationError
from assistant.models.enums import ProcessingStatus
from assistant.repositories.entity_store import EntityStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ProcessingStatus, set[ProcessingStatus]] = {
    ProcessingStatus.PENDING: {ProcessingStatus.PROCESSING},
    ProcessingStatus.FAILED: {ProcessingStatus.PROCESSING},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED},
    ProcessingStatus.COMPLETED: set(),
}


@dataclass(frozen=True)
class JobFields:
    """Names of the status and result columns on a job-bearing model."""
    status: str
    result: str


MEDIA_JOB = JobFields(status="processing_status", result="processing_result")
SEARCH_JOB = JobFields(status="status", result="results")


def can_transition(current: str, target: ProcessingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(ProcessingStatus(current), set())


def failure_payload(error: BaseException) -> dict[str, Any]:
    return {
        "error": "Processing failed",
        "kind": type(error).__name__,
        "detail": str(error),
        "failed_at": utcnow().isoformat(),
    }


class StatusLifecycle:
    """Runs one operation against one job row, persisting every status transition."""

    def __init__(self, store: EntityStore):
        self._store = store

    def run(
        self,
        model: type,
        job_id: str,
        fields: JobFields,
        operation: Callable[[Any], dict | None],
    ) -> Any:
        """
        Move the job through processing and into completed/failed.
        Returns the refreshed row on success; re-raises the operation's error on failure.
        """
        job = self._store.get(model, job_id)
        current = getattr(job, fields.status)
        if not can_transition(current, ProcessingStatus.PROCESSING):
            raise ValidationError(
                f"{model.__name__} {job_id} is {current}; only pending or failed jobs can be processed"
            )

        job = self._store.update(
            model,
            job_id,
            **{fields.status: ProcessingStatus.PROCESSING.value, fields.result: None, "updated_at": utcnow()},
        )
        logger.info("%s %s: %s -> processing", model.__name__, job_id, current)

        try:
            payload = operation(job)
            if payload is None:
                raise ValueError(f"{model.__name__} operation produced no result")
        except Exception as e:
            self._record_failure(model, job_id, fields, e)
            raise

        try:
            job = self._store.update(
                model,
                job_id,
                **{fields.status: ProcessingStatus.COMPLETED.value, fields.result: payload, "updated_at": utcnow()},
            )
        except PersistenceError as e:
            self._record_failure(model, job_id, fields, e)
            raise
        logger.info("%s %s: processing -> completed", model.__name__, job_id)
        return job

    def _record_failure(self, model: type, job_id: str, fields: JobFields, error: Exception) -> None:
        logger.warning("%s %s: processing -> failed (%s: %s)", model.__name__, job_id, type(error).__name__, error)
        try:
            self._store.update(
                model,
                job_id,
                **{
                    fields.status: ProcessingStatus.FAILED.value,
                    fields.result: failure_payload(error),
                    "updated_at": utcnow(),
                },
            )
        except (PersistenceError, NotFound):
            logger.exception("Failed to record failed status for %s %s", model.__name__, job_id)
