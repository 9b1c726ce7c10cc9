# File: app/core/jobs/manager.py

import logging
import re
import threading
from datetime import datetime, timezone
from typing import Optional

from .domain.models import BlobTrigger, JobRecord
from .types import JobType, JobStatus

logger = logging.getLogger(__name__)

# Blobs produced by the segmentation stage: <sourceId>_segment_<n>.wav
SEGMENT_BLOB_PATTERN = re.compile(r"^.+_segment_\d+\.wav$", re.IGNORECASE)


class JobManager:
    """
    The Central Dispatcher.
    It doesn't know *how* to do the job, but it knows *who* can.

    Every invocation is independent. Failures are logged and recorded
    on the returned JobRecord; they never escape `run`.
    """

    def __init__(self, handlers: Optional[dict] = None):
        # JobType -> handler with .handle(trigger, cancel_event). Lazily built if absent.
        self.handlers = dict(handlers or {})

    @staticmethod
    def classify(trigger: BlobTrigger) -> JobType:
        if SEGMENT_BLOB_PATTERN.match(trigger.name):
            return JobType.TRANSCRIPTION
        return JobType.SEGMENTATION

    def run(self, trigger: BlobTrigger, cancel_event: Optional[threading.Event] = None) -> JobRecord:
        """
        Executes the job a blob arrival calls for by routing it to the
        appropriate feature handler.
        """
        job = JobRecord(job_type=self.classify(trigger), trigger_name=trigger.name)

        # Update Status -> PROCESSING
        job.status = JobStatus.PROCESSING
        job.started_at = datetime.now(timezone.utc)

        try:
            logger.info(f"Starting Job {job.id} ({job.job_type.value}) for {trigger.name}...")

            result = self._route_to_feature(job.job_type, trigger, cancel_event)

            # Update Status -> COMPLETED
            job.result_meta = result
            job.status = JobStatus.COMPLETED
            logger.info(f"Job {job.id} Completed successfully.")

        except NotImplementedError as e:
            # Configuration error
            job.status = JobStatus.FAILED
            job.error_message = f"Configuration Error: {str(e)}"
            logger.error(f"Job {job.id} Failed: {e}")

        except Exception as e:
            # Execution error
            job.status = JobStatus.FAILED
            job.error_message = str(e)
            logger.exception(f"Job {job.id} Failed: {e}")

        finally:
            job.finished_at = datetime.now(timezone.utc)

        return job

    def _route_to_feature(self, job_type: JobType, trigger: BlobTrigger,
                          cancel_event: Optional[threading.Event]) -> dict:
        """
        Routes the job to the correct Feature Handler.
        Uses lazy imports to prevent circular dependencies.
        """
        handler = self.handlers.get(job_type)

        if handler is None and job_type == JobType.SEGMENTATION:
            from app.features.segmentation.service.job_handler import SegmentationHandler
            handler = SegmentationHandler()

        elif handler is None and job_type == JobType.TRANSCRIPTION:
            from app.features.transcription.service.job_handler import TranscriptionHandler
            handler = TranscriptionHandler()

        if handler is None:
            raise NotImplementedError(f"No handler registered for JobType: {job_type}")

        return handler.handle(trigger, cancel_event)
