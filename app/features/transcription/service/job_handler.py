# File: app/features/transcription/service/job_handler.py
import logging
import threading
from typing import Optional

from app.core.config.settings import settings
from app.core.jobs.domain.models import BlobTrigger
from ..data.repository import SqlTranscriptStore
from ..domain.interfaces import IRecognitionClient, ITranscriptStore
from .api import build_speech_client
from .session import RecognitionSession

logger = logging.getLogger(__name__)

class TranscriptionHandler:
    """
    Worker class responsible for executing TRANSCRIPTION jobs:
    one published segment in, one transcript document out.
    """

    def __init__(self, client: Optional[IRecognitionClient] = None,
                 store: Optional[ITranscriptStore] = None,
                 timeout_seconds: Optional[float] = None):
        self.client = client
        self.store = store
        self.timeout_seconds = timeout_seconds

    def handle(self, trigger: BlobTrigger, cancel_event: Optional[threading.Event] = None) -> dict:
        logger.info(f"Processing Transcription for Segment: {trigger.name}")

        # Clients are scoped to this invocation unless injected.
        client = self.client or build_speech_client()
        store = self.store or SqlTranscriptStore.from_settings(settings)

        # 1. Recognize (blocks until terminal status, cancellation or timeout)
        session = RecognitionSession(
            filename=trigger.name,
            client=client,
            timeout_seconds=self.timeout_seconds or settings.recognition_timeout,
            cancel_event=cancel_event
        )
        with trigger.open() as audio:
            record = session.run(audio)

        # 2. Persist whatever was aggregated, even after a failed or cancelled session
        stored_id = store.persist(record)

        # 3. A broken transport still fails the job, after the partial transcript is saved
        if session.error is not None:
            raise session.error

        return {
            "transcript_id": stored_id,
            "recognition_status": record.recognition_status.value,
            "phrase_count": len(record.phrases),
            "timed_out": session.timed_out,
            "cancelled": session.cancelled
        }
