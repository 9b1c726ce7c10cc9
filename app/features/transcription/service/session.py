# File: app/features/transcription/service/session.py
import logging
import queue
import threading
import time
import uuid
from typing import BinaryIO, Optional

from ..domain.interfaces import IRecognitionClient
from ..domain.models import RecognitionStatus, TerminalStatus, TranscriptRecord
from .aggregator import RecognitionResultAggregator

logger = logging.getLogger(__name__)

# How often the consumer wakes up to check for cancellation / the deadline.
POLL_INTERVAL_SECONDS = 0.25


class _EndOfStream:
    pass


class _DeliveryFailure:
    def __init__(self, error: BaseException):
        self.error = error


_END = _EndOfStream()


class RecognitionSession:
    """
    One recognition session for one segment.

    Carries everything the session needs explicitly: the source identity,
    a cancellation handle and its own aggregator. Results are produced on a
    background thread and handed over through a queue, so the aggregator only
    ever sees one event at a time from the consuming thread.

    The session is over when the first of these happens:
    a terminal status arrives, the producer ends, `cancel()` is called,
    or `timeout_seconds` elapse.
    """

    def __init__(self, filename: str, client: IRecognitionClient, timeout_seconds: float,
                 cancel_event: Optional[threading.Event] = None, join_timeout_seconds: float = 5.0):
        if timeout_seconds <= 0:
            raise ValueError(f"Session timeout must be positive, got {timeout_seconds}")

        self.filename = filename
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.join_timeout_seconds = join_timeout_seconds
        self.cancel_event = cancel_event or threading.Event()
        # Ends delivery for this session only; the caller's event is never set here.
        self._stop = threading.Event()
        self.request_id = uuid.uuid4().hex
        self.aggregator = RecognitionResultAggregator(filename)

        self.error: Optional[BaseException] = None
        self.timed_out = False
        self.cancelled = False
        self._events: "queue.Queue" = queue.Queue()

    def cancel(self) -> None:
        self.cancel_event.set()

    def _produce(self, audio: BinaryIO) -> None:
        try:
            for event in self.client.stream(audio, self.request_id, self._stop):
                self._events.put(event)
                if self._stop.is_set():
                    break
        except Exception as e:
            self._events.put(_DeliveryFailure(e))
        finally:
            self._events.put(_END)

    def run(self, audio: BinaryIO) -> TranscriptRecord:
        """
        Streams `audio` and blocks until the session is over.

        Whatever was aggregated before cancellation, timeout or a delivery
        failure is kept. The record's status is the terminal status received,
        `Error` after a delivery failure, or `Incomplete` otherwise.
        A delivery failure is exposed on `self.error`, not raised.
        """
        logger.info(f"Recognition session {self.request_id} started for {self.filename}")

        producer = threading.Thread(
            target=self._produce,
            args=(audio,),
            name=f"recognition-{self.request_id[:8]}",
            daemon=True
        )
        producer.start()

        deadline = time.monotonic() + self.timeout_seconds
        try:
            self._consume(deadline)
        finally:
            # Stop the producer before the caller releases the audio handle.
            self._stop.set()
            producer.join(self.join_timeout_seconds)
            if producer.is_alive():
                logger.warning(f"Recognition producer for {self.filename} did not stop within "
                               f"{self.join_timeout_seconds}s")

        default_status = RecognitionStatus.ERROR if self.error else RecognitionStatus.INCOMPLETE
        record = self.aggregator.finalize(default_status)

        logger.info(
            f"Recognition session {self.request_id} for {self.filename} ended: "
            f"{record.recognition_status.value}, {len(record.phrases)} phrase(s)"
        )
        return record

    def _consume(self, deadline: float) -> None:
        while True:
            if self.cancel_event.is_set():
                self.cancelled = True
                logger.info(f"Recognition for {self.filename} cancelled")
                return

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.timed_out = True
                logger.warning(f"Recognition for {self.filename} timed out after {self.timeout_seconds}s")
                return

            try:
                item = self._events.get(timeout=min(remaining, POLL_INTERVAL_SECONDS))
            except queue.Empty:
                continue

            if item is _END:
                return

            if isinstance(item, _DeliveryFailure):
                self.error = item.error
                logger.error(f"Recognition delivery failed for {self.filename}: {item.error}")
                return

            self.aggregator.on_event(item)
            if isinstance(item, TerminalStatus):
                return
