# File: app/features/transcription/service/aggregator.py
import logging
import uuid
from enum import Enum
from typing import List, Optional, Union

from ..domain.interfaces import RecognitionEvent
from ..domain.models import (
    TICKS_PER_SECOND,
    Phrase,
    PhraseEvent,
    RecognitionStatus,
    TerminalStatus,
    TranscriptRecord,
)

logger = logging.getLogger(__name__)


def normalize_confidence(value: Union[float, str, Enum]) -> str:
    """Scores become their decimal text ("0.9"), labels keep their name ("High")."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def ticks_to_seconds(ticks: int) -> float:
    return ticks / TICKS_PER_SECOND


class RecognitionResultAggregator:
    """
    Folds the events of ONE segment's recognition session into a TranscriptRecord.

    Events must be delivered one at a time; the aggregator does no locking.
    Phrases are kept in arrival order, never re-sorted by offset.
    """

    def __init__(self, filename: str):
        self.filename = filename
        self._record_id: Optional[str] = None
        self._status: Optional[RecognitionStatus] = None
        self._phrases: List[Phrase] = []
        self._final: Optional[TranscriptRecord] = None

    @property
    def started(self) -> bool:
        return self._record_id is not None

    @property
    def status(self) -> Optional[RecognitionStatus]:
        return self._status

    @property
    def phrase_count(self) -> int:
        return len(self._phrases)

    def on_event(self, event: RecognitionEvent) -> None:
        if self._final is not None:
            raise RuntimeError(f"Transcript for {self.filename} is already finalized")

        # The record comes into existence with the first event, whatever it is.
        if self._record_id is None:
            self._record_id = uuid.uuid4().hex

        if isinstance(event, PhraseEvent):
            phrase = Phrase(
                confidence=normalize_confidence(event.confidence),
                display_text=event.display_text,
                offset_seconds=ticks_to_seconds(event.offset_ticks)
            )
            self._phrases.append(phrase)
            logger.debug(f"{self.filename}: phrase #{len(self._phrases)} at {phrase.offset_seconds:.2f}s")

        elif isinstance(event, TerminalStatus):
            if self._status is not None and self._status != event.status:
                logger.warning(f"{self.filename}: status {self._status.value} replaced by {event.status.value}")
            self._status = event.status

        else:
            raise TypeError(f"Unsupported recognition event: {event!r}")

    def finalize(self, default_status: RecognitionStatus = RecognitionStatus.INCOMPLETE) -> TranscriptRecord:
        """
        Freezes the accumulated state. `default_status` applies only when no
        terminal status was received. Calling it again returns the same record.
        """
        if self._final is None:
            if self._record_id is None:
                self._record_id = uuid.uuid4().hex

            self._final = TranscriptRecord(
                id=self._record_id,
                filename=self.filename,
                recognition_status=self._status or default_status,
                phrases=tuple(self._phrases)
            )
        return self._final
