# File: app/features/transcription/domain/models.py
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Dict, Optional, Tuple, Union

# The recognizer reports media time in 100-nanosecond ticks.
TICKS_PER_SECOND = 10_000_000


@unique
class RecognitionStatus(str, Enum):
    SUCCESS = "Success"
    INITIAL_SILENCE_TIMEOUT = "InitialSilenceTimeout"
    BABBLE_TIMEOUT = "BabbleTimeout"
    NO_MATCH = "NoMatch"
    ERROR = "Error"
    # No terminal status was observed before the session was cancelled or timed out.
    INCOMPLETE = "Incomplete"


@dataclass(frozen=True)
class PhraseEvent:
    """
    One recognition result unit as delivered by the recognizer.
    `confidence` is either a score or a label such as "High".
    """
    confidence: Union[float, str, Enum]
    display_text: str
    offset_ticks: int = 0


@dataclass(frozen=True)
class TerminalStatus:
    """
    The final outcome code of one recognition session.
    """
    status: RecognitionStatus


@dataclass(frozen=True)
class Phrase:
    """
    A normalized phrase, timed relative to the start of its segment.
    """
    confidence: str
    display_text: str
    offset_seconds: float

    def to_document(self) -> Dict[str, Any]:
        return {
            "Confidence": self.confidence,
            "DisplayText": self.display_text,
            "OffsetInSeconds": self.offset_seconds,
        }


@dataclass(frozen=True)
class TranscriptRecord:
    """
    The canonical transcript of one segment. Immutable once produced.
    Phrases keep the order in which the recognizer delivered them.
    """
    id: str
    filename: str
    recognition_status: Optional[RecognitionStatus] = None
    phrases: Tuple[Phrase, ...] = field(default_factory=tuple)

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "Filename": self.filename,
            "RecognitionStatus": self.recognition_status.value if self.recognition_status else None,
            "Phrases": [p.to_document() for p in self.phrases],
        }
