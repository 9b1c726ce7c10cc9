import threading
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Union

from .models import PhraseEvent, TerminalStatus, TranscriptRecord

RecognitionEvent = Union[PhraseEvent, TerminalStatus]


class IRecognitionClient(ABC):
    """
    Contract for any streaming speech recognition service.
    """
    @abstractmethod
    def stream(self, audio: BinaryIO, request_id: str,
               cancel_event: threading.Event) -> Iterator[RecognitionEvent]:
        """
        Streams `audio` to the service and yields results as they arrive.

        The iterator ends after a TerminalStatus, when the service closes
        the stream, or soon after `cancel_event` is set.

        Raises:
            RecognitionError: On transport or protocol failures.
        """
        pass


class ITranscriptStore(ABC):
    """
    Contract for the transcript document store.
    """
    @abstractmethod
    def persist(self, record: TranscriptRecord) -> str:
        """
        Writes `record` as a new document and returns its stored id.

        Raises:
            PersistenceError: If the store is unreachable or rejects the write.
        """
        pass
