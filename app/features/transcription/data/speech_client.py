# File: app/features/transcription/data/speech_client.py
import json
import logging
import threading
import time
from typing import Any, BinaryIO, Iterator, Mapping, Optional

import requests

from app.core.errors import RecognitionError
from ..domain.interfaces import IRecognitionClient, RecognitionEvent
from ..domain.models import PhraseEvent, RecognitionStatus, TerminalStatus

logger = logging.getLogger(__name__)

# Marker the service sends once the whole audio stream has been recognized.
END_OF_DICTATION = "EndOfDictation"


def parse_message(message: Mapping[str, Any]) -> Optional[RecognitionEvent]:
    """
    Maps one result message from the service onto a recognition event.

    - "Success" with text     -> PhraseEvent
    - "EndOfDictation"        -> TerminalStatus(Success)
    - any other known status  -> TerminalStatus(status)
    - "Success" without text  -> None (nothing recognized in that span)
    """
    status = message.get("RecognitionStatus")
    if not status:
        raise RecognitionError(f"Result message without RecognitionStatus: {message!r}")

    if status == END_OF_DICTATION:
        return TerminalStatus(RecognitionStatus.SUCCESS)

    if status == RecognitionStatus.SUCCESS.value:
        nbest = message.get("NBest") or []
        best = nbest[0] if nbest else {}

        text = message.get("DisplayText")
        if text is None:
            text = best.get("Display")
        if not text:
            return None

        confidence = best.get("Confidence", message.get("Confidence", ""))
        try:
            offset = int(message.get("Offset", 0))
        except (TypeError, ValueError) as exc:
            raise RecognitionError(f"Invalid Offset in result: {message.get('Offset')!r}") from exc

        return PhraseEvent(confidence=confidence, display_text=text, offset_ticks=offset)

    try:
        return TerminalStatus(RecognitionStatus(status))
    except ValueError:
        logger.warning(f"Unknown recognition status {status!r}, treating it as Error")
        return TerminalStatus(RecognitionStatus.ERROR)


class SpeechServiceClient(IRecognitionClient):
    """
    Streaming client for a Bing/Azure-style speech endpoint.

    Audio is uploaded as a chunked request body. Once the upload is complete
    the response is read as newline-delimited JSON messages.
    """

    # Issued tokens are valid for 10 minutes; refresh a minute early.
    TOKEN_LIFETIME_SECONDS = 9 * 60

    def __init__(
        self,
        endpoint: str,
        subscription_key: str,
        token_endpoint: str,
        language: str = "en-US",
        *,
        session: Optional[requests.Session] = None,
        connect_timeout: float = 10.0,
        read_timeout: float = 60.0,
        chunk_bytes: int = 8192,
    ) -> None:
        if not endpoint or not subscription_key:
            raise ValueError("Speech endpoint and subscription key must be configured")

        self.endpoint = endpoint
        self.subscription_key = subscription_key
        self.token_endpoint = token_endpoint
        self.language = language
        self.timeout = (connect_timeout, read_timeout)
        self.chunk_bytes = chunk_bytes
        self._session = session or requests.Session()

        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    def _get_token(self) -> str:
        with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            logger.debug(f"Requesting speech token from {self.token_endpoint}")
            try:
                response = self._session.post(
                    self.token_endpoint,
                    headers={"Ocp-Apim-Subscription-Key": self.subscription_key},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise RecognitionError(f"Token request failed: {exc}") from exc

            if response.status_code != 200:
                raise RecognitionError(f"Token endpoint returned HTTP {response.status_code}")

            self._token = response.text.strip()
            self._token_expires_at = time.monotonic() + self.TOKEN_LIFETIME_SECONDS
            return self._token

    def _audio_chunks(self, audio: BinaryIO, cancel_event: threading.Event) -> Iterator[bytes]:
        while not cancel_event.is_set():
            data = audio.read(self.chunk_bytes)
            if not data:
                return
            yield data

    def stream(self, audio: BinaryIO, request_id: str,
               cancel_event: threading.Event) -> Iterator[RecognitionEvent]:
        headers = {
            "Authorization": f"Bearer {self._get_token()}",
            "Content-Type": "audio/wav; codecs=audio/pcm",
            "Accept": "application/json",
            "X-RequestId": request_id,
        }
        params = {"language": self.language, "format": "detailed"}

        try:
            response = self._session.post(
                self.endpoint,
                params=params,
                headers=headers,
                data=self._audio_chunks(audio, cancel_event),
                stream=True,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RecognitionError(f"Recognition request {request_id} failed: {exc}") from exc

        with response:
            if response.status_code != 200:
                raise RecognitionError(
                    f"Recognition service returned HTTP {response.status_code} (request_id={request_id})"
                )

            try:
                for line in response.iter_lines(decode_unicode=True):
                    if cancel_event.is_set():
                        logger.info(f"Recognition request {request_id} cancelled by caller")
                        return
                    if not line:
                        continue

                    try:
                        message = json.loads(line)
                    except ValueError as exc:
                        raise RecognitionError(f"Malformed result line: {line[:200]!r}") from exc

                    event = parse_message(message)
                    if event is None:
                        continue

                    yield event
                    if isinstance(event, TerminalStatus):
                        return
            except requests.RequestException as exc:
                raise RecognitionError(f"Recognition stream {request_id} broke: {exc}") from exc

        # A clean close without a final status message is the end of dictation.
        if not cancel_event.is_set():
            yield TerminalStatus(RecognitionStatus.SUCCESS)
