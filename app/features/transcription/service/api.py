from pathlib import Path

from app.core.config.settings import settings
from ..data.speech_client import SpeechServiceClient
from ..domain.interfaces import IRecognitionClient
from ..domain.models import TranscriptRecord
from .session import RecognitionSession

def build_speech_client() -> SpeechServiceClient:
    return SpeechServiceClient(
        endpoint=settings.SPEECH_ENDPOINT,
        subscription_key=settings.SPEECH_KEY,
        token_endpoint=settings.SPEECH_TOKEN_ENDPOINT,
        language=settings.SPEECH_LANGUAGE
    )

def transcribe_segment(audio_path: str, client: IRecognitionClient = None,
                       timeout_seconds: float = None) -> TranscriptRecord:
    """
    Standalone API for recognizing one segment file.
    Returns the aggregated record without persisting it.
    """
    path = Path(audio_path)
    session = RecognitionSession(
        filename=path.name,
        client=client or build_speech_client(),
        timeout_seconds=timeout_seconds or settings.recognition_timeout
    )
    with open(path, "rb") as audio:
        return session.run(audio)
