import io
import json
import threading

import pytest
import requests

from app.core.errors import RecognitionError
from app.features.transcription.data.speech_client import SpeechServiceClient, parse_message
from app.features.transcription.domain.models import PhraseEvent, RecognitionStatus, TerminalStatus

SPEECH_URL = "https://speech.example.test/recognize"
TOKEN_URL = "https://speech.example.test/issueToken"


class FakeResponse:
    def __init__(self, status_code=200, text="", lines=(), break_with=None):
        self.status_code = status_code
        self.text = text
        self._lines = list(lines)
        self._break_with = break_with
        self.closed = False

    def iter_lines(self, decode_unicode=False):
        for line in self._lines:
            yield line
        if self._break_with is not None:
            raise self._break_with

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeSession:
    """
    Records every POST. The token endpoint always answers; the recognition
    endpoint answers with the queued responses in order.
    """

    def __init__(self, responses=(), token_status=200, raise_on_post=None):
        self.responses = list(responses)
        self.token_status = token_status
        self.raise_on_post = raise_on_post
        self.calls = []
        self.uploaded = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if url == TOKEN_URL:
            return FakeResponse(status_code=self.token_status, text="token-123\n")

        if self.raise_on_post is not None:
            raise self.raise_on_post
        # Drain the chunked body like the transport would
        self.uploaded.append(b"".join(kwargs["data"]))
        return self.responses.pop(0)


def lines(*messages):
    return [json.dumps(m) for m in messages]


def make_client(session, **kwargs):
    return SpeechServiceClient(SPEECH_URL, "key-abc", TOKEN_URL, session=session, chunk_bytes=4, **kwargs)


# --- MESSAGE PARSING ---

def test_detailed_phrase_message():
    event = parse_message({
        "RecognitionStatus": "Success",
        "Offset": 12_500_000,
        "Duration": 9_000_000,
        "DisplayText": "Good morning.",
        "NBest": [{"Confidence": 0.93, "Display": "Good morning."}],
    })

    assert event == PhraseEvent(confidence=0.93, display_text="Good morning.", offset_ticks=12_500_000)


def test_simple_phrase_message_without_nbest():
    event = parse_message({"RecognitionStatus": "Success", "DisplayText": "Hi.", "Offset": 0})

    assert isinstance(event, PhraseEvent)
    assert event.display_text == "Hi."
    assert event.confidence == ""


def test_success_without_text_is_skipped():
    assert parse_message({"RecognitionStatus": "Success", "DisplayText": ""}) is None


@pytest.mark.parametrize("wire, status", [
    ("EndOfDictation", RecognitionStatus.SUCCESS),
    ("InitialSilenceTimeout", RecognitionStatus.INITIAL_SILENCE_TIMEOUT),
    ("BabbleTimeout", RecognitionStatus.BABBLE_TIMEOUT),
    ("NoMatch", RecognitionStatus.NO_MATCH),
    ("Error", RecognitionStatus.ERROR),
    ("SomethingNew", RecognitionStatus.ERROR),
])
def test_terminal_messages(wire, status):
    assert parse_message({"RecognitionStatus": wire}) == TerminalStatus(status)


def test_message_without_status_is_a_protocol_error():
    with pytest.raises(RecognitionError):
        parse_message({"DisplayText": "orphan"})


def test_non_numeric_offset_is_a_protocol_error():
    with pytest.raises(RecognitionError):
        parse_message({"RecognitionStatus": "Success", "DisplayText": "x", "Offset": "soon"})


# --- STREAMING ---

def test_stream_uploads_audio_and_yields_events():
    response = FakeResponse(lines=lines(
        {"RecognitionStatus": "Success", "DisplayText": "hello", "Offset": 0, "NBest": [{"Confidence": 0.9}]},
        {"RecognitionStatus": "Success", "DisplayText": "world", "Offset": 10_000_000, "NBest": [{"Confidence": 0.8}]},
        {"RecognitionStatus": "EndOfDictation"},
    ) + [""])
    session = FakeSession([response])
    client = make_client(session)

    events = list(client.stream(io.BytesIO(b"0123456789"), "req-1", threading.Event()))

    assert events == [
        PhraseEvent(0.9, "hello", 0),
        PhraseEvent(0.8, "world", 10_000_000),
        TerminalStatus(RecognitionStatus.SUCCESS),
    ]
    assert session.uploaded == [b"0123456789"]
    assert response.closed

    url, kwargs = session.calls[-1]
    assert url == SPEECH_URL
    assert kwargs["headers"]["Authorization"] == "Bearer token-123"
    assert kwargs["headers"]["X-RequestId"] == "req-1"
    assert kwargs["params"] == {"language": "en-US", "format": "detailed"}
    assert kwargs["stream"] is True


def test_clean_close_without_status_counts_as_end_of_dictation():
    response = FakeResponse(lines=lines({"RecognitionStatus": "Success", "DisplayText": "only", "Offset": 0}))
    client = make_client(FakeSession([response]))

    events = list(client.stream(io.BytesIO(b"abcd"), "req-1", threading.Event()))

    assert events[-1] == TerminalStatus(RecognitionStatus.SUCCESS)
    assert len(events) == 2


def test_cancelled_stream_stops_without_terminal_status():
    cancel = threading.Event()
    cancel.set()
    response = FakeResponse(lines=lines({"RecognitionStatus": "Success", "DisplayText": "late", "Offset": 0}))
    session = FakeSession([response])

    events = list(make_client(session).stream(io.BytesIO(b"abcdefgh"), "req-1", cancel))

    assert events == []
    # The upload generator also stops as soon as the session is cancelled
    assert session.uploaded == [b""]


def test_token_is_cached_between_requests():
    responses = [FakeResponse(lines=lines({"RecognitionStatus": "EndOfDictation"})) for _ in range(2)]
    session = FakeSession(responses)
    client = make_client(session)

    list(client.stream(io.BytesIO(b"a"), "req-1", threading.Event()))
    list(client.stream(io.BytesIO(b"b"), "req-2", threading.Event()))

    token_calls = [c for c in session.calls if c[0] == TOKEN_URL]
    assert len(token_calls) == 1
    assert token_calls[0][1]["headers"] == {"Ocp-Apim-Subscription-Key": "key-abc"}


def test_token_is_refreshed_after_expiry():
    responses = [FakeResponse(lines=lines({"RecognitionStatus": "EndOfDictation"})) for _ in range(2)]
    session = FakeSession(responses)
    client = make_client(session)

    list(client.stream(io.BytesIO(b"a"), "req-1", threading.Event()))
    client._token_expires_at = 0.0
    list(client.stream(io.BytesIO(b"b"), "req-2", threading.Event()))

    assert len([c for c in session.calls if c[0] == TOKEN_URL]) == 2


def test_token_failure_is_a_recognition_error():
    client = make_client(FakeSession(token_status=401))

    with pytest.raises(RecognitionError, match="401"):
        list(client.stream(io.BytesIO(b"a"), "req-1", threading.Event()))


def test_http_error_status_is_a_recognition_error():
    client = make_client(FakeSession([FakeResponse(status_code=503)]))

    with pytest.raises(RecognitionError, match="503"):
        list(client.stream(io.BytesIO(b"a"), "req-1", threading.Event()))


def test_connection_failure_is_a_recognition_error():
    client = make_client(FakeSession(raise_on_post=requests.ConnectionError("refused")))

    with pytest.raises(RecognitionError):
        list(client.stream(io.BytesIO(b"a"), "req-1", threading.Event()))


def test_broken_stream_is_a_recognition_error_after_delivered_events():
    response = FakeResponse(
        lines=lines({"RecognitionStatus": "Success", "DisplayText": "kept", "Offset": 0}),
        break_with=requests.exceptions.ChunkedEncodingError("connection broken"),
    )
    stream = make_client(FakeSession([response])).stream(io.BytesIO(b"a"), "req-1", threading.Event())

    assert next(stream).display_text == "kept"
    with pytest.raises(RecognitionError):
        next(stream)


def test_malformed_json_is_a_recognition_error():
    client = make_client(FakeSession([FakeResponse(lines=["{not json"])]))

    with pytest.raises(RecognitionError):
        list(client.stream(io.BytesIO(b"a"), "req-1", threading.Event()))


def test_client_requires_endpoint_and_key():
    with pytest.raises(ValueError):
        SpeechServiceClient("", "key", TOKEN_URL)
