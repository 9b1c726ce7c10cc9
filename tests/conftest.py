# File: tests/conftest.py

import os
import sys
import threading
import time
import wave
from pathlib import Path

import pytest

# 1. Add project root to path
sys.path.append(os.getcwd())

from app.core.database.connection import document_store_url
from app.features.segmentation.domain.models import AudioStream
from app.features.transcription.data.repository import SqlTranscriptStore
from app.features.transcription.domain.interfaces import IRecognitionClient


def write_pcm(path: Path, frames: int, channels: int = 1, sample_width: int = 2, extra_bytes: int = 0) -> Path:
    """
    Writes a deterministic, non-repeating byte pattern so that any misplaced
    or duplicated byte shows up in comparisons.
    """
    length = frames * channels * sample_width + extra_bytes
    pattern = bytes((i * 7 + (i >> 8)) & 0xFF for i in range(65536))
    with open(path, "wb") as f:
        remaining = length
        while remaining > 0:
            chunk = pattern[:min(remaining, len(pattern))]
            f.write(chunk)
            remaining -= len(chunk)
    return path


@pytest.fixture
def make_stream(tmp_path):
    """
    Factory: make_stream(seconds, sample_rate=16000, channels=1, sample_width=2, extra_bytes=0)
    `seconds` may be fractional.
    """
    counter = {"n": 0}

    def _make(seconds: float, sample_rate: int = 16000, channels: int = 1,
              sample_width: int = 2, extra_bytes: int = 0) -> AudioStream:
        counter["n"] += 1
        path = tmp_path / f"source_{counter['n']}.pcm"
        frames = int(round(seconds * sample_rate))
        write_pcm(path, frames, channels, sample_width, extra_bytes)
        return AudioStream.from_file(path, sample_rate=sample_rate, channels=channels, sample_width=sample_width)

    return _make


@pytest.fixture
def make_wav(tmp_path):
    """Factory: writes a small 16 kHz mono segment file named `name`."""
    def _make(name: str, seconds: float = 1.0) -> Path:
        path = tmp_path / name
        with wave.open(str(path), "wb") as w:
            w.setnchannels(1)
            w.setsampwidth(2)
            w.setframerate(16000)
            w.writeframes(b"\x00\x01" * int(16000 * seconds))
        return path
    return _make


@pytest.fixture
def transcript_store(tmp_path):
    """
    SQLite-backed document store. The database file does not exist yet,
    so the first persist has to create it.
    """
    url = document_store_url("sqlite://", "", str(tmp_path / "transcripts.db"))
    return SqlTranscriptStore(url, "transcripts")


class ScriptedRecognitionClient(IRecognitionClient):
    """
    In-process stand-in for the speech service.

    Yields `events` in order. If `hang_after` is True the stream then blocks
    until the session cancels it; if `fail_with` is set it is raised after the
    scripted events.
    """

    def __init__(self, events=(), hang_after: bool = False, fail_with: Exception = None, delay: float = 0.0):
        self.events = list(events)
        self.hang_after = hang_after
        self.fail_with = fail_with
        self.delay = delay
        self.audio_read = b""
        self.request_ids = []

    def stream(self, audio, request_id, cancel_event: threading.Event):
        self.request_ids.append(request_id)
        self.audio_read = audio.read()

        for event in self.events:
            if self.delay:
                time.sleep(self.delay)
            yield event

        if self.fail_with is not None:
            raise self.fail_with

        if self.hang_after:
            cancel_event.wait(10)


@pytest.fixture
def scripted_client():
    return ScriptedRecognitionClient
