import logging
import wave
from pathlib import Path
from typing import BinaryIO

from ..domain.interfaces import ISegmentWriter
from ..domain.models import Segment, SegmentArtifact
from .pcm_reader import DEFAULT_CHUNK_BYTES, copy_segment

logger = logging.getLogger(__name__)


class WavSegmentWriter(ISegmentWriter):
    """
    Writes a segment as a standalone RIFF/WAVE file so each artifact is playable
    (and streamable to the recognizer) on its own.
    """

    def __init__(self, chunk_bytes: int = DEFAULT_CHUNK_BYTES):
        self.chunk_bytes = chunk_bytes

    def write(self, segment: Segment, reader: BinaryIO, sink_path: Path,
              sample_rate: int, channels: int, sample_width: int) -> SegmentArtifact:
        sink_path.parent.mkdir(parents=True, exist_ok=True)

        # Closing the writer patches the RIFF/data sizes into the header,
        # which the with-block guarantees even if the copy fails half way.
        with wave.open(str(sink_path), "wb") as sink:
            sink.setnchannels(channels)
            sink.setsampwidth(sample_width)
            sink.setframerate(sample_rate)

            copied = copy_segment(reader, segment, sink.writeframesraw, self.chunk_bytes)

        logger.debug(f"Wrote {segment.name}: {copied} bytes -> {sink_path}")
        return SegmentArtifact(segment=segment, path=sink_path)
