# File: app/features/segmentation/domain/models.py
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from app.core.errors import FormatError


@dataclass(frozen=True)
class AudioStream:
    """
    Immutable description of a raw PCM source on disk.

    The bytes are interleaved little-endian samples with no container header,
    so byte offset 0 is the first sample of the first frame.
    """
    path: Path
    sample_rate: int
    channels: int
    sample_width: int  # bytes per sample (2 == 16-bit)
    byte_length: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise FormatError(f"Sample rate must be positive, got {self.sample_rate}")
        if self.channels <= 0 or self.sample_width <= 0:
            raise FormatError(
                f"Invalid frame layout: {self.channels} channel(s) x {self.sample_width} byte(s)"
            )
        if self.byte_length < 0:
            raise FormatError(f"Negative stream length: {self.byte_length}")

    @classmethod
    def from_file(cls, path: Path, sample_rate: int, channels: int, sample_width: int) -> "AudioStream":
        return cls(
            path=path,
            sample_rate=sample_rate,
            channels=channels,
            sample_width=sample_width,
            byte_length=path.stat().st_size
        )

    @property
    def frame_size(self) -> int:
        return self.channels * self.sample_width

    @property
    def total_frames(self) -> int:
        return self.byte_length // self.frame_size

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.frame_size

    @property
    def total_duration_seconds(self) -> int:
        """Whole seconds only; the fractional tail belongs to the last segment."""
        return self.total_frames // self.sample_rate

    def validate_framing(self) -> None:
        if self.byte_length % self.frame_size != 0:
            raise FormatError(
                f"{self.path.name}: length {self.byte_length} bytes is not a multiple "
                f"of the {self.frame_size}-byte sample frame"
            )

    def open(self) -> BinaryIO:
        """Seekable reader over the PCM bytes. Use as a context manager."""
        return open(self.path, "rb")


@dataclass(frozen=True)
class Segment:
    """
    A contiguous, frame-aligned sub-range [start_frame, end_frame) of an AudioStream.
    """
    source_id: str
    index: int
    start_frame: int
    end_frame: int
    frame_size: int

    def __post_init__(self):
        if self.start_frame < 0 or self.end_frame < self.start_frame:
            raise ValueError(f"Invalid frame range [{self.start_frame}, {self.end_frame})")

    @property
    def name(self) -> str:
        return f"{self.source_id}_segment_{self.index}"

    @property
    def start_byte(self) -> int:
        return self.start_frame * self.frame_size

    @property
    def end_byte(self) -> int:
        return self.end_frame * self.frame_size

    @property
    def byte_length(self) -> int:
        return self.end_byte - self.start_byte

    @property
    def frame_count(self) -> int:
        return self.end_frame - self.start_frame


@dataclass(frozen=True)
class SegmentArtifact:
    """
    A segment written to a playable file on local disk.
    """
    segment: Segment
    path: Path

    @property
    def blob_name(self) -> str:
        return f"{self.segment.name}{self.path.suffix}"
