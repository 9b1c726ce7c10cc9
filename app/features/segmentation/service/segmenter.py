# File: app/features/segmentation/service/segmenter.py
import logging
import math
from pathlib import Path
from typing import Iterator, List

from ..domain.interfaces import ISegmentWriter
from ..domain.models import AudioStream, Segment, SegmentArtifact

logger = logging.getLogger(__name__)


def plan_segments(stream: AudioStream, nominal_duration_seconds: int, source_id: str) -> Iterator[Segment]:
    """
    Lazily yields the frame-aligned segments that partition `stream`.

    - A source shorter than the nominal duration yields one segment spanning all of it.
    - A source shorter than one second (including an empty one) yields exactly one segment.
    - The last segment always ends at the true end of the stream, so the byte
      lengths of all segments add up to the stream's byte length.
    """
    if isinstance(nominal_duration_seconds, bool) or not isinstance(nominal_duration_seconds, int):
        raise ValueError(f"Segment duration must be an integer, got {nominal_duration_seconds!r}")
    if nominal_duration_seconds <= 0:
        raise ValueError(f"Segment duration must be positive, got {nominal_duration_seconds}")

    stream.validate_framing()

    total_seconds = stream.total_duration_seconds
    duration = min(nominal_duration_seconds, total_seconds)

    if total_seconds == 0:
        segment_count = 1
    else:
        segment_count = math.ceil(total_seconds / duration)

    frames_per_segment = duration * stream.sample_rate
    total_frames = stream.total_frames

    logger.debug(
        f"Planning {segment_count} segment(s) of {duration}s for {source_id} "
        f"({total_frames} frames, {stream.byte_length} bytes)"
    )

    start_frame = 0
    for i in range(segment_count):
        if i == segment_count - 1:
            end_frame = total_frames
        else:
            end_frame = start_frame + frames_per_segment

        yield Segment(
            source_id=source_id,
            index=i + 1,
            start_frame=start_frame,
            end_frame=end_frame,
            frame_size=stream.frame_size
        )
        start_frame = end_frame


class Segmenter:
    """
    Splits one decoded source into segment files, one at a time.
    """

    def __init__(self, writer: ISegmentWriter):
        self.writer = writer

    def split(self, stream: AudioStream, output_dir: Path, source_id: str,
              nominal_duration_seconds: int, suffix: str = ".wav") -> List[SegmentArtifact]:
        """
        Writes every segment of `stream` into `output_dir`.

        Any failure aborts the remaining segments for this source and propagates.
        """
        segments = plan_segments(stream, nominal_duration_seconds, source_id)
        output_dir.mkdir(parents=True, exist_ok=True)

        artifacts: List[SegmentArtifact] = []
        with stream.open() as reader:
            for segment in segments:
                sink_path = output_dir / f"{segment.name}{suffix}"
                artifact = self.writer.write(
                    segment,
                    reader,
                    sink_path,
                    sample_rate=stream.sample_rate,
                    channels=stream.channels,
                    sample_width=stream.sample_width
                )
                artifacts.append(artifact)

        logger.info(f"Split {source_id} into {len(artifacts)} segment(s) of up to {nominal_duration_seconds}s")
        return artifacts
