from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from .models import Segment, SegmentArtifact


class ISegmentWriter(ABC):
    """
    Contract for persisting one segment's bytes to a named output sink.
    """

    @abstractmethod
    def write(self, segment: Segment, reader: BinaryIO, sink_path: Path,
              sample_rate: int, channels: int, sample_width: int) -> SegmentArtifact:
        """
        Copies the segment's byte range out of `reader` into `sink_path`.

        The sink must be finalized (headers written, buffers flushed) on every
        exit path, including failure.

        Raises:
            OSError: If reading the source or writing the sink fails.
        """
        pass
