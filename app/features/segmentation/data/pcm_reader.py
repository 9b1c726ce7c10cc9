# File: app/features/segmentation/data/pcm_reader.py
from typing import BinaryIO, Callable

from ..domain.models import Segment

# Read buffer target; rounded down to a whole number of frames per stream.
DEFAULT_CHUNK_BYTES = 64 * 1024


def copy_segment(reader: BinaryIO, segment: Segment, sink_write: Callable[[bytes], object],
                 chunk_bytes: int = DEFAULT_CHUNK_BYTES) -> int:
    """
    Streams the segment's byte range from `reader` into `sink_write`.

    Chunks are a whole number of frames and never extend past the segment end.
    Returns the number of bytes copied.

    Raises:
        OSError: If the reader ends before the segment does.
    """
    chunk_size = max(1, chunk_bytes // segment.frame_size) * segment.frame_size

    reader.seek(segment.start_byte)
    remaining = segment.byte_length
    copied = 0

    while remaining > 0:
        data = reader.read(min(chunk_size, remaining))
        if not data:
            raise OSError(
                f"Unexpected end of stream in {segment.name}: "
                f"{remaining} of {segment.byte_length} bytes missing"
            )
        sink_write(data)
        remaining -= len(data)
        copied += len(data)

    return copied
