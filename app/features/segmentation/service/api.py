from pathlib import Path
from typing import List
from ..domain.models import AudioStream, SegmentArtifact
from ..data.wav_writer import WavSegmentWriter
from .segmenter import Segmenter

def split_audio(stream: AudioStream, output_dir: str, source_id: str, duration_seconds: int) -> List[SegmentArtifact]:
    """
    Public Service API: Cut a decoded PCM stream into WAV segments.

    Args:
        stream: The decoded source.
        output_dir: Directory that receives <source_id>_segment_<n>.wav files.
        source_id: Identity of the source recording, used for segment names.
        duration_seconds: Nominal segment length.
    """
    segmenter = Segmenter(WavSegmentWriter())
    return segmenter.split(stream, Path(output_dir), source_id, duration_seconds)
