from pathlib import Path
from app.core.shared_types import MediaFile
from app.features.segmentation.domain.models import AudioStream
from ..domain.models import ExtractionConfig
from ..data.ffmpeg_adapter import FFmpegDecoder

def decode_source(source_path: str, output_dir: str, config: ExtractionConfig = None) -> AudioStream:
    """
    Standalone API: Decodes an audio/video file into raw PCM.
    Does NOT interact with any store.
    """
    decoder = FFmpegDecoder()
    source = MediaFile(Path(source_path))

    return decoder.decode_to_pcm(source, Path(output_dir), config or ExtractionConfig())
