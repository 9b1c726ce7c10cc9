from abc import ABC, abstractmethod
from pathlib import Path

from app.core.shared_types import MediaFile
from app.features.segmentation.domain.models import AudioStream
from .models import ExtractionConfig


class IAudioDecoder(ABC):
    """
    Contract for turning an arbitrary audio/video container into raw PCM.
    The choice of codec is entirely the decoder's business.
    """
    @abstractmethod
    def decode_to_pcm(self, source: MediaFile, output_dir: Path, config: ExtractionConfig) -> AudioStream:
        """
        Decodes the first audio track of `source` into a headerless PCM file.

        Args:
            source: The audio or video file to decode.
            output_dir: Directory where the raw PCM file should be written.
            config: Target sample rate / channels / sample width.

        Returns:
            AudioStream describing the decoded bytes.

        Raises:
            RuntimeError: If the underlying decoding process fails.
        """
        pass
