import subprocess
import logging
from pathlib import Path
from app.core.config.settings import settings
from app.core.shared_types import MediaFile
from app.features.segmentation.domain.models import AudioStream
from ..domain.interfaces import IAudioDecoder
from ..domain.models import ExtractionConfig

logger = logging.getLogger(__name__)

class FFmpegDecoder(IAudioDecoder):
    def __init__(self, ffmpeg_binary: str = None):
        self.ffmpeg_binary = ffmpeg_binary or settings.FFMPEG_BINARY

    def decode_to_pcm(self, source: MediaFile, output_dir: Path, config: ExtractionConfig) -> AudioStream:
        if not source.exists():
            raise FileNotFoundError(f"Source not found: {source.path}")

        output_dir.mkdir(parents=True, exist_ok=True)

        # Output filename: source_name.pcm
        output_path = output_dir / f"{source.stem}.pcm"

        # FFmpeg command
        # -vn: Disable video
        # -y: Overwrite output
        # -f s16le: Headerless signed little-endian samples
        cmd = [
            self.ffmpeg_binary,
            "-y",
            "-i", str(source.path),
            "-vn",
            "-ac", str(config.channels),
            "-ar", str(config.sample_rate_hz),
            "-f", config.format,
            "-acodec", f"pcm_{config.format}",
            str(output_path)
        ]

        logger.info(f"Decoding audio: {' '.join(cmd)}")

        try:
            subprocess.run(
                cmd,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE
            )
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.decode(errors="replace") if e.stderr else str(e)
            logger.error(f"FFmpeg failed: {error_msg}")
            raise RuntimeError(f"Audio decoding failed: {error_msg}") from e

        return AudioStream.from_file(
            output_path,
            sample_rate=config.sample_rate_hz,
            channels=config.channels,
            sample_width=config.sample_width
        )
