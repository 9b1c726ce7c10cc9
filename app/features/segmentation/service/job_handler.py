import logging
import tempfile
import threading
from pathlib import Path
from typing import Optional

from app.core.config.settings import settings
from app.core.jobs.domain.models import BlobTrigger
from app.core.shared_types import MediaFile
from app.features.audio_extraction.data.ffmpeg_adapter import FFmpegDecoder
from app.features.audio_extraction.domain.interfaces import IAudioDecoder
from app.features.audio_extraction.domain.models import ExtractionConfig
from app.features.storage.service.api import SegmentPublisher

from ..data.wav_writer import WavSegmentWriter
from .segmenter import Segmenter

logger = logging.getLogger(__name__)

class SegmentationHandler:
    """
    Worker for JOB_TYPE.SEGMENTATION.
    Source file in, published segment blobs out.
    """

    def __init__(self, decoder: Optional[IAudioDecoder] = None,
                 publisher: Optional[SegmentPublisher] = None,
                 duration_seconds: Optional[int] = None,
                 container: Optional[str] = None,
                 config: Optional[ExtractionConfig] = None):
        self.decoder = decoder or FFmpegDecoder()
        self.publisher = publisher or SegmentPublisher()
        self.duration_seconds = duration_seconds
        self.container = container
        self.config = config or ExtractionConfig()

    def handle(self, trigger: BlobTrigger, cancel_event: Optional[threading.Event] = None) -> dict:
        duration = self.duration_seconds or settings.segment_duration
        container = self.container or settings.SEGMENT_CONTAINER
        source_id = trigger.stem

        logger.info(f"Processing Segmentation for {trigger.name} ({trigger.length} bytes, {duration}s segments)")

        # Each invocation gets its own working area; nothing is shared between sources.
        with tempfile.TemporaryDirectory(prefix=f"{source_id}-") as tmp_dir:
            work_dir = Path(tmp_dir)

            # 1. Decode to raw PCM
            stream = self.decoder.decode_to_pcm(
                MediaFile(trigger.path),
                work_dir / "decoded",
                self.config
            )

            # 2. Split (any failure aborts the rest of this source)
            segmenter = Segmenter(WavSegmentWriter())
            artifacts = segmenter.split(stream, work_dir / "segments", source_id, duration)

            # 3. Publish (per-segment outcomes, no all-or-nothing)
            report = self.publisher.publish(artifacts, container)

        if not report.all_succeeded:
            logger.warning(
                f"{len(report.failed)} of {len(report.outcomes)} segment(s) of {trigger.name} "
                f"were not published: {[o.blob_name for o in report.failed]}"
            )

        return {
            "source_id": source_id,
            "container": container,
            "segment_count": len(artifacts),
            "published": [o.blob_name for o in report.succeeded],
            "failed": {o.blob_name: str(o.error) for o in report.failed}
        }
