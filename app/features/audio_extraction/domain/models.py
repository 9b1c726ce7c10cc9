from dataclasses import dataclass

# ffmpeg raw PCM format name -> bytes per sample
PCM_FORMAT_WIDTHS = {
    "u8": 1,
    "s16le": 2,
    "s24le": 3,
    "s32le": 4,
}


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Target PCM layout for decoded sources.
    Defaulting to 16 kHz mono 16-bit, the format the recognizer expects.
    """
    sample_rate_hz: int = 16000
    channels: int = 1
    sample_width: int = 2  # bytes per sample
    format: str = "s16le"  # ffmpeg raw format name, must match sample_width

    def __post_init__(self):
        if self.sample_rate_hz <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate_hz}")
        if self.channels <= 0:
            raise ValueError(f"Channel count must be positive, got {self.channels}")
        if self.format not in PCM_FORMAT_WIDTHS:
            raise ValueError(f"Unsupported PCM format: {self.format!r}")
        if PCM_FORMAT_WIDTHS[self.format] != self.sample_width:
            raise ValueError(
                f"Format {self.format} has {PCM_FORMAT_WIDTHS[self.format]}-byte samples, "
                f"got sample_width={self.sample_width}"
            )
