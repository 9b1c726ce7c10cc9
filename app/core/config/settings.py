# File: app/core/config/settings.py

import os
import shutil
from pathlib import Path

from app.core.errors import ConfigurationError


class Settings:
    """
    Process-wide configuration, read from the environment once at startup
    and treated as read-only afterwards.
    """

    # --- Paths ---
    # app/core/config/settings.py -> app/core/config -> app/core -> app -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent

    def __init__(self):
        self.DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(self.BASE_DIR / "data")))
        self.ARTIFACTS_DIR: Path = self.DATA_DIR / "artifacts"
        self.INBOX_DIR: Path = self.DATA_DIR / "inbox"

        # --- Recognition Service ---
        self.SPEECH_ENDPOINT: str = os.getenv("SPEECH_ENDPOINT", "")
        self.SPEECH_KEY: str = os.getenv("SPEECH_KEY", "")
        self.SPEECH_TOKEN_ENDPOINT: str = os.getenv(
            "SPEECH_TOKEN_ENDPOINT",
            "https://api.cognitive.microsoft.com/sts/v1.0/issueToken"
        )
        self.SPEECH_LANGUAGE: str = os.getenv("SPEECH_LANGUAGE", "en-US")
        self.RECOGNITION_TIMEOUT_SECONDS: str = os.getenv("RECOGNITION_TIMEOUT_SECONDS", "600")

        # --- Segmentation ---
        self.SEGMENT_DURATION_SECONDS: str = os.getenv("SEGMENT_DURATION_SECONDS", "")
        self.SEGMENT_CONTAINER: str = os.getenv("SEGMENT_CONTAINER", "")

        # --- Document Store ---
        self.DOCUMENT_DB_ENDPOINT: str = os.getenv("DOCUMENT_DB_ENDPOINT", "")
        self.DOCUMENT_DB_KEY = os.getenv("DOCUMENT_DB_KEY")
        self.DOCUMENT_DB_DATABASE: str = os.getenv("DOCUMENT_DB_DATABASE", "")
        self.DOCUMENT_DB_COLLECTION: str = os.getenv("DOCUMENT_DB_COLLECTION", "")

        # --- External Tools ---
        # Auto-detect ffmpeg or use env var
        self.FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")

    @property
    def segment_duration(self) -> int:
        return int(self.SEGMENT_DURATION_SECONDS)

    @property
    def recognition_timeout(self) -> float:
        return float(self.RECOGNITION_TIMEOUT_SECONDS)

    def validate(self) -> None:
        """
        Checks every required option. Raises ConfigurationError naming all
        missing or invalid settings at once.
        """
        problems = []

        required = {
            "SPEECH_ENDPOINT": self.SPEECH_ENDPOINT,
            "SPEECH_KEY": self.SPEECH_KEY,
            "SEGMENT_DURATION_SECONDS": self.SEGMENT_DURATION_SECONDS,
            "SEGMENT_CONTAINER": self.SEGMENT_CONTAINER,
            "DOCUMENT_DB_ENDPOINT": self.DOCUMENT_DB_ENDPOINT,
            "DOCUMENT_DB_DATABASE": self.DOCUMENT_DB_DATABASE,
            "DOCUMENT_DB_COLLECTION": self.DOCUMENT_DB_COLLECTION,
        }
        for name, value in required.items():
            if not value or not value.strip():
                problems.append(f"{name} is not set")

        # The key may legitimately be empty (e.g. SQLite), but it must be declared.
        if self.DOCUMENT_DB_KEY is None:
            problems.append("DOCUMENT_DB_KEY is not set")

        if self.SEGMENT_DURATION_SECONDS:
            try:
                if self.segment_duration <= 0:
                    problems.append("SEGMENT_DURATION_SECONDS must be a positive integer")
            except ValueError:
                problems.append(f"SEGMENT_DURATION_SECONDS is not an integer: {self.SEGMENT_DURATION_SECONDS!r}")

        try:
            if self.recognition_timeout <= 0:
                problems.append("RECOGNITION_TIMEOUT_SECONDS must be positive")
        except ValueError:
            problems.append(f"RECOGNITION_TIMEOUT_SECONDS is not a number: {self.RECOGNITION_TIMEOUT_SECONDS!r}")

        if problems:
            raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)
        self.INBOX_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
