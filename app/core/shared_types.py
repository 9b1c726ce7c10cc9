from dataclasses import dataclass
from pathlib import Path

@dataclass(frozen=True)
class MediaFile:
    """
    Entity representing a media file on the filesystem.
    Encapsulates path validation.
    """
    path: Path
    validate_exists: bool = True

    def __post_init__(self):
        if str(self.path).strip() == "." or str(self.path).strip() == "":
             raise ValueError("File path cannot be empty.")
        if self.validate_exists and not self.path.is_file():
            raise FileNotFoundError(f"Media file not found: {self.path}")

    @property
    def stem(self) -> str:
        return self.path.stem

    def exists(self) -> bool:
        return self.path.exists()
