from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from app.core.jobs.domain.models import JobRecord

@dataclass(frozen=True)
class ScanRequest:
    """
    Intent to process everything waiting in an inbox directory.
    """
    root_path: Path
    recursive: bool = False

    def __post_init__(self):
        if not self.root_path.exists():
            raise FileNotFoundError(f"Inbox not found: {self.root_path}")
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Inbox is not a directory: {self.root_path}")

@dataclass
class ScanSummary:
    """
    Report returned after scanning completes.
    """
    files_found: int = 0
    files_processed: int = 0
    files_failed: int = 0
    jobs: List[JobRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
