import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional
from uuid import UUID

from app.core.jobs.types import JobType, JobStatus


def utc_now():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BlobTrigger:
    """
    Arrival of a named binary blob: a source recording, or an
    already published segment.
    """
    name: str  # full name with extension, e.g. "interview.mp4"
    path: Path
    length: int

    def __post_init__(self):
        if not self.name or Path(self.name).name != self.name:
            raise ValueError(f"Blob name must be a plain file name, got {self.name!r}")
        if self.length < 0:
            raise ValueError(f"Blob length cannot be negative: {self.length}")

    @classmethod
    def from_path(cls, path: Path) -> "BlobTrigger":
        return cls(name=path.name, path=path, length=path.stat().st_size)

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower()

    def open(self) -> BinaryIO:
        return open(self.path, "rb")


@dataclass
class JobRecord:
    """
    Outcome of one pipeline invocation.
    """
    job_type: JobType
    trigger_name: str
    id: UUID = field(default_factory=uuid.uuid4)
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=utc_now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error_message: Optional[str] = None
    result_meta: Dict[str, Any] = field(default_factory=dict)
