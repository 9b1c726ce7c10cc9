from dataclasses import dataclass, field
from typing import List, Optional

from app.core.errors import PublishError


@dataclass(frozen=True)
class PublishOutcome:
    """
    Result of uploading one segment.
    """
    blob_name: str
    location: Optional[str] = None
    error: Optional[PublishError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PublishReport:
    """
    Per-segment report returned after a publish run.
    """
    container: str
    outcomes: List[PublishOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[PublishOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[PublishOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
