from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from app.core.jobs.domain.models import BlobTrigger

class IArrivalSource(ABC):
    """
    Contract for discovering blobs that have arrived in an inbox directory.
    """
    @abstractmethod
    def arrivals(self, root: Path, recursive: bool) -> Iterator[BlobTrigger]:
        """
        Yields one trigger per arrived blob, ordered by path.
        Must skip system files and uploads that are still in progress.
        """
        pass
