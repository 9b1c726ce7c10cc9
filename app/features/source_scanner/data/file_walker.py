from pathlib import Path
from typing import Iterator

from app.core.jobs.domain.models import BlobTrigger
from ..domain.interfaces import IArrivalSource
from .ignore_rules import IgnoreRules

class InboxWalker(IArrivalSource):
    """
    Treats every regular file under the inbox as an arrived blob.
    """

    def arrivals(self, root: Path, recursive: bool) -> Iterator[BlobTrigger]:
        candidates = root.rglob("*") if recursive else root.iterdir()

        for path in sorted(candidates):
            if not path.is_file():
                continue
            # An ignored folder hides everything below it
            if any(IgnoreRules.should_ignore(Path(part)) for part in path.relative_to(root).parts):
                continue
            yield BlobTrigger.from_path(path)
