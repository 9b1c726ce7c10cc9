import logging
import shutil
import threading
from pathlib import Path
from typing import Optional

from app.core.jobs.domain.models import BlobTrigger, JobRecord
from app.core.jobs.manager import JobManager
from app.core.jobs.types import JobStatus

from ..domain.models import ScanRequest, ScanSummary
from ..data.file_walker import InboxWalker
from ..data.ignore_rules import IgnoreRules

logger = logging.getLogger(__name__)

class InboxScanner:
    """
    Turns every file waiting in the inbox into a blob-arrival trigger
    and runs it through the JobManager, one file at a time.

    A handled blob leaves the inbox: it is moved to `processed/` or `failed/`
    (keeping its relative path), so each arrival runs exactly one job.
    """

    def __init__(self, jobs: Optional[JobManager] = None):
        self.source = InboxWalker()
        self.jobs = jobs or JobManager()

    def scan_and_process(self, request: ScanRequest,
                         cancel_event: Optional[threading.Event] = None) -> ScanSummary:
        summary = ScanSummary()
        logger.info(f"Starting scan of: {request.root_path}")

        for trigger in self.source.arrivals(request.root_path, request.recursive):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Scan cancelled")
                break

            summary.files_found += 1
            job = self.jobs.run(trigger, cancel_event)
            summary.jobs.append(job)

            if job.status == JobStatus.COMPLETED:
                summary.files_processed += 1
            else:
                summary.files_failed += 1
                summary.errors.append(f"{trigger.name}: {job.error_message}")

            try:
                self._archive(request.root_path, trigger, job)
            except OSError as e:
                logger.error(f"Could not move {trigger.name} out of the inbox: {e}")
                summary.errors.append(f"{trigger.name}: not archived: {e}")

        logger.info(f"Scan complete. Processed: {summary.files_processed}/{summary.files_found}")
        return summary

    def _archive(self, root: Path, trigger: BlobTrigger, job: JobRecord) -> Path:
        folder = IgnoreRules.PROCESSED_DIR if job.status == JobStatus.COMPLETED else IgnoreRules.FAILED_DIR
        destination = root / folder / trigger.path.relative_to(root)

        # A blob with the same name was handled before; keep both
        if destination.exists():
            destination = destination.with_name(f"{destination.stem}.{job.id.hex[:8]}{destination.suffix}")

        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(trigger.path), str(destination))
        logger.debug(f"Moved {trigger.name} -> {destination}")
        return destination
