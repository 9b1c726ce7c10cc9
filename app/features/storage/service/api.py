import logging
from typing import Iterable

from app.core.errors import PublishError
from app.features.segmentation.domain.models import SegmentArtifact
from ..domain.interfaces import ContainerAccess, IBlobStore
from ..domain.models import PublishOutcome, PublishReport
from ..data.local_fs import LocalBlobStore

logger = logging.getLogger(__name__)

class SegmentPublisher:
    """
    Facade for the Storage Feature.
    Uploads segment artifacts to the durable segment store, one at a time.
    """
    def __init__(self, store: IBlobStore = None):
        self.store = store or LocalBlobStore()

    def publish(self, artifacts: Iterable[SegmentArtifact], container: str) -> PublishReport:
        """
        Uploads every artifact independently.
        - Ensures the container exists before the first write.
        - A failed upload is recorded and the next artifact is still attempted.
        - Nothing is retried.

        Returns:
            PublishReport with one outcome per artifact, in input order.

        Raises:
            PublishError: If the container cannot be created or reached.
        """
        report = PublishReport(container=container)

        # An unreachable store aborts the whole batch; there is nothing to publish into.
        try:
            created = self.store.ensure_container(container, ContainerAccess.PUBLIC_READ)
        except Exception as e:
            logger.error(f"Container '{container}' is unavailable: {e}")
            raise PublishError(container, f"container is unavailable: {e}") from e
        if created:
            logger.info(f"Created container '{container}'")

        for artifact in artifacts:
            blob_name = artifact.blob_name
            try:
                location = self.store.upload(container, blob_name, artifact.path.read_bytes())
            except Exception as e:
                error = e if isinstance(e, PublishError) else PublishError(blob_name, str(e))
                logger.error(f"Upload failed for {blob_name}: {e}")
                report.outcomes.append(PublishOutcome(blob_name=blob_name, error=error))
                continue

            logger.debug(f"Uploaded {blob_name} -> {location}")
            report.outcomes.append(PublishOutcome(blob_name=blob_name, location=location))

        logger.info(
            f"Published {len(report.succeeded)}/{len(report.outcomes)} segment(s) to '{container}'"
        )
        return report
