import os
import re
import tempfile
from pathlib import Path
from app.core.config.settings import settings
from ..domain.interfaces import ContainerAccess, IBlobStore

# Same naming rules as cloud blob containers: lowercase letters, digits, dashes.
_CONTAINER_NAME = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,61}[a-z0-9])$")

class LocalBlobStore(IBlobStore):
    """
    Blob store backed by the local filesystem:
    data/artifacts/{container}/{blob_name}
    """

    def __init__(self, root: Path = None):
        self.root = Path(root) if root else settings.ARTIFACTS_DIR

    def _container_dir(self, container: str) -> Path:
        if not _CONTAINER_NAME.match(container):
            raise ValueError(f"Invalid container name: {container!r}")
        return self.root / container

    def ensure_container(self, container: str, access: ContainerAccess = ContainerAccess.PUBLIC_READ) -> bool:
        directory = self._container_dir(container)
        created = not directory.exists()
        directory.mkdir(parents=True, exist_ok=True)

        # Public read == world readable/listable, owner writable.
        directory.chmod(0o755 if access == ContainerAccess.PUBLIC_READ else 0o700)
        return created

    def upload(self, container: str, blob_name: str, data: bytes) -> str:
        directory = self._container_dir(container)
        if Path(blob_name).name != blob_name:
            raise ValueError(f"Blob names cannot contain path separators: {blob_name!r}")

        destination = directory / blob_name

        # Write to a temp file in the same directory and rename, so readers
        # never observe a half-written blob.
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o644 if os.stat(directory).st_mode & 0o005 else 0o600)
            os.replace(tmp_name, destination)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        return str(destination)

    def exists(self, container: str, blob_name: str) -> bool:
        return (self._container_dir(container) / blob_name).is_file()
