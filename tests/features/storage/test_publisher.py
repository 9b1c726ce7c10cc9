import stat

import pytest

from app.core.errors import PublishError
from app.features.segmentation.domain.models import Segment, SegmentArtifact
from app.features.storage.data.local_fs import LocalBlobStore
from app.features.storage.domain.interfaces import ContainerAccess
from app.features.storage.service.api import SegmentPublisher

# --- FIXTURES ---

@pytest.fixture
def artifacts(tmp_path):
    """
    Three small segment files of one source, as the segmenter leaves them.
    """
    work = tmp_path / "work"
    work.mkdir()
    items = []
    for i in range(1, 4):
        segment = Segment("lecture", i, start_frame=(i - 1) * 10, end_frame=i * 10, frame_size=2)
        path = work / f"{segment.name}.wav"
        path.write_bytes(f"segment {i}".encode())
        items.append(SegmentArtifact(segment=segment, path=path))
    return items


@pytest.fixture
def blob_root(tmp_path):
    return tmp_path / "blobs"


class FlakyBlobStore(LocalBlobStore):
    """Rejects uploads for the blob names listed in `reject`."""

    def __init__(self, root, reject):
        super().__init__(root)
        self.reject = set(reject)
        self.attempts = []

    def upload(self, container, blob_name, data):
        self.attempts.append(blob_name)
        if blob_name in self.reject:
            raise ConnectionError("503 Service Unavailable")
        return super().upload(container, blob_name, data)

# --- TESTS ---

def test_publish_uploads_every_segment(artifacts, blob_root):
    store = LocalBlobStore(blob_root)

    report = SegmentPublisher(store).publish(artifacts, "segments")

    assert report.all_succeeded
    assert [o.blob_name for o in report.succeeded] == [
        "lecture_segment_1.wav", "lecture_segment_2.wav", "lecture_segment_3.wav"
    ]
    for artifact in artifacts:
        stored = blob_root / "segments" / artifact.blob_name
        assert stored.read_bytes() == artifact.path.read_bytes()


def test_partial_failure_does_not_stop_remaining_uploads(artifacts, blob_root):
    """
    Segment 2 of 3 fails: 1 and 3 are still stored, 2 is reported as failed.
    """
    store = FlakyBlobStore(blob_root, reject={"lecture_segment_2.wav"})

    report = SegmentPublisher(store).publish(artifacts, "segments")

    assert store.attempts == [a.blob_name for a in artifacts]
    assert not report.all_succeeded
    assert [o.blob_name for o in report.failed] == ["lecture_segment_2.wav"]
    assert isinstance(report.failed[0].error, PublishError)
    assert "503" in str(report.failed[0].error)

    assert store.exists("segments", "lecture_segment_1.wav")
    assert not store.exists("segments", "lecture_segment_2.wav")
    assert store.exists("segments", "lecture_segment_3.wav")


def test_missing_local_artifact_is_reported_not_raised(artifacts, blob_root):
    artifacts[0].path.unlink()

    report = SegmentPublisher(LocalBlobStore(blob_root)).publish(artifacts, "segments")

    assert [o.blob_name for o in report.failed] == ["lecture_segment_1.wav"]
    assert len(report.succeeded) == 2


def test_container_creation_is_idempotent(blob_root):
    store = LocalBlobStore(blob_root)

    assert store.ensure_container("segments") is True
    assert store.ensure_container("segments") is False

    mode = (blob_root / "segments").stat().st_mode
    assert mode & stat.S_IROTH and mode & stat.S_IXOTH


def test_private_container_is_not_world_readable(blob_root):
    store = LocalBlobStore(blob_root)
    store.ensure_container("private-segments", ContainerAccess.PRIVATE)

    mode = (blob_root / "private-segments").stat().st_mode
    assert not mode & stat.S_IROTH


def test_uploaded_blobs_are_public_read(blob_root):
    store = LocalBlobStore(blob_root)
    store.ensure_container("segments")

    location = store.upload("segments", "a_segment_1.wav", b"RIFF")

    assert (blob_root / "segments" / "a_segment_1.wav").stat().st_mode & stat.S_IROTH
    assert location.endswith("a_segment_1.wav")
    # No temp files left behind
    assert [p.name for p in (blob_root / "segments").iterdir()] == ["a_segment_1.wav"]


def test_upload_replaces_existing_blob(blob_root):
    store = LocalBlobStore(blob_root)
    store.ensure_container("segments")

    store.upload("segments", "a_segment_1.wav", b"old")
    store.upload("segments", "a_segment_1.wav", b"new")

    assert (blob_root / "segments" / "a_segment_1.wav").read_bytes() == b"new"


@pytest.mark.parametrize("name", ["Segments", "a", "../escape", "with space"])
def test_invalid_container_names_rejected(blob_root, name):
    with pytest.raises(ValueError):
        LocalBlobStore(blob_root).ensure_container(name)


def test_blob_names_cannot_escape_container(blob_root):
    store = LocalBlobStore(blob_root)
    store.ensure_container("segments")

    with pytest.raises(ValueError):
        store.upload("segments", "../outside.wav", b"x")


class UnreachableBlobStore(LocalBlobStore):
    def ensure_container(self, container, access=ContainerAccess.PUBLIC_READ):
        raise OSError("connection refused")


def test_unreachable_store_is_a_publish_error(artifacts, blob_root):
    with pytest.raises(PublishError) as excinfo:
        SegmentPublisher(UnreachableBlobStore(blob_root)).publish(artifacts, "segments")

    assert excinfo.value.blob_name == "segments"
    assert "connection refused" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_invalid_container_is_a_publish_error(artifacts, blob_root):
    with pytest.raises(PublishError):
        SegmentPublisher(LocalBlobStore(blob_root)).publish(artifacts, "Not A Container")
