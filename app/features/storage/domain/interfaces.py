from abc import ABC, abstractmethod
from enum import Enum, unique


@unique
class ContainerAccess(str, Enum):
    PRIVATE = "private"
    PUBLIC_READ = "public_read"


class IBlobStore(ABC):
    """
    Contract for the durable segment store.
    """

    @abstractmethod
    def ensure_container(self, container: str, access: ContainerAccess = ContainerAccess.PUBLIC_READ) -> bool:
        """
        Creates the container if it is missing. Safe to call repeatedly.
        Returns True only when the call actually created it.
        """
        pass

    @abstractmethod
    def upload(self, container: str, blob_name: str, data: bytes) -> str:
        """
        Stores `data` under `blob_name`, replacing any previous blob of that name.
        Returns a locator for the stored blob.
        """
        pass

    @abstractmethod
    def exists(self, container: str, blob_name: str) -> bool:
        pass
