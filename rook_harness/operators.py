"""
Resource operator interfaces.

One implementation per platform is selected when a TestClient is created;
suites only talk to these interfaces.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .model import (
    BlockImage,
    FileSystem,
    ObjectBucket,
    ObjectStoreConnectInfo,
    ObjectUser,
    OperationResult,
    Pool,
)
from .objects import CommandResult


class BlockOperator(ABC):
    """Block image provisioning, mapping and I/O."""

    @abstractmethod
    def block_create(self, name: str, size: int, pool: str = "rbd") -> OperationResult:
        pass

    @abstractmethod
    def block_delete(self, image: BlockImage) -> OperationResult:
        pass

    @abstractmethod
    def block_list(self) -> List[BlockImage]:
        pass

    @abstractmethod
    def block_provision(self, manifests: List[str], settle_delay: float = 0) -> None:
        """Create the storage class and claim resources backing block storage."""
        pass

    @abstractmethod
    def block_deprovision(self, manifests: List[str]) -> None:
        """Delete the provisioning resources, attempting every manifest."""
        pass

    @abstractmethod
    def block_wait_claim_bound(self, claim_name: str, namespace: str = "default") -> None:
        pass

    @abstractmethod
    def block_map(self, manifest_path: str, pod_name: str, namespace: str = "default") -> CommandResult:
        pass

    @abstractmethod
    def block_unmap(self, manifest_path: str, pod_name: str, namespace: str = "default") -> CommandResult:
        pass

    @abstractmethod
    def block_write(
        self, pod_name: str, mount_path: str, data: str, filename: str, namespace: str = "default"
    ) -> CommandResult:
        pass

    @abstractmethod
    def block_read(self, pod_name: str, mount_path: str, filename: str, namespace: str = "default") -> str:
        pass


class FileSystemOperator(ABC):
    """Shared filesystem lifecycle and I/O."""

    @abstractmethod
    def fs_create(self, name: str) -> OperationResult:
        pass

    @abstractmethod
    def fs_delete(self, name: str) -> OperationResult:
        pass

    @abstractmethod
    def fs_list(self) -> List[FileSystem]:
        pass

    @abstractmethod
    def fs_mount(self, template_path: str, pod_name: str, namespace: Optional[str] = None) -> CommandResult:
        pass

    @abstractmethod
    def fs_unmount(self, template_path: str, pod_name: str, namespace: Optional[str] = None) -> CommandResult:
        pass

    @abstractmethod
    def fs_write(
        self, pod_name: str, mount_path: str, data: str, filename: str, namespace: Optional[str] = None
    ) -> CommandResult:
        pass

    @abstractmethod
    def fs_read(self, pod_name: str, mount_path: str, filename: str, namespace: Optional[str] = None) -> str:
        pass


class ObjectOperator(ABC):
    """Object store (RGW) lifecycle, users and buckets."""

    @abstractmethod
    def object_create(self) -> str:
        """Create the object store and wait for its service; returns a readable message."""
        pass

    @abstractmethod
    def object_create_user(self, user_id: str, display_name: str, email: Optional[str] = None) -> ObjectUser:
        pass

    @abstractmethod
    def object_update_user(self, user_id: str, display_name: str, email: Optional[str] = None) -> ObjectUser:
        pass

    @abstractmethod
    def object_list_users(self) -> List[ObjectUser]:
        pass

    @abstractmethod
    def object_get_user(self, user_id: str) -> ObjectUser:
        pass

    @abstractmethod
    def object_delete_user(self, user_id: str) -> OperationResult:
        pass

    @abstractmethod
    def object_connection(self) -> ObjectStoreConnectInfo:
        pass

    @abstractmethod
    def object_bucket_list(self) -> List[ObjectBucket]:
        pass

    @abstractmethod
    def object_service_url(self) -> str:
        pass


class PoolOperator(ABC):
    """Storage pool management."""

    @abstractmethod
    def pool_create(self, pool: Pool) -> OperationResult:
        pass

    @abstractmethod
    def pool_list(self) -> List[Pool]:
        pass
