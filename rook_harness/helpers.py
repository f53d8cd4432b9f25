"""
Smoke test helper

Suite-level orchestration of the operator calls used by the block, file and
object smoke suites. Test data (names, sizes, mount paths and manifests) is
chosen per platform when the helper is created.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .clients import TestClient
from .config import HarnessConfig
from .connectivity import S3ConnectivityCheck
from .errors import UnsupportedPlatformError
from .k8s_helper import K8sHelper
from .model import (
    FileSystem,
    ObjectBucket,
    ObjectStoreConnectInfo,
    ObjectUser,
    OperationResult,
)
from .objects import CommandResult
from .platforms import PlatformType

logger = logging.getLogger(__name__)

BLOCK_CLAIM_NAME = "block-pv-claim"


@dataclass(frozen=True)
class BlockTestData:
    name: str
    size: int
    mount_path: str
    pvc_def_path: str
    pod_def_path: str
    namespace: str = "default"


@dataclass(frozen=True)
class FileTestData:
    name: str
    mount_path: str
    pod_name: str
    pod_def_path: str


@dataclass(frozen=True)
class ObjectUserData:
    user_id: str
    display_name: str
    email: Optional[str] = None


def get_block_test_data(platform: PlatformType, config: HarnessConfig) -> BlockTestData:
    """
    Block smoke test data for a platform.

    Raises:
        UnsupportedPlatformError: For platforms without test data
    """
    if platform is PlatformType.KUBERNETES:
        return BlockTestData(
            "block-test",
            1048576,
            "/tmp/rook1",
            config.get_data_path("smoke/pool_pvc.yaml"),
            config.get_data_path("smoke/block_mount.yaml"),
        )
    if platform is PlatformType.STANDALONE:
        return BlockTestData("block-test", 1048576, "/tmp/rook1", "", "")
    raise UnsupportedPlatformError(str(platform))


def get_file_test_data(platform: PlatformType, config: HarnessConfig) -> FileTestData:
    if platform is PlatformType.KUBERNETES:
        return FileTestData(
            "testfs",
            "/tmp/rookfs",
            "file-test",
            config.get_data_path("smoke/file_mount.yaml.j2"),
        )
    if platform is PlatformType.STANDALONE:
        return FileTestData("testfs", "/tmp/rookfs", "", "")
    raise UnsupportedPlatformError(str(platform))


class SmokeTestHelper:
    """Drives the smoke scenarios through the test client's operators."""

    def __init__(
        self,
        platform: PlatformType,
        k8s_version: str,
        k8s: Optional[K8sHelper],
        test_client: TestClient,
        config: Optional[HarnessConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the helper.

        Args:
            platform: Target platform
            k8s_version: Kubernetes version of the cluster (e.g. "v1.5")
            k8s: Helper bound to the cluster
            test_client: Client wired for the platform
            config: Harness configuration (defaults if None)
            logger: Logger for diagnostic output

        Raises:
            UnsupportedPlatformError: If the platform has no smoke test data
        """
        self.platform = platform
        self.k8s_version = k8s_version
        self.k8s = k8s
        self.client = test_client
        self.config = config or HarnessConfig()
        self.namespace = self.config.namespace
        self.logger = logger or logging.getLogger(__name__)

        self.block_data = get_block_test_data(platform, self.config)
        self.file_data = get_file_test_data(platform, self.config)
        self.object_user = ObjectUserData("rook-user", "A rook RGW user")

    def _storage_class_manifest(self) -> str:
        if self.k8s_version.casefold() == "v1.5":
            return self.config.get_data_path("smoke/pool_sc_1_5.yaml")
        return self.config.get_data_path("smoke/pool_sc.yaml")

    # Block storage
    def create_block_storage(self) -> None:
        """Create the pool and storage class, then the volume claim."""
        self.client.get_block_client().block_provision(
            [self._storage_class_manifest(), self.block_data.pvc_def_path],
            settle_delay=self.config.pool_settle_delay,
        )

    def wait_until_pvc_is_bound(self) -> None:
        """
        Wait for the smoke volume claim to bind.

        Raises:
            ResourceNotReadyError: If the claim is not bound within the poll timeout
        """
        self.client.get_block_client().block_wait_claim_bound(
            BLOCK_CLAIM_NAME, self.block_data.namespace
        )

    def mount_block_storage(self) -> CommandResult:
        return self.client.get_block_client().block_map(
            self.block_data.pod_def_path, self.block_data.name, self.block_data.namespace
        )

    def write_to_block_storage(self, data: str, filename: str) -> CommandResult:
        return self.client.get_block_client().block_write(
            self.block_data.name,
            self.block_data.mount_path,
            data,
            filename,
            self.block_data.namespace,
        )

    def read_from_block_storage(self, filename: str) -> str:
        return self.client.get_block_client().block_read(
            self.block_data.name, self.block_data.mount_path, filename, self.block_data.namespace
        )

    def unmount_block_storage(self) -> CommandResult:
        return self.client.get_block_client().block_unmap(
            self.block_data.pod_def_path, self.block_data.name, self.block_data.namespace
        )

    def delete_block_storage(self) -> None:
        """Delete the storage class, pool and volume claim."""
        self.client.get_block_client().block_deprovision(
            [self._storage_class_manifest(), self.block_data.pvc_def_path]
        )

    def cleanup_dynamic_block_storage(self) -> List[str]:
        """
        Delete every block image in the cluster.

        Failures are logged and collected.

        Returns:
            List of warning messages
        """
        warnings = []
        rest = self.client.get_rest_client()
        try:
            images = self.client.get_block_client().block_list()
        except Exception as e:
            msg = f"Failed to list block images: {e}"
            self.logger.warning(msg)
            return [msg]

        for image in images:
            try:
                rest.delete_block_image(image)
            except Exception as e:
                msg = f"Failed to delete block image {image.pool_name}/{image.name}: {e}"
                warnings.append(msg)
                self.logger.warning(msg)
        return warnings

    # File storage
    def create_file_storage(self) -> OperationResult:
        return self.client.get_file_system_client().fs_create(self.file_data.name)

    def list_file_storage(self) -> List[FileSystem]:
        return self.client.get_file_system_client().fs_list()

    def mount_file_storage(self) -> CommandResult:
        self.logger.info(f"Mounting filesystem {self.file_data.name} in pod {self.file_data.pod_name}")
        return self.client.get_file_system_client().fs_mount(
            self.file_data.pod_def_path, self.file_data.pod_name, self.namespace
        )

    def write_to_file_storage(self, data: str, filename: str) -> CommandResult:
        return self.client.get_file_system_client().fs_write(
            self.file_data.pod_name, self.file_data.mount_path, data, filename, self.namespace
        )

    def read_from_file_storage(self, filename: str) -> str:
        return self.client.get_file_system_client().fs_read(
            self.file_data.pod_name, self.file_data.mount_path, filename, self.namespace
        )

    def unmount_file_storage(self) -> CommandResult:
        return self.client.get_file_system_client().fs_unmount(
            self.file_data.pod_def_path, self.file_data.pod_name, self.namespace
        )

    def delete_file_storage(self) -> OperationResult:
        return self.client.get_file_system_client().fs_delete(self.file_data.name)

    # Object store
    def create_object_store(self) -> str:
        return self.client.get_object_client().object_create()

    def create_object_store_user(self) -> ObjectUser:
        return self.client.get_object_client().object_create_user(
            self.object_user.user_id, self.object_user.display_name, self.object_user.email
        )

    def get_object_store_users(self) -> List[ObjectUser]:
        return self.client.get_object_client().object_list_users()

    def get_object_store_user(self, user_id: str) -> ObjectUser:
        return self.client.get_object_client().object_get_user(user_id)

    def get_object_store_connection(self) -> ObjectStoreConnectInfo:
        return self.client.get_object_client().object_connection()

    def get_object_store_bucket_list(self) -> List[ObjectBucket]:
        return self.client.get_object_client().object_bucket_list()

    def delete_object_store_user(self) -> OperationResult:
        return self.client.get_object_client().object_delete_user(self.object_user.user_id)

    def get_rgw_service_url(self) -> str:
        return self.client.get_object_client().object_service_url()

    def verify_object_store(
        self, user: ObjectUser, bucket: str = "rook-smoke-bucket", keep_bucket: bool = False
    ) -> Dict[str, Any]:
        """
        Run an S3 round trip against the externally exposed RGW service.

        Args:
            user: Object store user carrying access and secret keys
            bucket: Bucket to create for the round trip
            keep_bucket: Leave the bucket in place afterwards

        Returns:
            Per-step results from S3ConnectivityCheck.run_full_test
        """
        check = S3ConnectivityCheck(
            endpoint=self.get_rgw_service_url(),
            access_key=user.access_key or "",
            secret_key=user.secret_key or "",
            bucket=bucket,
        )
        results = check.run_full_test(remove_bucket=not keep_bucket)
        if not results["success"]:
            self.logger.warning(f"S3 round trip against {check.endpoint_url} failed: {results['tests']}")
        return results
