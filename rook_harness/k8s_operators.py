"""
Kubernetes implementations of the resource operators.

Control-plane actions go through the management API; mapping, mounting and
in-pod I/O go through manifests and the kubectl transport.
"""

import logging
import posixpath
import shlex
import time
from typing import Dict, List, Optional

from .errors import RemoteCommandError, ResourceNotReadyError
from .k8s_helper import K8sHelper
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
from .operators import BlockOperator, FileSystemOperator, ObjectOperator, PoolOperator
from .rest_client import RookRestClient
from .transport import TransportClient

logger = logging.getLogger(__name__)

RGW_SERVICE = "rook-ceph-rgw"
RGW_EXTERNAL_SERVICE = "rgw-external"
RGW_EXTERNAL_PORT = 30001


def _write_file(
    transport: TransportClient,
    pod_name: str,
    mount_path: str,
    data: str,
    filename: str,
    namespace: str,
) -> CommandResult:
    path = posixpath.join(mount_path, filename)
    command = ["sh", "-c", f"echo {shlex.quote(data)} > {shlex.quote(path)}"]
    result = transport.execute_in_pod(pod_name, command, namespace=namespace)
    return result.check(f"Failed to write {path} in pod {pod_name}")


def _read_file(
    transport: TransportClient,
    pod_name: str,
    mount_path: str,
    filename: str,
    namespace: str,
) -> str:
    path = posixpath.join(mount_path, filename)
    result = transport.execute_in_pod(pod_name, ["cat", path], namespace=namespace)
    return result.check(f"Failed to read {path} in pod {pod_name}").stdout


class K8sBlockOperator(BlockOperator):
    """Block operations on a Kubernetes cluster."""

    def __init__(
        self,
        transport: TransportClient,
        rest: RookRestClient,
        k8s: K8sHelper,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.rest = rest
        self.k8s = k8s
        self.logger = logger or logging.getLogger(__name__)

    def block_create(self, name: str, size: int, pool: str = "rbd") -> OperationResult:
        return self.rest.create_block_image(BlockImage(name=name, size=size, pool_name=pool))

    def block_delete(self, image: BlockImage) -> OperationResult:
        return self.rest.delete_block_image(image)

    def block_list(self) -> List[BlockImage]:
        return self.rest.get_block_images()

    def block_provision(self, manifests: List[str], settle_delay: float = 0) -> None:
        """
        Create the resources backing block storage, in order.

        Args:
            manifests: Manifest paths, storage class first and claim last
            settle_delay: Seconds to wait between manifests so the pool is
                created before a claim references it
        """
        for index, manifest in enumerate(manifests):
            if index and settle_delay:
                self.logger.info(f"Waiting {settle_delay}s for the pool to settle")
                time.sleep(settle_delay)
            self.k8s.resource_operation("create", manifest)

    def block_deprovision(self, manifests: List[str]) -> None:
        """
        Delete the resources backing block storage.

        Every manifest is attempted; the first failure is raised afterwards.
        """
        errors = []
        for manifest in manifests:
            try:
                self.k8s.resource_operation("delete", manifest)
            except RemoteCommandError as e:
                self.logger.warning(f"Failed to delete {manifest}: {e}")
                errors.append(e)
        if errors:
            raise errors[0]

    def block_wait_claim_bound(self, claim_name: str, namespace: str = "default") -> None:
        if not self.k8s.wait_until_pvc_is_bound(claim_name, namespace):
            raise ResourceNotReadyError("pvc", claim_name, "Bound", self.k8s.poll.timeout)

    def block_map(self, manifest_path: str, pod_name: str, namespace: str = "default") -> CommandResult:
        """
        Start a pod that maps and mounts a block volume.

        Args:
            manifest_path: Pod manifest
            pod_name: Name of the pod defined by the manifest
            namespace: Pod namespace

        Returns:
            CommandResult of the create call

        Raises:
            ResourceNotReadyError: If the pod is not running within the poll timeout
        """
        result = self.k8s.resource_operation("create", manifest_path)
        if not self.k8s.is_pod_running(pod_name, namespace):
            raise ResourceNotReadyError("pod", pod_name, "Running", self.k8s.poll.timeout)
        return result

    def block_unmap(self, manifest_path: str, pod_name: str, namespace: str = "default") -> CommandResult:
        result = self.k8s.resource_operation("delete", manifest_path)
        if not self.k8s.is_pod_terminated(pod_name, namespace):
            raise ResourceNotReadyError("pod", pod_name, "Terminated", self.k8s.poll.timeout)
        return result

    def block_write(
        self, pod_name: str, mount_path: str, data: str, filename: str, namespace: str = "default"
    ) -> CommandResult:
        return _write_file(self.transport, pod_name, mount_path, data, filename, namespace)

    def block_read(self, pod_name: str, mount_path: str, filename: str, namespace: str = "default") -> str:
        return _read_file(self.transport, pod_name, mount_path, filename, namespace)


class K8sFileSystemOperator(FileSystemOperator):
    """Shared filesystem operations on a Kubernetes cluster."""

    def __init__(
        self,
        transport: TransportClient,
        rest: RookRestClient,
        k8s: K8sHelper,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.rest = rest
        self.k8s = k8s
        self.logger = logger or logging.getLogger(__name__)

    def fs_create(self, name: str) -> OperationResult:
        return self.rest.create_filesystem(FileSystem(name=name))

    def fs_delete(self, name: str) -> OperationResult:
        return self.rest.delete_filesystem(FileSystem(name=name))

    def fs_list(self) -> List[FileSystem]:
        return self.rest.get_filesystems()

    def _monitor_values(self) -> Dict[str, object]:
        """Template values for the monitor addresses (mon0, mon1, ... and monitors)."""
        mons = self.k8s.get_monitor_pods()
        if not mons:
            raise ResourceNotReadyError("pod", "app=rook-ceph-mon", "Running", self.k8s.poll.timeout)
        self.logger.info(f"Monitors: {mons}")

        addresses = [self.k8s.get_mon_ip(mon) for mon in mons]
        values: Dict[str, object] = {f"mon{i}": addr for i, addr in enumerate(addresses)}
        values["monitors"] = [addr for addr in addresses if addr]
        return values

    def fs_mount(self, template_path: str, pod_name: str, namespace: Optional[str] = None) -> CommandResult:
        """
        Start a pod that mounts the shared filesystem.

        The pod manifest is rendered with the addresses of the running monitors.

        Args:
            template_path: Jinja2 pod manifest template
            pod_name: Name of the pod defined by the template
            namespace: Pod namespace (helper namespace if None)

        Returns:
            CommandResult of the create call

        Raises:
            ResourceNotReadyError: If no monitor is found or the pod does not start
        """
        namespace = namespace or self.k8s.namespace
        result = self.k8s.resource_operation_from_template(
            "create", template_path, self._monitor_values()
        )
        if not self.k8s.is_pod_running(pod_name, namespace):
            raise ResourceNotReadyError("pod", pod_name, "Running", self.k8s.poll.timeout)
        return result

    def fs_unmount(self, template_path: str, pod_name: str, namespace: Optional[str] = None) -> CommandResult:
        namespace = namespace or self.k8s.namespace
        result = self.k8s.resource_operation_from_template(
            "delete", template_path, self._monitor_values()
        )
        if not self.k8s.is_pod_terminated(pod_name, namespace):
            raise ResourceNotReadyError("pod", pod_name, "Terminated", self.k8s.poll.timeout)
        return result

    def fs_write(
        self, pod_name: str, mount_path: str, data: str, filename: str, namespace: Optional[str] = None
    ) -> CommandResult:
        return _write_file(
            self.transport, pod_name, mount_path, data, filename, namespace or self.k8s.namespace
        )

    def fs_read(self, pod_name: str, mount_path: str, filename: str, namespace: Optional[str] = None) -> str:
        return _read_file(self.transport, pod_name, mount_path, filename, namespace or self.k8s.namespace)


class K8sObjectOperator(ObjectOperator):
    """Object store operations on a Kubernetes cluster."""

    def __init__(
        self,
        rest: RookRestClient,
        k8s: K8sHelper,
        external_service_def: str,
        namespace: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the object operator.

        Args:
            rest: Management API client
            k8s: Helper bound to the target cluster
            external_service_def: Manifest exposing RGW outside the cluster
            namespace: Namespace RGW runs in (helper namespace if None)
            logger: Logger for diagnostic output
        """
        self.rest = rest
        self.k8s = k8s
        self.external_service_def = external_service_def
        self.namespace = namespace or k8s.namespace
        self.logger = logger or logging.getLogger(__name__)

    def object_create(self) -> str:
        """
        Create the object store and expose it outside the cluster.

        Returns:
            Human-readable message

        Raises:
            ResourceNotReadyError: If the RGW service or its external service
                does not come up within the poll timeout
        """
        self.rest.create_object_store()

        if not self.k8s.is_service_up(RGW_SERVICE, self.namespace):
            raise ResourceNotReadyError("service", RGW_SERVICE, "up", self.k8s.poll.timeout)

        if self.k8s.get_service(RGW_EXTERNAL_SERVICE, self.namespace) is None:
            self.logger.info(f"Exposing {RGW_SERVICE} through {RGW_EXTERNAL_SERVICE}")
            self.k8s.resource_operation("create", self.external_service_def)
            if not self.k8s.is_service_up(RGW_EXTERNAL_SERVICE, self.namespace):
                raise ResourceNotReadyError(
                    "service", RGW_EXTERNAL_SERVICE, "up", self.k8s.poll.timeout
                )

        return "Object store created"

    def object_create_user(self, user_id: str, display_name: str, email: Optional[str] = None) -> ObjectUser:
        return self.rest.create_object_user(
            ObjectUser(user_id=user_id, display_name=display_name, email=email)
        )

    def object_update_user(self, user_id: str, display_name: str, email: Optional[str] = None) -> ObjectUser:
        return self.rest.update_object_user(
            ObjectUser(user_id=user_id, display_name=display_name, email=email)
        )

    def object_list_users(self) -> List[ObjectUser]:
        return self.rest.get_object_users()

    def object_get_user(self, user_id: str) -> ObjectUser:
        return self.rest.get_object_user(user_id)

    def object_delete_user(self, user_id: str) -> OperationResult:
        return self.rest.delete_object_user(user_id)

    def object_connection(self) -> ObjectStoreConnectInfo:
        return self.rest.get_object_store_connection_info()

    def object_bucket_list(self) -> List[ObjectBucket]:
        return self.rest.get_object_buckets()

    def object_service_url(self) -> str:
        """
        Address of the externally exposed RGW service.

        Returns:
            host:port of the node running RGW

        Raises:
            ResourceNotReadyError: If no RGW pod has been scheduled
        """
        found = {}

        def located() -> bool:
            found["host"] = self.k8s.get_pod_host_ip(RGW_SERVICE, self.namespace)
            return bool(found["host"])

        if not self.k8s.wait_until(located, f"Locating {RGW_SERVICE} pod"):
            raise ResourceNotReadyError("pod", RGW_SERVICE, "Running", self.k8s.poll.timeout)
        return f"{found['host']}:{RGW_EXTERNAL_PORT}"


class K8sPoolOperator(PoolOperator):
    """Pool operations on a Kubernetes cluster."""

    def __init__(self, rest: RookRestClient):
        self.rest = rest

    def pool_create(self, pool: Pool) -> OperationResult:
        return self.rest.create_pool(pool)

    def pool_list(self) -> List[Pool]:
        return self.rest.get_pools()
