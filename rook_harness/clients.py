"""
Test client

Factory and facade that wires the transport, management API and resource
operators for one platform.
"""

import logging
from typing import List, Optional

from .config import HarnessConfig
from .errors import (
    NotYetImplementedError,
    RemoteCommandError,
    ResourceNotReadyError,
    UnsupportedPlatformError,
)
from .k8s_helper import K8sHelper
from .k8s_operators import (
    K8sBlockOperator,
    K8sFileSystemOperator,
    K8sObjectOperator,
    K8sPoolOperator,
)
from .model import Node, StatusDetails
from .operators import BlockOperator, FileSystemOperator, ObjectOperator, PoolOperator
from .platforms import PlatformType
from .rest_client import RookRestClient
from .transport import K8sTransportClient, TransportClient

logger = logging.getLogger(__name__)

VERSION_CMD = ["rook", "version"]
REST_API_SERVICE = "rook-api"
UNABLE_TO_CHECK_ROOK_STATUS_MSG = (
    "Unable to check rook status - please check if rook is up and running"
)


def create_rest_client(
    platform: PlatformType, k8s: Optional[K8sHelper], config: HarnessConfig
) -> Optional[RookRestClient]:
    """
    Build a management API client for a platform.

    An explicitly configured endpoint always wins. On Kubernetes the endpoint
    is otherwise discovered from the rook-api service.

    Args:
        platform: Target platform
        k8s: Helper bound to the cluster (Kubernetes only)
        config: Harness configuration

    Returns:
        RookRestClient, or None when no endpoint is known for the platform
    """
    endpoint = config.rest_endpoint
    if not endpoint and platform is PlatformType.KUBERNETES and k8s is not None:
        if not k8s.is_service_up(REST_API_SERVICE, config.namespace):
            raise ResourceNotReadyError("service", REST_API_SERVICE, "up", k8s.poll.timeout)
        ip = k8s.get_service_ip(REST_API_SERVICE, config.namespace)
        if not ip:
            raise ResourceNotReadyError("service", REST_API_SERVICE, "clusterIP", k8s.poll.timeout)
        endpoint = f"http://{ip}:{config.rest.port}"

    if not endpoint:
        return None

    logger.info(f"Using Rook management API at {endpoint}")
    return RookRestClient(
        endpoint,
        timeout=config.rest.timeout,
        retry_attempts=config.rest.retry_attempts,
        retry_delay=config.rest.retry_delay,
    )


class TestClient:
    """Facade over all Rook operations for the platform in context."""

    __test__ = False

    def __init__(
        self,
        platform: PlatformType,
        transport_client: Optional[TransportClient] = None,
        block_client: Optional[BlockOperator] = None,
        fs_client: Optional[FileSystemOperator] = None,
        object_client: Optional[ObjectOperator] = None,
        pool_client: Optional[PoolOperator] = None,
        rest_client: Optional[RookRestClient] = None,
    ):
        self.platform = platform
        self._transport_client = transport_client
        self._block_client = block_client
        self._fs_client = fs_client
        self._object_client = object_client
        self._pool_client = pool_client
        self._rest_client = rest_client

    def _require(self, client, operation: str):
        if client is None:
            raise NotYetImplementedError(operation, str(self.platform))
        return client

    def status(self) -> StatusDetails:
        """Return Rook status details."""
        return self.get_rest_client().get_status_details()

    def version(self) -> str:
        """
        Return the installed Rook version.

        Raises:
            RemoteCommandError: If the version command fails
        """
        result = self.get_transport_client().execute(VERSION_CMD)
        if result.exit_code != 0:
            raise RemoteCommandError(UNABLE_TO_CHECK_ROOK_STATUS_MSG, result)
        return result.stdout.strip()

    def nodes(self) -> List[Node]:
        """Return the list of Rook nodes."""
        return self.get_rest_client().get_nodes()

    def get_transport_client(self) -> TransportClient:
        return self._require(self._transport_client, "transport client")

    def get_block_client(self) -> BlockOperator:
        return self._require(self._block_client, "block client")

    def get_file_system_client(self) -> FileSystemOperator:
        return self._require(self._fs_client, "filesystem client")

    def get_object_client(self) -> ObjectOperator:
        return self._require(self._object_client, "object client")

    def get_pool_client(self) -> PoolOperator:
        return self._require(self._pool_client, "pool client")

    def get_rest_client(self) -> RookRestClient:
        return self._require(self._rest_client, "management API client")


def create_test_client(
    platform: PlatformType,
    k8s: Optional[K8sHelper],
    config: Optional[HarnessConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> TestClient:
    """
    Create a test client for a platform.

    Args:
        platform: Target platform
        k8s: Helper bound to the cluster (required for Kubernetes)
        config: Harness configuration (defaults if None)
        logger: Logger handed to the operators

    Returns:
        TestClient wired for the platform. A StandAlone client has no
        operators; its getters raise NotYetImplementedError.

    Raises:
        UnsupportedPlatformError: For platforms other than Kubernetes and StandAlone
    """
    config = config or HarnessConfig()

    if platform is PlatformType.KUBERNETES:
        if k8s is None:
            raise ValueError("A K8sHelper is required for the Kubernetes platform")
        rest_client = create_rest_client(platform, k8s, config)
        transport_client = K8sTransportClient(k8s, namespace=config.namespace)
        return TestClient(
            platform,
            transport_client=transport_client,
            block_client=K8sBlockOperator(transport_client, rest_client, k8s, logger=logger),
            fs_client=K8sFileSystemOperator(transport_client, rest_client, k8s, logger=logger),
            object_client=K8sObjectOperator(
                rest_client,
                k8s,
                config.get_data_path("smoke/rgw_external.yaml"),
                namespace=config.namespace,
                logger=logger,
            ),
            pool_client=K8sPoolOperator(rest_client),
            rest_client=rest_client,
        )

    if platform is PlatformType.STANDALONE:
        return TestClient(platform, rest_client=create_rest_client(platform, k8s, config))

    raise UnsupportedPlatformError(str(platform))
