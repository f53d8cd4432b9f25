"""
Rook Management API Client

Provides a Python interface to the Rook management API for nodes, cluster
status, pools, block images, filesystems and the object store.
"""

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from .errors import RestApiError
from .model import (
    BlockImage,
    FileSystem,
    Node,
    ObjectBucket,
    ObjectStoreConnectInfo,
    ObjectUser,
    OperationResult,
    OperationStatus,
    Pool,
    StatusDetails,
)

logger = logging.getLogger(__name__)

DUPLICATE_MARKERS = ("already exists", "file exists")


def classify_response(response: requests.Response) -> OperationResult:
    """
    Turn a create response into a structured result.

    Args:
        response: Response from the management API

    Returns:
        OperationResult with SUCCESS, DUPLICATE or ERROR status
    """
    message = response.text.strip()
    if response.ok:
        return OperationResult(OperationStatus.SUCCESS, message, response.status_code)

    if response.status_code == 409 or any(m in message.lower() for m in DUPLICATE_MARKERS):
        return OperationResult(OperationStatus.DUPLICATE, message, response.status_code)

    return OperationResult(OperationStatus.ERROR, message, response.status_code)


class RookRestClient:
    """Client for interacting with the Rook management API."""

    def __init__(
        self,
        endpoint: str,
        timeout: int = 30,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        """
        Initialize the Rook management API client.

        Args:
            endpoint: The URL of the API (e.g., http://rook-api:8124)
            timeout: Request timeout in seconds
            retry_attempts: Number of attempts for requests that fail to connect
            retry_delay: Delay between retries in seconds
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _request(
        self,
        method: str,
        path: str,
        data: Optional[Any] = None,
        params: Optional[Dict] = None,
    ) -> requests.Response:
        """
        Make a request to the API with retries.

        Only connection failures and timeouts are retried; an HTTP error
        response is returned to the caller as-is.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API endpoint path
            data: Request body data
            params: Query parameters

        Returns:
            The HTTP response

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        url = urljoin(self.endpoint + "/", path.lstrip("/"))

        for attempt in range(self.retry_attempts):
            try:
                return self.session.request(
                    method=method,
                    url=url,
                    json=data,
                    params=params,
                    timeout=self.timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < self.retry_attempts - 1:
                    logger.warning(f"Request to {url} failed (attempt {attempt + 1}): {e}")
                    time.sleep(self.retry_delay * (attempt + 1))
                else:
                    logger.error(f"Request to {url} failed after {self.retry_attempts} attempts")
                    raise

    def _get_json(self, path: str) -> Any:
        response = self._request("GET", path)
        if not response.ok:
            raise RestApiError(
                f"GET {path} failed: {response.status_code} {response.text.strip()}",
                response.status_code,
            )
        if response.content:
            return response.json()
        return None

    def _operation(
        self, method: str, path: str, data: Optional[Any] = None, check: bool = True
    ) -> OperationResult:
        result = classify_response(self._request(method, path, data=data))
        logger.debug(f"{method} {path}: {result.status.value} {result.message}")
        if check:
            result.raise_for_status()
        return result

    # Cluster
    def get_nodes(self) -> List[Node]:
        """
        List the storage nodes of the cluster.

        Returns:
            List of nodes
        """
        return [Node.from_dict(n) for n in self._get_json("/node") or []]

    def get_status_details(self) -> StatusDetails:
        """
        Get the current cluster status.

        Returns:
            Cluster status details
        """
        return StatusDetails.from_dict(self._get_json("/status") or {})

    # Pool Operations
    def get_pools(self) -> List[Pool]:
        return [Pool.from_dict(p) for p in self._get_json("/pool") or []]

    def create_pool(self, pool: Pool, check: bool = True) -> OperationResult:
        """
        Create a storage pool.

        Args:
            pool: Pool to create
            check: Raise when the API reports a failure

        Returns:
            Structured result of the creation
        """
        return self._operation("POST", "/pool", pool.to_dict(), check=check)

    # Block Image Operations
    def get_block_images(self) -> List[BlockImage]:
        """
        List all block images in the cluster.

        Returns:
            List of block images
        """
        return [BlockImage.from_dict(i) for i in self._get_json("/image") or []]

    def create_block_image(self, image: BlockImage, check: bool = True) -> OperationResult:
        """
        Create a block image.

        Args:
            image: Block image to create
            check: Raise when the API reports a failure

        Returns:
            Structured result of the creation

        Raises:
            DuplicateResourceError: If check is set and the image already exists in the pool
            RestApiError: If check is set and the creation failed otherwise
        """
        return self._operation("POST", "/image", image.to_dict(), check=check)

    def delete_block_image(self, image: BlockImage) -> OperationResult:
        """
        Delete a block image.

        Args:
            image: Block image to delete (name and pool are used)

        Returns:
            Structured result of the deletion
        """
        return self._operation("POST", "/image/remove", image.to_dict())

    # Filesystem Operations
    def get_filesystems(self) -> List[FileSystem]:
        return [FileSystem.from_dict(f) for f in self._get_json("/filesystem") or []]

    def create_filesystem(self, fs: FileSystem, check: bool = True) -> OperationResult:
        return self._operation("POST", "/filesystem", fs.to_dict(), check=check)

    def delete_filesystem(self, fs: FileSystem) -> OperationResult:
        return self._operation("POST", "/filesystem/remove", fs.to_dict())

    # Object Store Operations
    def create_object_store(self) -> OperationResult:
        """
        Start creating the object store.

        Returns:
            Structured result; creation completes asynchronously
        """
        return self._operation("POST", "/objectstore")

    def get_object_users(self) -> List[ObjectUser]:
        return [ObjectUser.from_dict(u) for u in self._get_json("/objectstore/users") or []]

    def get_object_user(self, user_id: str) -> ObjectUser:
        return ObjectUser.from_dict(self._get_json(f"/objectstore/users/{user_id}") or {})

    def create_object_user(self, user: ObjectUser) -> ObjectUser:
        """
        Create an object store user.

        Args:
            user: User to create

        Returns:
            Created user including its access and secret keys
        """
        response = self._request("POST", "/objectstore/users", data=user.to_dict())
        classify_response(response).raise_for_status()
        return ObjectUser.from_dict(response.json() if response.content else user.to_dict())

    def update_object_user(self, user: ObjectUser) -> ObjectUser:
        response = self._request(
            "PUT", f"/objectstore/users/{user.user_id}", data=user.to_dict()
        )
        classify_response(response).raise_for_status()
        return ObjectUser.from_dict(response.json() if response.content else user.to_dict())

    def delete_object_user(self, user_id: str) -> OperationResult:
        return self._operation("DELETE", f"/objectstore/users/{user_id}")

    def get_object_store_connection_info(self) -> ObjectStoreConnectInfo:
        return ObjectStoreConnectInfo.from_dict(
            self._get_json("/objectstore/connectioninfo") or {}
        )

    def get_object_buckets(self) -> List[ObjectBucket]:
        return [ObjectBucket.from_dict(b) for b in self._get_json("/objectstore/buckets") or []]

    def get_object_bucket(self, name: str) -> ObjectBucket:
        return ObjectBucket.from_dict(self._get_json(f"/objectstore/buckets/{name}") or {})

    def delete_object_bucket(self, name: str) -> OperationResult:
        return self._operation("DELETE", f"/objectstore/buckets/{name}")
