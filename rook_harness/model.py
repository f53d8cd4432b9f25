"""
Data model for the Rook management API.

These classes mirror the JSON documents exchanged with the API. They are
projections of remote state: the harness re-queries the API instead of
caching them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import DuplicateResourceError, RestApiError


@dataclass
class BlockImage:
    """A block image within a pool. Identity is (name, pool_name)."""

    name: str
    size: int
    pool_name: str
    device: str = ""
    mount_point: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlockImage":
        return cls(
            name=data.get("imageName", ""),
            size=data.get("size", 0),
            pool_name=data.get("poolName", ""),
            device=data.get("device", ""),
            mount_point=data.get("mountPoint", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imageName": self.name,
            "poolName": self.pool_name,
            "size": self.size,
            "device": self.device,
            "mountPoint": self.mount_point,
        }


@dataclass
class Pool:
    """A storage pool."""

    name: str
    number: int = 0
    type: int = 0
    replicated_config: Dict[str, Any] = field(default_factory=dict)
    erasure_coded_config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pool":
        return cls(
            name=data.get("poolName", ""),
            number=data.get("poolNum", 0),
            type=data.get("type", 0),
            replicated_config=data.get("replicatedConfig") or {},
            erasure_coded_config=data.get("erasureCodedConfig") or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"poolName": self.name, "type": self.type}
        if self.replicated_config:
            data["replicatedConfig"] = self.replicated_config
        if self.erasure_coded_config:
            data["erasureCodedConfig"] = self.erasure_coded_config
        return data


@dataclass
class FileSystem:
    """A shared filesystem."""

    name: str
    pool_name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileSystem":
        return cls(name=data.get("name", ""), pool_name=data.get("poolName", ""))

    def to_dict(self) -> Dict[str, Any]:
        data = {"name": self.name}
        if self.pool_name:
            data["poolName"] = self.pool_name
        return data


@dataclass
class Node:
    """A storage node in the cluster."""

    node_id: str
    cluster_name: str = ""
    public_ip: str = ""
    private_ip: str = ""
    state: int = 0
    location: str = ""
    storage: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            node_id=data.get("nodeId", ""),
            cluster_name=data.get("clusterName", ""),
            public_ip=data.get("publicIp", ""),
            private_ip=data.get("privateIp", ""),
            state=data.get("state", 0),
            location=data.get("location", ""),
            storage=data.get("storage", 0),
        )


@dataclass
class StatusDetails:
    """Overall health of the cluster."""

    overall_status: Any
    summary_message: str = ""
    monitors: List[Dict[str, Any]] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusDetails":
        return cls(
            overall_status=data.get("overall"),
            summary_message=data.get("summary", ""),
            monitors=data.get("monitors") or [],
            raw=data,
        )


@dataclass
class ObjectUser:
    """An object store (RGW) user."""

    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObjectUser":
        return cls(
            user_id=data.get("userId", ""),
            display_name=data.get("displayName"),
            email=data.get("email"),
            access_key=data.get("accessKey"),
            secret_key=data.get("secretKey"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"userId": self.user_id}
        if self.display_name is not None:
            data["displayName"] = self.display_name
        if self.email is not None:
            data["email"] = self.email
        return data


@dataclass
class ObjectBucket:
    """A bucket in the object store."""

    name: str
    owner: str = ""
    created_at: str = ""
    size: int = 0
    number_of_objects: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObjectBucket":
        return cls(
            name=data.get("name", ""),
            owner=data.get("owner", ""),
            created_at=data.get("createdAt", ""),
            size=data.get("size", 0),
            number_of_objects=data.get("numberOfObjects", 0),
        )


@dataclass
class ObjectStoreConnectInfo:
    """Connection details for the object store."""

    host: str
    ip_endpoint: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObjectStoreConnectInfo":
        return cls(host=data.get("host", ""), ip_endpoint=data.get("ipEndpoint", ""))


class OperationStatus(Enum):
    """Outcome of a create call on the management API."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    ERROR = "error"


@dataclass(frozen=True)
class OperationResult:
    """Structured result of a create call."""

    status: OperationStatus
    message: str = ""
    status_code: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    def raise_for_status(self) -> "OperationResult":
        """
        Raise if the operation did not succeed.

        Raises:
            DuplicateResourceError: If the resource already existed
            RestApiError: For any other failure
        """
        if self.status is OperationStatus.DUPLICATE:
            raise DuplicateResourceError(self.message, self.status_code, self)
        if self.status is OperationStatus.ERROR:
            raise RestApiError(self.message, self.status_code, self)
        return self
