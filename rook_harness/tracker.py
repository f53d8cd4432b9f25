"""
Resource tracking for test cleanup.

Resources created by a test are recorded explicitly and removed in
dependency order when the test ends:
1. Manifests (pods release their volumes)
2. Block images
3. Filesystems
4. Object store users

Cleanup is best effort: a failed deletion is logged and reported as a
warning, and the remaining resources are still removed.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple

from .k8s_helper import K8sHelper
from .model import BlockImage, FileSystem
from .rest_client import RookRestClient

logger = logging.getLogger(__name__)


class ResourceKind(IntEnum):
    """Resource kinds in cleanup order (lower = cleanup first)."""

    MANIFEST = 1
    BLOCK_IMAGE = 2
    FILESYSTEM = 3
    OBJECT_USER = 4


@dataclass
class TrackedResource:
    """A resource being tracked for cleanup."""

    kind: ResourceKind
    name: str
    pool_name: str = ""


@dataclass
class ResourceTracker:
    """Tracks resources created by a test and removes them afterwards."""

    rest: Optional[RookRestClient] = None
    k8s: Optional[K8sHelper] = None
    resources: List[TrackedResource] = field(default_factory=list)

    def track_block_image(self, image: BlockImage) -> None:
        self.resources.append(
            TrackedResource(ResourceKind.BLOCK_IMAGE, image.name, image.pool_name)
        )

    def track_filesystem(self, name: str) -> None:
        self.resources.append(TrackedResource(ResourceKind.FILESYSTEM, name))

    def track_object_user(self, user_id: str) -> None:
        self.resources.append(TrackedResource(ResourceKind.OBJECT_USER, user_id))

    def track_manifest(self, path: str) -> None:
        self.resources.append(TrackedResource(ResourceKind.MANIFEST, path))

    def _delete(self, resource: TrackedResource) -> None:
        if resource.kind is ResourceKind.MANIFEST:
            self.k8s.kubectl(["delete", "-f", resource.name, "--ignore-not-found=true"])
        elif resource.kind is ResourceKind.BLOCK_IMAGE:
            self.rest.delete_block_image(
                BlockImage(name=resource.name, size=0, pool_name=resource.pool_name)
            )
        elif resource.kind is ResourceKind.FILESYSTEM:
            self.rest.delete_filesystem(FileSystem(name=resource.name))
        elif resource.kind is ResourceKind.OBJECT_USER:
            self.rest.delete_object_user(resource.name)

    def cleanup_all(self) -> List[str]:
        """
        Delete all tracked resources in dependency order.

        Returns:
            List of warning messages for resources that failed to delete
        """
        warnings = []

        # Within the same kind, reverse creation order
        ordered = sorted(
            enumerate(self.resources),
            key=lambda x: (x[1].kind, -x[0]),
        )

        for _, resource in ordered:
            try:
                self._delete(resource)
                logger.debug(f"Deleted {resource.kind.name.lower()} {resource.name}")
            except Exception as e:
                msg = f"Failed to delete {resource.kind.name.lower()} {resource.name}: {e}"
                warnings.append(msg)
                logger.warning(msg)

        self.resources.clear()
        return warnings

    def clear(self) -> None:
        """Forget all tracked resources without deleting them."""
        self.resources.clear()

    def __len__(self) -> int:
        return len(self.resources)


def cleanup_matching(rest: RookRestClient, marker: str) -> Tuple[List[BlockImage], List[str]]:
    """
    Delete every block image whose name contains a marker.

    Matching is a case-sensitive substring test. Failures are logged and
    collected; the remaining images are still deleted.

    Args:
        rest: Management API client
        marker: Substring identifying test-created images

    Returns:
        Tuple of (deleted images, warning messages)
    """
    deleted = []
    warnings = []

    try:
        images = rest.get_block_images()
    except Exception as e:
        msg = f"Failed to list block images for cleanup: {e}"
        logger.warning(msg)
        return deleted, [msg]

    for image in images:
        if marker not in image.name:
            continue
        try:
            rest.delete_block_image(image)
            deleted.append(image)
            logger.info(f"Deleted block image {image.pool_name}/{image.name}")
        except Exception as e:
            msg = f"Failed to delete block image {image.pool_name}/{image.name}: {e}"
            warnings.append(msg)
            logger.warning(msg)

    return deleted, warnings
