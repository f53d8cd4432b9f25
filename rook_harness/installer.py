"""
Rook installer for Kubernetes

Installs the Rook operator, a Rook cluster and the rook-tools pod from the
packaged manifests, and removes them again after a test session.
"""

import logging
from typing import List, Optional

from .config import HarnessConfig
from .errors import ResourceNotReadyError
from .k8s_helper import K8sHelper

logger = logging.getLogger(__name__)

OPERATOR_MANIFEST = "rook-operator.yaml"
CLUSTER_MANIFEST = "rook-cluster.yaml"
TOOLS_MANIFEST = "rook-tools.yaml"


class InstallHelper:
    """Install and uninstall Rook on a Kubernetes cluster."""

    def __init__(
        self,
        k8s: K8sHelper,
        config: Optional[HarnessConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the installer.

        Args:
            k8s: Helper bound to the target cluster
            config: Harness configuration (defaults if None)
            logger: Logger for diagnostic output
        """
        self.k8s = k8s
        self.config = config or HarnessConfig()
        self.logger = logger or logging.getLogger(__name__)

    def _manifest(self, name: str) -> str:
        return self.config.get_data_path(name)

    def is_rook_installed(self) -> bool:
        return self.k8s.get_service("rook-api", self.config.namespace) is not None

    def install_rook_on_k8s(self) -> None:
        """
        Install the operator and a cluster, then wait for the API and tools pod.

        Raises:
            ResourceNotReadyError: If a component does not come up in time
            RemoteCommandError: If a manifest is rejected
        """
        namespace = self.config.namespace

        self.logger.info("Installing rook operator")
        self.k8s.resource_operation("create", self._manifest(OPERATOR_MANIFEST))
        if not self.k8s.is_pod_with_label_running("app=rook-operator", "default"):
            raise ResourceNotReadyError("pod", "rook-operator", "Running", self.k8s.poll.timeout)

        # The cluster resource type is registered by the operator after it starts
        cluster_manifest = self._manifest(CLUSTER_MANIFEST)
        self.logger.info("Creating rook cluster")
        accepted = self.k8s.wait_until(
            lambda: self.k8s.kubectl(["apply", "-f", cluster_manifest], check=False).ok,
            "Waiting for the cluster resource to be accepted",
        )
        if not accepted:
            raise ResourceNotReadyError("cluster", namespace, "Created", self.k8s.poll.timeout)

        if not self.k8s.is_service_up("rook-api", namespace):
            raise ResourceNotReadyError("service", "rook-api", "up", self.k8s.poll.timeout)
        if not self.k8s.is_pod_with_label_running("app=rook-api", namespace):
            raise ResourceNotReadyError("pod", "rook-api", "Running", self.k8s.poll.timeout)

        self.logger.info("Starting rook-tools")
        self.k8s.resource_operation("create", self._manifest(TOOLS_MANIFEST))
        if not self.k8s.is_pod_running("rook-tools", namespace):
            raise ResourceNotReadyError("pod", "rook-tools", "Running", self.k8s.poll.timeout)

        self.logger.info("Rook is installed")

    def uninstall_rook_from_k8s(self) -> List[str]:
        """
        Remove the tools pod, the cluster and the operator.

        Every step is attempted even if an earlier one fails.

        Returns:
            List of warning messages for manifests that failed to delete
        """
        warnings = []
        for name in (TOOLS_MANIFEST, CLUSTER_MANIFEST, OPERATOR_MANIFEST):
            result = self.k8s.kubectl(
                ["delete", "-f", self._manifest(name), "--ignore-not-found=true"],
                timeout=300,
                check=False,
            )
            if not result.ok:
                msg = f"Failed to delete {name}: {result.stderr.strip() or result.error}"
                warnings.append(msg)
                self.logger.warning(msg)

        self.logger.info("Rook uninstalled")
        return warnings
