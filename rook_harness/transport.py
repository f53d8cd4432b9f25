"""
Transport clients

A transport client executes a command against the target platform and
returns its captured output.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .k8s_helper import K8sHelper
from .objects import CommandArgs, CommandResult

logger = logging.getLogger(__name__)

DEFAULT_TOOLS_POD = "rook-tools"


class TransportClient(ABC):
    """Executes commands against a platform."""

    @abstractmethod
    def execute(
        self,
        command: List[str],
        stdin: Optional[str] = None,
        env: Optional[List[str]] = None,
    ) -> CommandResult:
        """Run a command with the platform's Rook tooling."""
        pass

    @abstractmethod
    def execute_in_pod(
        self,
        pod_name: str,
        command: List[str],
        namespace: Optional[str] = None,
        stdin: Optional[str] = None,
    ) -> CommandResult:
        """Run a command inside a specific workload."""
        pass

    def run(self, args: CommandArgs) -> CommandResult:
        """Run a command described by a CommandArgs value object."""
        return self.execute(
            args.as_command(),
            stdin=args.pipe_to_stdin,
            env=args.environment or None,
        )


class K8sTransportClient(TransportClient):
    """Transport client that runs commands through kubectl exec."""

    def __init__(
        self,
        k8s: K8sHelper,
        namespace: Optional[str] = None,
        tools_pod: str = DEFAULT_TOOLS_POD,
    ):
        """
        Initialize the transport client.

        Args:
            k8s: Helper bound to the target cluster
            namespace: Namespace of the tools pod (helper namespace if None)
            tools_pod: Pod carrying the rook client binary
        """
        self.k8s = k8s
        self.namespace = namespace or k8s.namespace
        self.tools_pod = tools_pod

    def execute(
        self,
        command: List[str],
        stdin: Optional[str] = None,
        env: Optional[List[str]] = None,
    ) -> CommandResult:
        if env:
            command = ["env"] + list(env) + list(command)
        logger.debug(f"Executing in {self.tools_pod}: {command}")
        return self.k8s.exec_in_pod(
            self.tools_pod, command, namespace=self.namespace, input_data=stdin
        )

    def execute_in_pod(
        self,
        pod_name: str,
        command: List[str],
        namespace: Optional[str] = None,
        stdin: Optional[str] = None,
    ) -> CommandResult:
        logger.debug(f"Executing in {pod_name}: {command}")
        return self.k8s.exec_in_pod(
            pod_name, command, namespace=namespace or self.namespace, input_data=stdin
        )
