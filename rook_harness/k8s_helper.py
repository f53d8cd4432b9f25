"""
Kubernetes helper

Connection context for the orchestrated cluster. Pod, service and PVC state
is read through the kubernetes client (CoreV1Api); kubectl is used for
applying and deleting manifests (optionally rendered from a Jinja2 template)
and for executing commands in pods. Polls for pod, service and PVC state are
bounded by the configured poll policy.
"""

import logging
import math
import os
import subprocess
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config import ConfigException
from urllib3.exceptions import HTTPError

from .config import PollConfig
from .objects import CommandResult

logger = logging.getLogger(__name__)

MON_PORT = 6790


class K8sHelper:
    """Connection context for a Kubernetes cluster running Rook."""

    def __init__(
        self,
        namespace: str = "rook",
        kubeconfig: Optional[str] = None,
        poll: Optional[PollConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the helper.

        The kubernetes client configuration is loaded on first API use.

        Args:
            namespace: Namespace the Rook cluster runs in
            kubeconfig: Path to kubeconfig file (uses KUBECONFIG env or default if None)
            poll: Polling policy for wait operations
            logger: Logger for diagnostic output (module logger if None)
        """
        self.namespace = namespace
        self.kubeconfig = kubeconfig or os.environ.get("KUBECONFIG")
        self.poll = poll or PollConfig()
        self.logger = logger or logging.getLogger(__name__)
        self._core_v1: Optional[client.CoreV1Api] = None

    @property
    def core_v1(self) -> client.CoreV1Api:
        """CoreV1Api bound to the configured cluster."""
        if self._core_v1 is None:
            self._load_config()
            self._core_v1 = client.CoreV1Api()
        return self._core_v1

    def _load_config(self) -> None:
        try:
            config.load_kube_config(config_file=self.kubeconfig)
            self.logger.debug(f"Loaded kubeconfig {self.kubeconfig or '(default)'}")
        except ConfigException:
            config.load_incluster_config()
            self.logger.debug("Loaded in-cluster config")

    def kubectl(
        self,
        args: List[str],
        input_data: Optional[str] = None,
        timeout: int = 60,
        check: bool = True,
    ) -> CommandResult:
        """
        Run a kubectl command.

        Args:
            args: kubectl arguments
            input_data: Optional stdin data
            timeout: Command timeout in seconds
            check: Whether to raise on failure

        Returns:
            CommandResult with captured output

        Raises:
            RemoteCommandError: If check is set and the command failed
        """
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        cmd.extend(args)

        self.logger.debug(f"Running: {' '.join(cmd)}")
        try:
            completed = subprocess.run(
                cmd,
                input=input_data,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
            result = CommandResult(
                stdout=completed.stdout,
                stderr=completed.stderr,
                exit_code=completed.returncode,
            )
        except subprocess.TimeoutExpired as e:
            result = CommandResult(exit_code=-1, error=f"timed out after {timeout}s: {e}")
        except OSError as e:
            result = CommandResult(exit_code=-1, error=str(e))

        if check:
            result.check(f"kubectl {args[0] if args else ''} failed")
        return result

    # -------------------------------------------------------------------------
    # Manifests
    # -------------------------------------------------------------------------

    def resource_operation(self, action: str, manifest_path: str) -> CommandResult:
        """
        Create or delete the resources defined in a manifest file.

        Args:
            action: kubectl verb ("create", "apply" or "delete")
            manifest_path: Path to the manifest

        Returns:
            CommandResult of the kubectl call
        """
        self.logger.info(f"kubectl {action} -f {manifest_path}")
        return self.kubectl([action, "-f", manifest_path])

    def render_template(self, template_path: str, values: Dict[str, Any]) -> str:
        """
        Render a manifest template.

        Args:
            template_path: Path to the Jinja2 template
            values: Substitution values

        Returns:
            Rendered manifest text
        """
        path = Path(template_path)
        env = Environment(
            loader=FileSystemLoader(str(path.parent)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        return env.get_template(path.name).render(**values)

    def resource_operation_from_template(
        self, action: str, template_path: str, values: Dict[str, Any]
    ) -> CommandResult:
        """
        Render a manifest template and create or delete its resources.

        Args:
            action: kubectl verb ("create", "apply" or "delete")
            template_path: Path to the Jinja2 template
            values: Substitution values

        Returns:
            CommandResult of the kubectl call
        """
        manifest = self.render_template(template_path, values)
        self.logger.info(f"kubectl {action} -f {template_path} (rendered)")
        return self.kubectl([action, "-f", "-"], input_data=manifest)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    def _read(self, reader: Callable[..., Any], name: str, namespace: Optional[str]) -> Optional[Any]:
        """Call a read_namespaced_* method, mapping 404 to None."""
        try:
            return reader(name=name, namespace=namespace or self.namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def read_pod(self, name: str, namespace: Optional[str] = None) -> Optional[client.V1Pod]:
        return self._read(self.core_v1.read_namespaced_pod, name, namespace)

    def read_pvc(
        self, name: str, namespace: Optional[str] = None
    ) -> Optional[client.V1PersistentVolumeClaim]:
        return self._read(self.core_v1.read_namespaced_persistent_volume_claim, name, namespace)

    def list_pods(
        self, namespace: Optional[str] = None, label_selector: Optional[str] = None
    ) -> List[client.V1Pod]:
        """List pods in a namespace, optionally filtered by label."""
        pods = self.core_v1.list_namespaced_pod(
            namespace=namespace or self.namespace,
            label_selector=label_selector or "",
        )
        return list(pods.items or [])

    def get_pod_phase(self, name: str, namespace: Optional[str] = None) -> Optional[str]:
        pod = self.read_pod(name, namespace)
        if pod is not None and pod.status is not None:
            return pod.status.phase
        return None

    def get_service(self, name: str, namespace: Optional[str] = None) -> Optional[client.V1Service]:
        return self._read(self.core_v1.read_namespaced_service, name, namespace)

    def get_service_ip(self, name: str, namespace: Optional[str] = None) -> Optional[str]:
        """
        Cluster IP of a service.

        Returns:
            The IP, or None if the service is missing, headless or has no
            address yet
        """
        service = self.get_service(name, namespace)
        if service is None or service.spec is None:
            return None
        ip = service.spec.cluster_ip
        if not ip or ip == "None":
            return None
        return ip

    def exec_in_pod(
        self,
        pod_name: str,
        command: List[str],
        namespace: Optional[str] = None,
        input_data: Optional[str] = None,
        timeout: int = 60,
    ) -> CommandResult:
        """
        Execute a command in a pod.

        Args:
            pod_name: Pod name
            command: Command to execute
            namespace: Pod namespace (helper namespace if None)
            input_data: Optional stdin data
            timeout: Execution timeout

        Returns:
            CommandResult with captured output (not checked)
        """
        args = ["-n", namespace or self.namespace, "exec"]
        if input_data is not None:
            args.append("-i")
        args.append(pod_name)
        args.append("--")
        args.extend(command)
        return self.kubectl(args, input_data=input_data, timeout=timeout, check=False)

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def wait_until(self, condition: Callable[[], bool], description: str) -> bool:
        """
        Poll a condition until it holds or the poll timeout is reached.

        Args:
            condition: Callable returning True once the state is reached
            description: Text used in log messages

        Returns:
            True if the condition held, False when the poll gave up
        """
        attempts = max(1, math.ceil(self.poll.timeout / self.poll.interval))
        for attempt in range(attempts):
            if condition():
                self.logger.info(f"{description}: done")
                return True
            self.logger.debug(f"{description}: waiting (attempt {attempt + 1}/{attempts})")
            time.sleep(self.poll.interval)

        self.logger.warning(f"{description}: gave up after {self.poll.timeout}s")
        return False

    def is_pod_running(self, name: str, namespace: str = "default") -> bool:
        return self.wait_until(
            lambda: self.get_pod_phase(name, namespace) == "Running",
            f"Waiting for pod {name} in {namespace} to be running",
        )

    def is_pod_terminated(self, name: str, namespace: str = "default") -> bool:
        return self.wait_until(
            lambda: self.read_pod(name, namespace) is None,
            f"Waiting for pod {name} in {namespace} to terminate",
        )

    def is_pod_with_label_running(self, label_selector: str, namespace: str) -> bool:
        """Wait until at least one pod matching the selector is running."""

        def running() -> bool:
            pods = self.list_pods(namespace, label_selector)
            return any(p.status is not None and p.status.phase == "Running" for p in pods)

        return self.wait_until(
            running, f"Waiting for pods {label_selector} in {namespace} to be running"
        )

    def is_service_up(self, name: str, namespace: Optional[str] = None) -> bool:
        return self.wait_until(
            lambda: self.get_service(name, namespace) is not None,
            f"Waiting for service {name} to be up",
        )

    def wait_until_pvc_is_bound(self, name: str, namespace: str = "default") -> bool:
        def bound() -> bool:
            pvc = self.read_pvc(name, namespace)
            return pvc is not None and pvc.status is not None and pvc.status.phase == "Bound"

        return self.wait_until(bound, f"Waiting for PVC {name} to be bound")

    # -------------------------------------------------------------------------
    # Rook cluster lookups
    # -------------------------------------------------------------------------

    def get_monitor_pods(self) -> List[str]:
        """Names of the Ceph monitor pods in the Rook namespace."""
        pods = self.list_pods(self.namespace, "app=rook-ceph-mon")
        return [p.metadata.name for p in pods]

    def get_mon_ip(self, mon_pod: str) -> str:
        """
        Address of a monitor, as ip:port.

        Args:
            mon_pod: Monitor pod name

        Returns:
            Monitor address, or an empty string if the pod has no IP yet
        """
        pod = self.read_pod(mon_pod, self.namespace)
        if pod is None or pod.status is None or not pod.status.pod_ip:
            return ""
        return f"{pod.status.pod_ip}:{MON_PORT}"

    def get_pod_host_ip(self, app_label: str, namespace: Optional[str] = None) -> Optional[str]:
        """Host IP of the first pod carrying the given app label."""
        for pod in self.list_pods(namespace, f"app={app_label}"):
            if pod.status is not None and pod.status.host_ip:
                return pod.status.host_ip
        return None

    def cluster_info(self) -> bool:
        """Check if the cluster is accessible."""
        try:
            self.core_v1.list_namespace(limit=1)
            return True
        except (ApiException, ConfigException, HTTPError) as e:
            self.logger.warning(f"Cluster is not accessible: {e}")
            return False
