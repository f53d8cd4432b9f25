"""
Harness configuration

Loads the settings a test run needs (target platform, cluster access,
management API endpoint, polling policy) from a YAML/JSON file or from
environment variables.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path(__file__).resolve().parent / "data"


@dataclass
class PollConfig:
    """Policy for bounded polls on cluster state."""

    interval: float = 2.0
    timeout: float = 120.0


@dataclass
class RestConfig:
    """Settings for the management API client."""

    timeout: int = 30
    retry_attempts: int = 3
    retry_delay: float = 1.0
    port: int = 8124


@dataclass
class HarnessConfig:
    """Complete harness configuration."""

    platform: str = "Kubernetes"
    namespace: str = "rook"
    k8s_version: str = "v1.6"
    kubeconfig: Optional[str] = None
    rest_endpoint: Optional[str] = None
    data_path: Optional[str] = None
    test_marker: str = "test"
    pool_settle_delay: float = 10.0
    poll: PollConfig = field(default_factory=PollConfig)
    rest: RestConfig = field(default_factory=RestConfig)

    def get_data_path(self, name: str) -> str:
        """
        Resolve a manifest file against the data directory.

        Args:
            name: Relative path such as "smoke/pool_pvc.yaml"

        Returns:
            Absolute path to the file
        """
        base = Path(self.data_path) if self.data_path else DEFAULT_DATA_PATH
        return str(base / name)


def load_config_from_file(config_path: str) -> HarnessConfig:
    """
    Load harness configuration from a YAML or JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Parsed HarnessConfig object
    """
    with open(config_path, "r") as f:
        if config_path.endswith((".yml", ".yaml")):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    return parse_config(data)


def load_config_from_env() -> HarnessConfig:
    """
    Load harness configuration from environment variables.

    Environment variables:
        ROOK_TEST_CONFIG: JSON string with full configuration
        ROOK_TEST_PLATFORM: Target platform name
        ROOK_TEST_NAMESPACE: Namespace Rook runs in
        ROOK_TEST_K8S_VERSION: Kubernetes version (e.g. v1.5)
        KUBECONFIG: Path to kubeconfig file
        ROOK_API_ENDPOINT: Management API URL (discovered when unset)
        ROOK_TEST_DATA_PATH: Directory holding manifest files
        ROOK_TEST_MARKER: Name marker for test-created resources
        ROOK_TEST_POLL_INTERVAL: Seconds between polls
        ROOK_TEST_POLL_TIMEOUT: Seconds before a poll gives up

    Returns:
        Parsed HarnessConfig object
    """
    config_json = os.environ.get("ROOK_TEST_CONFIG")
    if config_json:
        return parse_config(json.loads(config_json))

    defaults = HarnessConfig()
    poll = PollConfig(
        interval=float(os.environ.get("ROOK_TEST_POLL_INTERVAL", defaults.poll.interval)),
        timeout=float(os.environ.get("ROOK_TEST_POLL_TIMEOUT", defaults.poll.timeout)),
    )

    return HarnessConfig(
        platform=os.environ.get("ROOK_TEST_PLATFORM", defaults.platform),
        namespace=os.environ.get("ROOK_TEST_NAMESPACE", defaults.namespace),
        k8s_version=os.environ.get("ROOK_TEST_K8S_VERSION", defaults.k8s_version),
        kubeconfig=os.environ.get("KUBECONFIG"),
        rest_endpoint=os.environ.get("ROOK_API_ENDPOINT"),
        data_path=os.environ.get("ROOK_TEST_DATA_PATH"),
        test_marker=os.environ.get("ROOK_TEST_MARKER", defaults.test_marker),
        poll=poll,
    )


def parse_config(data: Dict[str, Any]) -> HarnessConfig:
    """
    Parse a configuration dictionary into a HarnessConfig object.

    Args:
        data: Configuration dictionary

    Returns:
        HarnessConfig object
    """
    defaults = HarnessConfig()

    poll_data = data.get("poll", {})
    poll = PollConfig(
        interval=float(poll_data.get("interval", defaults.poll.interval)),
        timeout=float(poll_data.get("timeout", defaults.poll.timeout)),
    )

    rest_data = data.get("rest", {})
    rest = RestConfig(
        timeout=int(rest_data.get("timeout", defaults.rest.timeout)),
        retry_attempts=int(rest_data.get("retryAttempts", defaults.rest.retry_attempts)),
        retry_delay=float(rest_data.get("retryDelay", defaults.rest.retry_delay)),
        port=int(rest_data.get("port", defaults.rest.port)),
    )

    config = HarnessConfig(
        platform=data.get("platform", defaults.platform),
        namespace=data.get("namespace", defaults.namespace),
        k8s_version=data.get("k8sVersion", defaults.k8s_version),
        kubeconfig=data.get("kubeconfig"),
        rest_endpoint=data.get("restEndpoint"),
        data_path=data.get("dataPath"),
        test_marker=data.get("testMarker", defaults.test_marker),
        pool_settle_delay=float(data.get("poolSettleDelay", defaults.pool_settle_delay)),
        poll=poll,
        rest=rest,
    )
    logger.debug(f"Loaded harness configuration for platform {config.platform}")
    return config
