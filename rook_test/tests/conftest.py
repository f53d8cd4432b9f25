"""
Pytest fixtures for the live-cluster suites.

The suites install Rook once per session and remove it at the end. They only
run when ROOK_E2E is set; configuration comes from the ROOK_TEST_* variables.
"""

import logging

import pytest

from rook_harness.clients import create_test_client
from rook_harness.config import load_config_from_env
from rook_harness.helpers import SmokeTestHelper
from rook_harness.installer import InstallHelper
from rook_harness.k8s_helper import K8sHelper
from rook_harness.platforms import PlatformType
from rook_harness.tracker import ResourceTracker, cleanup_matching

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def harness_config():
    """Harness configuration from the environment."""
    return load_config_from_env()


@pytest.fixture(scope="session")
def platform(harness_config):
    return PlatformType.from_string(harness_config.platform)


@pytest.fixture(scope="session")
def k8s(harness_config):
    """Helper bound to the cluster under test."""
    helper = K8sHelper(harness_config.namespace, harness_config.kubeconfig, harness_config.poll)
    if not helper.cluster_info():
        pytest.skip("Kubernetes cluster is not reachable")
    return helper


@pytest.fixture(scope="session")
def rook_installed(k8s, harness_config):
    """Install Rook for the session and remove it afterwards."""
    installer = InstallHelper(k8s, harness_config)
    installer.install_rook_on_k8s()
    yield installer
    for warning in installer.uninstall_rook_from_k8s():
        logger.warning(f"Uninstall: {warning}")


@pytest.fixture(scope="session")
def test_client(rook_installed, platform, k8s, harness_config):
    """Test client wired for the configured platform."""
    return create_test_client(platform, k8s, harness_config)


@pytest.fixture(scope="session")
def rest_client(test_client):
    return test_client.get_rest_client()


@pytest.fixture(scope="session")
def smoke_helper(test_client, platform, k8s, harness_config):
    """Smoke test helper for the configured platform."""
    return SmokeTestHelper(platform, harness_config.k8s_version, k8s, test_client, harness_config)


@pytest.fixture
def tracker(rest_client, k8s, harness_config):
    """
    Per-test resource tracker.

    Tracked resources are removed after the test, followed by any block image
    whose name contains the configured marker.
    """
    resources = ResourceTracker(rest=rest_client, k8s=k8s)
    yield resources

    for warning in resources.cleanup_all():
        logger.warning(f"Cleanup: {warning}")
    _, warnings = cleanup_matching(rest_client, harness_config.test_marker)
    for warning in warnings:
        logger.warning(f"Cleanup: {warning}")
