"""
Tests for the test client factory and facade.
"""

from unittest.mock import MagicMock

import pytest

from rook_harness.clients import (
    UNABLE_TO_CHECK_ROOK_STATUS_MSG,
    TestClient,
    create_rest_client,
    create_test_client,
)
from rook_harness.config import HarnessConfig
from rook_harness.errors import (
    NotYetImplementedError,
    RemoteCommandError,
    ResourceNotReadyError,
    UnsupportedPlatformError,
)
from rook_harness.k8s_operators import (
    K8sBlockOperator,
    K8sFileSystemOperator,
    K8sObjectOperator,
    K8sPoolOperator,
)
from rook_harness.model import Node, StatusDetails
from rook_harness.objects import CommandResult
from rook_harness.platforms import PlatformType
from rook_harness.rest_client import RookRestClient
from rook_harness.transport import K8sTransportClient, TransportClient


class TestCreateRestClient:
    """Tests for create_rest_client."""

    def test_explicit_endpoint(self, mock_k8s):
        """Test that a configured endpoint is used as-is."""
        config = HarnessConfig(rest_endpoint="http://10.0.0.5:8124")

        client = create_rest_client(PlatformType.KUBERNETES, mock_k8s, config)

        assert client.endpoint == "http://10.0.0.5:8124"
        mock_k8s.is_service_up.assert_not_called()

    def test_discovered_endpoint(self, mock_k8s):
        """Test discovering the endpoint from the rook-api service."""
        mock_k8s.is_service_up.return_value = True
        mock_k8s.get_service_ip.return_value = "10.96.0.12"

        client = create_rest_client(PlatformType.KUBERNETES, mock_k8s, HarnessConfig())

        assert client.endpoint == "http://10.96.0.12:8124"
        mock_k8s.get_service_ip.assert_called_once_with("rook-api", "rook")

    def test_discovery_service_down(self, mock_k8s):
        """Test that a missing rook-api service raises."""
        mock_k8s.is_service_up.return_value = False

        with pytest.raises(ResourceNotReadyError):
            create_rest_client(PlatformType.KUBERNETES, mock_k8s, HarnessConfig())

    def test_discovery_service_without_cluster_ip(self, mock_k8s):
        """Test that a rook-api service with no cluster IP raises."""
        mock_k8s.is_service_up.return_value = True
        mock_k8s.get_service_ip.return_value = None

        with pytest.raises(ResourceNotReadyError) as exc_info:
            create_rest_client(PlatformType.KUBERNETES, mock_k8s, HarnessConfig())

        assert exc_info.value.name == "rook-api"
        assert exc_info.value.state == "clusterIP"

    def test_standalone_without_endpoint(self):
        """Test that StandAlone has no client unless configured."""
        assert create_rest_client(PlatformType.STANDALONE, None, HarnessConfig()) is None


class TestCreateTestClient:
    """Tests for create_test_client."""

    def test_kubernetes(self, mock_k8s):
        """Test that every operator is wired for Kubernetes."""
        config = HarnessConfig(rest_endpoint="http://rook-api:8124")

        client = create_test_client(PlatformType.KUBERNETES, mock_k8s, config)

        assert client.platform is PlatformType.KUBERNETES
        assert isinstance(client.get_transport_client(), K8sTransportClient)
        assert isinstance(client.get_block_client(), K8sBlockOperator)
        assert isinstance(client.get_file_system_client(), K8sFileSystemOperator)
        assert isinstance(client.get_object_client(), K8sObjectOperator)
        assert isinstance(client.get_pool_client(), K8sPoolOperator)
        assert isinstance(client.get_rest_client(), RookRestClient)
        assert client.get_block_client().rest is client.get_rest_client()
        assert client.get_object_client().external_service_def.endswith("rgw_external.yaml")

    def test_kubernetes_requires_helper(self):
        """Test that Kubernetes needs a K8sHelper."""
        with pytest.raises(ValueError):
            create_test_client(PlatformType.KUBERNETES, None)

    def test_standalone_operators_not_implemented(self):
        """Test that StandAlone getters raise immediately."""
        client = create_test_client(PlatformType.STANDALONE, None)

        for getter in (
            client.get_transport_client,
            client.get_block_client,
            client.get_file_system_client,
            client.get_object_client,
            client.get_pool_client,
            client.get_rest_client,
        ):
            with pytest.raises(NotYetImplementedError) as exc_info:
                getter()
            assert exc_info.value.platform == "StandAlone"

    def test_standalone_with_endpoint(self):
        """Test that StandAlone gets a REST client when an endpoint is configured."""
        config = HarnessConfig(rest_endpoint="http://localhost:8124")

        client = create_test_client(PlatformType.STANDALONE, None, config)

        assert client.get_rest_client().endpoint == "http://localhost:8124"
        with pytest.raises(NotYetImplementedError):
            client.get_block_client()

    @pytest.mark.parametrize("platform", [PlatformType.BAREMETAL, PlatformType.NONE])
    def test_unsupported(self, platform, mock_k8s):
        """Test that other platforms are rejected."""
        with pytest.raises(UnsupportedPlatformError):
            create_test_client(platform, mock_k8s)


class TestTestClient:
    """Tests for the TestClient facade."""

    def test_version(self):
        """Test reading the Rook version."""
        transport = MagicMock(spec=TransportClient)
        transport.execute.return_value = CommandResult(stdout="rook: v0.5.0\n")
        client = TestClient(PlatformType.KUBERNETES, transport_client=transport)

        assert client.version() == "rook: v0.5.0"
        transport.execute.assert_called_once_with(["rook", "version"])

    def test_version_failure(self):
        """Test that a failing version command raises with the status message."""
        transport = MagicMock(spec=TransportClient)
        transport.execute.return_value = CommandResult(stderr="pod not found", exit_code=1)
        client = TestClient(PlatformType.KUBERNETES, transport_client=transport)

        with pytest.raises(RemoteCommandError) as exc_info:
            client.version()

        assert UNABLE_TO_CHECK_ROOK_STATUS_MSG in str(exc_info.value)
        assert exc_info.value.result.exit_code == 1

    def test_status_and_nodes(self):
        """Test status and node queries through the API."""
        rest = MagicMock(spec=RookRestClient)
        rest.get_status_details.return_value = StatusDetails(overall_status=0)
        rest.get_nodes.return_value = [Node("n1")]
        client = TestClient(PlatformType.KUBERNETES, rest_client=rest)

        assert client.status().overall_status == 0
        assert client.nodes() == [Node("n1")]
