"""
Pytest fixtures for the harness unit tests.
"""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from rook_harness.config import HarnessConfig, PollConfig
from rook_harness.k8s_helper import K8sHelper
from rook_harness.rest_client import RookRestClient


@pytest.fixture
def make_response():
    """Factory for real requests.Response objects."""

    def _make(status_code=200, body=None):
        response = requests.Response()
        response.status_code = status_code
        if body is None:
            response._content = b""
        elif isinstance(body, (dict, list)):
            response._content = json.dumps(body).encode("utf-8")
        else:
            response._content = body.encode("utf-8")
        response.encoding = "utf-8"
        return response

    return _make


@pytest.fixture
def mock_session():
    """MagicMock standing in for requests.Session."""
    return MagicMock()


@pytest.fixture
def rest_client(mock_session):
    """RookRestClient whose session is a mock."""
    client = RookRestClient("http://rook-api:8124", retry_delay=0)
    client.session = mock_session
    return client


@pytest.fixture
def fast_poll():
    """Poll policy with two attempts."""
    return PollConfig(interval=1.0, timeout=2.0)


@pytest.fixture
def mock_k8s(fast_poll):
    """MagicMock standing in for K8sHelper."""
    k8s = MagicMock(spec=K8sHelper)
    k8s.namespace = "rook"
    k8s.poll = fast_poll
    return k8s


@pytest.fixture
def harness_config(tmp_path):
    """Harness configuration pointing at a temporary data directory."""
    return HarnessConfig(data_path=str(tmp_path), pool_settle_delay=0)


@pytest.fixture
def mock_env_vars():
    """Set up environment variables for configuration tests."""
    env_vars = {
        "ROOK_TEST_PLATFORM": "kubernetes",
        "ROOK_TEST_NAMESPACE": "rook-e2e",
        "ROOK_TEST_K8S_VERSION": "v1.5",
        "KUBECONFIG": "/tmp/kubeconfig",
        "ROOK_API_ENDPOINT": "http://10.0.0.5:8124",
        "ROOK_TEST_MARKER": "e2e",
        "ROOK_TEST_POLL_INTERVAL": "0.5",
        "ROOK_TEST_POLL_TIMEOUT": "30",
    }
    with patch.dict(os.environ, env_vars, clear=True):
        yield env_vars
