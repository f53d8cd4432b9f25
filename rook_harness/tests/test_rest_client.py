"""
Tests for the Rook management API client.
"""

from unittest.mock import patch

import pytest
import requests

from rook_harness.errors import DuplicateResourceError, RestApiError
from rook_harness.model import BlockImage, FileSystem, ObjectUser, OperationStatus, Pool
from rook_harness.rest_client import RookRestClient, classify_response


class TestClassifyResponse:
    """Tests for classify_response."""

    def test_success(self, make_response):
        """Test a 2xx response."""
        result = classify_response(make_response(200, "succeeded created image block-test"))

        assert result.status is OperationStatus.SUCCESS
        assert result.succeeded
        assert result.status_code == 200

    def test_conflict_is_duplicate(self, make_response):
        """Test that HTTP 409 is a duplicate."""
        result = classify_response(make_response(409, "conflict"))

        assert result.status is OperationStatus.DUPLICATE

    def test_already_exists_body_is_duplicate(self, make_response):
        """Test that an error body naming an existing resource is a duplicate."""
        result = classify_response(
            make_response(500, "failed to create image: rbd: create error: (17) File exists")
        )

        assert result.status is OperationStatus.DUPLICATE

    def test_other_error(self, make_response):
        """Test a plain server error."""
        result = classify_response(make_response(500, "pool does not exist"))

        assert result.status is OperationStatus.ERROR
        assert result.message == "pool does not exist"


class TestRookRestClient:
    """Tests for RookRestClient."""

    def test_init(self):
        """Test client initialization."""
        client = RookRestClient("http://rook-api:8124/")

        assert client.endpoint == "http://rook-api:8124"
        assert client.session.headers["Content-Type"] == "application/json"

    @patch("requests.Session")
    def test_get_nodes(self, mock_session_class, make_response):
        """Test listing nodes."""
        mock_session = mock_session_class.return_value
        mock_session.request.return_value = make_response(
            200, [{"nodeId": "abc", "publicIp": "10.0.0.1", "state": 0}]
        )

        client = RookRestClient("http://rook-api:8124")
        nodes = client.get_nodes()

        assert len(nodes) == 1
        assert nodes[0].node_id == "abc"
        assert nodes[0].public_ip == "10.0.0.1"
        _, kwargs = mock_session.request.call_args
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "http://rook-api:8124/node"

    def test_get_status_details(self, rest_client, mock_session, make_response):
        """Test reading cluster status."""
        mock_session.request.return_value = make_response(
            200, {"overall": 0, "summary": "HEALTH_OK", "monitors": [{"name": "mon0"}]}
        )

        status = rest_client.get_status_details()

        assert status.overall_status == 0
        assert status.summary_message == "HEALTH_OK"
        assert status.monitors == [{"name": "mon0"}]

    def test_get_block_images(self, rest_client, mock_session, make_response):
        """Test listing block images."""
        mock_session.request.return_value = make_response(
            200,
            [
                {"imageName": "test-1", "poolName": "rbd", "size": 4096},
                {"imageName": "data", "poolName": "replicapool", "size": 8192},
            ],
        )

        images = rest_client.get_block_images()

        assert [(i.name, i.pool_name) for i in images] == [
            ("test-1", "rbd"),
            ("data", "replicapool"),
        ]

    def test_get_block_images_empty_body(self, rest_client, mock_session, make_response):
        """Test that an empty body is an empty list."""
        mock_session.request.return_value = make_response(200)

        assert rest_client.get_block_images() == []

    def test_read_error_raises(self, rest_client, mock_session, make_response):
        """Test that a failed read raises RestApiError."""
        mock_session.request.return_value = make_response(503, "unavailable")

        with pytest.raises(RestApiError) as exc_info:
            rest_client.get_pools()

        assert exc_info.value.status_code == 503

    def test_create_block_image(self, rest_client, mock_session, make_response):
        """Test creating a block image."""
        mock_session.request.return_value = make_response(200, "succeeded created image test-1")

        result = rest_client.create_block_image(BlockImage("test-1", 4096, "rbd"))

        assert result.succeeded
        _, kwargs = mock_session.request.call_args
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "http://rook-api:8124/image"
        assert kwargs["json"]["imageName"] == "test-1"
        assert kwargs["json"]["poolName"] == "rbd"
        assert kwargs["json"]["size"] == 4096

    def test_create_block_image_duplicate_raises(self, rest_client, mock_session, make_response):
        """Test that a duplicate image raises DuplicateResourceError."""
        mock_session.request.return_value = make_response(500, "image test-1 already exists")

        with pytest.raises(DuplicateResourceError) as exc_info:
            rest_client.create_block_image(BlockImage("test-1", 4096, "rbd"))

        assert exc_info.value.result.status is OperationStatus.DUPLICATE

    def test_create_block_image_unchecked(self, rest_client, mock_session, make_response):
        """Test that check=False returns the duplicate result."""
        mock_session.request.return_value = make_response(409, "exists")

        result = rest_client.create_block_image(BlockImage("test-1", 4096, "rbd"), check=False)

        assert result.status is OperationStatus.DUPLICATE

    def test_create_block_image_error_raises(self, rest_client, mock_session, make_response):
        """Test that a plain failure raises RestApiError, not a duplicate."""
        mock_session.request.return_value = make_response(500, "pool missing")

        with pytest.raises(RestApiError) as exc_info:
            rest_client.create_block_image(BlockImage("test-1", 4096, "nopool"))

        assert not isinstance(exc_info.value, DuplicateResourceError)

    def test_delete_block_image(self, rest_client, mock_session, make_response):
        """Test deleting a block image."""
        mock_session.request.return_value = make_response(200, "succeeded deleting image")

        rest_client.delete_block_image(BlockImage("test-1", 0, "rbd"))

        _, kwargs = mock_session.request.call_args
        assert kwargs["url"] == "http://rook-api:8124/image/remove"
        assert kwargs["json"]["imageName"] == "test-1"

    def test_create_pool(self, rest_client, mock_session, make_response):
        """Test creating a pool."""
        mock_session.request.return_value = make_response(200, "pool created")

        result = rest_client.create_pool(Pool("replicapool", replicated_config={"size": 1}))

        assert result.succeeded
        _, kwargs = mock_session.request.call_args
        assert kwargs["json"] == {
            "poolName": "replicapool",
            "type": 0,
            "replicatedConfig": {"size": 1},
        }

    def test_filesystem_operations(self, rest_client, mock_session, make_response):
        """Test creating and removing a filesystem."""
        mock_session.request.return_value = make_response(202, "")

        rest_client.create_filesystem(FileSystem("testfs"))
        rest_client.delete_filesystem(FileSystem("testfs"))

        urls = [c.kwargs["url"] for c in mock_session.request.call_args_list]
        assert urls == [
            "http://rook-api:8124/filesystem",
            "http://rook-api:8124/filesystem/remove",
        ]

    def test_create_object_user(self, rest_client, mock_session, make_response):
        """Test that a created user comes back with keys."""
        mock_session.request.return_value = make_response(
            200,
            {
                "userId": "rook-user",
                "displayName": "A rook RGW user",
                "accessKey": "AK",
                "secretKey": "SK",
            },
        )

        user = rest_client.create_object_user(ObjectUser("rook-user", "A rook RGW user"))

        assert user.access_key == "AK"
        assert user.secret_key == "SK"
        _, kwargs = mock_session.request.call_args
        assert kwargs["json"] == {"userId": "rook-user", "displayName": "A rook RGW user"}

    def test_update_object_user(self, rest_client, mock_session, make_response):
        """Test updating a user."""
        mock_session.request.return_value = make_response(
            200, {"userId": "rook-user", "displayName": "renamed"}
        )

        user = rest_client.update_object_user(ObjectUser("rook-user", "renamed"))

        assert user.display_name == "renamed"
        _, kwargs = mock_session.request.call_args
        assert kwargs["method"] == "PUT"
        assert kwargs["url"] == "http://rook-api:8124/objectstore/users/rook-user"

    def test_delete_object_user(self, rest_client, mock_session, make_response):
        """Test deleting a user."""
        mock_session.request.return_value = make_response(204)

        assert rest_client.delete_object_user("rook-user").succeeded
        _, kwargs = mock_session.request.call_args
        assert kwargs["method"] == "DELETE"

    def test_get_connection_info(self, rest_client, mock_session, make_response):
        """Test reading object store connection details."""
        mock_session.request.return_value = make_response(
            200, {"host": "rook-ceph-rgw", "ipEndpoint": "10.0.0.9:53390"}
        )

        info = rest_client.get_object_store_connection_info()

        assert info.host == "rook-ceph-rgw"
        assert info.ip_endpoint == "10.0.0.9:53390"

    def test_get_object_buckets(self, rest_client, mock_session, make_response):
        """Test listing buckets."""
        mock_session.request.return_value = make_response(
            200, [{"name": "b1", "owner": "rook-user", "numberOfObjects": 3}]
        )

        buckets = rest_client.get_object_buckets()

        assert buckets[0].name == "b1"
        assert buckets[0].number_of_objects == 3

    @patch("rook_harness.rest_client.time.sleep")
    def test_retry_on_connection_error(self, mock_sleep, rest_client, mock_session, make_response):
        """Test that connection failures are retried."""
        mock_session.request.side_effect = [
            requests.ConnectionError("refused"),
            make_response(200, []),
        ]

        assert rest_client.get_pools() == []
        assert mock_session.request.call_count == 2
        mock_sleep.assert_called_once()

    @patch("rook_harness.rest_client.time.sleep")
    def test_retry_exhausted(self, mock_sleep, rest_client, mock_session):
        """Test that the last connection failure propagates."""
        mock_session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(requests.ConnectionError):
            rest_client.get_pools()

        assert mock_session.request.call_count == 3

    def test_http_error_not_retried(self, rest_client, mock_session, make_response):
        """Test that an error response is not retried."""
        mock_session.request.return_value = make_response(409, "already exists")

        rest_client.create_block_image(BlockImage("test-1", 1, "rbd"), check=False)

        assert mock_session.request.call_count == 1
