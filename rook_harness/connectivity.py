"""
S3 connectivity check for the Rook object store.

Verifies that an RGW endpoint accepts S3 requests signed with an object
store user's keys by running a bucket and object round trip through boto3.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class S3ConnectivityCheck:
    """Round trip against an RGW endpoint using the boto3 S3 client."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str = "us-east-1",
        secure: bool = False,
    ):
        """
        Initialize the check.

        Args:
            endpoint: RGW address, host:port or URL
            access_key: Object store user access key
            secret_key: Object store user secret key
            bucket: Bucket to create and use for the round trip
            region: Region name used for signing
            secure: Use HTTPS when the endpoint has no scheme
        """
        self.endpoint = endpoint
        self.access_key = access_key
        self.secret_key = secret_key
        self.bucket = bucket
        self.region = region
        self.secure = secure
        self.client = None

    @property
    def endpoint_url(self) -> str:
        if self.endpoint.startswith(("http://", "https://")):
            return self.endpoint
        protocol = "https" if self.secure else "http"
        return f"{protocol}://{self.endpoint}"

    def connect(self) -> bool:
        """Create the boto3 client."""
        self.client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )
        logger.info(f"boto3 S3 client connected to {self.endpoint_url}")
        return True

    def bucket_exists(self) -> bool:
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return True
        except ClientError:
            return False

    def create_bucket(self) -> bool:
        """Create the bucket unless it already exists."""
        if self.bucket_exists():
            return True
        self.client.create_bucket(Bucket=self.bucket)
        logger.info(f"Created bucket {self.bucket}")
        return True

    def put_object(self, key: str, data: bytes) -> bool:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType="text/plain",
        )
        return True

    def get_object(self, key: str) -> Optional[bytes]:
        response = self.client.get_object(Bucket=self.bucket, Key=key)
        return response["Body"].read()

    def delete_object(self, key: str) -> bool:
        self.client.delete_object(Bucket=self.bucket, Key=key)
        return True

    def list_objects(self, prefix: str = "") -> List[str]:
        response = self.client.list_objects_v2(Bucket=self.bucket, Prefix=prefix)
        return [obj["Key"] for obj in response.get("Contents", [])]

    def delete_bucket(self) -> bool:
        self.client.delete_bucket(Bucket=self.bucket)
        return True

    def run_full_test(self, remove_bucket: bool = True) -> Dict[str, Any]:
        """
        Run the full round trip.

        Connects, creates the bucket, then puts, reads back, lists and
        deletes one object. Each step's outcome is recorded; a step that
        raises records False plus a "<step>_error" entry.

        Args:
            remove_bucket: Delete the bucket once the round trip is done

        Returns:
            Dictionary with per-step results and an overall "success" flag
        """
        results = {
            "endpoint": self.endpoint_url,
            "bucket": self.bucket,
            "tests": {},
            "success": True,
        }

        test_key = f"rook-connectivity-{uuid.uuid4()}.txt"
        test_data = b"Hello from the Rook object store check"

        try:
            results["tests"]["connect"] = self.connect()
        except Exception as e:
            results["tests"]["connect"] = False
            results["tests"]["connect_error"] = str(e)
            results["success"] = False
            return results

        steps = [
            ("create_bucket", self.create_bucket),
            ("put_object", lambda: self.put_object(test_key, test_data)),
            ("get_object", lambda: self.get_object(test_key) == test_data),
            ("list_objects", lambda: test_key in self.list_objects()),
            ("delete_object", lambda: self.delete_object(test_key)),
        ]
        if remove_bucket:
            steps.append(("delete_bucket", self.delete_bucket))

        for name, step in steps:
            try:
                results["tests"][name] = step()
            except Exception as e:
                results["tests"][name] = False
                results["tests"][f"{name}_error"] = str(e)
                logger.warning(f"S3 check step {name} failed: {e}")

        results["success"] = all(
            v for k, v in results["tests"].items() if not k.endswith("_error")
        )
        return results
