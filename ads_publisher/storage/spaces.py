"""
DigitalOcean Spaces storage backend.

Spaces speaks the S3 API, so this wraps a boto3 S3 client pointed at the
Spaces endpoint.

Example usage:
    >>> from ads_publisher.storage import SpacesStorage
    >>> storage = SpacesStorage.from_config(config)
    >>> if not storage.exists("ads/config.json"):
    ...     storage.put_object("ads/config.json", b"{}", "application/json")
"""

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ads_publisher.storage.base import ObjectStorage, StorageError
from ads_publisher.utils.config import PublisherConfig
from ads_publisher.utils.logging import get_logger
from ads_publisher.utils.metrics import PublishMetrics

logger = get_logger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class SpacesStorage(ObjectStorage):
    """S3-compatible object storage backed by a boto3 client."""

    def __init__(
        self,
        bucket: str,
        client: Any,
        metrics: Optional[PublishMetrics] = None,
    ) -> None:
        """
        Args:
            bucket: Spaces bucket name
            client: boto3 S3 client
            metrics: Optional metrics sink for storage errors
        """
        if not bucket:
            raise ValueError("Bucket name must be provided")
        self.bucket = bucket
        self.client = client
        self.metrics = metrics

    @classmethod
    def from_config(
        cls,
        config: PublisherConfig,
        metrics: Optional[PublishMetrics] = None,
    ) -> "SpacesStorage":
        """Build a client for the endpoint, region and keys in ``config``."""
        session = boto3.session.Session(
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
        )
        client = session.client("s3", endpoint_url=config.endpoint_url)
        logger.debug(f"Created S3 client for {config.endpoint_url} ({config.region})")
        return cls(bucket=config.bucket, client=client, metrics=metrics)

    def describe(self) -> str:
        return f"s3://{self.bucket}"

    def exists(self, key: str) -> bool:
        """
        Check whether ``key`` exists in the bucket.

        Any error other than "not found" is logged and reported as False, so
        the caller uploads the object rather than silently skipping it.
        """
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                return False
            logger.warning(f"Existence check failed for {key} ({code}): {e}")
            self._record_error("head", code or type(e).__name__)
            return False
        except BotoCoreError as e:
            logger.warning(f"Existence check failed for {key}: {e}")
            self._record_error("head", type(e).__name__)
            return False

    def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        public: bool = True,
    ) -> None:
        """
        Upload ``body`` to ``key``.

        Raises:
            StorageError: If the S3 call fails
        """
        extra = {"ACL": "public-read"} if public else {}
        logger.debug(f"PUT {self.describe()}/{key} ({len(body)} bytes, {content_type})")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                **extra,
            )
        except (ClientError, BotoCoreError) as e:
            self._record_error("put", type(e).__name__)
            raise StorageError(f"Failed to upload {key} to {self.describe()}: {e}") from e

    def _record_error(self, operation: str, error_type: str) -> None:
        if self.metrics is not None:
            self.metrics.record_storage_error(operation=operation, error_type=error_type)
