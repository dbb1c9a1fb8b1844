"""Object storage client for downloading staged artifacts.

Objects are addressed by URL: ``gs://bucket/key`` or ``s3://bucket/key``.
Both are served through boto3's S3 client; Google Cloud Storage URLs go to
the GCS XML API, which is S3 compatible when HMAC credentials are
configured.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
from urllib.parse import urlsplit

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

GCS_ENDPOINT_URL = "https://storage.googleapis.com"

# Endpoint per URL scheme; None selects the AWS default
SCHEME_ENDPOINTS: Dict[str, Optional[str]] = {
    "gs": GCS_ENDPOINT_URL,
    "s3": None,
}

MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


class ObjectStoreError(Exception):
    """Base exception for object storage errors."""

    pass


class ObjectNotFoundError(ObjectStoreError):
    """Raised when a required object does not exist."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"object not found: {url}")


def parse_object_url(url: str) -> Tuple[str, str, str]:
    """Split an object URL into (scheme, bucket, key).

    Raises:
        ObjectStoreError: If the scheme is unsupported or bucket/key is missing.
    """
    parts = urlsplit(url)
    if parts.scheme not in SCHEME_ENDPOINTS:
        raise ObjectStoreError(f"unsupported object URL scheme: {url}")
    key = parts.path.lstrip("/")
    if not parts.netloc or not key:
        raise ObjectStoreError(f"object URL must name a bucket and key: {url}")
    return parts.scheme, parts.netloc, key


class ObjectStore:
    """Copies objects from GCS or S3 to the local filesystem.

    Attributes:
        endpoint_url: Explicit endpoint overriding the per-scheme default.
    """

    def __init__(self, s3_client=None, endpoint_url: Optional[str] = None):
        """
        Initialize ObjectStore.

        Args:
            s3_client: Optional boto3 S3 client used for every scheme (for testing)
            endpoint_url: Optional endpoint override for all schemes
        """
        self.endpoint_url = endpoint_url
        self._client_override = s3_client
        self._clients: Dict[str, object] = {}

    def _client_for(self, scheme: str):
        if self._client_override is not None:
            return self._client_override
        if scheme not in self._clients:
            endpoint = self.endpoint_url or SCHEME_ENDPOINTS[scheme]
            self._clients[scheme] = boto3.client("s3", endpoint_url=endpoint)
        return self._clients[scheme]

    def copy_to_local(
        self,
        source: str,
        destination: Union[str, Path],
        allow_missing: bool = True,
    ) -> bool:
        """Download the object at source into the local file destination.

        Args:
            source: Object URL.
            destination: Local file path; parent directories are created.
            allow_missing: When False a missing object raises instead of
                being skipped.

        Returns:
            True if the object was copied, False if it was missing and skipped.

        Raises:
            ObjectNotFoundError: If the object is missing and allow_missing is False.
            ObjectStoreError: On any other storage failure.
        """
        scheme, bucket, key = parse_object_url(source)
        client = self._client_for(scheme)
        destination = Path(destination)

        if not self._exists(client, bucket, key, source):
            if allow_missing:
                logger.warning(
                    "Object not found, skipping copy",
                    extra={"source": source},
                )
                return False
            raise ObjectNotFoundError(source)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ObjectStoreError(
                f"cannot create {destination.parent}: {e}"
            ) from e

        logger.info(
            "Copying object to local file",
            extra={"source": source, "destination": str(destination)},
        )
        try:
            client.download_file(bucket, key, str(destination))
        except ClientError as e:
            raise ObjectStoreError(
                f"copy {source} failed: {self._error_code(e)} - "
                f"{e.response.get('Error', {}).get('Message', str(e))}"
            ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"copy {source} failed: {e}") from e
        return True

    def _exists(self, client, bucket: str, key: str, source: str) -> bool:
        try:
            client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if self._error_code(e) in MISSING_OBJECT_CODES:
                return False
            raise ObjectStoreError(
                f"stat {source} failed: {self._error_code(e)}"
            ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"stat {source} failed: {e}") from e
        return True

    @staticmethod
    def _error_code(error: ClientError) -> str:
        return str(error.response.get("Error", {}).get("Code", ""))
