from typing import Any

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from legaldocs.logging.logger import Log
from legaldocs.storage.base import BaseBlobStore, blob_key
from legaldocs.storage.exceptions import BlobNotFoundError, StorageError

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3BlobStore(BaseBlobStore):
    """S3-compatible object storage (AWS S3, Cloudflare R2, MinIO)."""

    def __init__(self, bucket: str, client: Any) -> None:
        self._bucket = bucket
        self._client = client

    @classmethod
    def from_credentials(
        cls,
        *,
        bucket: str,
        access_key_id: str,
        secret_access_key: str,
        endpoint_url: str | None = None,
        region: str = "auto",
    ) -> "S3BlobStore":
        client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
            config=Config(signature_version="s3v4"),
        )
        return cls(bucket, client)

    def put(
        self,
        owner_id: str,
        document_id: str,
        filename: str,
        data: bytes,
        content_type: str,
    ) -> str:
        key = blob_key(owner_id, document_id, filename)
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=data, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to store {key} in bucket {self._bucket}: {exc}") from exc
        Log.debug(f"Stored {len(data)} bytes at s3://{self._bucket}/{key}")
        return key

    def get(self, locator: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=locator)
            return response["Body"].read()
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                raise BlobNotFoundError(f"Blob not found: {locator}") from exc
            raise StorageError(f"Failed to read {locator}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Failed to read {locator}: {exc}") from exc

    def delete(self, locator: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=locator)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                Log.warning(f"Blob {locator} already absent from bucket {self._bucket}")
                return
            raise StorageError(f"Failed to delete {locator}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Failed to delete {locator}: {exc}") from exc


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))
