from pathlib import Path

from legaldocs.config.settings import Settings
from legaldocs.storage.base import BaseBlobStore
from legaldocs.storage.local_blob_store import LocalBlobStore
from legaldocs.storage.s3_blob_store import S3BlobStore


class BlobStoreFactory:
    """Creates the configured blob store backend."""

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        if settings.blob_store_backend == "s3":
            if not (settings.s3_access_key_id and settings.s3_secret_access_key):
                raise ValueError("S3 blob store requires S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY")
            return S3BlobStore.from_credentials(
                bucket=settings.s3_bucket,
                access_key_id=settings.s3_access_key_id,
                secret_access_key=settings.s3_secret_access_key,
                endpoint_url=settings.s3_endpoint_url,
                region=settings.s3_region,
            )
        return LocalBlobStore(Path(settings.blob_store_root))
