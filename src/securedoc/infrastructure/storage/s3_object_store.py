"""S3-compatible object store adapter."""

import asyncio

import boto3


class S3ObjectStore:
    """Stores blobs in an S3 bucket. The locator is the object key.

    boto3 is blocking, so each call runs in the default thread pool.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: object | None = None,
    ) -> None:
        self._bucket = bucket
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    async def put(self, data: bytes, key: str, metadata: dict[str, str]) -> str:
        await asyncio.to_thread(self._put_sync, data, key, metadata)
        return key

    async def get(self, locator: str) -> bytes:
        return await asyncio.to_thread(self._get_sync, locator)

    async def delete(self, locator: str) -> None:
        await asyncio.to_thread(self._delete_sync, locator)

    # --- Synchronous helpers (executed in thread pool) ---

    def _put_sync(self, data: bytes, key: str, metadata: dict[str, str]) -> None:
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=data,
            ContentType="application/octet-stream",
            Metadata=metadata,
        )

    def _get_sync(self, key: str) -> bytes:
        response = self._client.get_object(Bucket=self._bucket, Key=key)
        return response["Body"].read()

    def _delete_sync(self, key: str) -> None:
        # S3 DeleteObject succeeds for missing keys
        self._client.delete_object(Bucket=self._bucket, Key=key)
