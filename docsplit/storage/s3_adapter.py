import uuid
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from docsplit.pipeline.exceptions import ArtifactNotFoundError, UploadError
from docsplit.storage.base import BaseArtifactStore
from docsplit.storage.models import StoredArtifact


class S3ArtifactStore(BaseArtifactStore):
    """Stores artifacts in an S3 bucket and mints presigned GET URLs."""

    def __init__(
        self,
        *,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any = None,
    ) -> None:
        if not bucket:
            raise ValueError("s3_bucket is required for storage_backend=s3")
        self._bucket = bucket
        self._client = client or boto3.client(
            "s3",
            region_name=region or None,
            endpoint_url=endpoint_url or None,
        )

    def save(self, data: bytes, filename: str, mime_type: str) -> StoredArtifact:
        artifact_id = uuid.uuid4().hex
        key = f"{artifact_id}/{filename}"
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=data, ContentType=mime_type
            )
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"S3 upload of {filename} failed: {exc}") from exc
        return StoredArtifact(id=artifact_id, key=key)

    def read(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise ArtifactNotFoundError(f"Artifact not found: {key}") from exc
            raise UploadError(f"S3 read of {key} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise UploadError(f"S3 read of {key} failed: {exc}") from exc

    def signed_url(self, key: str, ttl_seconds: int) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"Could not presign {key}: {exc}") from exc
