from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from docsplit.pipeline.exceptions import ArtifactNotFoundError, UploadError
from docsplit.storage.s3_adapter import S3ArtifactStore


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "op")


def _make_store() -> tuple[S3ArtifactStore, MagicMock]:
    client = MagicMock()
    return S3ArtifactStore(bucket="docs", client=client), client


class TestS3ArtifactStore:
    def test_save_puts_object_under_unique_key(self) -> None:
        store, client = _make_store()

        artifact = store.save(b"pdf", "part.pdf", "application/pdf")

        assert artifact.key == f"{artifact.id}/part.pdf"
        client.put_object.assert_called_once_with(
            Bucket="docs", Key=artifact.key, Body=b"pdf", ContentType="application/pdf"
        )

    def test_save_failure_raises_upload_error(self) -> None:
        store, client = _make_store()
        client.put_object.side_effect = _client_error("AccessDenied")

        with pytest.raises(UploadError, match="S3 upload of part.pdf failed"):
            store.save(b"pdf", "part.pdf", "application/pdf")

    def test_read_returns_body(self) -> None:
        store, client = _make_store()
        client.get_object.return_value = {"Body": MagicMock(read=MagicMock(return_value=b"x"))}

        assert store.read("k/a.pdf") == b"x"
        client.get_object.assert_called_once_with(Bucket="docs", Key="k/a.pdf")

    def test_read_missing_key_raises_not_found(self) -> None:
        store, client = _make_store()
        client.get_object.side_effect = _client_error("NoSuchKey")

        with pytest.raises(ArtifactNotFoundError):
            store.read("k/a.pdf")

    def test_signed_url_uses_presigned_get(self) -> None:
        store, client = _make_store()
        client.generate_presigned_url.return_value = "https://signed"

        assert store.signed_url("k/a.pdf", 1800) == "https://signed"
        client.generate_presigned_url.assert_called_once_with(
            "get_object", Params={"Bucket": "docs", "Key": "k/a.pdf"}, ExpiresIn=1800
        )

    def test_requires_bucket(self) -> None:
        with pytest.raises(ValueError, match="s3_bucket is required"):
            S3ArtifactStore(bucket="", client=MagicMock())
