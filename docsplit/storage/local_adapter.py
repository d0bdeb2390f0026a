import hashlib
import hmac
import time
import uuid
from pathlib import Path
from urllib.parse import quote, urlencode

from docsplit.logging.logger import Log
from docsplit.pipeline.exceptions import ArtifactNotFoundError, UploadError
from docsplit.storage.base import BaseArtifactStore
from docsplit.storage.models import StoredArtifact


class LocalArtifactStore(BaseArtifactStore):
    """Stores artifacts on the local filesystem: {files_root}/{id}/{filename}.

    Signed URLs point at ``public_base_url`` and carry an expiry timestamp
    plus an HMAC-SHA256 signature that the file server checks with
    ``verify_signature``.
    """

    def __init__(self, files_root: Path, public_base_url: str, signing_secret: str) -> None:
        self._files_root = files_root
        self._public_base_url = public_base_url.rstrip("/")
        self._secret = signing_secret.encode("utf-8")

    def save(self, data: bytes, filename: str, mime_type: str) -> StoredArtifact:
        artifact_id = uuid.uuid4().hex
        key = f"{artifact_id}/{Path(filename).name}"
        path = self._resolve_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise UploadError(f"Failed to store {filename}: {exc}") from exc
        Log.debug(f"Stored {len(data)} bytes ({mime_type}) at {key}")
        return StoredArtifact(id=artifact_id, key=key)

    def read(self, key: str) -> bytes:
        path = self._resolve_path(key)
        if not path.is_file():
            raise ArtifactNotFoundError(f"Artifact not found: {key}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise UploadError(f"Failed to read {key}: {exc}") from exc

    def signed_url(self, key: str, ttl_seconds: int) -> str:
        expires = int(time.time()) + ttl_seconds
        query = urlencode({"expires": expires, "signature": self._sign(key, expires)})
        return f"{self._public_base_url}/{quote(key)}?{query}"

    def verify_signature(self, key: str, expires: int, signature: str) -> bool:
        """Check a signed URL's parameters. Expired URLs never verify."""
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self._sign(key, expires), signature)

    def _sign(self, key: str, expires: int) -> str:
        message = f"{key}:{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def _resolve_path(self, key: str) -> Path:
        path = (self._files_root / key).resolve()
        if not path.is_relative_to(self._files_root.resolve()):
            raise UploadError(f"Artifact key escapes storage root: {key}")
        return path
