import logging
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from bugcrusher.core.errors import UploadError

logger = logging.getLogger(__name__)


class StorageClient:
    """
    Blob store backed by a local directory.

    Objects live at <root>/<bucket>/<path> and are reachable at
    <public_base_url>/<bucket>/<path>. The app mounts <root> read-only under
    that URL prefix.
    """

    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _target(self, bucket: str, path: str) -> Path:
        rel = PurePosixPath(path)
        if rel.is_absolute() or ".." in rel.parts or "/" in bucket:
            raise UploadError(f"Invalid storage path: {bucket}/{path}")
        return self.root / bucket / Path(*rel.parts)

    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store `data` and return its storage path. Existing objects are never overwritten."""
        target = self._target(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(data)
        except OSError as exc:
            raise UploadError(f"Failed to upload {PurePosixPath(path).name}.") from exc

        logger.info("stored %s/%s (%d bytes, %s)", bucket, path, len(data), content_type)
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{quote(path)}"

    def object_url(self, full_path: str) -> str:
        """URL of an object addressed as "<bucket>/<path>", the form content rows store."""
        return f"{self.public_base_url}/{quote(full_path.lstrip('/'))}"
