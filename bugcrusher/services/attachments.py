import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import PurePosixPath

from bugcrusher.core.config import MAX_FILE_SIZE, MAX_FILES
from bugcrusher.core.errors import AttachmentError, UploadError
from bugcrusher.services.storage import StorageClient

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._ -]")


@dataclass(frozen=True)
class Attachment:
    filename: str
    data: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return PurePosixPath(self.filename).suffix.lower()


def read_upload(upload, limit: int) -> Attachment:
    """
    Read an uploaded file, stopping one byte past `limit`.

    Oversized files are never buffered in full; the size check then rejects
    them from the truncated copy.
    """
    return Attachment(
        filename=upload.filename or "",
        data=upload.file.read(limit + 1),
        content_type=upload.content_type,
    )


def validate_images(files: list[Attachment], max_files: int = MAX_FILES, max_size: int = MAX_FILE_SIZE) -> None:
    if not files:
        raise AttachmentError("At least one image is required.")
    if len(files) > max_files:
        raise AttachmentError(f"Maximum of {max_files} images allowed.")
    for f in files:
        if f.size > max_size:
            raise AttachmentError(f"{f.filename} exceeds {max_size // (1024 * 1024)}MB limit.")


def validate_single_file(file: Attachment | None, extensions: set[str], max_size: int) -> None:
    if file is None or not file.filename:
        raise AttachmentError("A file is required.")
    if file.extension not in extensions:
        allowed = ", ".join(sorted(extensions))
        raise AttachmentError(f"{file.filename} must be one of: {allowed}.")
    if file.size > max_size:
        raise AttachmentError(f"{file.filename} exceeds {max_size // (1024 * 1024)}MB limit.")


def safe_filename(filename: str) -> str:
    name = PurePosixPath(filename.replace("\\", "/")).name
    return _UNSAFE.sub("_", name) or "file"


def upload_all(storage: StorageClient, bucket: str, prefix: str, files: list[Attachment]) -> list[str]:
    """
    Upload files one by one under `prefix` and return their public URLs.

    The first failure aborts the batch. Files already stored stay where they are.
    """
    urls: list[str] = []
    last_ms = 0
    for f in files:
        # ms keeps upload order readable, the token separates concurrent batches
        last_ms = max(int(time.time() * 1000), last_ms + 1)
        path = f"{prefix}/{last_ms}-{secrets.token_hex(3)}-{safe_filename(f.filename)}"
        try:
            storage.upload(bucket, path, f.data, f.content_type)
        except UploadError:
            if urls:
                logger.warning("upload batch aborted, %d orphaned object(s) in %s", len(urls), bucket)
            raise
        urls.append(storage.public_url(bucket, path))
    return urls
