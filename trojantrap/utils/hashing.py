"""SHA-256 helpers and chunked upload spooling."""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..errors import UploadTooLargeError
from .logging import get_logger

logger = get_logger("utils.hashing")

CHUNK_SIZE = 1024 * 1024


def sha256_of_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_of_path(path, chunk_size: int = CHUNK_SIZE) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.hexdigest()


async def spool_upload(
    upload,
    upload_dir: str,
    max_bytes: int,
    chunk_size: int = CHUNK_SIZE,
) -> tuple[Path, int, str]:
    """Stream an uploaded file to a temp file while hashing it.

    ``upload`` is anything with an async ``read(size)`` (FastAPI's
    ``UploadFile``). Returns ``(path, size_bytes, sha256)``; the caller
    owns the file and must remove it.

    Raises:
        UploadTooLargeError: The stream exceeded ``max_bytes``. The partial
            file is removed before raising, as it is for any other failure.
    """
    Path(upload_dir).mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix="upload-", suffix=".part", dir=upload_dir)
    path = Path(name)
    h = hashlib.sha256()
    size = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = await upload.read(chunk_size)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise UploadTooLargeError(max_bytes)
                h.update(chunk)
                out.write(chunk)
    except BaseException:
        discard(path)
        raise
    return path, size, h.hexdigest()


def discard(path: Optional[Path]) -> None:
    """Remove a spooled upload, ignoring files that are already gone."""
    if path is None:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("upload_cleanup_failed", path=str(path), error=str(e))
