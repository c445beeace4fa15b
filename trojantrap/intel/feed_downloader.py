"""Malware hash feed downloader (MalwareBazaar CSV export, no API key required)."""

import io
import zipfile
from pathlib import Path

import httpx

from ..errors import FeedDownloadError
from ..utils.logging import get_logger

logger = get_logger("intel.feed_downloader")

_DEFAULT_FEED_URL = "https://bazaar.abuse.ch/export/csv/full/"


class FeedDownloader:
    """Fetches the hash feed export and writes it as a plain CSV file.

    The export is usually a zip archive holding one CSV; plain CSV bodies
    are written through unchanged.
    """

    def __init__(self, url: str = _DEFAULT_FEED_URL, dest: str | Path = "full.csv", timeout: float = 120.0) -> None:
        self._url = url
        self._dest = Path(dest)
        self._timeout = timeout

    async def download(self) -> Path:
        """Download the feed to the destination path and return it."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(self._url)
                response.raise_for_status()
                payload = response.content
        except httpx.HTTPStatusError as exc:
            logger.error("feed_download_error", url=self._url, status=exc.response.status_code)
            raise FeedDownloadError(f"Feed download failed with HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("feed_download_exception", url=self._url, error=str(exc))
            raise FeedDownloadError(f"Feed download failed: {exc}") from exc

        data = self._unpack(payload)
        try:
            self._dest.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._dest.with_suffix(self._dest.suffix + ".part")
            tmp_path.write_bytes(data)
            tmp_path.replace(self._dest)
        except OSError as exc:
            logger.error("feed_write_error", path=str(self._dest), error=str(exc))
            raise FeedDownloadError(f"Cannot write feed to {self._dest}: {exc}") from exc

        logger.info("feed_downloaded", url=self._url, path=str(self._dest), bytes=len(data))
        return self._dest

    def _unpack(self, payload: bytes) -> bytes:
        """Return the CSV bytes, extracting the first .csv member of a zip payload."""
        if not zipfile.is_zipfile(io.BytesIO(payload)):
            return payload
        try:
            with zipfile.ZipFile(io.BytesIO(payload)) as archive:
                members = [n for n in archive.namelist() if n.lower().endswith(".csv")]
                if not members:
                    raise FeedDownloadError("Feed archive contains no CSV file")
                return archive.read(members[0])
        except zipfile.BadZipFile as exc:
            raise FeedDownloadError(f"Corrupt feed archive: {exc}") from exc
