"""Hash store: set of known-malicious SHA-256 digests loaded from a CSV feed."""

import csv
from pathlib import Path
from typing import Iterable, Union

from ..utils.logging import get_logger

logger = get_logger("intel.hash_store")

# Checked in order; the first present, non-empty 64-char value wins.
CANDIDATE_COLUMNS = ("sha256_hash", "sha256", "hash", "_1", "_2", "_3")
_NAMED_COLUMNS = frozenset(CANDIDATE_COLUMNS[:3])

# Synthetic digests loaded when no feed is available.
FALLBACK_HASHES = ("a" * 64, "b" * 64, "c" * 64)

SOURCE_FEED = "feed"
SOURCE_FALLBACK = "fallback"


def _clean(value) -> str:
    return str(value).replace('"', "").strip().lower()


def _normalize_headers(row: list[str]) -> list[str]:
    """Strip quotes, whitespace and a leading '#' marker; name empty cells _<index>."""
    headers = []
    for index, raw in enumerate(row):
        name = raw.replace('"', "").strip()
        if index == 0:
            name = name.lstrip("#").strip()
        headers.append(name or f"_{index}")
    return headers


class HashStore:
    """In-memory set of malicious hashes with O(1) case-insensitive lookups.

    Read-only once loaded, so it can be shared by concurrent requests
    without locking.
    """

    def __init__(self) -> None:
        self._hashes: set[str] = set()
        self.source: str | None = None

    def __len__(self) -> int:
        return len(self._hashes)

    @property
    def size(self) -> int:
        return len(self._hashes)

    def add(self, value: str) -> bool:
        """Add one digest; returns False when it is not a 64-char value."""
        cleaned = _clean(value)
        if len(cleaned) != 64:
            return False
        self._hashes.add(cleaned)
        return True

    def contains(self, value) -> bool:
        """Membership test; malformed input is simply not a member."""
        if not isinstance(value, str):
            return False
        cleaned = value.strip().lower()
        if len(cleaned) != 64:
            return False
        return cleaned in self._hashes

    def load(self, source: Union[str, Path, Iterable[str], None]) -> int:
        """Load hashes from a CSV path or an iterable of CSV lines.

        Falls back to the synthetic set when the feed is missing or
        unreadable. Returns the number of hashes in the store.
        """
        if source is None:
            logger.warning("hash_feed_missing", reason="no source configured")
            return self.load_fallback()

        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_file():
                logger.warning("hash_feed_missing", path=str(path))
                return self.load_fallback()
            try:
                with open(path, newline="", encoding="utf-8", errors="replace") as fh:
                    added = self._load_lines(fh)
            except (OSError, csv.Error) as exc:
                logger.error("hash_feed_load_error", path=str(path), error=str(exc))
                return self.load_fallback()
            origin = str(path)
        else:
            try:
                added = self._load_lines(source)
            except csv.Error as exc:
                logger.error("hash_feed_load_error", path="<rows>", error=str(exc))
                return self.load_fallback()
            origin = "<rows>"

        self.source = SOURCE_FEED
        logger.info("hash_store_loaded", source=origin, added=added, size=self.size)
        return self.size

    def load_fallback(self) -> int:
        """Seed the store with the synthetic test digests."""
        for value in FALLBACK_HASHES:
            self._hashes.add(value)
        self.source = SOURCE_FALLBACK
        logger.info("hash_store_loaded", source=SOURCE_FALLBACK, size=self.size)
        return self.size

    def _load_lines(self, lines: Iterable[str]) -> int:
        reader = csv.reader(lines, skipinitialspace=True)
        headers: list[str] | None = None
        added = 0
        for row in reader:
            if not row:
                continue
            if headers is None:
                normalized = _normalize_headers(row)
                # Feed preambles are '#' comment lines; the header line may be one too
                if row[0].lstrip().startswith("#") and not _NAMED_COLUMNS.intersection(normalized):
                    continue
                headers = normalized
                continue
            if row[0].lstrip().startswith("#"):
                continue
            record = dict(zip(headers, row))
            digest = self._pick_hash(record)
            if digest is not None and digest not in self._hashes:
                self._hashes.add(digest)
                added += 1
        return added

    @staticmethod
    def _pick_hash(record: dict) -> str | None:
        for column in CANDIDATE_COLUMNS:
            value = record.get(column)
            if not value:
                continue
            cleaned = _clean(value)
            if cleaned and len(cleaned) == 64:
                return cleaned
        return None
