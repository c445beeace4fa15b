"""Content heuristics: additive scoring of script-like text for malicious markers.

Only text-ish extensions are scanned. Each distinct indicator counts once,
encoded blobs and URL-heavy content add smaller weights, and anything that
cannot be read as UTF-8 text scores zero instead of raising.
"""

import re
from pathlib import Path
from typing import Union

from ..utils.logging import get_logger
from .types import (
    FINDING_ENCODED_CONTENT,
    FINDING_MULTIPLE_URLS,
    FINDING_SUSPICIOUS_PATTERN,
    ContentFinding,
    ContentScanResult,
)

logger = get_logger("engine.content_scanner")

SCANNABLE_EXTENSIONS = frozenset({"txt", "js", "vbs", "bat", "ps1", "py"})

SUSPICIOUS_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"eval\s*\(",
        r"document\.write\s*\(",
        r"window\.open\s*\(",
        r"RegExp\s*\(",
        r"Function\s*\(",
        r"setTimeout\s*\(",
        r"setInterval\s*\(",
        r"ActiveXObject",
        r"WScript\.Shell",
        r"cmd\.exe",
        r"powershell",
        r"rundll32",
        r"regsvr32",
        r"certutil",
    )
)

_URL_RE = re.compile(r"https?://\S+")

PATTERN_WEIGHT = 10
ENCODED_WEIGHT = 15
URLS_WEIGHT = 5
ENCODED_MIN_LENGTH = 1000
URL_COUNT_THRESHOLD = 5
MALICIOUS_THRESHOLD = 20

NEUTRAL_RESULT = ContentScanResult()


def is_scannable(extension: str | None) -> bool:
    return (extension or "").lower().lstrip(".") in SCANNABLE_EXTENSIONS


def scan_content(content: Union[str, bytes, None]) -> ContentScanResult:
    """Score text content. Bytes are decoded as strict UTF-8."""
    if isinstance(content, (bytes, bytearray)):
        try:
            content = bytes(content).decode("utf-8")
        except UnicodeDecodeError:
            return NEUTRAL_RESULT
    if not content or not isinstance(content, str):
        return NEUTRAL_RESULT

    score = 0
    findings: list[ContentFinding] = []

    for pattern in SUSPICIOUS_PATTERNS:
        if pattern.search(content):
            score += PATTERN_WEIGHT
            findings.append(ContentFinding(FINDING_SUSPICIOUS_PATTERN, "medium", pattern.pattern))

    if "base64" in content and len(content) > ENCODED_MIN_LENGTH:
        score += ENCODED_WEIGHT
        findings.append(ContentFinding(FINDING_ENCODED_CONTENT, "high", "base64"))

    url_count = len(_URL_RE.findall(content))
    if url_count > URL_COUNT_THRESHOLD:
        score += URLS_WEIGHT
        findings.append(ContentFinding(FINDING_MULTIPLE_URLS, "low", url_count))

    score = max(0, min(score, 100))
    return ContentScanResult(
        score=score,
        malicious=score > MALICIOUS_THRESHOLD,
        findings=tuple(findings),
    )


def scan_path(path: Union[str, Path]) -> ContentScanResult:
    """Read a file as UTF-8 text and score it; unreadable files are neutral."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        logger.debug("content_read_failed", path=str(path), error=str(exc))
        return NEUTRAL_RESULT
    return scan_content(data)
