"""Value types shared by the classification engine and the scan lifecycle."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")

# File-type risk tiers
RISK_LOW = "low"
RISK_MEDIUM = "medium"
RISK_HIGH = "high"

# Overall threat levels
THREAT_LOW = "Low"
THREAT_MEDIUM = "Medium"
THREAT_HIGH = "High"
THREAT_CRITICAL = "Critical"

# Finding kinds
FINDING_SUSPICIOUS_PATTERN = "suspicious_pattern"
FINDING_ENCODED_CONTENT = "encoded_content"
FINDING_MULTIPLE_URLS = "multiple_urls"
FINDING_KNOWN_MALWARE = "known_malware"
FINDING_DANGEROUS_FILE_TYPE = "dangerous_file_type"

# Scan record states
STATE_PENDING = "pending"
STATE_COMPLETED = "completed"

DETECTION_CATEGORIES = ("virus", "spyware", "trojan", "ransomware", "adware")


def is_sha256_hex(value) -> bool:
    """True when value is a 64-char lowercase hex digest."""
    return isinstance(value, str) and bool(_SHA256_RE.match(value))


def extension_of(file_name: str) -> str:
    """Lowercased text after the last dot of a file name, or "" when there is none."""
    base = (file_name or "").replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[-1].lower()


@dataclass(frozen=True)
class FileDescriptor:
    """Identity of one uploaded file."""

    name: str
    extension: str
    size_bytes: int
    content_hash: str

    def __post_init__(self) -> None:
        if not is_sha256_hex(self.content_hash):
            raise ValueError(f"content_hash must be 64 lowercase hex chars, got: {self.content_hash!r}")
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got: {self.size_bytes!r}")

    @classmethod
    def from_upload(cls, name: str, size_bytes: int, content_hash: str) -> "FileDescriptor":
        """Build a descriptor from the raw upload fields (extension derived from name)."""
        return cls(
            name=name,
            extension=extension_of(name),
            size_bytes=int(size_bytes),
            content_hash=(content_hash or "").strip().lower(),
        )

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


@dataclass(frozen=True)
class RiskAssessment:
    tier: str  # low / medium / high
    reason: str


@dataclass(frozen=True)
class ContentFinding:
    """One heuristic hit; detail is the pattern, a count or a reason."""

    kind: str
    severity: str  # low / medium / high / critical
    detail: Union[str, int, None] = None


@dataclass(frozen=True)
class ContentScanResult:
    score: int = 0
    malicious: bool = False
    findings: tuple[ContentFinding, ...] = ()


@dataclass(frozen=True)
class Verdict:
    """Deterministic classification of one file.

    Every field is immutable so a stored verdict cannot change; categories are
    ``(name, count)`` pairs in DETECTION_CATEGORIES order.
    """

    overall_score: int
    threat_level: str
    is_malicious: bool
    detection_count: int
    detection_categories: tuple[tuple[str, int], ...]
    findings: tuple[ContentFinding, ...]
    known_malicious: bool
    content_score: int = 0
    risk: Optional[RiskAssessment] = None


@dataclass(frozen=True)
class ScanRecord:
    scan_id: str
    descriptor: FileDescriptor
    verdict: Verdict
    requires_payment: bool
    payment_reason: Optional[str]
    state: str = STATE_PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    report_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    payment_reference: Optional[str] = None


@dataclass(frozen=True)
class ScanTicket:
    """Returned by ScanLifecycle.create; report_id is set when no payment was needed."""

    scan_id: str
    requires_payment: bool
    payment_reason: Optional[str]
    report_id: Optional[str] = None


@dataclass(frozen=True)
class PaymentIntent:
    intent_id: str
    client_secret: str
    amount: int
    currency: str
    method: str = "card"
    upi_link: Optional[str] = None
