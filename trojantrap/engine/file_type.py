"""File-type risk classification from a bare extension."""

from .types import RISK_HIGH, RISK_LOW, RISK_MEDIUM, RiskAssessment

DANGEROUS_EXTENSIONS = frozenset({
    "exe", "bat", "cmd", "com", "pif", "scr", "vbs", "js", "jar",
    "msi", "dmg", "app", "ps1", "py", "pl", "sh", "elf", "dll",
})

SAFE_EXTENSIONS = frozenset({
    "txt", "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    "jpg", "jpeg", "png", "gif", "bmp", "svg", "mp3", "mp4",
    "avi", "mov", "zip", "rar", "7z", "tar", "gz",
})

REASON_DANGEROUS = "Executable or script file"
REASON_SAFE = "Common safe file type"
REASON_UNKNOWN = "Unknown file type"


def classify_extension(extension: str | None) -> RiskAssessment:
    """Map an extension (case-insensitive, optional leading dot) to a risk tier."""
    ext = (extension or "").strip().lower().lstrip(".")
    if ext in DANGEROUS_EXTENSIONS:
        return RiskAssessment(tier=RISK_HIGH, reason=REASON_DANGEROUS)
    if ext in SAFE_EXTENSIONS:
        return RiskAssessment(tier=RISK_LOW, reason=REASON_SAFE)
    return RiskAssessment(tier=RISK_MEDIUM, reason=REASON_UNKNOWN)
