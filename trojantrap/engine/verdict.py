"""Verdict engine: fuses hash, file-type and content signals into one Verdict."""

from pathlib import Path
from typing import Union

from ..intel.hash_store import HashStore
from ..utils.logging import get_logger
from .content_scanner import NEUTRAL_RESULT, is_scannable, scan_content, scan_path
from .file_type import classify_extension
from .types import (
    DETECTION_CATEGORIES,
    FINDING_DANGEROUS_FILE_TYPE,
    FINDING_KNOWN_MALWARE,
    RISK_HIGH,
    RISK_MEDIUM,
    THREAT_CRITICAL,
    THREAT_HIGH,
    THREAT_LOW,
    THREAT_MEDIUM,
    ContentFinding,
    ContentScanResult,
    FileDescriptor,
    RiskAssessment,
    Verdict,
)

logger = get_logger("engine.verdict")

TIER_POINTS = {RISK_HIGH: 30, RISK_MEDIUM: 15}
CONTENT_WEIGHT_TENTHS = 7  # content score counts at 0.7
LARGE_FILE_BYTES = 100 * 1024 * 1024
LARGE_FILE_POINTS = 10

MALICIOUS_ABOVE = 50
# (threshold, level) checked top-down, strictly greater than
THREAT_THRESHOLDS = ((80, THREAT_CRITICAL), (60, THREAT_HIGH), (40, THREAT_MEDIUM))

# Cosmetic split of the score across categories, in percent
CATEGORY_SHARES = {"virus": 30, "spyware": 20, "trojan": 25, "ransomware": 15, "adware": 10}


def threat_level_for(score_tenths: int) -> str:
    for threshold, level in THREAT_THRESHOLDS:
        if score_tenths > threshold * 10:
            return level
    return THREAT_LOW


def detection_categories_for(score: int, malicious: bool) -> tuple[tuple[str, int], ...]:
    if not malicious:
        return tuple((name, 0) for name in DETECTION_CATEGORIES)
    return tuple((name, score * CATEGORY_SHARES[name] // 100) for name in DETECTION_CATEGORIES)


class VerdictEngine:
    """Produces reproducible verdicts from a FileDescriptor and optional content.

    Scoring is done in integer tenths; the final score is rounded half up
    and clamped to [0, 100].
    """

    def __init__(self, hash_store: HashStore) -> None:
        self._hash_store = hash_store

    def evaluate(self, descriptor: FileDescriptor, content: Union[str, bytes, None] = None) -> Verdict:
        """Classify a descriptor; content is only considered for script-like types."""
        content_result = NEUTRAL_RESULT
        if content is not None and is_scannable(descriptor.extension):
            content_result = scan_content(content)
        return self._fuse(descriptor, content_result)

    def evaluate_path(self, descriptor: FileDescriptor, path: Union[str, Path]) -> Verdict:
        """Classify a file on disk, reading its text only when the type is scannable."""
        content_result = NEUTRAL_RESULT
        if is_scannable(descriptor.extension):
            content_result = scan_path(path)
        return self._fuse(descriptor, content_result)

    def _fuse(self, descriptor: FileDescriptor, content: ContentScanResult) -> Verdict:
        known = self._hash_store.contains(descriptor.content_hash)
        risk = classify_extension(descriptor.extension)

        if known:
            # Strongest signal, nothing else is scored
            score_tenths = 1000
            threat_level = THREAT_CRITICAL
            malicious = True
        else:
            score_tenths = TIER_POINTS.get(risk.tier, 0) * 10
            score_tenths += content.score * CONTENT_WEIGHT_TENTHS
            if descriptor.size_bytes > LARGE_FILE_BYTES:
                score_tenths += LARGE_FILE_POINTS * 10
            malicious = score_tenths > MALICIOUS_ABOVE * 10
            threat_level = threat_level_for(score_tenths)

        overall = max(0, min(100, (score_tenths + 5) // 10))
        verdict = Verdict(
            overall_score=overall,
            threat_level=threat_level,
            is_malicious=malicious,
            detection_count=overall // 10 + 1 if malicious else 0,
            detection_categories=detection_categories_for(overall, malicious),
            findings=self._findings(known, risk, content),
            known_malicious=known,
            content_score=content.score,
            risk=risk,
        )
        logger.debug(
            "verdict_computed",
            file_hash=descriptor.content_hash,
            score=verdict.overall_score,
            threat_level=verdict.threat_level,
            known_malicious=known,
        )
        return verdict

    @staticmethod
    def _findings(known: bool, risk: RiskAssessment, content: ContentScanResult) -> tuple[ContentFinding, ...]:
        findings: list[ContentFinding] = []
        if known:
            findings.append(ContentFinding(FINDING_KNOWN_MALWARE, "critical", "Hash matches known malware"))
        if risk.tier == RISK_HIGH:
            findings.append(ContentFinding(FINDING_DANGEROUS_FILE_TYPE, "high", risk.reason))
        findings.extend(content.findings)
        return tuple(findings)
