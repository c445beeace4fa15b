"""Scan report payloads (JSON shape used by the web client) and the plain-text download."""

from dataclasses import asdict

from ..engine.types import RISK_HIGH, ScanRecord, Verdict


def _format_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} GB"


def describe_verdict(verdict: Verdict) -> dict:
    """Human-readable description and recommendation for a verdict."""
    dangerous_type = verdict.risk is not None and verdict.risk.tier == RISK_HIGH
    if verdict.is_malicious:
        return {
            "description": "The file contains potentially harmful content. Please avoid opening it.",
            "recommendation": "We recommend deleting the file immediately or running a malware scan on your system.",
        }
    if dangerous_type:
        return {
            "description": "The file type is potentially dangerous. Exercise caution when opening.",
            "recommendation": "Consider scanning with premium tools or running in a sandbox environment.",
        }
    return {
        "description": "The file appears safe and does not contain any known threats.",
        "recommendation": "You can safely proceed with this file.",
    }


def verdict_payload(verdict: Verdict) -> dict:
    """camelCase verdict fields shared by every report response."""
    risk = asdict(verdict.risk) if verdict.risk else None
    file_type = {"risk": risk["tier"], "reason": risk["reason"]} if risk else None
    return {
        "scanStatus": "malicious" if verdict.is_malicious else "clean",
        "isMalicious": verdict.is_malicious,
        "threatLevel": verdict.threat_level,
        "overallScore": verdict.overall_score,
        "detectionCount": verdict.detection_count,
        "detectionCategories": dict(verdict.detection_categories),
        "isKnownMalicious": verdict.known_malicious,
        "isPotentiallyDangerous": bool(risk and risk["tier"] == RISK_HIGH),
        "fileType": file_type,
        "threats": [
            {"type": f.kind, "severity": f.severity, "detail": f.detail}
            for f in verdict.findings
        ],
        "details": {
            **describe_verdict(verdict),
            "analysisDetails": {
                "hashBasedDetection": verdict.known_malicious,
                "fileTypeRisk": file_type,
                "contentScore": verdict.content_score,
                "overallScore": verdict.overall_score,
            },
        },
    }


def report_payload(record: ScanRecord) -> dict:
    """Full report for a scan record."""
    descriptor = record.descriptor
    scanned_at = record.completed_at or record.created_at
    return {
        "reportId": record.report_id,
        "scanId": record.scan_id,
        "state": record.state,
        "fileName": descriptor.name,
        "fileSize": descriptor.size_bytes,
        "fileHash": descriptor.content_hash,
        "scannedAt": scanned_at.isoformat(),
        "scanType": "premium" if record.requires_payment else "basic",
        **verdict_payload(record.verdict),
    }


def render_text_report(record: ScanRecord) -> str:
    """Plain-text report offered as a download."""
    descriptor = record.descriptor
    verdict = record.verdict
    details = describe_verdict(verdict)
    scanned_at = (record.completed_at or record.created_at).strftime("%Y-%m-%d %H:%M:%S UTC")

    lines = [
        "Scan Report",
        "===========",
        "",
        f"File Name: {descriptor.name}",
        f"File Size: {_format_size(descriptor.size_bytes)}",
        f"SHA-256 Hash: {descriptor.content_hash}",
        f"Scan Date: {scanned_at}",
        f"Threat Level: {'Malicious' if verdict.is_malicious else 'Safe'} ({verdict.threat_level}, score {verdict.overall_score}/100)",
        "",
    ]
    if verdict.findings:
        lines.append("Findings:")
        for finding in verdict.findings:
            detail = f" - {finding.detail}" if finding.detail not in (None, "") else ""
            lines.append(f"  [{finding.severity}] {finding.kind}{detail}")
        lines.append("")
    lines += [
        "Analysis Result:",
        details["description"],
        "",
        "Recommendation:",
        details["recommendation"],
        "",
    ]
    return "\n".join(lines)


def download_filename(record: ScanRecord) -> str:
    """``scan-report-YYYY-MM-DD.txt`` for the day the scan completed."""
    scanned_at = record.completed_at or record.created_at
    return f"scan-report-{scanned_at:%Y-%m-%d}.txt"
