"""Tests for report payloads and the text download."""

from datetime import datetime, timezone

from trojantrap.engine.types import ScanRecord
from trojantrap.utils.report_template import (
    describe_verdict,
    download_filename,
    render_text_report,
    report_payload,
)

KNOWN_BAD = "a" * 64


def _record(engine, descriptor, content=None):
    return ScanRecord(
        scan_id="s" * 32,
        descriptor=descriptor,
        verdict=engine.evaluate(descriptor, content),
        requires_payment=False,
        payment_reason=None,
        state="completed",
        report_id="r" * 32,
        completed_at=datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc),
    )


class TestDescribeVerdict:
    def test_malicious(self, engine, make_descriptor):
        text = describe_verdict(engine.evaluate(make_descriptor("a.pdf", 1, KNOWN_BAD)))
        assert text["description"].startswith("The file contains potentially harmful content")
        assert "deleting the file" in text["recommendation"]

    def test_dangerous_type(self, engine, make_descriptor):
        text = describe_verdict(engine.evaluate(make_descriptor("tool.exe", 1)))
        assert text["description"].startswith("The file type is potentially dangerous")
        assert "sandbox" in text["recommendation"]

    def test_safe(self, engine, make_descriptor):
        text = describe_verdict(engine.evaluate(make_descriptor("cat.png", 1)))
        assert text["description"] == "The file appears safe and does not contain any known threats."
        assert text["recommendation"] == "You can safely proceed with this file."


class TestReportPayload:
    def test_fields(self, engine, make_descriptor):
        record = _record(engine, make_descriptor("tool.exe", 2048))
        payload = report_payload(record)

        assert payload["reportId"] == "r" * 32
        assert payload["scanId"] == "s" * 32
        assert payload["fileName"] == "tool.exe"
        assert payload["fileSize"] == 2048
        assert payload["scannedAt"] == "2026-03-14T09:26:53+00:00"
        assert payload["scanType"] == "basic"
        assert payload["scanStatus"] == "clean"
        assert payload["overallScore"] == 30
        assert payload["threatLevel"] == "Low"
        assert payload["isPotentiallyDangerous"] is True
        assert payload["fileType"] == {"risk": "high", "reason": "Executable or script file"}
        assert payload["threats"][0]["type"] == "dangerous_file_type"
        assert payload["details"]["analysisDetails"]["overallScore"] == 30

    def test_malicious_payload(self, engine, make_descriptor):
        payload = report_payload(_record(engine, make_descriptor("x.bin", 10, KNOWN_BAD)))
        assert payload["scanStatus"] == "malicious"
        assert payload["isKnownMalicious"] is True
        assert payload["detectionCount"] == 11


class TestTextReport:
    def test_layout(self, engine, make_descriptor):
        text = render_text_report(_record(engine, make_descriptor("photo.png", 1536)))
        lines = text.splitlines()
        assert lines[0] == "Scan Report"
        assert lines[1] == "==========="
        assert "File Name: photo.png" in lines
        assert "File Size: 1.50 KB" in lines
        assert f"SHA-256 Hash: {'d' * 64}" in lines
        assert "Scan Date: 2026-03-14 09:26:53 UTC" in lines
        assert lines[lines.index("Analysis Result:") + 1].startswith("The file appears safe")
        assert lines[lines.index("Recommendation:") + 1] == "You can safely proceed with this file."

    def test_findings_listed(self, engine, make_descriptor):
        text = render_text_report(_record(engine, make_descriptor("evil.exe", 10, KNOWN_BAD)))
        assert "Threat Level: Malicious (Critical, score 100/100)" in text
        assert "[critical] known_malware - Hash matches known malware" in text

    def test_download_filename(self, engine, make_descriptor):
        assert download_filename(_record(engine, make_descriptor())) == "scan-report-2026-03-14.txt"
