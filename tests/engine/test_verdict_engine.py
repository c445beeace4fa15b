"""Tests for VerdictEngine: signal fusion, thresholds and reproducibility."""

import random
from dataclasses import FrozenInstanceError

import pytest

from trojantrap.engine.file_type import DANGEROUS_EXTENSIONS, SAFE_EXTENSIONS
from trojantrap.engine.types import (
    FINDING_DANGEROUS_FILE_TYPE,
    FINDING_KNOWN_MALWARE,
    FINDING_SUSPICIOUS_PATTERN,
    THREAT_CRITICAL,
    THREAT_LOW,
    THREAT_MEDIUM,
)
from trojantrap.engine.verdict import threat_level_for

KNOWN_BAD = "a" * 64
MIB = 1024 * 1024

DROPPER_JS = "var s = new ActiveXObject('WScript.Shell'); s.Run('cmd.exe');"


class TestScenarios:
    def test_known_hash_is_critical(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("holiday.jpg", 2048, KNOWN_BAD))
        assert verdict.is_malicious is True
        assert verdict.known_malicious is True
        assert verdict.threat_level == THREAT_CRITICAL
        assert verdict.overall_score == 100
        assert verdict.detection_count == 11
        assert verdict.findings[0].kind == FINDING_KNOWN_MALWARE
        assert verdict.findings[0].severity == "critical"

    def test_executable_without_content(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("setup.exe", 1024))
        assert verdict.overall_score == 30
        assert verdict.threat_level == THREAT_LOW
        assert verdict.is_malicious is False
        assert verdict.detection_count == 0
        assert [f.kind for f in verdict.findings] == [FINDING_DANGEROUS_FILE_TYPE]
        assert verdict.findings[0].detail == "Executable or script file"

    def test_text_with_one_repeated_pattern(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("notes.txt", 64), "eval(x) eval(x) eval(x)")
        assert verdict.content_score == 10
        assert verdict.overall_score == 7
        assert verdict.threat_level == THREAT_LOW
        assert verdict.is_malicious is False

    def test_large_safe_file(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("scan.pdf", 120 * MIB))
        assert verdict.overall_score == 10
        assert verdict.threat_level == THREAT_LOW
        assert verdict.is_malicious is False


class TestFusion:
    def test_script_with_patterns_crosses_malicious_threshold(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("invoice.js", 512), DROPPER_JS)
        # 30 (type) + 30 * 0.7 (content) = 51
        assert verdict.overall_score == 51
        assert verdict.is_malicious is True
        assert verdict.threat_level == THREAT_MEDIUM
        assert verdict.detection_count == 6
        kinds = [f.kind for f in verdict.findings]
        assert kinds[0] == FINDING_DANGEROUS_FILE_TYPE
        assert kinds[1:] == [FINDING_SUSPICIOUS_PATTERN] * 3

    def test_content_ignored_for_non_script_types(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("setup.exe", 1024), DROPPER_JS)
        assert verdict.content_score == 0
        assert verdict.overall_score == 30

    def test_half_points_round_up(self, engine, make_descriptor):
        blob = "base64," + "A" * 1200
        verdict = engine.evaluate(make_descriptor("blob.txt", len(blob)), blob)
        # 15 * 0.7 = 10.5
        assert verdict.overall_score == 11

    def test_score_is_clamped(self, engine, make_descriptor):
        noisy = " ".join(
            ["eval(", "document.write(", "window.open(", "RegExp(", "Function(", "setTimeout(",
             "setInterval(", "ActiveXObject", "WScript.Shell", "cmd.exe", "powershell",
             "rundll32", "regsvr32", "certutil", "base64"]
            + [f"https://h{i}.example" for i in range(10)]
        ) + " " + "A" * 1200
        verdict = engine.evaluate(make_descriptor("x.ps1", 200 * MIB), noisy)
        assert verdict.content_score == 100
        assert verdict.overall_score == 100
        assert verdict.threat_level == THREAT_CRITICAL

    def test_categories_follow_score(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("a.bin", 1, KNOWN_BAD))
        assert dict(verdict.detection_categories) == {
            "virus": 30, "spyware": 20, "trojan": 25, "ransomware": 15, "adware": 10,
        }

    def test_clean_file_has_zero_categories(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("photo.png", 100))
        assert {count for _, count in verdict.detection_categories} == {0}

    def test_evaluation_is_idempotent(self, engine, make_descriptor):
        descriptor = make_descriptor("invoice.js", 512)
        assert engine.evaluate(descriptor, DROPPER_JS) == engine.evaluate(descriptor, DROPPER_JS)

    def test_more_content_never_lowers_the_score(self, engine, make_descriptor):
        descriptor = make_descriptor("run.bat", 100)
        base = engine.evaluate(descriptor, "echo hi")
        more = engine.evaluate(descriptor, "echo hi & powershell -nop")
        assert more.overall_score >= base.overall_score

    def test_evaluate_path_reads_scannable_files(self, engine, make_descriptor, tmp_path):
        script = tmp_path / "invoice.js"
        script.write_text(DROPPER_JS, encoding="utf-8")
        verdict = engine.evaluate_path(make_descriptor("invoice.js", script.stat().st_size), script)
        assert verdict.is_malicious is True


def test_threat_level_thresholds_are_strict():
    assert threat_level_for(800) == "High"
    assert threat_level_for(801) == THREAT_CRITICAL
    assert threat_level_for(400) == THREAT_LOW
    assert threat_level_for(401) == THREAT_MEDIUM


PATTERN_SAMPLES = (
    "eval(", "document.write (", "window.open(", "RegExp(", "Function(", "setTimeout(",
    "setInterval(", "ActiveXObject", "WScript.Shell", "cmd.exe", "PowerShell",
    "rundll32", "regsvr32", "certutil",
)


class TestKnownHashDominates:
    @pytest.mark.parametrize("name", ["dropper.js", "run.ps1", "setup.exe", "notes.txt", "image.iso", "noext"])
    @pytest.mark.parametrize("size", [0, 1024, 200 * MIB])
    def test_known_hash_is_critical_for_any_file(self, engine, make_descriptor, name, size):
        verdict = engine.evaluate(make_descriptor(name, size, KNOWN_BAD), DROPPER_JS + " https://a.example" * 8)
        assert verdict.known_malicious is True
        assert verdict.is_malicious is True
        assert verdict.threat_level == THREAT_CRITICAL
        assert verdict.overall_score == 100
        assert verdict.detection_count == 11


class TestScoreBounds:
    def test_clean_text_scores_zero(self, engine, make_descriptor):
        text = "Meeting notes. " + " ".join(f"https://docs{i}.example/page" for i in range(5))
        assert len(text) <= 1000
        verdict = engine.evaluate(make_descriptor("notes.txt", len(text)), text)
        assert verdict.content_score == 0
        assert verdict.overall_score == 0
        assert verdict.threat_level == THREAT_LOW
        assert verdict.findings == ()

    def test_score_stays_in_range_for_random_inputs(self, engine, make_descriptor):
        rng = random.Random(1337)
        extensions = sorted(DANGEROUS_EXTENSIONS | SAFE_EXTENSIONS) + ["xyz", "", "iso"]
        for _ in range(500):
            ext = rng.choice(extensions)
            name = f"file.{ext}" if ext else "file"
            size = rng.choice([0, 1, 50 * MIB, 100 * MIB, 100 * MIB + 1, rng.randrange(0, 300 * MIB)])
            parts = rng.sample(PATTERN_SAMPLES, rng.randrange(0, len(PATTERN_SAMPLES) + 1))
            if rng.random() < 0.3:
                parts.append("base64," + "Q" * rng.randrange(0, 2000))
            parts += [f"http://u{i}.example" for i in range(rng.randrange(0, 10))]
            content = " ".join(parts)

            verdict = engine.evaluate(make_descriptor(name, size), content)

            assert 0 <= verdict.overall_score <= 100
            assert 0 <= verdict.content_score <= 100
            if verdict.is_malicious:
                assert verdict.detection_count == verdict.overall_score // 10 + 1
            else:
                assert verdict.detection_count == 0
                assert verdict.overall_score <= 50


class TestVerdictImmutability:
    def test_verdict_is_hashable(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("invoice.js", 512), DROPPER_JS)
        assert hash(verdict) == hash(engine.evaluate(make_descriptor("invoice.js", 512), DROPPER_JS))

    def test_categories_cannot_be_modified(self, engine, make_descriptor):
        verdict = engine.evaluate(make_descriptor("a.bin", 1, KNOWN_BAD))
        with pytest.raises(TypeError):
            verdict.detection_categories["virus"] = 999
        with pytest.raises(FrozenInstanceError):
            verdict.detection_categories = ()
