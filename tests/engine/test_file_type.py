"""Tests for extension-based risk classification."""

import pytest

from trojantrap.engine.file_type import DANGEROUS_EXTENSIONS, SAFE_EXTENSIONS, classify_extension
from trojantrap.engine.types import RISK_HIGH, RISK_LOW, RISK_MEDIUM


def _variants(extensions):
    return sorted(extensions) + sorted(e.upper() for e in extensions) + sorted("." + e for e in extensions)


@pytest.mark.parametrize("ext", _variants(DANGEROUS_EXTENSIONS))
def test_dangerous_extensions(ext):
    risk = classify_extension(ext)
    assert risk.tier == RISK_HIGH
    assert risk.reason == "Executable or script file"


@pytest.mark.parametrize("ext", _variants(SAFE_EXTENSIONS))
def test_safe_extensions(ext):
    risk = classify_extension(ext)
    assert risk.tier == RISK_LOW
    assert risk.reason == "Common safe file type"


@pytest.mark.parametrize("ext", ["xyz", "", None, "iso", "html", "exe1"])
def test_unknown_extensions_are_medium(ext):
    risk = classify_extension(ext)
    assert risk.tier == RISK_MEDIUM
    assert risk.reason == "Unknown file type"


def test_extension_lists_do_not_overlap():
    assert len(DANGEROUS_EXTENSIONS) == 18
    assert len(SAFE_EXTENSIONS) == 23
    assert not DANGEROUS_EXTENSIONS & SAFE_EXTENSIONS
