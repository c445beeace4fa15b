"""Shared test fixtures."""

import pytest

from trojantrap.engine.scan_lifecycle import PaymentPolicy, ScanLifecycle
from trojantrap.engine.types import FileDescriptor
from trojantrap.engine.verdict import VerdictEngine
from trojantrap.intel.hash_store import HashStore
from trojantrap.payments.mock_gate import MockPaymentGate

KNOWN_BAD = "a" * 64
UNKNOWN = "d" * 64
MIB = 1024 * 1024


@pytest.fixture
def hash_store():
    """HashStore seeded with the synthetic fallback digests."""
    store = HashStore()
    store.load_fallback()
    return store


@pytest.fixture
def engine(hash_store):
    return VerdictEngine(hash_store)


@pytest.fixture
def mock_gate():
    """Mock gate that confirms instantly."""
    return MockPaymentGate(delay=0)


@pytest.fixture
def lifecycle(mock_gate):
    return ScanLifecycle(mock_gate, policy=PaymentPolicy(size_threshold=50 * MIB))


@pytest.fixture
def make_descriptor():
    def _make(name="report.pdf", size_bytes=1024, content_hash=UNKNOWN):
        return FileDescriptor.from_upload(name, size_bytes, content_hash)
    return _make
