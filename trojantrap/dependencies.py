"""FastAPI dependency providers: process-wide singletons built on first use."""

from pathlib import Path

from .config import TrojanTrapConfig, get_config
from .engine.scan_lifecycle import PaymentPolicy, ScanLifecycle
from .engine.verdict import VerdictEngine
from .intel.hash_store import HashStore
from .payments import PaymentGate, build_payment_gate
from .utils.logging import get_logger

_dep_logger = get_logger("dependencies")

_config_instance: TrojanTrapConfig | None = None
_hash_store: HashStore | None = None
_verdict_engine: VerdictEngine | None = None
_payment_gate: PaymentGate | None = None
_scan_lifecycle: ScanLifecycle | None = None


def get_app_config() -> TrojanTrapConfig:
    """Get the application config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = get_config()
    return _config_instance


def resolve_path(path: str) -> Path:
    """Relative paths are resolved against the project root."""
    p = Path(path)
    if not p.is_absolute():
        p = get_app_config().base_dir / p
    return p


def get_hash_store() -> HashStore:
    """Get the HashStore singleton, loading the feed on first use."""
    global _hash_store
    if _hash_store is None:
        config = get_app_config()
        store = HashStore()
        store.load(resolve_path(config.hash_feed_path))
        _hash_store = store
    return _hash_store


def get_verdict_engine() -> VerdictEngine:
    """Get the VerdictEngine singleton."""
    global _verdict_engine
    if _verdict_engine is None:
        _verdict_engine = VerdictEngine(get_hash_store())
    return _verdict_engine


def get_payment_gate() -> PaymentGate:
    """Get the payment gate singleton (chosen once from config)."""
    global _payment_gate
    if _payment_gate is None:
        _payment_gate = build_payment_gate(get_app_config())
    return _payment_gate


def get_scan_lifecycle() -> ScanLifecycle:
    """Get the ScanLifecycle singleton."""
    global _scan_lifecycle
    if _scan_lifecycle is None:
        config = get_app_config()
        policy = PaymentPolicy(
            size_threshold=config.premium_size_threshold,
            dangerous_type_requires_payment=config.premium_on_dangerous_type,
        )
        _scan_lifecycle = ScanLifecycle(
            get_payment_gate(),
            policy=policy,
            report_ttl=config.report_ttl_seconds,
        )
        _dep_logger.info(
            "scan_lifecycle_ready",
            premium_size_threshold=config.premium_size_threshold,
            report_ttl_seconds=config.report_ttl_seconds,
        )
    return _scan_lifecycle


def reset_singletons() -> None:
    """Drop every singleton so the next call rebuilds it from fresh config."""
    global _config_instance, _hash_store, _verdict_engine, _payment_gate, _scan_lifecycle
    _config_instance = None
    _hash_store = None
    _verdict_engine = None
    _payment_gate = None
    _scan_lifecycle = None
