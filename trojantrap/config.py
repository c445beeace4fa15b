"""TrojanTrap configuration system using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class TrojanTrapConfig(BaseSettings):
    """Main configuration class. Loads from .env file and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "TrojanTrap"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: str = "*"

    # Logging
    log_dir: str = "logs"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    # Hash feed
    hash_feed_path: str = "full.csv"
    hash_feed_url: str = "https://bazaar.abuse.ch/export/csv/full/"
    feed_download_timeout: float = 120.0

    # Uploads
    upload_dir: str = "uploads"
    upload_chunk_size: int = 1024 * 1024
    max_upload_bytes: int = 500 * MIB

    # Premium scan policy
    premium_size_threshold: int = 50 * MIB
    premium_on_dangerous_type: bool = False

    # Payments
    payment_provider: str = "mock"  # mock / stripe
    stripe_secret_key: Optional[str] = None
    payment_amount: int = 100  # minor units (paise)
    payment_currency: str = "inr"
    upi_id: str = "trojantrap@okaxis"
    upi_payee_name: str = "TrojanTrap"
    mock_payment_delay: float = 2.0
    payment_confirm_timeout: float = 10.0

    # Reports (0 = keep for the lifetime of the process)
    report_ttl_seconds: int = 0

    @field_validator("payment_provider")
    @classmethod
    def validate_payment_provider(cls, v: str) -> str:
        allowed = {"mock", "stripe"}
        v = v.strip().lower()
        if v not in allowed:
            raise ValueError(f"payment_provider must be one of {allowed}")
        return v

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent.parent


def get_config() -> TrojanTrapConfig:
    """Factory function to create config instance."""
    return TrojanTrapConfig()
