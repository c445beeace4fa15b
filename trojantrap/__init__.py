"""TrojanTrap file-threat screening service."""

__version__ = "1.0.0"
