"""
Mini-Cache Configuration Settings

This module contains all configuration constants for the Mini-Cache server.
Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("MINICACHE_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("MINICACHE_PORT", "6379"))

    # Connection settings
    READ_BUFFER_SIZE: int = 512  # Bytes requested per transport read

    # Protocol settings
    DELIMITER: bytes = b"\r\n"

    # TTL settings
    MAX_TTL_MS: int = 2**63 - 1  # Longer TTLs are rejected by the decoder

    # Logging settings
    DEBUG: bool = os.environ.get("MINICACHE_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("MINICACHE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
