"""Storage configuration with environment variable support."""

import os
from dataclasses import dataclass, field
from typing import Optional

JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}
SYNCHRONOUS_MODES = {"OFF", "NORMAL", "FULL", "EXTRA"}


@dataclass
class StorageConfig:
    """Configuration for the backing store connection and behaviour."""

    # Location (None = utils.paths.DATA_DIR)
    data_dir: Optional[str] = field(
        default_factory=lambda: os.getenv("SIMPLE_STORAGE_DATA_DIR")
    )
    filename: str = field(
        default_factory=lambda: os.getenv("SIMPLE_STORAGE_FILENAME", "simple_storage.sqlite")
    )

    # SQLite behaviour
    busy_timeout: float = field(
        default_factory=lambda: float(os.getenv("SIMPLE_STORAGE_BUSY_TIMEOUT", "30.0"))
    )
    journal_mode: str = field(
        default_factory=lambda: os.getenv("SIMPLE_STORAGE_JOURNAL_MODE", "DELETE").upper()
    )
    synchronous: str = field(
        default_factory=lambda: os.getenv("SIMPLE_STORAGE_SYNCHRONOUS", "FULL").upper()
    )

    # Logging
    echo: bool = field(
        default_factory=lambda: os.getenv("SIMPLE_STORAGE_ECHO", "false").lower() == "true"
    )
    log_slow_queries: bool = field(
        default_factory=lambda: os.getenv("SIMPLE_STORAGE_LOG_SLOW_QUERIES", "true").lower()
        == "true"
    )
    slow_query_threshold: float = field(
        default_factory=lambda: float(os.getenv("SIMPLE_STORAGE_SLOW_QUERY_THRESHOLD", "1.0"))
    )

    def __post_init__(self):
        """Validate configuration values."""
        if not self.filename:
            raise ValueError("filename must not be empty")
        if self.busy_timeout <= 0:
            raise ValueError("busy_timeout must be > 0")
        if self.journal_mode not in JOURNAL_MODES:
            raise ValueError(f"journal_mode must be one of {sorted(JOURNAL_MODES)}")
        if self.synchronous not in SYNCHRONOUS_MODES:
            raise ValueError(f"synchronous must be one of {sorted(SYNCHRONOUS_MODES)}")
        if self.slow_query_threshold < 0:
            raise ValueError("slow_query_threshold must be >= 0")


# Singleton instance
_config: Optional[StorageConfig] = None


def get_config() -> StorageConfig:
    """Get or create storage configuration singleton.

    Returns:
        StorageConfig: The storage configuration instance.
    """
    global _config
    if _config is None:
        _config = StorageConfig()

    return _config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global _config
    _config = None
