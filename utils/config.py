"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))

    # Appraisal
    batch_limit: int = field(default_factory=lambda: int(os.getenv("BATCH_LIMIT", "10")))
    unique_appraisals: bool = field(default_factory=lambda: _env_flag("UNIQUE_APPRAISALS"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def store_path(self) -> Path:
        """JSON file backing the property and appraisal store."""
        return Path(self.data_dir) / "appraisal_store.json"

    @property
    def audit_log_path(self) -> Path:
        """JSON file backing the audit log."""
        return Path(self.data_dir) / "processing_logs.json"

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "batch_limit": self.batch_limit,
            "unique_appraisals": self.unique_appraisals,
            "log_level": self.log_level,
            "data_dir": self.data_dir,
        }
