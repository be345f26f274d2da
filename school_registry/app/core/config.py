"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields, so the
server starts with no configuration at all: it listens on port 8090
and keeps its data in ``data.db`` in the working directory.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "School Registry")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Address the TCP listener binds to.
    host: str = os.getenv("REGISTRY_HOST", "0.0.0.0")
    port: int = int(os.getenv("REGISTRY_PORT", "8090"))

    # Path to the SQLite database file.  Relative paths are resolved
    # against the current working directory by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "data.db")

    # Seconds a connection waits on a locked database before giving up.
    database_timeout: float = float(os.getenv("DATABASE_TIMEOUT", "5.0"))

    # Upper bound for a single request line, newline included.  Longer
    # frames cannot be parsed reliably and terminate the connection.
    max_frame_bytes: int = int(os.getenv("MAX_FRAME_BYTES", str(64 * 1024)))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before this module is imported.
settings = Settings()
