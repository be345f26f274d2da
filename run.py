"""Entry point for the School Registry server.

Starts the TCP listener and serves until the process receives SIGINT or
SIGTERM.  Configuration (port, database path, log level) is read from
environment variables, see ``school_registry/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import sys

from school_registry.app.main import serve


if __name__ == "__main__":
    sys.exit(asyncio.run(serve()))
