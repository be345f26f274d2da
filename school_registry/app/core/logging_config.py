"""
Logging setup for the registry server.

``setup_logging`` attaches handlers to the ``school_registry`` package
logger, not the root logger, so embedding the server in another
program leaves that program's logging alone.  Records from a client
connection go through ``connection_logger``, which prefixes every
message with the peer address so interleaved connections stay
readable::

    2026-10-19 10:00:00 [INFO] school_registry.app.api.connection: [127.0.0.1:50512] opened
"""

import logging
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

from .config import Settings

PACKAGE_LOGGER = "school_registry"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(settings: Settings, logger_name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Configure the package logger from ``settings``.

    A console handler is always attached; ``settings.log_file`` adds a
    file handler.  Calling this again once handlers exist only updates
    the level, so tests and repeated ``create_server`` calls do not
    duplicate output.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(Path(settings.log_file).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging configured for %s", settings.project_name)
    return logger


def format_peer(peer: Any) -> str:
    """Render a ``peername`` tuple as ``host:port``."""
    if isinstance(peer, tuple) and len(peer) >= 2:
        return f"{peer[0]}:{peer[1]}"
    return str(peer)


class ConnectionLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the client address kept in ``extra['peer']``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['peer']}] {msg}", kwargs


def connection_logger(logger: logging.Logger, peer: Any) -> ConnectionLogAdapter:
    return ConnectionLogAdapter(logger, {"peer": format_peer(peer)})
