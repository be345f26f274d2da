"""
Main entrypoint for the School Registry server.

This module assembles the server: ``create_server`` sets up logging,
bootstraps the database schema and wires store, service and router
together into a ``RegistryServer``.  The server accepts TCP
connections and runs one ``ConnectionHandler`` task per client.  Run it
with::

    python run.py

Host, port and database location come from ``Settings`` in
``core.config``.
"""

import asyncio
import logging
import signal
import sys
from typing import Optional, Set

from .api.connection import ConnectionHandler
from .api.router import RequestRouter
from .core.config import Settings, settings as default_settings
from .core.db import get_database_path, init_db
from .core.errors import StoreError
from .core.logging_config import setup_logging
from .services.enrollment_service import EnrollmentService
from .services.store import EntityStore

logger = logging.getLogger(__name__)


class RegistryServer:
    """TCP listener owning the per-connection tasks."""

    def __init__(self, router: RequestRouter, settings: Settings) -> None:
        self.router = router
        self.settings = settings
        self._server: Optional[asyncio.AbstractServer] = None
        self._writers: Set[asyncio.StreamWriter] = set()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def port(self) -> int:
        """The bound port; useful when the server was started on port 0."""
        if self._server is None or not self._server.sockets:
            raise RuntimeError("server is not listening")
        return self._server.sockets[0].getsockname()[1]

    async def _on_connect(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        handler = ConnectionHandler(
            self.router, reader, writer, max_frame_bytes=self.settings.max_frame_bytes
        )
        task = asyncio.current_task()
        self._writers.add(writer)
        if task is not None:
            self._tasks.add(task)
        try:
            await handler.run()
        finally:
            self._writers.discard(writer)
            if task is not None:
                self._tasks.discard(task)

    async def start(self) -> None:
        """Bind the listener.  Raises ``OSError`` if the address is unavailable."""
        self._server = await asyncio.start_server(
            self._on_connect,
            host=self.settings.host,
            port=self.settings.port,
            limit=self.settings.max_frame_bytes,
        )
        logger.info("%s listening on %s:%s", self.settings.project_name, self.settings.host, self.port)

    async def stop(self) -> None:
        """Stop accepting clients and let open connections wind down.

        The listener is closed first.  Each live connection then has its
        socket closed, which ends its loop at the next read; a request
        that is already being dispatched still gets its response.
        """
        if self._server is None:
            return
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._server.wait_closed()
        self._server = None
        logger.info("%s stopped", self.settings.project_name)


def create_server(settings: Settings = default_settings) -> RegistryServer:
    """Create and wire a ``RegistryServer``.

    Configures logging, creates the schema if it is missing and builds
    the store, service and router.  A ``StoreError`` raised while
    creating the schema propagates to the caller.
    """
    setup_logging(settings)

    db_path = get_database_path(settings.database_url)
    init_db(db_path, settings.database_timeout)

    store = EntityStore(db_path, timeout=settings.database_timeout)
    router = RequestRouter(EnrollmentService(store))
    return RegistryServer(router, settings)


async def serve(settings: Settings = default_settings) -> int:
    """Run the server until SIGINT or SIGTERM; return the process exit status.

    Failing to create the schema or to bind the listener is fatal and
    yields status 1.
    """
    try:
        server = create_server(settings)
        await server.start()
    except (StoreError, OSError) as exc:
        logger.critical("Cannot start %s: %s", settings.project_name, exc)
        return 1

    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop_requested.set)

    await stop_requested.wait()
    logger.info("Shutdown requested")
    await server.stop()
    return 0


def run() -> None:
    """Console entry point."""
    sys.exit(asyncio.run(serve()))
