"""
Per-connection protocol loop.

A ``ConnectionHandler`` serves one client socket: it reads a
newline-terminated JSON frame, decodes the envelope, lets the
``RequestRouter`` run it, writes the encoded response and only then
reads the next frame.  Requests on one connection are therefore handled
strictly in order, one at a time.

A frame that is not valid JSON gets an ``invalid json`` response and
the connection stays open.  The connection is closed when the client
disconnects, when the stream ends in the middle of a frame, or when a
frame is longer than ``max_frame_bytes``.
"""

import asyncio
import logging
from typing import Optional

import pydantic

from school_registry.app.api.router import RequestRouter
from school_registry.app.core.errors import FramingError, ProtocolError
from school_registry.app.core.logging_config import connection_logger
from school_registry.app.schemas.protocol import Request, Response

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Serves the request/response loop for a single client."""

    def __init__(
        self,
        router: RequestRouter,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        max_frame_bytes: int = 64 * 1024,
    ) -> None:
        self.router = router
        self.reader = reader
        self.writer = writer
        self.max_frame_bytes = max_frame_bytes
        self.peer = writer.get_extra_info("peername")
        self.log = connection_logger(logger, self.peer)

    async def read_frame(self) -> Optional[bytes]:
        """Return the next frame without its newline, or ``None`` at end of stream."""
        try:
            line = await self.reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            if exc.partial:
                self.log.debug("dropping unterminated frame")
            return None
        except asyncio.LimitOverrunError as exc:
            raise FramingError("frame too large") from exc
        if len(line) > self.max_frame_bytes:
            raise FramingError("frame too large")
        return line.rstrip(b"\r\n")

    @staticmethod
    def decode(frame: bytes) -> Request:
        try:
            return Request.model_validate_json(frame)
        except pydantic.ValidationError as exc:
            raise ProtocolError("invalid json") from exc

    async def send(self, response: Response) -> None:
        self.writer.write(response.encode())
        await self.writer.drain()

    async def handle_frame(self, frame: bytes) -> Response:
        try:
            request = self.decode(frame)
        except ProtocolError as exc:
            self.log.warning("undecodable frame")
            return Response.fail(str(exc))
        self.log.debug("-> %s", request.method)
        return await self.router.dispatch(request)

    async def run(self) -> None:
        self.log.info("opened")
        try:
            while True:
                frame = await self.read_frame()
                if frame is None:
                    break
                response = await self.handle_frame(frame)
                await self.send(response)
        except FramingError as exc:
            self.log.warning("closing: %s", exc)
            try:
                await self.send(Response.fail(str(exc)))
            except ConnectionError:
                pass
        except ConnectionError as exc:
            self.log.info("lost: %s", exc)
        finally:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except ConnectionError:
                pass
            self.log.info("closed")
