"""School Registry client.

This module defines a small asyncio client for the registry's
line-delimited JSON protocol.  One ``RegistryClient`` wraps one TCP
connection; requests are sent one at a time and each call waits for
its response, which matches the server's strictly sequential handling
per connection.

The client exposes one high-level method per server method:

* :meth:`create_school`
* :meth:`create_person`
* :meth:`create_class`
* :meth:`add_student_to_class`
* :meth:`who_am_i`

Each returns the response ``data`` and raises :class:`RequestFailed`
when the server answers with ``status=false``.  :meth:`call` gives
access to the raw :class:`Response` envelope.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from school_registry.app.schemas.protocol import (
    ADD_STUDENT_TO_CLASS_METHOD,
    CREATE_CLASS_METHOD,
    CREATE_PERSON_METHOD,
    CREATE_SCHOOL_METHOD,
    WHO_AM_I_METHOD,
    Request,
    Response,
)


logger = logging.getLogger(__name__)


class RequestFailed(Exception):
    """Raised when the server rejects a request.

    Attributes:
        method: The protocol method that was called.
        message: The ``message`` field of the failed response.
    """

    def __init__(self, method: str, message: str) -> None:
        super().__init__(f"{method}: {message}")
        self.method = method
        self.message = message


class RegistryClient:
    """Client for one connection to a registry server."""

    def __init__(self, host: str = "127.0.0.1", port: int = 8090) -> None:
        """Initialise the client.

        Args:
            host: Server host name or address.
            port: Server TCP port.
        """
        self.host = host
        self.port = port
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> "RegistryClient":
        self._reader, self._writer = await asyncio.open_connection(self.host, self.port)
        logger.debug("Connected to %s:%s", self.host, self.port)
        return self

    async def close(self) -> None:
        if self._writer is None:
            return
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except ConnectionError:
            pass
        self._reader = self._writer = None

    async def __aenter__(self) -> "RegistryClient":
        return await self.connect()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def send_raw(self, frame: bytes) -> Response:
        """Send pre-encoded bytes and read one response frame.

        ``frame`` is written as is, so the caller supplies the
        terminating newline.  Mostly useful to exercise error paths.
        """
        if self._writer is None or self._reader is None:
            raise RuntimeError("client is not connected")
        self._writer.write(frame)
        await self._writer.drain()
        line = await self._reader.readline()
        if not line:
            raise ConnectionError("server closed the connection")
        return Response.model_validate_json(line)

    async def call(self, method: str, data: Optional[Dict[str, Any]] = None) -> Response:
        """Send a request and return the server's response envelope."""
        request = Request(method=method, data=data or {})
        return await self.send_raw(request.model_dump_json().encode("utf-8") + b"\n")

    async def _data(self, method: str, data: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.call(method, data)
        if not response.status:
            raise RequestFailed(method, response.message)
        return response.data or {}

    async def create_school(self, name: str) -> Dict[str, Any]:
        return await self._data(CREATE_SCHOOL_METHOD, {"name": name})

    async def create_person(self, name: str) -> Dict[str, Any]:
        return await self._data(CREATE_PERSON_METHOD, {"name": name})

    async def create_class(self, name: str, school_id: int, teacher_id: int) -> Dict[str, Any]:
        return await self._data(
            CREATE_CLASS_METHOD,
            {"name": name, "school_id": school_id, "teacher": {"id": teacher_id}},
        )

    async def add_student_to_class(self, student_id: int, class_id: int) -> Dict[str, Any]:
        return await self._data(
            ADD_STUDENT_TO_CLASS_METHOD, {"student_id": student_id, "class_id": class_id}
        )

    async def who_am_i(self, person_id: int) -> Dict[str, Any]:
        return await self._data(WHO_AM_I_METHOD, {"id": person_id})

    async def classes_of(self, person_id: int) -> List[int]:
        """Shortcut for the ``classes`` list returned by :meth:`who_am_i`."""
        return (await self.who_am_i(person_id)).get("classes", [])
