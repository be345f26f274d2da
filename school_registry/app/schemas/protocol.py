"""
Wire envelopes for the line-delimited JSON protocol.

Each request is a single JSON object ``{"method": ..., "data": {...}}``
terminated by a newline; each response is
``{"status": ..., "message": ..., "data": {...}}`` with ``data`` left
out when the request failed.
"""

from typing import Any, Optional

from pydantic import BaseModel

CREATE_SCHOOL_METHOD = "/school/create"
CREATE_PERSON_METHOD = "/person/create"
CREATE_CLASS_METHOD = "/class/create"
ADD_STUDENT_TO_CLASS_METHOD = "/class/add/student"
WHO_AM_I_METHOD = "/who/am/i"


class Request(BaseModel):
    # A missing method is routed like any other unknown one.
    method: str = ""
    # Checked against the method's payload model by the router.
    data: Any = None


class Response(BaseModel):
    status: bool
    message: str
    data: Optional[dict[str, Any]] = None

    @classmethod
    def ok(cls, message: str, data: BaseModel) -> "Response":
        return cls(status=True, message=message, data=data.model_dump(exclude_none=True))

    @classmethod
    def fail(cls, message: str) -> "Response":
        return cls(status=False, message=message)

    def encode(self) -> bytes:
        """Serialize to one newline-terminated frame."""
        return self.model_dump_json(exclude_none=True).encode("utf-8") + b"\n"
