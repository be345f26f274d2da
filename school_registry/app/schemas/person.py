"""
Pydantic models for persons.

A person starts out ``unassigned`` and becomes either a teacher (when a
class is created for them) or a student (on first enrollment).  The
role never changes again after that, and a student's
``home_school_id`` is fixed by their first enrollment.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, Field

# Ids arriving from clients must fit a signed 64-bit SQLite INTEGER.
SQLITE_MAX_INTEGER = 2**63 - 1
EntityId = Annotated[int, Field(gt=0, le=SQLITE_MAX_INTEGER)]


class Role(str, Enum):
    UNASSIGNED = "unassigned"
    TEACHER = "teacher"
    STUDENT = "student"


class Person(BaseModel):
    """A stored person row."""

    id: int
    name: str
    role: Role = Role.UNASSIGNED
    home_school_id: Optional[int] = None


class PersonCreate(BaseModel):
    name: str


class PersonRef(BaseModel):
    """Reference to a person by id, as sent in ``/who/am/i`` and ``teacher``."""

    id: EntityId
    name: Optional[str] = None


class PersonRead(BaseModel):
    """Schema for returning a person to clients.

    ``classes`` is left out of the serialized form for freshly created
    persons and filled with ascending class ids everywhere else.
    """

    id: int
    name: str
    classes: Optional[list[int]] = Field(default=None)
