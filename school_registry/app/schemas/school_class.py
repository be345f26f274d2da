"""
Pydantic models for classes.

``class`` is a reserved word, hence ``SchoolClass`` for the stored row
and ``school_class`` for the module name.
"""

from pydantic import BaseModel

from .person import EntityId, PersonRead, PersonRef


class SchoolClass(BaseModel):
    """A stored class row."""

    id: int
    name: str
    school_id: int
    teacher_id: int


class ClassCreate(BaseModel):
    name: str
    school_id: EntityId
    teacher: PersonRef


class ClassRead(BaseModel):
    id: int
    name: str
    school_id: int
    teacher: PersonRead


class AddStudentToClass(BaseModel):
    student_id: EntityId
    class_id: EntityId
