"""Pydantic models for schools."""

from pydantic import BaseModel


class School(BaseModel):
    """A stored school row."""

    id: int
    name: str


class SchoolCreate(BaseModel):
    name: str


class SchoolRead(BaseModel):
    id: int
    name: str
