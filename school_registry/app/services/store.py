"""
Entity store backed by SQLite.

The ``EntityStore`` is the only component that touches the database.
It assigns identifiers, persists rows and answers the small lookups the
enrollment service needs.  Each method opens its own connection and
commits before returning, so a write is durable as soon as the call
completes.  The store performs writes without judging them: role
transitions and school scoping are validated by ``EnrollmentService``.
"""

import logging
from typing import List, Optional

from school_registry.app.core.db import get_cursor
from school_registry.app.schemas.person import Person, Role
from school_registry.app.schemas.school import School
from school_registry.app.schemas.school_class import SchoolClass


class EntityStore:
    """Read/write access to schools, persons, classes and enrollments."""

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self.db_path = db_path
        self.timeout = timeout

    def _cursor(self):
        return get_cursor(self.db_path, self.timeout)

    def create_school(self, name: str) -> School:
        with self._cursor() as cursor:
            cursor.execute("INSERT INTO schools (name) VALUES (?)", (name,))
            school_id = cursor.lastrowid
        logging.getLogger(__name__).info("School %s created", school_id)
        return School(id=school_id, name=name)

    def school_exists(self, school_id: int) -> bool:
        with self._cursor() as cursor:
            row = cursor.execute(
                "SELECT 1 FROM schools WHERE id = ?", (school_id,)
            ).fetchone()
        return row is not None

    def create_person(self, name: str) -> Person:
        """Insert a person with role ``unassigned`` and no home school."""
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT INTO persons (name, role) VALUES (?, ?)",
                (name, Role.UNASSIGNED.value),
            )
            person_id = cursor.lastrowid
        logging.getLogger(__name__).info("Person %s created", person_id)
        return Person(id=person_id, name=name, role=Role.UNASSIGNED)

    def person_by_id(self, person_id: int) -> Optional[Person]:
        with self._cursor() as cursor:
            row = cursor.execute(
                "SELECT id, name, role, school_id FROM persons WHERE id = ?",
                (person_id,),
            ).fetchone()
        if not row:
            return None
        return Person(
            id=row["id"],
            name=row["name"],
            role=Role(row["role"]),
            home_school_id=row["school_id"],
        )

    def set_person_role(
        self, person_id: int, role: Role, home_school_id: Optional[int] = None
    ) -> None:
        """Write ``role`` and, if none is recorded yet, the home school.

        Calling this with the role a person already has is harmless.  A
        home school that is already set is never replaced.
        """
        with self._cursor() as cursor:
            cursor.execute(
                "UPDATE persons SET role = ?, school_id = COALESCE(school_id, ?) WHERE id = ?",
                (role.value, home_school_id, person_id),
            )

    def create_class(self, name: str, school_id: int, teacher_id: int) -> SchoolClass:
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT INTO classes (name, school_id, teacher_id) VALUES (?, ?, ?)",
                (name, school_id, teacher_id),
            )
            class_id = cursor.lastrowid
        logging.getLogger(__name__).info(
            "Class %s created in school %s with teacher %s", class_id, school_id, teacher_id
        )
        return SchoolClass(id=class_id, name=name, school_id=school_id, teacher_id=teacher_id)

    def class_school_id(self, class_id: int) -> Optional[int]:
        """Return the school a class belongs to, or ``None`` if the class is unknown."""
        with self._cursor() as cursor:
            row = cursor.execute(
                "SELECT school_id FROM classes WHERE id = ?", (class_id,)
            ).fetchone()
        return row["school_id"] if row else None

    def add_enrollment(self, class_id: int, person_id: int) -> bool:
        """Record that a person attends a class.

        Returns ``False`` when the pair was already recorded, in which
        case nothing is written.
        """
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT OR IGNORE INTO class_students (class_id, person_id) VALUES (?, ?)",
                (class_id, person_id),
            )
            inserted = cursor.rowcount == 1
        if inserted:
            logging.getLogger(__name__).info(
                "Person %s enrolled in class %s", person_id, class_id
            )
        return inserted

    def classes_for_person(self, person_id: int, role: Role) -> List[int]:
        """Class ids linked to a person, in ascending order.

        Students are linked through enrollments and teachers through
        ``classes.teacher_id``; an unassigned person has no classes.
        """
        if role is Role.STUDENT:
            query = "SELECT class_id FROM class_students WHERE person_id = ? ORDER BY class_id ASC"
        elif role is Role.TEACHER:
            query = "SELECT id FROM classes WHERE teacher_id = ? ORDER BY id ASC"
        else:
            return []
        with self._cursor() as cursor:
            rows = cursor.execute(query, (person_id,)).fetchall()
        return [row[0] for row in rows]
