"""
Business logic for schools, persons, classes and enrollments.

The ``EnrollmentService`` keeps the person/class/school graph valid.
Every operation validates first and writes afterwards, and the order of
the checks is part of the contract: the first rule that fails decides
which error the client sees.  The rules are:

* a person is either a teacher or a student, never both, and the role
  is fixed once assigned;
* a class needs an existing school and an existing, non-student teacher;
* a student belongs to the school of their first class and may only
  join classes of that school.

No state is cached between calls.  Each step is its own store call and
no lock is held across them.
"""

import logging

from school_registry.app.core.errors import (
    AlreadyEnrolled,
    ClassNotFound,
    InvalidName,
    PersonNotFound,
    RoleConflict,
    SchoolMismatch,
    SchoolNotFound,
)
from school_registry.app.schemas.person import PersonRead, Role
from school_registry.app.schemas.school import SchoolRead
from school_registry.app.schemas.school_class import ClassRead
from school_registry.app.services.store import EntityStore

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service enforcing the enrollment rules on top of an ``EntityStore``."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def create_school(self, name: str) -> SchoolRead:
        if not name:
            raise InvalidName("school name must not be empty")
        school = self.store.create_school(name)
        return SchoolRead(id=school.id, name=school.name)

    async def create_person(self, name: str) -> PersonRead:
        person = self.store.create_person(name)
        return PersonRead(id=person.id, name=person.name)

    async def create_class(self, name: str, school_id: int, teacher_id: int) -> ClassRead:
        """Create a class and make its teacher a teacher.

        Fails with ``SchoolNotFound``, ``PersonNotFound`` or
        ``RoleConflict`` (the person is already a student), checked in
        that order.  The returned class carries the stored teacher name,
        not whatever the client sent along with the id.
        """
        if not self.store.school_exists(school_id):
            raise SchoolNotFound()
        teacher = self.store.person_by_id(teacher_id)
        if teacher is None:
            raise PersonNotFound("teacher not found")
        if teacher.role is Role.STUDENT:
            raise RoleConflict("person is already a student, cannot be a teacher")

        if teacher.role is not Role.TEACHER:
            self.store.set_person_role(teacher.id, Role.TEACHER)
            logger.info("Person %s is now a teacher", teacher.id)
        school_class = self.store.create_class(name, school_id, teacher.id)
        return ClassRead(
            id=school_class.id,
            name=school_class.name,
            school_id=school_class.school_id,
            teacher=PersonRead(id=teacher.id, name=teacher.name),
        )

    async def add_student_to_class(self, student_id: int, class_id: int) -> PersonRead:
        """Enroll a person in a class.

        Checks, in order: the person exists, is not a teacher, the class
        exists and, when the person already has a home school, the class
        belongs to it.  The first enrollment fixes the home school.  A
        repeated enrollment fails with ``AlreadyEnrolled`` and changes
        nothing.  The returned class list is re-read from the store.
        """
        person = self.store.person_by_id(student_id)
        if person is None:
            raise PersonNotFound("student not found")
        if person.role is Role.TEACHER:
            raise RoleConflict("person is a teacher, cannot be a student")
        class_school_id = self.store.class_school_id(class_id)
        if class_school_id is None:
            raise ClassNotFound()
        if person.home_school_id is not None and person.home_school_id != class_school_id:
            raise SchoolMismatch()

        if person.role is not Role.STUDENT or person.home_school_id is None:
            self.store.set_person_role(person.id, Role.STUDENT, class_school_id)
            logger.info("Person %s is now a student of school %s", person.id, class_school_id)
        if not self.store.add_enrollment(class_id, person.id):
            raise AlreadyEnrolled()

        classes = self.store.classes_for_person(person.id, Role.STUDENT)
        return PersonRead(id=person.id, name=person.name, classes=classes)

    async def who_am_i(self, person_id: int) -> PersonRead:
        person = self.store.person_by_id(person_id)
        if person is None:
            raise PersonNotFound()
        # Teachers get the classes they teach, students those they attend.
        classes = self.store.classes_for_person(person.id, person.role)
        return PersonRead(id=person.id, name=person.name, classes=classes)
