"""
Exception hierarchy for the registry.

Every error that reaches a client derives from ``RegistryError``; its
string form is the ``message`` sent back in the response envelope.
Three families exist:

* ``ProtocolError``: the request could not be understood (bad JSON,
  unknown method, payload of the wrong shape).  ``FramingError`` is the
  one protocol error that also ends the connection.
* ``ValidationError``: a domain rule rejected the request.
* ``StoreError``: the database failed.
"""


class RegistryError(Exception):
    """Base exception for errors reported to clients."""

    default_message = "request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ProtocolError(RegistryError):
    """Raised when a request frame cannot be decoded."""

    default_message = "invalid json"


class FramingError(ProtocolError):
    """Raised when the byte stream itself is unusable; the connection is closed."""

    default_message = "malformed frame"


class UnknownMethod(ProtocolError):
    default_message = "unknown route"


class InvalidPayload(ProtocolError):
    """Raised when ``data`` does not fit the shape the method expects."""

    default_message = "invalid request data"


class ValidationError(RegistryError):
    """Base class for domain-rule violations."""

    default_message = "validation failed"


class NotFoundError(ValidationError):
    default_message = "not found"


class SchoolNotFound(NotFoundError):
    default_message = "school not found"


class PersonNotFound(NotFoundError):
    default_message = "person not found"


class ClassNotFound(NotFoundError):
    default_message = "class not found"


class RoleConflict(ValidationError):
    """Raised when a teacher would become a student or vice versa."""

    default_message = "role conflict"


class SchoolMismatch(ValidationError):
    default_message = "student can only enroll in classes from one school"


class AlreadyEnrolled(ValidationError):
    default_message = "student is already enrolled in this class"


class InvalidName(ValidationError):
    default_message = "name must not be empty"


class StoreError(RegistryError):
    """Raised when the underlying database fails."""

    default_message = "storage error"
