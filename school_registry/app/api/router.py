"""
Method table for the registry protocol.

``ROUTES`` maps every method name to the payload model its ``data``
must fit, the service call it forwards to and the message returned on
success.  The router does no validation of its own: it turns ``data``
into the typed payload once, hands typed arguments to
``EnrollmentService`` and wraps the result, or the failure, in a
``Response``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Type

import pydantic
from pydantic import BaseModel

from school_registry.app.core.errors import (
    InvalidPayload,
    ProtocolError,
    RegistryError,
    StoreError,
    UnknownMethod,
    ValidationError,
)
from school_registry.app.schemas.person import PersonCreate, PersonRef
from school_registry.app.schemas.protocol import (
    ADD_STUDENT_TO_CLASS_METHOD,
    CREATE_CLASS_METHOD,
    CREATE_PERSON_METHOD,
    CREATE_SCHOOL_METHOD,
    WHO_AM_I_METHOD,
    Request,
    Response,
)
from school_registry.app.schemas.school import SchoolCreate
from school_registry.app.schemas.school_class import AddStudentToClass, ClassCreate
from school_registry.app.services.enrollment_service import EnrollmentService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """One entry of the method table."""

    payload: Type[BaseModel]
    handler: Callable[[EnrollmentService, Any], Awaitable[BaseModel]]
    success_message: str
    invalid_message: str


ROUTES: Dict[str, Route] = {
    CREATE_SCHOOL_METHOD: Route(
        payload=SchoolCreate,
        handler=lambda service, body: service.create_school(body.name),
        success_message="school created",
        invalid_message="invalid school data",
    ),
    CREATE_PERSON_METHOD: Route(
        payload=PersonCreate,
        handler=lambda service, body: service.create_person(body.name),
        success_message="person created",
        invalid_message="invalid person data",
    ),
    CREATE_CLASS_METHOD: Route(
        payload=ClassCreate,
        handler=lambda service, body: service.create_class(body.name, body.school_id, body.teacher.id),
        success_message="class created",
        invalid_message="invalid class data",
    ),
    ADD_STUDENT_TO_CLASS_METHOD: Route(
        payload=AddStudentToClass,
        handler=lambda service, body: service.add_student_to_class(body.student_id, body.class_id),
        success_message="student added to class",
        invalid_message="invalid request data",
    ),
    WHO_AM_I_METHOD: Route(
        payload=PersonRef,
        handler=lambda service, body: service.who_am_i(body.id),
        success_message="success",
        invalid_message="invalid request data",
    ),
}


def describe_validation_error(exc: pydantic.ValidationError) -> str:
    """Flatten pydantic errors into ``field: reason`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "data"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class RequestRouter:
    """Dispatches decoded requests to ``EnrollmentService``."""

    def __init__(self, service: EnrollmentService, routes: Dict[str, Route] = ROUTES) -> None:
        self.service = service
        self.routes = routes

    def route_for(self, method: str) -> Route:
        route = self.routes.get(method)
        if route is None:
            raise UnknownMethod()
        return route

    def decode_payload(self, route: Route, data: Any) -> BaseModel:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidPayload(f"{route.invalid_message}: data must be an object")
        try:
            return route.payload.model_validate(data)
        except pydantic.ValidationError as exc:
            raise InvalidPayload(
                f"{route.invalid_message}: {describe_validation_error(exc)}"
            ) from exc

    async def dispatch(self, request: Request) -> Response:
        """Run one request and return its response; never raises ``RegistryError``."""
        try:
            route = self.route_for(request.method)
            body = self.decode_payload(route, request.data)
            result = await route.handler(self.service, body)
        except ProtocolError as exc:
            logger.warning("Rejected %r: %s", request.method, exc)
            return Response.fail(str(exc))
        except ValidationError as exc:
            logger.info("%s refused: %s", request.method, exc)
            return Response.fail(str(exc))
        except StoreError as exc:
            logger.exception("Store failure while handling %s", request.method)
            return Response.fail(str(exc))
        except RegistryError as exc:
            return Response.fail(str(exc))
        logger.debug("%s succeeded", request.method)
        return Response.ok(route.success_message, result)
