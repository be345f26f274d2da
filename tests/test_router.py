"""Tests for the method table and response translation."""

import pytest

from school_registry.app.api.router import ROUTES, RequestRouter
from school_registry.app.schemas.protocol import (
    ADD_STUDENT_TO_CLASS_METHOD,
    CREATE_CLASS_METHOD,
    CREATE_PERSON_METHOD,
    CREATE_SCHOOL_METHOD,
    WHO_AM_I_METHOD,
    Request,
)
from school_registry.app.services.enrollment_service import EnrollmentService
from school_registry.app.services.store import EntityStore


def test_method_table_covers_every_method():
    assert set(ROUTES) == {
        CREATE_SCHOOL_METHOD,
        CREATE_PERSON_METHOD,
        CREATE_CLASS_METHOD,
        ADD_STUDENT_TO_CLASS_METHOD,
        WHO_AM_I_METHOD,
    }


@pytest.mark.asyncio
async def test_create_school_response(router):
    response = await router.dispatch(Request(method=CREATE_SCHOOL_METHOD, data={"name": "S1"}))
    assert response.status is True
    assert response.message == "school created"
    assert response.data == {"id": 1, "name": "S1"}


@pytest.mark.asyncio
async def test_create_person_omits_classes(router):
    response = await router.dispatch(Request(method=CREATE_PERSON_METHOD, data={"name": "P1"}))
    assert response.message == "person created"
    assert response.data == {"id": 1, "name": "P1"}


@pytest.mark.asyncio
async def test_class_flow(router):
    await router.dispatch(Request(method=CREATE_SCHOOL_METHOD, data={"name": "S1"}))
    await router.dispatch(Request(method=CREATE_PERSON_METHOD, data={"name": "T1"}))
    await router.dispatch(Request(method=CREATE_PERSON_METHOD, data={"name": "P1"}))

    created = await router.dispatch(
        Request(
            method=CREATE_CLASS_METHOD,
            data={"name": "C1", "school_id": 1, "teacher": {"id": 1, "name": "ignored"}},
        )
    )
    assert created.message == "class created"
    assert created.data == {
        "id": 1,
        "name": "C1",
        "school_id": 1,
        "teacher": {"id": 1, "name": "T1"},
    }

    added = await router.dispatch(
        Request(method=ADD_STUDENT_TO_CLASS_METHOD, data={"student_id": 2, "class_id": 1})
    )
    assert added.message == "student added to class"
    assert added.data == {"id": 2, "name": "P1", "classes": [1]}

    me = await router.dispatch(Request(method=WHO_AM_I_METHOD, data={"id": 1}))
    assert me.message == "success"
    assert me.data == {"id": 1, "name": "T1", "classes": [1]}


@pytest.mark.asyncio
async def test_unknown_method(router):
    response = await router.dispatch(Request(method="/school/delete", data={}))
    assert response.status is False
    assert response.message == "unknown route"
    assert response.data is None


@pytest.mark.asyncio
async def test_missing_method_is_unknown(router):
    response = await router.dispatch(Request())
    assert response.message == "unknown route"


@pytest.mark.asyncio
async def test_payload_of_wrong_shape(router):
    response = await router.dispatch(
        Request(method=CREATE_CLASS_METHOD, data={"name": "C1", "school_id": "first"})
    )
    assert response.status is False
    assert response.message.startswith("invalid class data: ")
    assert "school_id" in response.message
    assert "teacher" in response.message
    assert response.data is None


@pytest.mark.asyncio
async def test_null_data_is_an_empty_payload(router):
    response = await router.dispatch(Request(method=WHO_AM_I_METHOD, data=None))
    assert response.status is False
    assert response.message.startswith("invalid request data: id")


@pytest.mark.asyncio
async def test_domain_errors_become_failed_responses(router):
    response = await router.dispatch(Request(method=WHO_AM_I_METHOD, data={"id": 3}))
    assert (response.status, response.message) == (False, "person not found")

    response = await router.dispatch(Request(method=CREATE_SCHOOL_METHOD, data={"name": ""}))
    assert (response.status, response.message) == (False, "school name must not be empty")


@pytest.mark.asyncio
async def test_store_errors_become_failed_responses(tmp_path):
    # The schema was never created, so every statement fails.
    router = RequestRouter(EnrollmentService(EntityStore(str(tmp_path / "bare.db"))))
    response = await router.dispatch(Request(method=CREATE_PERSON_METHOD, data={"name": "P"}))
    assert response.status is False
    assert response.message.startswith("storage error")
    assert response.data is None


@pytest.mark.asyncio
async def test_ids_outside_integer_range_are_invalid_payload(router):
    for bad_id in (0, -1, 2**63):
        response = await router.dispatch(
            Request(method=ADD_STUDENT_TO_CLASS_METHOD, data={"student_id": bad_id, "class_id": 1})
        )
        assert response.status is False
        assert response.message.startswith("invalid request data: student_id")

    response = await router.dispatch(
        Request(method=CREATE_CLASS_METHOD, data={"name": "C", "school_id": 1, "teacher": {"id": 2**64}})
    )
    assert response.message.startswith("invalid class data: teacher.id")


@pytest.mark.asyncio
async def test_largest_storable_id_reaches_the_service(router):
    response = await router.dispatch(Request(method=WHO_AM_I_METHOD, data={"id": 2**63 - 1}))
    assert (response.status, response.message) == (False, "person not found")


@pytest.mark.asyncio
async def test_non_object_data_is_invalid_payload(router):
    response = await router.dispatch(Request(method=WHO_AM_I_METHOD, data=[1]))
    assert response.status is False
    assert response.message == "invalid request data: data must be an object"
