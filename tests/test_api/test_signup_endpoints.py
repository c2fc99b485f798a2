"""Tests for the signup and buyer progress endpoints."""

import pytest
from unittest.mock import AsyncMock, patch

from api.buyer import step
from api.signup import buyer as buyer_signup
from api.signup import realtor as realtor_signup
from src.services.signup import SignupService
from src.utils.errors import StorageError
from tests.utils.assertions import assert_error_response
from tests.utils.factories import create_buyer, create_invite
from tests.utils.helpers import make_handler, read_response


def _post(handler_cls, body):
    h = make_handler(handler_cls, body=body)
    h.do_POST()
    return read_response(h)


@pytest.mark.unit
def test_buyer_signup(repository, realtor):
    repository.invites["ABCD1234"] = create_invite("ABCD1234").model_dump(mode="json")

    status, body = _post(buyer_signup.handler, {
        "first_name": "Dana",
        "last_name": "Buyer",
        "email": "dana@example.com",
        "invite_code": "abcd1234",
    })

    assert status == 201
    assert body["buyer"]["realtor_id"] == "r1"
    assert body["buyer"]["current_step"] == 1
    assert repository.invites["ABCD1234"]["status"] == "used"


@pytest.mark.unit
def test_buyer_signup_reused_code(repository, realtor):
    repository.invites["ABCD1234"] = create_invite("ABCD1234").model_dump(mode="json")
    first = {"first_name": "Dana", "email": "dana@example.com", "invite_code": "ABCD1234"}
    second = {"first_name": "Eli", "email": "eli@example.com", "invite_code": "ABCD1234"}

    assert _post(buyer_signup.handler, first)[0] == 201
    status, body = _post(buyer_signup.handler, second)

    assert_error_response(status, body, 400)
    assert "already been used" in body["error"]


@pytest.mark.unit
def test_buyer_signup_missing_fields(repository):
    status, body = _post(buyer_signup.handler, {"first_name": "Dana"})

    assert_error_response(status, body, 400)
    assert body["error"] == "Missing required fields: email, invite_code"


@pytest.mark.unit
def test_realtor_signup(repository):
    status, body = _post(realtor_signup.handler, {
        "name": "Rita Realtor",
        "email": "rita@example.com",
        "signup_code": "REALTOR",
        "brokerage": "Acme Realty",
    })

    assert status == 201
    assert body["realtor"]["brokerage"] == "Acme Realty"
    assert body["realtor"]["buyers"] == []


@pytest.mark.unit
def test_realtor_signup_wrong_code(repository):
    status, body = _post(realtor_signup.handler, {
        "name": "Rita Realtor",
        "email": "rita@example.com",
        "signup_code": "ABCD1234",
    })

    assert_error_response(status, body, 400)


@pytest.mark.unit
def test_complete_step_endpoint(repository):
    buyer = create_buyer()
    repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")

    status, body = _post(step.handler, {"buyer_id": buyer.buyer_id, "step": 1})

    assert status == 200
    assert body["buyer"]["current_step"] == 2
    assert body["buyer"]["completed_steps"] == [1]


@pytest.mark.unit
@pytest.mark.parametrize("payload", [
    {"buyer_id": "b1"},
    {"buyer_id": "b1", "step": "3"},
    {"buyer_id": "b1", "step": True},
    {"step": 1},
])
def test_complete_step_bad_request(repository, payload):
    status, body = _post(step.handler, payload)

    assert_error_response(status, body, 400)


@pytest.mark.unit
def test_complete_step_unknown_step(repository):
    buyer = create_buyer()
    repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")

    status, body = _post(step.handler, {"buyer_id": buyer.buyer_id, "step": 12})

    assert_error_response(status, body, 400)


@pytest.mark.unit
def test_complete_step_unknown_buyer(repository):
    status, body = _post(step.handler, {"buyer_id": "missing", "step": 1})

    assert_error_response(status, body, 400)


@pytest.mark.unit
def test_complete_step_storage_error(repository):
    with patch.object(SignupService, "complete_step", AsyncMock(side_effect=StorageError("down"))):
        status, body = _post(step.handler, {"buyer_id": "b1", "step": 1})

    assert_error_response(status, body, 500)


@pytest.mark.unit
def test_buyer_signup_invalid_email(repository, realtor):
    repository.invites["ABCD1234"] = create_invite("ABCD1234").model_dump(mode="json")

    status, body = _post(buyer_signup.handler, {
        "first_name": "Dana",
        "email": "dana-at-example",
        "invite_code": "ABCD1234",
    })

    assert_error_response(status, body, 400)
    assert repository.invites["ABCD1234"]["status"] == "pending"


@pytest.mark.unit
def test_buyer_signup_undecodable_body(repository):
    h = make_handler(buyer_signup.handler, body=b"\xff\xfe")
    h.do_POST()

    assert_error_response(*read_response(h), 400)


@pytest.mark.unit
def test_buyer_signup_unexpected_error(repository, realtor):
    with patch.object(SignupService, "register_buyer", AsyncMock(side_effect=RuntimeError("boom"))):
        status, body = _post(buyer_signup.handler, {
            "first_name": "Dana",
            "email": "dana@example.com",
            "invite_code": "ABCD1234",
        })

    assert status == 500
    assert body == {"error": "Internal server error"}
