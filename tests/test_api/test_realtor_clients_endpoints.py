"""Tests for the realtor client endpoints."""

import pytest
from unittest.mock import AsyncMock, patch

from api.realtor import client, clients
from src.services.clients import RealtorClientsService
from src.utils.errors import StorageError
from tests.utils.assertions import assert_error_response
from tests.utils.factories import create_buyer
from tests.utils.helpers import make_handler, read_response


def _get(handler_cls, path):
    h = make_handler(handler_cls, path=path)
    h.do_GET()
    return read_response(h)


@pytest.mark.unit
def test_clients_endpoint(repository, realtor):
    mine = create_buyer(first_name="Dana")
    theirs = create_buyer(realtor_id="r2")
    for buyer in (mine, theirs):
        repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")

    status, body = _get(clients.handler, "/api/realtor/clients?realtor_id=r1")

    assert status == 200
    assert [c["buyer_id"] for c in body["clients"]] == [mine.buyer_id]
    assert body["counts"]["active"] == 1


@pytest.mark.unit
def test_clients_endpoint_filters(repository, realtor):
    buyer = create_buyer(first_name="Dana", status="completed")
    repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")

    status, body = _get(clients.handler, "/api/realtor/clients?realtor_id=r1&status=active&search=dana")

    assert status == 200
    assert body["clients"] == []
    assert body["counts"]["completed"] == 1


@pytest.mark.unit
@pytest.mark.parametrize("path,expected", [
    ("/api/realtor/clients", 400),
    ("/api/realtor/clients?realtor_id=r1&status=sold", 400),
    ("/api/realtor/clients?realtor_id=nobody", 404),
])
def test_clients_endpoint_errors(repository, realtor, path, expected):
    status, body = _get(clients.handler, path)

    assert_error_response(status, body, expected)


@pytest.mark.unit
def test_clients_endpoint_storage_error(repository):
    with patch.object(RealtorClientsService, "list_clients", AsyncMock(side_effect=StorageError("down"))):
        status, body = _get(clients.handler, "/api/realtor/clients?realtor_id=r1")

    assert_error_response(status, body, 500)


@pytest.mark.unit
def test_client_detail_endpoint(repository, realtor):
    buyer = create_buyer()
    buyer.complete_step(1)
    repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")

    status, body = _get(client.handler, f"/api/realtor/client?realtor_id=r1&buyer_id={buyer.buyer_id}")

    assert status == 200
    assert body["buyer"]["buyer_id"] == buyer.buyer_id
    assert body["steps"][0]["completed"] is True
    assert body["steps"][1]["current"] is True


@pytest.mark.unit
@pytest.mark.parametrize("path,expected", [
    ("/api/realtor/client?realtor_id=r1", 400),
    ("/api/realtor/client?realtor_id=r1&buyer_id=missing", 404),
])
def test_client_detail_endpoint_errors(repository, path, expected):
    status, body = _get(client.handler, path)

    assert_error_response(status, body, expected)


@pytest.mark.unit
def test_client_detail_other_realtor(repository):
    buyer = create_buyer(realtor_id="r2")
    repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")

    status, body = _get(client.handler, f"/api/realtor/client?realtor_id=r1&buyer_id={buyer.buyer_id}")

    assert_error_response(status, body, 404)
