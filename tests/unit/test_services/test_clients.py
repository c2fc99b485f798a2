"""Tests for the realtor client views."""

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock

from src.services.clients import RealtorClientsService
from src.utils.errors import ClientNotFoundError, StorageError
from tests.utils.factories import create_buyer

BASE = datetime(2024, 12, 1, tzinfo=timezone.utc)


@pytest.fixture
def clients_service(repository) -> RealtorClientsService:
    return RealtorClientsService(repository)


@pytest.fixture
def roster(repository, realtor):
    buyers = [
        create_buyer(first_name="Dana", last_name="Buyer", email="dana@example.com",
                     created_at=BASE + timedelta(days=2)),
        create_buyer(first_name="Eli", last_name="Stone", email="eli@example.com",
                     created_at=BASE, status="completed"),
        create_buyer(first_name="Fay", last_name="Moss", email="fay@sample.org",
                     created_at=BASE + timedelta(days=1), status="inactive"),
        create_buyer(realtor_id="r2", email="other@example.com"),
    ]
    for buyer in buyers:
        repository.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")
    return buyers


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_clients_oldest_first_with_counts(clients_service, roster):
    result = await clients_service.list_clients("r1")

    assert [buyer.first_name for buyer in result.clients] == ["Eli", "Fay", "Dana"]
    assert result.counts == {"active": 1, "completed": 1, "inactive": 1}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_clients_status_filter_keeps_full_counts(clients_service, roster):
    result = await clients_service.list_clients("r1", status="completed")

    assert [buyer.first_name for buyer in result.clients] == ["Eli"]
    assert sum(result.counts.values()) == 3


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("search,expected", [
    ("dana", ["Dana"]),
    ("STONE", ["Eli"]),
    ("sample.org", ["Fay"]),
    ("  ", ["Eli", "Fay", "Dana"]),
    ("nobody", []),
])
async def test_list_clients_search(clients_service, roster, search, expected):
    result = await clients_service.list_clients("r1", search=search)

    assert [buyer.first_name for buyer in result.clients] == expected


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_clients_unknown_realtor(clients_service):
    with pytest.raises(ClientNotFoundError):
        await clients_service.list_clients("nobody")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_clients_unknown_status(clients_service, realtor):
    with pytest.raises(ValueError):
        await clients_service.list_clients("r1", status="sold")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_client_step_progress(clients_service, repository, realtor):
    buyer = create_buyer()
    buyer.complete_step(1)
    buyer.complete_step(2)
    await repository.create_buyer(buyer)

    detail = await clients_service.get_client("r1", buyer.buyer_id)

    assert detail.buyer.buyer_id == buyer.buyer_id
    assert len(detail.steps) == 9
    assert [s.step for s in detail.steps if s.completed] == [1, 2]
    assert [s.step for s in detail.steps if s.current] == [3]
    assert detail.steps[0].title == "Pre-Qualification & Financial Readiness"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_client_scoped_to_realtor(clients_service, repository):
    buyer = create_buyer(realtor_id="r2")
    await repository.create_buyer(buyer)

    with pytest.raises(ClientNotFoundError):
        await clients_service.get_client("r1", buyer.buyer_id)
    with pytest.raises(ClientNotFoundError):
        await clients_service.get_client("r1", "missing")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_client_storage_error_propagates(clients_service, repository):
    repository.get_buyer = AsyncMock(side_effect=StorageError("down"))

    with pytest.raises(StorageError):
        await clients_service.get_client("r1", "b1")
