"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import Mock, MagicMock
from freezegun import freeze_time

# Set test environment variables (before src.utils.config is imported)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("OPENAI_ASSISTANT_ID", "asst_test")
os.environ.setdefault("CONTACT_RELAY_ACCESS_KEY", "test-access-key")
os.environ.setdefault("LOG_FORMAT", "text")

from src.models.realtor import Realtor  # noqa: E402
from src.services.invite_codes import InviteCodeService  # noqa: E402
from src.services.repository import InMemoryRepository, reset_repository  # noqa: E402
from src.services.signup import SignupService  # noqa: E402
from tests.utils.factories import create_realtor  # noqa: E402


@pytest.fixture
def repository():
    """Fresh in-memory repository installed as the process singleton."""
    repo = InMemoryRepository()
    reset_repository(repo)
    yield repo
    reset_repository(None)


@pytest.fixture
def realtor(repository) -> Realtor:
    """A realtor with id r1 stored in the repository."""
    realtor = create_realtor(realtor_id="r1")
    repository.realtors[realtor.realtor_id] = realtor.model_dump(mode="json")
    return realtor


@pytest.fixture
def invite_service(repository) -> InviteCodeService:
    return InviteCodeService(repository)


@pytest.fixture
def signup_service(repository, invite_service) -> SignupService:
    return SignupService(repository, invite_service)


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client with a chainable query builder."""
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "order"):
        getattr(query, method).return_value = query
    query.execute.return_value = Mock(data=[])
    client.table.return_value = query
    client.query = query
    return client


@pytest.fixture
def legacy_snapshot():
    """Browser-storage snapshot in the legacy multi-location layout."""
    return {
        "buyhome_invite_codes": [
            {
                "code": "AAAA1111",
                "email": "ann@example.com",
                "realtorId": "r1",
                "status": "pending",
                "createdAt": "2024-11-01T10:00:00.000Z",
            },
        ],
        "buyhome_pending_invites": [
            {
                "email": "ann@example.com",
                "inviteCode": "aaaa1111",
                "realtorId": "r1",
                "createdAt": "2024-11-01T10:00:00.000Z",
            },
            {
                "email": "bob@example.com",
                "inviteCode": "BBBB2222",
                "realtorId": "r1",
                "createdAt": "2024-11-02T10:00:00.000Z",
            },
        ],
        "buyhome_all_realtors": [
            {
                "id": "r1",
                "name": "Rita Realtor",
                "pendingInvites": [
                    {"email": "bob@example.com", "inviteCode": "BBBB2222", "createdAt": "2024-11-02T10:00:00.000Z"},
                    {"email": "cat@example.com", "inviteCode": "CCCC3333", "createdAt": "2024-11-03T10:00:00.000Z"},
                ],
            },
            {
                "id": "r2",
                "name": "Rob Realtor",
                "pendingInvites": [
                    {"email": "cat@example.com", "inviteCode": "CCCC3333", "createdAt": "2024-11-03T11:00:00.000Z"},
                ],
            },
        ],
        "buyhome_all_buyers": [
            {
                "id": "b1",
                "name": "Dan Buyer",
                "email": "dan@example.com",
                "inviteCode": "DDDD4444",
                "realtorId": "r1",
            },
        ],
    }


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
