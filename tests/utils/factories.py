"""Test data factories using Faker."""

from faker import Faker
from typing import Optional
from datetime import datetime, timezone

from src.models.buyer import BuyerAccount
from src.models.invite_code import InviteCode, InviteStatus
from src.models.realtor import Realtor

fake = Faker()


def _ulid_like() -> str:
    return fake.uuid4().replace('-', '')[:26].upper()


def create_realtor(realtor_id: Optional[str] = None, **overrides) -> Realtor:
    """Create a test realtor."""
    data = {
        "realtor_id": realtor_id or _ulid_like(),
        "name": fake.name(),
        "email": fake.email(),
        "phone": fake.phone_number(),
        "brokerage": fake.company(),
    }
    data.update(overrides)
    return Realtor(**data)


def create_invite(code: str, realtor_id: str = "r1", **overrides) -> InviteCode:
    """Create a test invite code record."""
    data = {
        "code": code,
        "realtor_id": realtor_id,
        "email": fake.email(),
        "status": InviteStatus.PENDING,
        "created_at": datetime.now(timezone.utc),
    }
    data.update(overrides)
    return InviteCode(**data)


def create_buyer(realtor_id: str = "r1", invite_code: str = "ABCD1234", **overrides) -> BuyerAccount:
    """Create a test buyer account."""
    data = {
        "buyer_id": _ulid_like(),
        "first_name": fake.first_name(),
        "last_name": fake.last_name(),
        "email": fake.email(),
        "invite_code": invite_code,
        "realtor_id": realtor_id,
        "created_at": datetime.now(timezone.utc),
    }
    data.update(overrides)
    return BuyerAccount(**data)


def create_contact_form_data(**overrides) -> dict:
    """Create raw contact form input."""
    data = {
        "name": fake.name(),
        "email": fake.email(),
        "phone": "555-0100",
        "message": fake.sentence(nb_words=8),
    }
    data.update(overrides)
    return data
