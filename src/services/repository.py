"""Repository interface - the single authoritative store for invites and accounts."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.models.buyer import BuyerAccount
from src.models.invite_code import InviteCode, InviteStatus, normalize_code
from src.models.realtor import Realtor
from src.utils.config import AppConfig
from src.utils.errors import InviteCodeCollisionError, StorageError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_record(model: Type[ModelT], record: Optional[dict], source: str) -> Optional[ModelT]:
    """
    Validate a raw storage record against its model.

    Malformed records are logged and treated as missing.
    """
    if record is None:
        return None
    try:
        return model.model_validate(record)
    except (ValidationError, ValueError) as e:
        logger.warning(
            "Skipping malformed storage record",
            source=source,
            model=model.__name__,
            error=str(e),
        )
        return None


def parse_records(model: Type[ModelT], records: list[dict], source: str) -> list[ModelT]:
    """Validate a list of raw records, dropping malformed ones."""
    parsed = (parse_record(model, record, source) for record in records or [])
    return [item for item in parsed if item is not None]


class InviteRepository(ABC):
    """Invite code storage contract."""

    @abstractmethod
    async def get_invite(self, code: str) -> Optional[InviteCode]:
        """Get an invite by (normalized) code."""

    @abstractmethod
    async def insert_invite(self, invite: InviteCode) -> InviteCode:
        """Insert a new invite. Raises InviteCodeCollisionError if the code exists."""

    @abstractmethod
    async def mark_invite_used(self, code: str, used_at: datetime) -> bool:
        """Transition a pending invite to used. Returns False if missing or already used."""

    @abstractmethod
    async def release_invite(self, code: str) -> bool:
        """Return a used invite to pending. Returns False if missing or not used."""

    @abstractmethod
    async def list_invites(
        self,
        realtor_id: Optional[str] = None,
        status: Optional[InviteStatus] = None
    ) -> list[InviteCode]:
        """List invites, optionally filtered by owner and status."""


class AccountRepository(ABC):
    """Buyer and realtor account storage contract."""

    @abstractmethod
    async def create_buyer(self, buyer: BuyerAccount) -> BuyerAccount: ...

    @abstractmethod
    async def get_buyer(self, buyer_id: str) -> Optional[BuyerAccount]: ...

    @abstractmethod
    async def update_buyer(self, buyer: BuyerAccount) -> BuyerAccount: ...

    @abstractmethod
    async def delete_buyer(self, buyer_id: str) -> bool: ...

    @abstractmethod
    async def find_buyer_by_email(self, email: str) -> Optional[BuyerAccount]: ...

    @abstractmethod
    async def list_buyers(self, realtor_id: Optional[str] = None) -> list[BuyerAccount]: ...

    @abstractmethod
    async def create_realtor(self, realtor: Realtor) -> Realtor: ...

    @abstractmethod
    async def get_realtor(self, realtor_id: str) -> Optional[Realtor]: ...

    @abstractmethod
    async def find_realtor_by_email(self, email: str) -> Optional[Realtor]: ...

    @abstractmethod
    async def add_buyer_to_realtor(self, realtor_id: str, buyer_id: str) -> Realtor: ...


class Repository(InviteRepository, AccountRepository):
    """Combined storage contract used by the services."""


class InMemoryRepository(Repository):
    """
    Dict-backed repository for local development and tests.

    Records are kept as JSON-mode dicts and re-validated on every read so the
    same schema boundary applies as with Supabase. A single lock serializes
    writers, so two concurrent signups cannot both consume the same code.
    """

    def __init__(self) -> None:
        self.invites: dict[str, dict[str, Any]] = {}
        self.buyers: dict[str, dict[str, Any]] = {}
        self.realtors: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    # Invites -------------------------------------------------------------
    async def get_invite(self, code: str) -> Optional[InviteCode]:
        return parse_record(InviteCode, self.invites.get(normalize_code(code)), "invites")

    async def insert_invite(self, invite: InviteCode) -> InviteCode:
        async with self._lock:
            if invite.code in self.invites:
                raise InviteCodeCollisionError(f"Invite code already exists: {invite.code}")
            self.invites[invite.code] = invite.model_dump(mode="json")
        return invite

    async def mark_invite_used(self, code: str, used_at: datetime) -> bool:
        code = normalize_code(code)
        async with self._lock:
            invite = parse_record(InviteCode, self.invites.get(code), "invites")
            if invite is None or not invite.is_pending:
                return False
            updated = invite.model_copy(update={"status": InviteStatus.USED, "used_at": used_at})
            self.invites[code] = updated.model_dump(mode="json")
        return True

    async def release_invite(self, code: str) -> bool:
        code = normalize_code(code)
        async with self._lock:
            invite = parse_record(InviteCode, self.invites.get(code), "invites")
            if invite is None or invite.is_pending:
                return False
            released = invite.model_copy(update={"status": InviteStatus.PENDING, "used_at": None})
            self.invites[code] = released.model_dump(mode="json")
        return True

    async def list_invites(
        self,
        realtor_id: Optional[str] = None,
        status: Optional[InviteStatus] = None
    ) -> list[InviteCode]:
        invites = parse_records(InviteCode, list(self.invites.values()), "invites")
        return [
            invite for invite in invites
            if (realtor_id is None or invite.realtor_id == realtor_id)
            and (status is None or invite.status == status)
        ]

    # Buyers --------------------------------------------------------------
    async def create_buyer(self, buyer: BuyerAccount) -> BuyerAccount:
        async with self._lock:
            if buyer.buyer_id in self.buyers:
                raise StorageError(f"Buyer already exists: {buyer.buyer_id}")
            self.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")
        return buyer

    async def get_buyer(self, buyer_id: str) -> Optional[BuyerAccount]:
        return parse_record(BuyerAccount, self.buyers.get(buyer_id), "buyers")

    async def update_buyer(self, buyer: BuyerAccount) -> BuyerAccount:
        async with self._lock:
            if buyer.buyer_id not in self.buyers:
                raise StorageError(f"Buyer not found: {buyer.buyer_id}")
            buyer = buyer.model_copy(update={"updated_at": utc_now()})
            self.buyers[buyer.buyer_id] = buyer.model_dump(mode="json")
        return buyer

    async def delete_buyer(self, buyer_id: str) -> bool:
        async with self._lock:
            return self.buyers.pop(buyer_id, None) is not None

    async def find_buyer_by_email(self, email: str) -> Optional[BuyerAccount]:
        email = email.strip().lower()
        for buyer in await self.list_buyers():
            if buyer.email == email:
                return buyer
        return None

    async def list_buyers(self, realtor_id: Optional[str] = None) -> list[BuyerAccount]:
        buyers = parse_records(BuyerAccount, list(self.buyers.values()), "buyers")
        return [b for b in buyers if realtor_id is None or b.realtor_id == realtor_id]

    # Realtors ------------------------------------------------------------
    async def create_realtor(self, realtor: Realtor) -> Realtor:
        async with self._lock:
            if realtor.realtor_id in self.realtors:
                raise StorageError(f"Realtor already exists: {realtor.realtor_id}")
            self.realtors[realtor.realtor_id] = realtor.model_dump(mode="json")
        return realtor

    async def get_realtor(self, realtor_id: str) -> Optional[Realtor]:
        return parse_record(Realtor, self.realtors.get(realtor_id), "realtors")

    async def find_realtor_by_email(self, email: str) -> Optional[Realtor]:
        email = email.strip().lower()
        realtors = parse_records(Realtor, list(self.realtors.values()), "realtors")
        for realtor in realtors:
            if realtor.email == email:
                return realtor
        return None

    async def add_buyer_to_realtor(self, realtor_id: str, buyer_id: str) -> Realtor:
        async with self._lock:
            realtor = parse_record(Realtor, self.realtors.get(realtor_id), "realtors")
            if realtor is None:
                raise StorageError(f"Realtor not found: {realtor_id}")
            if buyer_id not in realtor.buyers:
                realtor = realtor.model_copy(
                    update={"buyers": [*realtor.buyers, buyer_id], "updated_at": utc_now()}
                )
                self.realtors[realtor_id] = realtor.model_dump(mode="json")
        return realtor


# Global repository instance (singleton pattern)
_repository: Optional[Repository] = None


def get_repository() -> Repository:
    """Get or create the repository singleton for the configured backend."""
    global _repository

    if _repository is None:
        backend = AppConfig.STORAGE_BACKEND
        if backend == "supabase":
            from src.services.supabase_client import SupabaseRepository
            _repository = SupabaseRepository()
        elif backend == "memory":
            _repository = InMemoryRepository()
        else:
            raise StorageError(f"Unknown STORAGE_BACKEND: {backend}")
        logger.info("Repository initialized", backend=backend)

    return _repository


def reset_repository(repository: Optional[Repository] = None) -> None:
    """Replace (or clear) the repository singleton."""
    global _repository
    _repository = repository
