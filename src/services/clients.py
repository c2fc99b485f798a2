"""Realtor client views - a realtor's buyers with status counts and per-buyer progress."""

from typing import Optional

from pydantic import BaseModel, Field

from src.models.buyer import BUYER_STEPS, BuyerAccount
from src.services.repository import Repository, get_repository
from src.utils.errors import ClientNotFoundError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

BUYER_STATUSES = ("active", "completed", "inactive")


class StepProgress(BaseModel):
    """One guided step as seen by the realtor."""
    step: int
    title: str
    completed: bool = False
    current: bool = False


class ClientList(BaseModel):
    """A realtor's buyers after filtering, with counts over all of them."""
    clients: list[BuyerAccount] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict, description="Buyer status -> count, unfiltered")


class ClientDetail(BaseModel):
    """A single buyer with step-by-step progress."""
    buyer: BuyerAccount
    steps: list[StepProgress]


def step_progress(buyer: BuyerAccount) -> list[StepProgress]:
    return [
        StepProgress(
            step=step,
            title=title,
            completed=step in buyer.completed_steps,
            current=step == buyer.current_step,
        )
        for step, title in sorted(BUYER_STEPS.items())
    ]


class RealtorClientsService:
    """Read-only views over the buyers linked to a realtor."""

    def __init__(self, repository: Optional[Repository] = None):
        self.repository = repository or get_repository()

    async def list_clients(
        self,
        realtor_id: str,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> ClientList:
        """
        List a realtor's buyers, oldest signup first.

        `status` keeps only buyers with that status. `search` is a
        case-insensitive substring match on full name or email. Counts
        are always over the unfiltered list.
        """
        if status is not None and status not in BUYER_STATUSES:
            raise ValueError(f"Unknown buyer status: {status}")

        if await self.repository.get_realtor(realtor_id) is None:
            raise ClientNotFoundError(f"Realtor not found: {realtor_id}")

        buyers = await self.repository.list_buyers(realtor_id=realtor_id)
        buyers.sort(key=lambda buyer: (buyer.created_at is None, buyer.created_at))
        counts = {name: sum(1 for buyer in buyers if buyer.status == name) for name in BUYER_STATUSES}

        needle = (search or "").strip().lower()
        clients = [
            buyer for buyer in buyers
            if (status is None or buyer.status == status)
            and (not needle or needle in buyer.full_name.lower() or needle in buyer.email)
        ]

        logger.info(
            "Listed realtor clients",
            realtor_id=realtor_id,
            total=len(buyers),
            returned=len(clients),
        )
        return ClientList(clients=clients, counts=counts)

    async def get_client(self, realtor_id: str, buyer_id: str) -> ClientDetail:
        """A buyer's detail view. The buyer must belong to the realtor."""
        buyer = await self.repository.get_buyer(buyer_id)
        if buyer is not None and buyer.realtor_id != realtor_id:
            logger.warning("Realtor requested another realtor's client", realtor_id=realtor_id, buyer_id=buyer_id)
            buyer = None
        if buyer is None:
            raise ClientNotFoundError(f"Client not found: {buyer_id}")
        return ClientDetail(buyer=buyer, steps=step_progress(buyer))
