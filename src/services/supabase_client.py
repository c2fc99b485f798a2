"""Supabase client wrapper and Supabase-backed repository."""

import os
from datetime import datetime
from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.models.buyer import BuyerAccount
from src.models.invite_code import InviteCode, InviteStatus, normalize_code
from src.models.realtor import Realtor
from src.services.repository import Repository, parse_record, parse_records, utc_now
from src.utils.errors import InviteCodeCollisionError, StorageError
import logging

logger = logging.getLogger(__name__)

INVITE_CODES_TABLE = "invite_codes"
BUYERS_TABLE = "buyers"
REALTORS_TABLE = "realtors"

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise StorageError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        """Enter async context."""
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


def _first(result) -> Optional[dict]:
    return result.data[0] if result.data and len(result.data) > 0 else None


class SupabaseRepository(Repository):
    """Repository over the invite_codes, buyers and realtors tables."""

    # Invites -------------------------------------------------------------
    async def get_invite(self, code: str) -> Optional[InviteCode]:
        async with SupabaseClient() as client:
            try:
                result = client.table(INVITE_CODES_TABLE).select("*").eq("code", normalize_code(code)).execute()
            except Exception as e:
                raise StorageError(f"Failed to get invite code: {e}")
        return parse_record(InviteCode, _first(result), INVITE_CODES_TABLE)

    async def insert_invite(self, invite: InviteCode) -> InviteCode:
        async with SupabaseClient() as client:
            try:
                result = client.table(INVITE_CODES_TABLE).insert(invite.model_dump(mode="json")).execute()
            except Exception as e:
                if "duplicate key" in str(e).lower():
                    raise InviteCodeCollisionError(f"Invite code already exists: {invite.code}")
                raise StorageError(f"Failed to insert invite code: {e}")

        record = _first(result)
        if record is None:
            raise StorageError("Failed to insert invite code: no data returned")
        return parse_record(InviteCode, record, INVITE_CODES_TABLE) or invite

    async def mark_invite_used(self, code: str, used_at: datetime) -> bool:
        async with SupabaseClient() as client:
            try:
                # Conditional update: only a pending row transitions
                result = client.table(INVITE_CODES_TABLE).update({
                    "status": InviteStatus.USED.value,
                    "used_at": used_at.isoformat(),
                }).eq("code", normalize_code(code)).eq("status", InviteStatus.PENDING.value).execute()
            except Exception as e:
                raise StorageError(f"Failed to mark invite code used: {e}")
        return bool(result.data)

    async def release_invite(self, code: str) -> bool:
        async with SupabaseClient() as client:
            try:
                # Conditional update: only a used row goes back to pending
                result = client.table(INVITE_CODES_TABLE).update({
                    "status": InviteStatus.PENDING.value,
                    "used_at": None,
                }).eq("code", normalize_code(code)).eq("status", InviteStatus.USED.value).execute()
            except Exception as e:
                raise StorageError(f"Failed to release invite code: {e}")
        return bool(result.data)

    async def list_invites(
        self,
        realtor_id: Optional[str] = None,
        status: Optional[InviteStatus] = None
    ) -> list[InviteCode]:
        async with SupabaseClient() as client:
            try:
                query = client.table(INVITE_CODES_TABLE).select("*")
                if realtor_id is not None:
                    query = query.eq("realtor_id", realtor_id)
                if status is not None:
                    query = query.eq("status", status.value)
                result = query.order("created_at").execute()
            except Exception as e:
                raise StorageError(f"Failed to list invite codes: {e}")
        return parse_records(InviteCode, result.data, INVITE_CODES_TABLE)

    # Buyers --------------------------------------------------------------
    async def create_buyer(self, buyer: BuyerAccount) -> BuyerAccount:
        async with SupabaseClient() as client:
            try:
                result = client.table(BUYERS_TABLE).insert(buyer.model_dump(mode="json")).execute()
            except Exception as e:
                raise StorageError(f"Failed to create buyer: {e}")
        record = _first(result)
        if record is None:
            raise StorageError("Failed to create buyer: no data returned")
        return parse_record(BuyerAccount, record, BUYERS_TABLE) or buyer

    async def get_buyer(self, buyer_id: str) -> Optional[BuyerAccount]:
        async with SupabaseClient() as client:
            try:
                result = client.table(BUYERS_TABLE).select("*").eq("buyer_id", buyer_id).execute()
            except Exception as e:
                raise StorageError(f"Failed to get buyer: {e}")
        return parse_record(BuyerAccount, _first(result), BUYERS_TABLE)

    async def update_buyer(self, buyer: BuyerAccount) -> BuyerAccount:
        buyer = buyer.model_copy(update={"updated_at": utc_now()})
        updates = buyer.model_dump(mode="json", exclude={"buyer_id", "created_at"})
        async with SupabaseClient() as client:
            try:
                result = client.table(BUYERS_TABLE).update(updates).eq("buyer_id", buyer.buyer_id).execute()
            except Exception as e:
                raise StorageError(f"Failed to update buyer: {e}")
        record = _first(result)
        if record is None:
            raise StorageError(f"Failed to update buyer: {buyer.buyer_id}")
        return parse_record(BuyerAccount, record, BUYERS_TABLE) or buyer

    async def delete_buyer(self, buyer_id: str) -> bool:
        async with SupabaseClient() as client:
            try:
                result = client.table(BUYERS_TABLE).delete().eq("buyer_id", buyer_id).execute()
            except Exception as e:
                raise StorageError(f"Failed to delete buyer: {e}")
        return bool(result.data)

    async def find_buyer_by_email(self, email: str) -> Optional[BuyerAccount]:
        async with SupabaseClient() as client:
            try:
                result = client.table(BUYERS_TABLE).select("*").eq("email", email.strip().lower()).execute()
            except Exception as e:
                raise StorageError(f"Failed to find buyer by email: {e}")
        return parse_record(BuyerAccount, _first(result), BUYERS_TABLE)

    async def list_buyers(self, realtor_id: Optional[str] = None) -> list[BuyerAccount]:
        async with SupabaseClient() as client:
            try:
                query = client.table(BUYERS_TABLE).select("*")
                if realtor_id is not None:
                    query = query.eq("realtor_id", realtor_id)
                result = query.execute()
            except Exception as e:
                raise StorageError(f"Failed to list buyers: {e}")
        return parse_records(BuyerAccount, result.data, BUYERS_TABLE)

    # Realtors ------------------------------------------------------------
    async def create_realtor(self, realtor: Realtor) -> Realtor:
        async with SupabaseClient() as client:
            try:
                result = client.table(REALTORS_TABLE).insert(realtor.model_dump(mode="json")).execute()
            except Exception as e:
                raise StorageError(f"Failed to create realtor: {e}")
        record = _first(result)
        if record is None:
            raise StorageError("Failed to create realtor: no data returned")
        return parse_record(Realtor, record, REALTORS_TABLE) or realtor

    async def get_realtor(self, realtor_id: str) -> Optional[Realtor]:
        async with SupabaseClient() as client:
            try:
                result = client.table(REALTORS_TABLE).select("*").eq("realtor_id", realtor_id).execute()
            except Exception as e:
                raise StorageError(f"Failed to get realtor: {e}")
        return parse_record(Realtor, _first(result), REALTORS_TABLE)

    async def find_realtor_by_email(self, email: str) -> Optional[Realtor]:
        async with SupabaseClient() as client:
            try:
                result = client.table(REALTORS_TABLE).select("*").eq("email", email.strip().lower()).execute()
            except Exception as e:
                raise StorageError(f"Failed to find realtor by email: {e}")
        return parse_record(Realtor, _first(result), REALTORS_TABLE)

    async def add_buyer_to_realtor(self, realtor_id: str, buyer_id: str) -> Realtor:
        realtor = await self.get_realtor(realtor_id)
        if realtor is None:
            raise StorageError(f"Realtor not found: {realtor_id}")
        if buyer_id in realtor.buyers:
            return realtor

        async with SupabaseClient() as client:
            try:
                result = client.table(REALTORS_TABLE).update({
                    "buyers": [*realtor.buyers, buyer_id],
                    "updated_at": utc_now().isoformat(),
                }).eq("realtor_id", realtor_id).execute()
            except Exception as e:
                raise StorageError(f"Failed to update realtor: {e}")
        record = _first(result)
        if record is None:
            raise StorageError(f"Failed to update realtor: {realtor_id}")
        return parse_record(Realtor, record, REALTORS_TABLE) or realtor
