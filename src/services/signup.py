"""Signup service - buyer and realtor account creation, buyer step progression."""

from typing import Optional
from pydantic import ValidationError
from ulid import ULID

from src.models.buyer import BuyerAccount
from src.models.realtor import Realtor
from src.services.invite_codes import InviteCodeService
from src.services.repository import Repository, get_repository, utc_now
from src.utils.errors import SignupError, StorageError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

MSG_EMAIL_TAKEN = "An account with this email already exists."
MSG_CODE_CLAIMED = "This invite code has already been used. Please request a new invite from your realtor."
MSG_SIGNUP_FAILED = "We couldn't create your account. Please try again later."
MSG_INVALID_DETAILS = "Please check your name and email address."
MSG_REALTOR_UNAVAILABLE = "This invite code is no longer valid. Please contact your realtor."


def generate_buyer_id() -> str:
    """Generate a text-based buyer ID (ULID format)."""
    return str(ULID())


def generate_realtor_id() -> str:
    """Generate a text-based realtor ID (ULID format)."""
    return str(ULID())


class SignupService:
    """Creates accounts and links buyers to the realtor that invited them."""

    def __init__(
        self,
        repository: Optional[Repository] = None,
        invite_service: Optional[InviteCodeService] = None,
    ):
        self.repository = repository or get_repository()
        self.invite_service = invite_service or InviteCodeService(self.repository)

    async def register_buyer(
        self,
        first_name: str,
        last_name: str,
        email: str,
        invite_code: str,
    ) -> BuyerAccount:
        """
        Sign up a buyer with a realtor's invite code.

        Everything that can be checked is checked before the code is claimed.
        The code is claimed before the account is written, so two signups
        racing on one code cannot both succeed; if writing the account then
        fails, the claim is released.
        """
        validation = await self.invite_service.validate_invite_code(invite_code, role="buyer", email=email)
        if not validation.valid:
            logger.info(
                "Buyer signup rejected",
                email=email if isinstance(email, str) else None,
                reason=validation.rejection_reason,
            )
            raise SignupError(validation.message)

        now = utc_now()
        try:
            buyer = BuyerAccount(
                buyer_id=generate_buyer_id(),
                first_name=first_name,
                last_name=last_name or "",
                email=email,
                invite_code=validation.code,
                realtor_id=validation.realtor_id,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as e:
            logger.info("Buyer signup rejected", reason="Invalid account details", error=str(e))
            raise SignupError(MSG_INVALID_DETAILS)

        try:
            if await self.repository.find_buyer_by_email(buyer.email) is not None:
                raise SignupError(MSG_EMAIL_TAKEN)
            if await self.repository.get_realtor(buyer.realtor_id) is None:
                logger.warning(
                    "Buyer signup rejected, inviting realtor not found",
                    realtor_id=buyer.realtor_id,
                    code=buyer.invite_code,
                )
                raise SignupError(MSG_REALTOR_UNAVAILABLE)
            has_record = await self.repository.get_invite(buyer.invite_code) is not None
        except StorageError as e:
            logger.error("Buyer signup lookup failed", error=str(e))
            raise SignupError(MSG_SIGNUP_FAILED)

        # Allow-listed test codes have no canonical record to claim
        if has_record and not await self.invite_service.mark_used(buyer.invite_code):
            raise SignupError(MSG_CODE_CLAIMED)

        try:
            buyer = await self.repository.create_buyer(buyer)
        except StorageError as e:
            logger.error("Failed to persist buyer signup", buyer_id=buyer.buyer_id, error=str(e))
            await self._release_claim(buyer, has_record)
            raise SignupError(MSG_SIGNUP_FAILED)

        try:
            await self.repository.add_buyer_to_realtor(buyer.realtor_id, buyer.buyer_id)
        except StorageError as e:
            logger.error(
                "Failed to link buyer to realtor",
                buyer_id=buyer.buyer_id,
                realtor_id=buyer.realtor_id,
                error=str(e),
            )
            await self._discard_buyer(buyer)
            await self._release_claim(buyer, has_record)
            raise SignupError(MSG_SIGNUP_FAILED)

        logger.info(
            "Buyer signed up",
            buyer_id=buyer.buyer_id,
            realtor_id=buyer.realtor_id,
            email=buyer.email,
        )
        return buyer

    async def _release_claim(self, buyer: BuyerAccount, has_record: bool) -> None:
        if has_record and not await self.invite_service.release(buyer.invite_code):
            logger.error("Invite code left used by failed signup", code=buyer.invite_code)

    async def _discard_buyer(self, buyer: BuyerAccount) -> None:
        try:
            await self.repository.delete_buyer(buyer.buyer_id)
        except StorageError as e:
            logger.error("Failed to remove buyer from failed signup", buyer_id=buyer.buyer_id, error=str(e))

    async def register_realtor(
        self,
        name: str,
        email: str,
        signup_code: str,
        phone: Optional[str] = None,
        brokerage: Optional[str] = None,
        license_number: Optional[str] = None,
    ) -> Realtor:
        """Sign up a realtor with the realtor signup code."""
        validation = await self.invite_service.validate_invite_code(signup_code, role="realtor")
        if not validation.valid:
            raise SignupError(validation.message)

        now = utc_now()
        try:
            realtor = Realtor(
                realtor_id=generate_realtor_id(),
                name=name,
                email=email,
                phone=phone,
                brokerage=brokerage,
                license_number=license_number,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as e:
            logger.info("Realtor signup rejected", reason="Invalid account details", error=str(e))
            raise SignupError(MSG_INVALID_DETAILS)

        try:
            if await self.repository.find_realtor_by_email(realtor.email) is not None:
                raise SignupError(MSG_EMAIL_TAKEN)
            realtor = await self.repository.create_realtor(realtor)
        except StorageError as e:
            logger.error("Failed to persist realtor signup", error=str(e))
            raise SignupError(MSG_SIGNUP_FAILED)

        logger.info("Realtor signed up", realtor_id=realtor.realtor_id, email=realtor.email)
        return realtor

    async def complete_step(self, buyer_id: str, step: int) -> BuyerAccount:
        """Record completion of a guided step for a buyer."""
        buyer = await self.repository.get_buyer(buyer_id)
        if buyer is None:
            raise SignupError(f"Buyer not found: {buyer_id}")

        previous_step = buyer.current_step
        buyer.complete_step(step)
        buyer = await self.repository.update_buyer(buyer)

        logger.info(
            "Buyer step completed",
            buyer_id=buyer_id,
            step=step,
            previous_step=previous_step,
            current_step=buyer.current_step,
            buyer_status=buyer.status,
        )
        return buyer
