"""Invite code registry - issuance, validation and consumption over the canonical store."""

import secrets
from typing import Optional

from pydantic import ValidationError

from src.models.invite_code import (
    INVITE_CODE_ALPHABET,
    INVITE_CODE_LENGTH,
    InviteCode,
    InviteStatus,
    InviteValidation,
    normalize_code,
)
from src.services.repository import Repository, get_repository, utc_now
from src.utils.config import AppConfig
from src.utils.errors import InviteCodeCollisionError, InviteCodeError, StorageError
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

MSG_VALID_BUYER = "Valid invite code."
MSG_VALID_REALTOR = "Valid realtor signup code."
MSG_MISSING = "Please enter an invite code."
MSG_INVALID = "This invite code is not valid. Please check the code or contact your realtor."
MSG_INVALID_REALTOR = "Invalid signup code. Realtors must use the REALTOR code."
MSG_USED = "This invite code has already been used. Please request a new invite from your realtor."
MSG_EMAIL_MISMATCH = "This invite code is not valid for this email address."


def generate_invite_code() -> str:
    """Generate an 8-character code from the 36-symbol alphabet."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def _invalid(code: str, message: str, reason: str, **fields) -> InviteValidation:
    return InviteValidation(
        valid=False,
        status=fields.pop("status", "invalid"),
        message=message,
        code=code,
        rejection_reason=reason,
        **fields,
    )


class InviteCodeService:
    """Issues, validates and consumes invite codes."""

    def __init__(self, repository: Optional[Repository] = None):
        self.repository = repository or get_repository()

    async def create_invite_code(
        self,
        email: str,
        realtor_id: str,
        buyer_name: Optional[str] = None,
    ) -> InviteCode:
        """
        Issue a new invite code for a buyer email on behalf of a realtor.

        Regenerates on collision with any existing code (pending or used)
        up to INVITE_MAX_GENERATION_ATTEMPTS times.
        """
        if not isinstance(email, str) or not email.strip():
            raise InviteCodeError("Email is required to create an invite code")

        realtor = await self.repository.get_realtor(realtor_id)
        if realtor is None:
            logger.warning("Invite requested for unknown realtor", realtor_id=realtor_id)
            raise InviteCodeError(f"Realtor not found: {realtor_id}")

        attempts = AppConfig.INVITE_MAX_GENERATION_ATTEMPTS
        with log_timing("create_invite_code", logger=logger, realtor_id=realtor_id):
            for attempt in range(1, attempts + 1):
                code = generate_invite_code()
                if await self.repository.get_invite(code) is not None:
                    logger.warning("Generated invite code collided", attempt=attempt)
                    continue

                try:
                    invite = InviteCode(
                        code=code,
                        realtor_id=realtor_id,
                        email=email,
                        buyer_name=buyer_name,
                        status=InviteStatus.PENDING,
                        created_at=utc_now(),
                    )
                except ValidationError as e:
                    raise InviteCodeError(f"Invalid invite details: {e.errors()[0]['msg']}")

                try:
                    invite = await self.repository.insert_invite(invite)
                except InviteCodeCollisionError:
                    # Inserted concurrently between lookup and insert
                    logger.warning("Invite code collided on insert", attempt=attempt)
                    continue

                logger.info(
                    "Created invite code",
                    realtor_id=realtor_id,
                    email=invite.email,
                    attempt=attempt,
                )
                return invite

        raise InviteCodeCollisionError(
            f"Could not generate a unique invite code after {attempts} attempts"
        )

    async def validate_invite_code(
        self,
        code: Optional[str],
        role: str = "buyer",
        email: Optional[str] = None,
    ) -> InviteValidation:
        """
        Validate a user-supplied code. Never raises; storage failures yield invalid.

        Input is trimmed and upper-cased before lookup.
        """
        normalized = normalize_code(code)
        if not normalized:
            return _invalid(normalized, MSG_MISSING, "No code provided")

        realtor_code = AppConfig.REALTOR_SIGNUP_CODE

        if role == "realtor":
            if normalized == realtor_code:
                return InviteValidation(
                    valid=True,
                    status="valid",
                    message=MSG_VALID_REALTOR,
                    code=normalized,
                    invite_found=True,
                )
            return _invalid(normalized, MSG_INVALID_REALTOR, "Invalid realtor code")

        if role != "buyer":
            return _invalid(normalized, "Invalid role specified.", "Unknown role")

        if normalized == realtor_code:
            return _invalid(normalized, MSG_INVALID, "Buyers cannot use the realtor code")

        try:
            invite = await self.repository.get_invite(normalized)
        except StorageError as e:
            logger.error("Invite code lookup failed", code=normalized, error=str(e))
            return _invalid(normalized, MSG_INVALID, "Storage error")

        if invite is None:
            return self._check_test_codes(normalized)

        email_matched = None
        if isinstance(email, str) and email.strip():
            email_matched = email.strip().lower() == invite.email

        if not invite.is_pending:
            logger.info("Rejected used invite code", code=normalized, realtor_id=invite.realtor_id)
            return _invalid(
                normalized,
                MSG_USED,
                "Invite code already used",
                status="used",
                realtor_id=invite.realtor_id,
                invite_found=True,
                email_matched=email_matched,
            )

        if email_matched is False and AppConfig.INVITE_ENFORCE_EMAIL_MATCH:
            return _invalid(
                normalized,
                MSG_EMAIL_MISMATCH,
                "Email does not match invite code",
                realtor_id=invite.realtor_id,
                invite_found=True,
                email_matched=False,
            )

        return InviteValidation(
            valid=True,
            realtor_id=invite.realtor_id,
            status="valid",
            message=MSG_VALID_BUYER,
            code=normalized,
            invite_found=True,
            email_matched=email_matched,
        )

    def _check_test_codes(self, normalized: str) -> InviteValidation:
        if AppConfig.INVITE_TEST_CODES_ENABLED and normalized in AppConfig.INVITE_TEST_CODES:
            logger.info("Accepted test invite code", code=normalized)
            return InviteValidation(
                valid=True,
                realtor_id=AppConfig.INVITE_TEST_REALTOR_ID,
                status="valid",
                message=MSG_VALID_BUYER,
                code=normalized,
                invite_found=True,
            )

        logger.info("No matching invite code found", code=normalized)
        return _invalid(normalized, MSG_INVALID, "No matching invite code found")

    async def mark_used(self, code: Optional[str]) -> bool:
        """Transition a pending code to used. Succeeds at most once per code."""
        normalized = normalize_code(code)
        if not normalized:
            return False

        try:
            marked = await self.repository.mark_invite_used(normalized, utc_now())
        except StorageError as e:
            logger.error("Failed to mark invite code used", code=normalized, error=str(e))
            return False

        if marked:
            logger.info("Marked invite code as used", code=normalized)
        else:
            logger.info("Invite code not pending, nothing to mark", code=normalized)
        return marked

    async def release(self, code: Optional[str]) -> bool:
        """Return a consumed code to pending after the signup that claimed it failed."""
        normalized = normalize_code(code)
        if not normalized:
            return False

        try:
            released = await self.repository.release_invite(normalized)
        except StorageError as e:
            logger.error("Failed to release invite code", code=normalized, error=str(e))
            return False

        if released:
            logger.warning("Released invite code after failed signup", code=normalized)
        return released

    async def pending_invites_for_realtor(self, realtor_id: str) -> list[InviteCode]:
        """Pending invites owned by a realtor, oldest first."""
        invites = await self.repository.list_invites(realtor_id=realtor_id, status=InviteStatus.PENDING)
        return sorted(invites, key=lambda invite: invite.created_at)
