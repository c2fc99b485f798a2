"""Invite code models - one canonical record per issued code."""

from enum import Enum
from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

INVITE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
INVITE_CODE_LENGTH = 8


def normalize_code(code: Optional[str]) -> str:
    """Normalize user-supplied invite code input (trim + uppercase). Non-strings normalize to ""."""
    if not code or not isinstance(code, str):
        return ""
    return code.strip().upper()


def normalize_email(value):
    """Trim and lower-case an email string; other values are left for validation to reject."""
    return value.strip().lower() if isinstance(value, str) else value


class InviteStatus(str, Enum):
    """Invite code lifecycle status."""
    PENDING = "pending"
    USED = "used"


class InviteCode(BaseModel):
    """Invite code issued by a realtor to a prospective buyer."""
    code: str = Field(
        ...,
        pattern=r"^[A-Z0-9]{8}$",
        description="8-character uppercase alphanumeric code"
    )
    realtor_id: str = Field(..., min_length=1, description="Owning realtor ID (text FK)")
    email: EmailStr = Field(..., description="Recipient email (normalized lower-case)")
    buyer_name: Optional[str] = Field(None, description="Recipient name, if known")
    status: InviteStatus = Field(default=InviteStatus.PENDING, description="Status: pending, used")
    created_at: datetime = Field(..., description="Issue time (UTC)")
    used_at: Optional[datetime] = Field(None, description="Time the code was consumed")

    @field_validator("code", mode="before")
    @classmethod
    def _normalize_code(cls, value):
        return normalize_code(value) if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)

    def model_post_init(self, __context) -> None:
        """Validate that used_at is set exactly when the code is used."""
        if self.status == InviteStatus.USED and self.used_at is None:
            raise ValueError("used_at is required when status is used")
        if self.status == InviteStatus.PENDING and self.used_at is not None:
            raise ValueError("used_at must be null while status is pending")

    @property
    def is_pending(self) -> bool:
        return self.status == InviteStatus.PENDING


class InviteValidation(BaseModel):
    """Outcome of validating a user-supplied invite code."""
    valid: bool
    realtor_id: Optional[str] = None
    status: Literal["valid", "invalid", "used"] = "invalid"
    message: str = ""
    code: str = Field("", description="Normalized code that was checked")
    invite_found: bool = False
    email_matched: Optional[bool] = None
    rejection_reason: Optional[str] = None
