"""Realtor model - professional accounts that invite and manage buyers."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from src.models.invite_code import normalize_email


class Realtor(BaseModel):
    """Realtor model. Pending invites live in the invite store, not on this record."""
    realtor_id: str = Field(..., description="Realtor ID (text)")
    email: EmailStr = Field(..., description="Email address")
    name: str = Field(..., min_length=1, description="Full name")
    phone: Optional[str] = Field(None, description="Phone number")
    license_number: Optional[str] = Field(None, description="Real estate license number")
    brokerage: Optional[str] = Field(None, description="Brokerage name")
    buyers: list[str] = Field(default_factory=list, description="Buyer IDs managed by this realtor")
    status: str = Field(default="active", description="Status: active, inactive, suspended, pending")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: Optional[dict] = Field(default_factory=dict, description="Additional metadata")

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value
