"""Buyer model - client accounts progressing through the guided purchase workflow."""

from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from src.models.invite_code import normalize_email

# Guided home-purchase steps, keyed by step id
BUYER_STEPS: dict[int, str] = {
    1: "Pre-Qualification & Financial Readiness",
    2: "Needs Assessment",
    3: "Property Search",
    4: "Property Pre-Selection & Status",
    5: "Offer & Negotiation",
    6: "Due Diligence",
    7: "Financing & Closing Prep",
    8: "Closing",
    9: "Post-Transaction Support",
}
FIRST_STEP = min(BUYER_STEPS)
LAST_STEP = max(BUYER_STEPS)


class BuyerAccount(BaseModel):
    """Buyer account created at signup from a realtor's invite code."""
    buyer_id: str = Field(..., description="Buyer ID (text, ULID)")
    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(default="", description="Last name")
    email: EmailStr = Field(..., description="Email address (normalized lower-case)")
    role: Literal["buyer"] = "buyer"
    invite_code: str = Field(..., description="Invite code consumed at signup")
    realtor_id: str = Field(..., description="Realtor ID (text FK)")
    current_step: int = Field(default=FIRST_STEP, ge=FIRST_STEP, le=LAST_STEP, description="Current step (1-9)")
    completed_steps: set[int] = Field(default_factory=set, description="Completed step ids")
    status: Literal["active", "completed", "inactive"] = Field(
        default="active",
        description="Status: active, completed, inactive"
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("completed_steps")
    @classmethod
    def _check_steps(cls, value: set[int]) -> set[int]:
        unknown = [step for step in value if step not in BUYER_STEPS]
        if unknown:
            raise ValueError(f"Unknown step ids: {sorted(unknown)}")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def complete_step(self, step: int) -> None:
        """
        Mark a step complete and advance the current step.

        current_step never moves backwards; completing the last outstanding
        step marks the buyer as completed.
        """
        if step not in BUYER_STEPS:
            raise ValueError(f"Unknown step id: {step}")

        self.completed_steps.add(step)
        self.current_step = max(self.current_step, min(step + 1, LAST_STEP))

        if len(self.completed_steps) == len(BUYER_STEPS):
            self.status = "completed"
