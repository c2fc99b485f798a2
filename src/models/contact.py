"""Contact form models."""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

# User-facing message per field, used in place of pydantic's error text
FIELD_ERROR_MESSAGES = {
    "name": "Name is required",
    "email": "Please enter a valid email address",
    "message": "Message is required",
}


class ContactForm(BaseModel):
    """Contact form submission."""
    name: str = Field(..., description="Sender name")
    email: EmailStr = Field(..., description="Sender email")
    phone: Optional[str] = Field(None, description="Sender phone")
    message: str = Field(..., description="Message body")

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("name", "message")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ContactResult(BaseModel):
    """Result returned to the contact form."""
    success: bool
    message: str
    errors: dict[str, str] = Field(default_factory=dict)
