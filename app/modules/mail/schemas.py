"""Pydantic models for mailbox requests and responses."""

from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field, StrictBool, field_validator

from app.core.schemas import CamelModel
from app.models.email import EmailStatus, MAX_BODY_LENGTH


class SendEmailRequest(CamelModel):
    """
    New outgoing email.

    `status` may be omitted; new mail then lands in the inbox.
    """

    to_email: EmailStr
    subject: str = Field(..., max_length=998)
    body: str = Field(..., max_length=MAX_BODY_LENGTH)
    status: Optional[EmailStatus] = None

    @field_validator("subject", "body")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class StatusUpdate(CamelModel):
    status: EmailStatus


class ReadUpdate(CamelModel):
    read: StrictBool


class StarUpdate(CamelModel):
    starred: StrictBool


class EmailResponse(CamelModel):
    id: int
    user_id: int
    from_email: str
    from_name: str
    to_email: str
    subject: str
    body: str
    status: EmailStatus
    read: bool
    starred: bool
    created_at: datetime
