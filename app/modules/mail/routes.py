"""
Mailbox routes - all require an authenticated user.

Endpoints:
- GET /api/emails/{folder} - List inbox | sent | archived | trash | starred
- GET /api/emails/view/{email_id} - View one email (marks it read)
- POST /api/emails - Send (create) an email
- PATCH /api/emails/{email_id}/status - Move to another folder
- PATCH /api/emails/{email_id}/read - Mark read / unread
- PATCH /api/emails/{email_id}/star - Star / unstar
- DELETE /api/emails/{email_id} - Delete permanently
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.email import MAX_EMAIL_ID
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.modules.mail.schemas import (
    EmailResponse,
    ReadUpdate,
    SendEmailRequest,
    StarUpdate,
    StatusUpdate,
)
from app.modules.mail.service import MailService

router = APIRouter(prefix="/api/emails", tags=["emails"])

EmailId = Annotated[int, Path(ge=1, le=MAX_EMAIL_ID)]


def get_mail_service(db: AsyncSession = Depends(get_db)) -> MailService:
    return MailService(db)


@router.get("/view/{email_id}", response_model=EmailResponse)
async def view_email(
    email_id: EmailId,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    """
    Get a single email.

    Errors:
        404 if it does not exist, 403 if it belongs to someone else
    """
    return await mail.get_by_id(user, email_id)


@router.get("/{folder}", response_model=List[EmailResponse])
async def list_emails(
    folder: str,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    """
    List the user's emails in a folder, newest first.

    Errors:
        400 for an unknown folder
    """
    return await mail.list_folder(user, folder)


@router.post("", response_model=EmailResponse, status_code=status.HTTP_201_CREATED)
async def send_email(
    payload: SendEmailRequest,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    """
    Send an email.

    Body:
        toEmail, subject, body (all required, non-blank), optional status
    """
    return await mail.send(
        user,
        to_email=payload.to_email,
        subject=payload.subject,
        body=payload.body,
        status=payload.status,
    )


@router.patch("/{email_id}/status", response_model=EmailResponse)
async def update_email_status(
    email_id: EmailId,
    payload: StatusUpdate,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    """Move an email to inbox | sent | archived | trash."""
    return await mail.set_status(user, email_id, payload.status)


@router.patch("/{email_id}/read", response_model=EmailResponse)
async def update_email_read(
    email_id: EmailId,
    payload: ReadUpdate,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    return await mail.set_read(user, email_id, payload.read)


@router.patch("/{email_id}/star", response_model=EmailResponse)
async def update_email_starred(
    email_id: EmailId,
    payload: StarUpdate,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    return await mail.set_starred(user, email_id, payload.starred)


@router.delete("/{email_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_email(
    email_id: EmailId,
    user: User = Depends(get_current_user),
    mail: MailService = Depends(get_mail_service),
):
    """Delete an email permanently (independent of moving it to trash)."""
    await mail.delete(user, email_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
