"""
Mail service - folder listing, viewing, sending and state changes.

Every operation runs on behalf of an authenticated user and checks that the
user owns the email before reading or changing it.

Folder model:
- inbox / sent / archived / trash: exact `status` match
- starred: `starred = true`, whatever the status
"""

import logging
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Forbidden, InvalidFolder, InvalidStatus, NotFound
from app.models.email import MAX_EMAIL_ID, Email, EmailStatus, Folder
from app.models.user import User

logger = logging.getLogger(__name__)


def parse_folder(folder: Union[Folder, str]) -> Folder:
    try:
        return Folder(folder)
    except ValueError:
        raise InvalidFolder()


def parse_status(status: Union[EmailStatus, str]) -> EmailStatus:
    """Only the four stored statuses are accepted; "starred" is a flag, not a status."""
    try:
        return EmailStatus(status)
    except ValueError:
        raise InvalidStatus()


class MailService:
    """
    Mailbox operations for one request.

    Usage:
        mail = MailService(db)
        emails = await mail.list_folder(user, "inbox")
        email = await mail.set_status(user, email_id, "archived")
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_folder(self, user: User, folder: Union[Folder, str]) -> List[Email]:
        """
        List a user's emails in one folder, newest first.

        Raises:
            InvalidFolder: unknown folder name
        """
        folder = parse_folder(folder)

        query = select(Email).where(Email.user_id == user.id)
        if folder is Folder.STARRED:
            query = query.where(Email.starred.is_(True))
        else:
            query = query.where(Email.status == folder.status)

        result = await self.db.execute(
            query.order_by(Email.created_at.desc(), Email.id.desc())
        )
        return list(result.scalars().all())

    async def _get_owned(self, user: User, email_id: int) -> Email:
        """
        Load an email and run the ownership check.

        Raises:
            NotFound: no such email
            Forbidden: email belongs to another user
        """
        if not 1 <= email_id <= MAX_EMAIL_ID:
            raise NotFound("Email not found")
        email = await self.db.get(Email, email_id)
        if email is None:
            raise NotFound("Email not found")
        if not email.is_owned_by(user.id):
            logger.warning(
                f"Ownership check failed: user={user.id} email={email_id}",
                extra={"user_id": user.id, "email_id": email_id},
            )
            raise Forbidden()
        return email

    async def get_by_id(self, user: User, email_id: int) -> Email:
        """Fetch one email; viewing an unread email marks it read."""
        email = await self._get_owned(user, email_id)
        if not email.read:
            email.read = True
            await self.db.commit()
        return email

    async def send(
        self,
        user: User,
        to_email: str,
        subject: str,
        body: str,
        status: Optional[Union[EmailStatus, str]] = None,
    ) -> Email:
        """
        Store a new email from `user`.

        Sender fields come from the authenticated user, never the payload.
        Without an explicit status the email is filed in the inbox; read and
        starred start out false.
        """
        email = Email(
            user_id=user.id,
            from_email=user.email,
            from_name=user.username,
            to_email=to_email,
            subject=subject,
            body=body,
            status=parse_status(status) if status is not None else EmailStatus.INBOX,
            read=False,
            starred=False,
        )
        self.db.add(email)
        await self.db.commit()

        logger.info(
            f"Email created: id={email.id} user={user.id}",
            extra={"user_id": user.id, "email_id": email.id},
        )
        return email

    async def set_status(self, user: User, email_id: int, status: Union[EmailStatus, str]) -> Email:
        """Move an email to another folder. Any status may move to any other."""
        status = parse_status(status)
        email = await self._get_owned(user, email_id)
        email.status = status
        await self.db.commit()
        return email

    async def set_read(self, user: User, email_id: int, read: bool) -> Email:
        email = await self._get_owned(user, email_id)
        email.read = read
        await self.db.commit()
        return email

    async def set_starred(self, user: User, email_id: int, starred: bool) -> Email:
        email = await self._get_owned(user, email_id)
        email.starred = starred
        await self.db.commit()
        return email

    async def delete(self, user: User, email_id: int) -> None:
        """Permanently delete an email, whatever its status."""
        email = await self._get_owned(user, email_id)
        await self.db.delete(email)
        await self.db.commit()

        logger.info(
            f"Email deleted: id={email_id} user={user.id}",
            extra={"user_id": user.id, "email_id": email_id},
        )
