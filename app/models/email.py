"""
Email model - a message in a user's mailbox.

The folder an email appears in is its `status`; `read` and `starred` are
independent flags overlaid on any status. The "starred" folder is a filtered
view, never a stored status.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text, Enum, Index
from sqlalchemy.orm import relationship

from app.core.database import Base

MAX_BODY_LENGTH = 10000

# Largest value a 32-bit INTEGER primary key can hold
MAX_EMAIL_ID = 2**31 - 1


class EmailStatus(str, enum.Enum):
    """Stored status of an email. Any status may move to any other."""

    INBOX = "inbox"
    SENT = "sent"
    ARCHIVED = "archived"
    TRASH = "trash"


class Folder(str, enum.Enum):
    """Client-facing mailbox views: one per status, plus starred."""

    INBOX = "inbox"
    SENT = "sent"
    ARCHIVED = "archived"
    TRASH = "trash"
    STARRED = "starred"

    @property
    def status(self):
        """The EmailStatus this folder filters on, or None for starred."""
        if self is Folder.STARRED:
            return None
        return EmailStatus(self.value)


class Email(Base):
    """
    Email record, owned by exactly one user.

    Every read and mutation path must check `user_id` against the
    requesting user before touching the record.
    """

    __tablename__ = "emails"
    __table_args__ = (
        Index("ix_emails_user_id_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Envelope
    from_email = Column(String(320), nullable=False)
    from_name = Column(String, nullable=False)
    to_email = Column(String(320), nullable=False)
    subject = Column(String, nullable=False)
    body = Column(Text, nullable=False)

    # Folder state
    status = Column(
        Enum(
            EmailStatus,
            name="email_status",
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=EmailStatus.INBOX,
        nullable=False,
    )
    read = Column(Boolean, default=False, nullable=False)
    starred = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="emails")

    def __repr__(self):
        return f"<Email {self.id} {self.status.value if self.status else None}>"

    def is_owned_by(self, user_id: int) -> bool:
        """Ownership check: True if `user_id` owns this email."""
        return self.user_id == user_id
