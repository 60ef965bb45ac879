"""
Database models package.

Import all models here so Base.metadata knows every table.
"""

from app.models.user import User
from app.models.email import Email, EmailStatus, Folder

__all__ = [
    "User",
    "Email",
    "EmailStatus",
    "Folder",
]
