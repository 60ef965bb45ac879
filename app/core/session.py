"""Session management utilities for cookie-based authentication."""

from datetime import datetime, timezone
from typing import Optional

from starlette.requests import Request


def get_session_user_id(request: Request) -> Optional[int]:
    """
    Get the authenticated user's ID from the session.

    Args:
        request: The incoming request

    Returns:
        User id if authenticated, None otherwise
    """
    user_id = request.session.get("user_id")
    if user_id is None:
        return None

    try:
        return int(user_id)
    except (ValueError, TypeError):
        # Garbage in the session, clear it
        request.session.clear()
        return None


def get_session_created_at(request: Request) -> Optional[datetime]:
    """
    Get the session creation timestamp.

    Returns:
        Session creation datetime if available, None otherwise
    """
    created_at_str = request.session.get("created_at")
    if not created_at_str:
        return None

    try:
        return datetime.fromisoformat(created_at_str)
    except (ValueError, TypeError):
        return None


def is_session_expired(request: Request, max_age_hours: int = 24) -> bool:
    """
    Check if the current session has exceeded its maximum age.

    Args:
        request: The incoming request
        max_age_hours: Maximum session age in hours (default: 24)

    Returns:
        True if session is expired, False otherwise
    """
    created_at = get_session_created_at(request)
    if not created_at:
        return True

    now = datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    age_hours = (now - created_at).total_seconds() / 3600
    return age_hours >= max_age_hours


def set_session_user_id(request: Request, user_id: int) -> None:
    """
    Store the authenticated user's ID in the session.

    Args:
        request: The incoming request
        user_id: The user's id
    """
    request.session["user_id"] = user_id

    if "created_at" not in request.session:
        request.session["created_at"] = datetime.now(timezone.utc).isoformat()


def clear_session(request: Request) -> None:
    """Clear all session data (used for logout)."""
    request.session.clear()


def regenerate_session(request: Request) -> None:
    """
    Start a fresh session after authentication (prevents session fixation).

    Everything from the old session is dropped and the creation timestamp
    is reset. Call set_session_user_id afterwards.
    """
    request.session.clear()
    request.session["created_at"] = datetime.now(timezone.utc).isoformat()


def start_session(request: Request, user_id: int) -> None:
    """Log a user in: fresh session holding `user_id`."""
    regenerate_session(request)
    set_session_user_id(request, user_id)
