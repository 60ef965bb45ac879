"""
Authentication routes - registration, login, logout and current user.

Endpoints:
- POST /api/register - Create account, start session, issue token
- POST /api/login - Check credentials, start session, issue token
- POST /api/logout - Clear the session
- GET /api/user - Current user (bearer token or session)
"""

from fastapi import APIRouter, Depends, Request, status

from app.core.config import settings
from app.core.middleware import limiter
from app.core.session import clear_session, start_session
from app.models.user import User
from app.modules.auth.dependencies import get_auth_service, get_current_user
from app.modules.auth.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from app.modules.auth.service import AuthService

router = APIRouter(prefix="/api", tags=["authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register(
    request: Request,
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Register a new user.

    Body:
        username, email, password

    Returns:
        201 {user, token}; the response also carries a fresh session cookie

    Errors:
        400 on validation failure or when the username/email is taken
    """
    user, token = await auth.register(payload.username, payload.email, payload.password)
    start_session(request, user.id)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Log in with username and password.

    Returns:
        {user, token}; the session is regenerated (prevents session fixation)

    Errors:
        401 on unknown username or wrong password
    """
    user, token = await auth.login(payload.username, payload.password)
    start_session(request, user.id)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    """
    Log out the current user.

    Clears the session. Bearer tokens stay valid until they expire.
    """
    clear_session(request)
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def current_user(user: User = Depends(get_current_user)):
    """Return the authenticated user (password hash never included)."""
    return user
