"""Pydantic models for authentication requests and responses."""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.core.schemas import CamelModel


class RegisterRequest(BaseModel):
    """New account. Limits follow the registration form of the web client."""

    username: str = Field(..., min_length=3, max_length=64, pattern=r"^\S+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=1024)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username is required")
    password: str = Field(..., min_length=1, description="Password is required")


class UserResponse(CamelModel):
    """Sanitized user: never carries the password hash."""

    id: int
    username: str
    email: str
    created_at: datetime


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    message: str
