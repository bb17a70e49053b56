"""
User model for the Task Tracker API
Identity records, authentication request schemas and the public profile
"""
import re
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import EmailStr, ValidationError, field_validator
from sqlmodel import Field, SQLModel

from ..utils.dates import utc_now


USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6
INVALID_EMAIL = "Please provide a valid email address"


class AuthProvider(str, Enum):
    """Where an account's credentials live"""
    LOCAL = "local"
    EXTERNAL = "external"


class User(SQLModel, table=True):
    """User model for database table"""
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    username: str = Field(max_length=USERNAME_MAX_LENGTH, unique=True, index=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: Optional[str] = Field(default=None)
    external_id: Optional[str] = Field(default=None, unique=True, index=True)
    auth_provider: AuthProvider = Field(default=AuthProvider.LOCAL)
    reset_token: Optional[str] = Field(default=None, index=True)
    reset_token_expires_at: Optional[datetime] = Field(default=None)
    verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


def validate_username(value: str) -> str:
    value = value.strip()
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username can only contain letters, numbers, and underscores")
    return value


def normalize_email(value: str) -> str:
    return value.strip().lower()


def validate_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
    ):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return value


class UserCreate(SQLModel):
    """Schema for registering a local account"""
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("email", mode="wrap")
    @classmethod
    def check_email(cls, v, handler) -> str:
        # EmailStr does the parsing; only the message and the case are ours
        try:
            return normalize_email(handler(v.strip() if isinstance(v, str) else v))
        except ValidationError:
            raise ValueError(INVALID_EMAIL)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserLogin(SQLModel):
    """Schema for logging in with a username (or email) and password"""
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class ForgotPasswordRequest(SQLModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = normalize_email(v)
        if not v:
            raise ValueError("Email is required")
        return v


class ResetPasswordRequest(SQLModel):
    token: str
    password: str

    @field_validator("token")
    @classmethod
    def check_token(cls, v: str) -> str:
        if not v:
            raise ValueError("Token is required")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class ChangePasswordRequest(SQLModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str) -> str:
        return validate_password_strength(v)


class ExternalProfile(SQLModel):
    """Identity returned by an external OAuth provider"""
    external_id: str
    email: str
    name: Optional[str] = None


class UserPublic(SQLModel):
    """Public profile of a user (no credential fields)"""
    id: str
    username: str
    email: str
    auth_provider: AuthProvider
    verified: bool
    created_at: datetime
