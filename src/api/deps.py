"""
Request dependencies for the Task Tracker API
Wires process-wide settings into services and guards owner-scoped routes
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import Settings, get_settings
from ..services.auth_service import AuthService
from ..services.email_service import EmailService
from ..services.oauth_service import GoogleOAuthClient
from ..services.token_service import IdentityClaims, TokenService
from ..utils.errors import UnauthenticatedError

# Parses "Authorization: Bearer <token>"; returns None instead of failing so we control the response
bearer_scheme = HTTPBearer(auto_error=False)

# The principal resolved from a verified bearer token
AuthenticatedUser = IdentityClaims


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService.from_settings(settings)


def get_auth_service(
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(tokens, bcrypt_rounds=settings.bcrypt_rounds)


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(settings)


def get_oauth_client(settings: Settings = Depends(get_settings)) -> Optional[GoogleOAuthClient]:
    """Google client, or None when OAuth credentials are not configured."""
    if not settings.google_configured:
        return None
    return GoogleOAuthClient.from_settings(settings)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """
    Resolve the request's bearer token into the authenticated user.

    Raises:
        UnauthenticatedError: If the header is missing or the token does not verify
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Access token required")

    principal = tokens.verify_identity_token(credentials.credentials)
    if principal is None:
        raise UnauthenticatedError("Invalid or expired token")

    return principal


__all__ = [
    "AuthenticatedUser",
    "bearer_scheme",
    "get_current_user",
    "get_token_service",
    "get_auth_service",
    "get_email_service",
    "get_oauth_client",
]
