"""
Google OAuth client for the Task Tracker API
Exchanges an authorization code for the user's Google identity
"""
import logging
from urllib.parse import urlencode

import httpx

from ..config import Settings
from ..models.user import ExternalProfile

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class OAuthError(Exception):
    """Raised when the provider rejects the code or returns an unusable profile"""
    pass


class GoogleOAuthClient:
    """Authorization-code flow against Google's OpenID Connect endpoints"""

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleOAuthClient":
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_callback_url,
        )

    def authorization_url(self) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid profile email",
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> ExternalProfile:
        """
        Trade an authorization code for the user's profile.

        Raises:
            OAuthError: If either provider call fails or the profile lacks an id or email
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                token_response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_response.raise_for_status()
                access_token = token_response.json()["access_token"]

                userinfo_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                info = userinfo_response.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("Google OAuth exchange failed: %s", e)
            raise OAuthError("Google authentication failed") from e

        if not info.get("sub") or not info.get("email"):
            raise OAuthError("Google profile is missing an id or email")

        return ExternalProfile(external_id=str(info["sub"]), email=info["email"], name=info.get("name"))


__all__ = [
    "GoogleOAuthClient",
    "OAuthError",
]
