"""
Token service for the Task Tracker API
Issues and verifies bearer identity tokens and one-time password reset tokens
"""
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

import jwt
from sqlmodel import Session

from ..config import Settings
from ..models.user import User
from ..utils.dates import utc_now
from ..utils.security import generate_reset_token, hash_reset_token
from .user_service import UserService

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("id", "username", "email")


@dataclass(frozen=True)
class IdentityClaims:
    """Identity carried inside a verified bearer token"""
    id: str
    username: str
    email: str


class TokenService:
    """
    Signs identity tokens with the process-wide secret and manages reset tokens.

    Identity tokens are HS256 JWTs that expire ``jwt_expires_hours`` after
    issue (24 hours by default). Reset tokens are random values of which only
    a SHA-256 digest is ever stored.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_hours: int = 24,
        reset_ttl_minutes: int = 60,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.expires_delta = timedelta(hours=expires_hours)
        self.reset_ttl = timedelta(minutes=reset_ttl_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_hours=settings.jwt_expires_hours,
            reset_ttl_minutes=settings.reset_token_ttl_minutes,
        )

    # Identity tokens

    def issue_identity_token(self, user: User | IdentityClaims, now: Optional[datetime] = None) -> str:
        issued_at = now or utc_now()
        payload = {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_identity_token(self, token: Optional[str]) -> Optional[IdentityClaims]:
        """
        Verify a bearer token.

        Returns the embedded identity, or None when the token is missing,
        malformed, signed with another key, expired, or lacks identity claims.
        Never raises on client-supplied input.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired identity token")
            return None
        except jwt.InvalidTokenError:
            logger.debug("Rejected invalid identity token")
            return None

        if not all(isinstance(payload.get(claim), str) and payload.get(claim) for claim in REQUIRED_CLAIMS):
            return None

        return IdentityClaims(id=payload["id"], username=payload["username"], email=payload["email"])

    # Reset tokens

    def issue_reset_token(self, now: Optional[datetime] = None) -> Tuple[str, str, datetime]:
        """
        Create a reset token.

        Returns:
            (raw_token, token_hash, expires_at); only the hash and expiry are persisted
        """
        raw_token = generate_reset_token()
        expires_at = (now or utc_now()) + self.reset_ttl
        return raw_token, hash_reset_token(raw_token), expires_at

    def verify_reset_token(self, db: Session, raw_token: Optional[str], now: Optional[datetime] = None) -> Optional[User]:
        """
        Find the user holding a live reset token.

        Returns None for unknown, already used, or expired tokens.
        """
        if not raw_token:
            return None

        token_hash = hash_reset_token(raw_token)
        user = UserService.find_by_reset_token_hash(db, token_hash, now or utc_now())
        if user is None or user.reset_token is None:
            return None
        if not hmac.compare_digest(user.reset_token, token_hash):
            return None
        return user


__all__ = [
    "TokenService",
    "IdentityClaims",
]
