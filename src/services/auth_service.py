"""
Authentication service for the Task Tracker API
Registration, login, external identity login and password recovery
"""
import logging
import re
import secrets
from typing import Any, Dict

from sqlmodel import Session

from ..models.user import (
    User,
    AuthProvider,
    UserCreate,
    ExternalProfile,
    USERNAME_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
)
from ..utils.errors import (
    ConflictError,
    InternalServerError,
    NotFoundError,
    UnauthenticatedError,
    UserNotFoundException,
    ValidationFailedError,
)
from ..utils.security import hash_password, verify_password
from .email_service import EmailService
from .token_service import TokenService, IdentityClaims
from .user_service import UserService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


class AuthService:
    """
    Service class for authentication flows.

    Credential failures always produce the same message so callers cannot
    tell which check failed.
    """

    def __init__(self, tokens: TokenService, bcrypt_rounds: int = 10):
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    def _session_payload(self, user: User) -> Dict[str, Any]:
        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "token": self.tokens.issue_identity_token(user),
        }

    def register(self, db: Session, data: UserCreate) -> Dict[str, Any]:
        """
        Register a local account and sign the user in.

        Raises:
            ConflictError: If the username or email is taken
        """
        if UserService.find_by_username_or_email(db, data.username, data.email):
            raise ConflictError()

        user = UserService.create(
            db,
            User(
                username=data.username,
                email=data.email,
                password_hash=hash_password(data.password, self.bcrypt_rounds),
                auth_provider=AuthProvider.LOCAL,
            ),
        )
        logger.info("Registered user id=%s username=%s", user.id, user.username)
        return self._session_payload(user)

    def login(self, db: Session, identifier: str, password: str) -> Dict[str, Any]:
        """
        Sign in with a username (or email) and password.

        Raises:
            UnauthenticatedError: For an unknown user, an account without a
                local password, or a wrong password
        """
        user = UserService.find_by_login(db, identifier)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthenticatedError(INVALID_CREDENTIALS)
        return self._session_payload(user)

    def get_profile(self, db: Session, principal: IdentityClaims) -> User:
        user = UserService.find_by_id(db, principal.id)
        if user is None:
            raise UserNotFoundException()
        return user

    def change_password(self, db: Session, principal: IdentityClaims, current_password: str, new_password: str) -> User:
        """
        Replace the password of a local account. Any pending reset token is revoked.

        Raises:
            ValidationFailedError: If the current password is wrong or the account has no local password
        """
        user = self.get_profile(db, principal)
        if not verify_password(current_password, user.password_hash):
            raise ValidationFailedError("Current password is incorrect")

        return UserService.save(
            db,
            user,
            password_hash=hash_password(new_password, self.bcrypt_rounds),
            reset_token=None,
            reset_token_expires_at=None,
        )

    def forgot_password(self, db: Session, email: str, email_service: EmailService) -> None:
        """
        Start password recovery by emailing a one-time reset link.

        Raises:
            NotFoundError: If no account uses the email
            ValidationFailedError: If the account signs in through an external provider
            InternalServerError: If the email could not be delivered
        """
        user = UserService.find_by_email(db, email)
        if user is None:
            raise NotFoundError("No account found with this email")
        if user.auth_provider == AuthProvider.EXTERNAL:
            raise ValidationFailedError(
                "This account uses Google authentication. Please sign in with Google."
            )

        raw_token, token_hash, expires_at = self.tokens.issue_reset_token()
        UserService.save(db, user, reset_token=token_hash, reset_token_expires_at=expires_at)

        if not email_service.send_reset_password_email(user.email, raw_token):
            raise InternalServerError("Failed to send reset email. Please try again.")

    def check_reset_token(self, db: Session, raw_token: str) -> None:
        """
        Raises:
            ValidationFailedError: If the token is unknown, used, or expired
        """
        if self.tokens.verify_reset_token(db, raw_token) is None:
            raise ValidationFailedError("Invalid or expired token")

    def reset_password(self, db: Session, raw_token: str, new_password: str) -> User:
        """
        Set a new password using a reset token. The token is cleared, so it works once.

        Raises:
            ValidationFailedError: If the token is unknown, used, or expired
        """
        user = self.tokens.verify_reset_token(db, raw_token)
        if user is None:
            raise ValidationFailedError(INVALID_RESET_TOKEN)

        user = UserService.save(
            db,
            user,
            password_hash=hash_password(new_password, self.bcrypt_rounds),
            reset_token=None,
            reset_token_expires_at=None,
        )
        logger.info("Password reset for user id=%s", user.id)
        return user

    def external_login(self, db: Session, profile: ExternalProfile) -> Dict[str, Any]:
        """
        Sign in with an identity from an external provider.

        Known external ids sign straight in. Otherwise an account with the same
        email is linked (it keeps its local password), or a new external-only
        account is created.
        """
        user = UserService.find_by_external_id(db, profile.external_id)

        if user is None:
            existing = UserService.find_by_email(db, profile.email)
            if existing is not None:
                user = UserService.save(db, existing, external_id=profile.external_id, verified=True)
                logger.info("Linked external identity to user id=%s", user.id)
            else:
                user = UserService.create(
                    db,
                    User(
                        username=self._unique_username(db, profile),
                        email=profile.email.strip().lower(),
                        external_id=profile.external_id,
                        auth_provider=AuthProvider.EXTERNAL,
                        verified=True,
                    ),
                )
                logger.info("Created external user id=%s username=%s", user.id, user.username)

        return self._session_payload(user)

    @staticmethod
    def _unique_username(db: Session, profile: ExternalProfile) -> str:
        base = re.sub(r"[^A-Za-z0-9_]", "", profile.email.split("@")[0])
        base = (base or "user")[: USERNAME_MAX_LENGTH - 5]
        if len(base) < USERNAME_MIN_LENGTH:
            base = base.ljust(USERNAME_MIN_LENGTH, "_")

        candidate = base
        while UserService.find_by_username(db, candidate) is not None:
            candidate = f"{base}_{secrets.randbelow(10000):04d}"
        return candidate


__all__ = [
    "AuthService",
    "INVALID_CREDENTIALS",
    "INVALID_RESET_TOKEN",
]
