"""
User service module for the Task Tracker API
Credential store: lookups and writes of user identity records
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, or_, col

from ..models.user import User
from ..utils.dates import utc_now
from ..utils.errors import ConflictError
from ..utils.logging import log_error


class UserService:
    """Service class for user record operations"""

    @staticmethod
    def find_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.get(User, user_id)

    @staticmethod
    def find_by_username(db: Session, username: str) -> Optional[User]:
        statement = select(User).where(User.username == username)
        return db.exec(statement).first()

    @staticmethod
    def find_by_email(db: Session, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email.strip().lower())
        return db.exec(statement).first()

    @staticmethod
    def find_by_external_id(db: Session, external_id: str) -> Optional[User]:
        statement = select(User).where(User.external_id == external_id)
        return db.exec(statement).first()

    @staticmethod
    def find_by_username_or_email(db: Session, username: str, email: str) -> Optional[User]:
        """Any user holding either the username or the email."""
        statement = select(User).where(
            or_(User.username == username, User.email == email.strip().lower())
        )
        return db.exec(statement).first()

    @staticmethod
    def find_by_login(db: Session, identifier: str) -> Optional[User]:
        """Resolve a login identifier, which may be a username or an email address."""
        return UserService.find_by_username_or_email(db, identifier, identifier)

    @staticmethod
    def find_by_reset_token_hash(db: Session, token_hash: str, now: datetime) -> Optional[User]:
        """User whose reset token matches the hash and has not expired."""
        statement = select(User).where(
            User.reset_token == token_hash,
            col(User.reset_token_expires_at) > now,
        )
        return db.exec(statement).first()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If the username, email or external id is taken
        """
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        except IntegrityError:
            db.rollback()
            raise ConflictError()
        except Exception as e:
            log_error(e, "UserService.create", None)
            db.rollback()
            raise

    @staticmethod
    def save(db: Session, user: User, **fields) -> User:
        """
        Patch fields on a user and persist them.

        Raises:
            ConflictError: If the patch would violate a uniqueness constraint
        """
        try:
            for field, value in fields.items():
                setattr(user, field, value)
            user.updated_at = utc_now()

            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        except IntegrityError:
            db.rollback()
            raise ConflictError()
        except Exception as e:
            log_error(e, "UserService.save", user.id)
            db.rollback()
            raise


__all__ = [
    "UserService",
]
