"""
vinscan/services/user.py

Handles user-level operations: registration, credential checks, email
verification, password reset, and account deletion (which takes the user's
assets and records with it).

Sending mail is outside this service; send_verification_email() is the
hand-off point and only logs the token.
"""

import os
import logging

from sqlalchemy.orm import Session

from vinscan.constants import MIN_PASSWORD_LENGTH
from vinscan.database import commit_or_rollback
from vinscan.errors import AuthError, ConflictError, ValidationError
from vinscan.models.user import User
from vinscan.schemas.user import UserCreate
from vinscan.utils.auth import (
    VERIFY_PURPOSE,
    create_verification_token,
    verify_access_token,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."


def verification_required() -> bool:
    return os.getenv("REQUIRE_EMAIL_VERIFICATION", "false").lower() in ("1", "true", "yes")


def get_user_by_email(email: str, db: Session) -> User | None:
    """
    Return a User by email, or None if not found.
    """
    return db.query(User).filter(User.email == email.lower()).first()


def get_user_by_id(user_id: str, db: Session) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def _check_password_strength(password: str, error=ConflictError) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise error(
            f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
        )


def create_user(user_data: UserCreate, db: Session) -> User:
    """
    Create a new User record and start email verification.
    Raises ConflictError if the email is taken or the password is too weak.
    """
    if get_user_by_email(user_data.email, db):
        raise ConflictError("Email already in use")
    _check_password_strength(user_data.password)

    new_user = User(email=user_data.email.lower())
    new_user.set_password(user_data.password)
    db.add(new_user)
    commit_or_rollback(db, "user registration")
    db.refresh(new_user)
    logger.info(f"Registered user {new_user.id}")

    send_verification_email(new_user, create_verification_token(new_user.id))
    return new_user


def send_verification_email(user: User, token: str) -> None:
    """
    Delivery hook for the verification link. Mail delivery is an external
    collaborator; here the token is only logged.
    """
    logger.info(f"Verification token for {user.email}: {token}")


def authenticate_user(email: str, password: str, db: Session) -> User:
    """
    Look up the user and check the password. The same generic message is
    used for unknown email and wrong password.
    """
    user = get_user_by_email(email, db)
    if not user or not user.verify_password(password):
        raise AuthError(INVALID_CREDENTIALS)
    if verification_required() and not user.email_verified:
        raise AuthError("Email not verified")
    return user


def verify_email(token: str, db: Session) -> User:
    user_id = verify_access_token(token, purpose=VERIFY_PURPOSE)
    user = get_user_by_id(user_id, db)
    if not user:
        raise AuthError("Invalid token")
    if not user.email_verified:
        user.email_verified = True
        commit_or_rollback(db, "email verification")
        db.refresh(user)
        logger.info(f"Email verified for user {user.id}")
    return user


def reset_password(user: User, password: str, db: Session) -> None:
    _check_password_strength(password, error=ValidationError)
    user.set_password(password)
    commit_or_rollback(db, "password reset")
    logger.info(f"Password reset for user {user.id}")


def delete_user(user: User, db: Session) -> None:
    """
    Delete a User together with all of its assets and records.
    """
    user_id = user.id
    db.delete(user)
    commit_or_rollback(db, "user delete")
    logger.info(f"Deleted user {user_id} and associated data")
