"""
vinscan/utils/auth.py

Bearer-token helpers. Access tokens and email-verification tokens are both
HS256 JWTs signed with SECRET_KEY; the 'purpose' claim keeps one from being
accepted as the other.

get_current_user() is the request-scoped dependency every protected route
uses: it turns "Authorization: Bearer <token>" into the owning User.
"""

import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from vinscan.database import get_db
from vinscan.errors import AuthError
from vinscan.models.user import User

load_dotenv()

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY", "default_secret_key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
VERIFY_TOKEN_EXPIRE_MINUTES = int(os.getenv("VERIFY_TOKEN_EXPIRE_MINUTES", "1440"))

ACCESS_PURPOSE = "access"
VERIFY_PURPOSE = "verify-email"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/login", auto_error=False)


# --- JWT Helper Functions ---

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None,
                        purpose: str = ACCESS_PURPOSE) -> str:
    """
    Generate a new JWT.

    Args:
        data (dict): Payload data to encode in the token ('sub' = user id).
        expires_delta (timedelta): Lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
        purpose (str): 'access' for API calls, 'verify-email' for verification links.

    Returns:
        str: Encoded JWT token.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "purpose": purpose})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_verification_token(user_id: str) -> str:
    return create_access_token(
        {"sub": user_id},
        expires_delta=timedelta(minutes=VERIFY_TOKEN_EXPIRE_MINUTES),
        purpose=VERIFY_PURPOSE,
    )


def verify_access_token(token: str, purpose: str = ACCESS_PURPOSE) -> str:
    """
    Verify and decode a JWT.

    Args:
        token (str): The JWT token to verify.
        purpose (str): The purpose the token must have been issued for.

    Returns:
        str: User id extracted from the token.

    Raises:
        AuthError: If the token is invalid, issued for another purpose, or expired.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError(
            "Token expired",
            headers={"WWW-Authenticate": 'Bearer error="invalid_token", error_description="expired"'},
        )
    except JWTError:
        raise AuthError("Invalid token")

    user_id = payload.get("sub")
    if user_id is None or payload.get("purpose") != purpose:
        raise AuthError("Invalid token")
    return user_id


# --- Request Dependency ---

def get_current_user(token: Optional[str] = Depends(oauth2_scheme),
                     db: Session = Depends(get_db)) -> User:
    """
    Resolve the bearer credential to its User (id, email, email_verified).
    Raises 401 when the header is missing, the token does not verify, or the
    account no longer exists.
    """
    if not token:
        raise AuthError("Not authenticated")

    user_id = verify_access_token(token)
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.info(f"Token for unknown user id={user_id} rejected")
        raise AuthError("Invalid token")
    return user
