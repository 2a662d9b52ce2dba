# FILE: vinscan/routers/user.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

# Pydantic schemas for registration, verification and the profile
from vinscan.schemas.user import (
    UserCreate,
    UserProfile,
    PasswordReset,
    VerifyEmailRequest,
    RegisterResponse,
    MessageResponse,
)

# Service functions that interact with the database
from vinscan.services import user as user_service

from vinscan.database import get_db
from vinscan.models.user import User
from vinscan.utils.auth import get_current_user

router = APIRouter(tags=["users"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user: POST /api/v1/register

    - 400 if email/password are missing or the email is malformed.
    - 401 if the email is already registered or the password is too weak.
    - A verification token is issued to the delivery hook.
    """
    new_user = user_service.create_user(user, db)
    return {"message": "User registered successfully", "uid": new_user.id}


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(body: VerifyEmailRequest, db: Session = Depends(get_db)):
    """
    Mark the email behind a verification token as verified.
    """
    user_service.verify_email(body.token, db)
    return {"message": "Email verified successfully"}


@router.post("/reset-password", response_model=MessageResponse, status_code=201)
def reset_password(
    body: PasswordReset,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Set a new password for the authenticated user.
    """
    user_service.reset_password(current_user, body.password, db)
    return {"message": "Password reset successfully"}


@router.get("/user", response_model=UserProfile)
def get_user(current_user: User = Depends(get_current_user)):
    """
    The authenticated user with all of its assets and records.
    """
    return current_user


@router.delete("/user", response_model=MessageResponse)
def delete_user(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Delete the authenticated user together with its assets and records.
    """
    user_service.delete_user(current_user, db)
    return {"message": "User and associated data deleted successfully"}
