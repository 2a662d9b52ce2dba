"""
vinscan/schemas/user.py

Defines the Pydantic schemas for registration, login, password reset and the
user profile. A user is identified by email; the password is supplied raw and
hashed by the model.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr

from vinscan.schemas.asset import AssetRead
from vinscan.schemas.record import RecordRead


class UserCreate(BaseModel):
    """
    For registering a new user. Password strength is checked by the
    service layer so it can answer with the registration error code.
    """
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    """
    Schema for login JSON:
      { "email": "someone@example.com", "password": "somePass" }
    """
    email: EmailStr
    password: str


class PasswordReset(BaseModel):
    password: str


class VerifyEmailRequest(BaseModel):
    token: str


class UserProfile(BaseModel):
    """
    GET /user: the account together with everything it owns.
    Excludes the hashed password.
    """
    id: str
    email: str
    email_verified: bool
    created_at: Optional[datetime] = None
    assets: List[AssetRead] = []
    records: List[RecordRead] = []

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    token: str
    uid: str


class RegisterResponse(BaseModel):
    message: str
    uid: str


class MessageResponse(BaseModel):
    message: str


class CreatedResponse(BaseModel):
    message: str
    id: str
