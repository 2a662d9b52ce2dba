"""
vinscan/models/user.py

Represents a user of the Vinscan application. Each user owns a private set of
Assets and Records; deleting the user removes both collections.
"""

from __future__ import annotations
import uuid
from datetime import datetime
from typing import List, TYPE_CHECKING

import bcrypt
from sqlalchemy import String, Boolean
from sqlalchemy.orm import relationship, Mapped, mapped_column

from vinscan.database import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from vinscan.models.asset import Asset
    from vinscan.models.record import Record


def new_id() -> str:
    """Opaque identifier shared by users, assets and records."""
    return uuid.uuid4().hex


class User(Base):
    """
    The main user table. Each user has:
      - An opaque ID (PK)
      - A unique email used for login
      - A bcrypt-hashed password
      - An email verification flag
      - The assets and records it owns
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    assets: Mapped[List[Asset]] = relationship(
        "Asset",
        back_populates="user",
        order_by="Asset.created_at",
        cascade="all, delete-orphan",
        doc="All balance buckets owned by this user."
    )
    records: Mapped[List[Record]] = relationship(
        "Record",
        back_populates="user",
        order_by="Record.date",
        cascade="all, delete-orphan",
        doc="All expense/income/transfer records owned by this user."
    )

    def set_password(self, password: str) -> None:
        """
        Hash and store the user's password using bcrypt.
        bcrypt only looks at the first 72 bytes, so longer input is cut there
        explicitly instead of letting the library reject it.
        """
        raw = password.encode("utf-8")[:72]
        self.password_hash = bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")

    def verify_password(self, password: str) -> bool:
        """
        Verify a plain-text password against the stored hash.
        """
        if not password or not self.password_hash:
            return False
        raw = password.encode("utf-8")[:72]
        return bcrypt.checkpw(raw, self.password_hash.encode("utf-8"))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
