"""
vinscan/models/asset.py

Defines the Asset model: a balance bucket (cash, bank account, e-wallet)
owned by one user.

User => One-to-many => Asset

Records reference assets by id only (no foreign key), because deleting an
asset intentionally leaves its records in place.
"""

from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from vinscan.database import Base, Money, UTCDateTime, utcnow
from vinscan.models.user import new_id


class Asset(Base):
    __tablename__ = "assets"

    # ---------------------------------------------------------------------
    # Primary Key & Fields
    # ---------------------------------------------------------------------
    id = Column(String(32), primary_key=True, default=new_id)

    user_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # "Cash", "Bank" or "E-Wallet"
    category = Column(String(20), nullable=False)

    # Free-text label such as "BCA" or "OVO"; copied into records for display
    subcategory = Column(String(255), nullable=False)

    # Signed balance; expenses may take it below zero
    amount = Column(Money, nullable=False, default=0)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    # ---------------------------------------------------------------------
    # Relationships
    # ---------------------------------------------------------------------
    user = relationship(
        "User",
        back_populates="assets",
        doc="The user that owns this asset."
    )

    def __repr__(self):
        return (
            f"<Asset(id={self.id}, user_id={self.user_id}, category={self.category}, "
            f"subcategory={self.subcategory}, amount={self.amount})>"
        )
