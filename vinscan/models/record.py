"""
vinscan/models/record.py

Defines the Record model: a dated Expense, Income or Transfer that moved money
in or out of one (or, for Transfer, two) of the user's assets.

Display fields are denormalized at write time:
 - 'asset' holds the source asset's subcategory label
 - for a Transfer, 'category' holds the target asset's subcategory label

The ids those labels were resolved from are kept in 'asset_id' and
'target_asset_id', so an update or delete can undo exactly the balance
change the stored record applied. Renaming an asset later does not touch
historical labels.
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from vinscan.database import Base, Money, UTCDateTime, utcnow
from vinscan.models.user import new_id


class Record(Base):
    __tablename__ = "records"

    id = Column(String(32), primary_key=True, default=new_id)

    user_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Calendar fields as entered
    day = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)

    # UTC midnight of (year, month, day); the indexed sort/filter key
    date = Column(UTCDateTime, nullable=False, index=True)

    # Source asset id and its label at write time
    asset_id = Column(String(32), nullable=False)
    asset = Column(String(255), nullable=False)

    # "Expense", "Income" or "Transfer"
    type = Column(String(10), nullable=False)

    # Free text for Expense/Income; resolved target label for Transfer
    category = Column(String(255), nullable=False)

    # Only set for Transfer
    target_asset_id = Column(String(32), nullable=True)

    # Magnitude of the movement, never negative
    amount = Column(Money, nullable=False)

    note = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    user = relationship(
        "User",
        back_populates="records",
        doc="The user that owns this record."
    )

    def __repr__(self):
        return (
            f"<Record(id={self.id}, type={self.type}, date={self.date}, "
            f"asset={self.asset}, category={self.category}, amount={self.amount})>"
        )
