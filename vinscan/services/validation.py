"""
vinscan/services/validation.py

Record validation: the checks a create/update payload has to pass before the
balance engine touches anything.

Structural rules (required fields, day/month ranges, record type, amount >= 0)
are enforced by the Pydantic schema. What is left here needs the database or
the calendar:
 - the (day, month, year) triple must be a real date
 - the source asset must exist for this user
 - for a Transfer, 'category' holds the target asset id, which must exist;
   it is replaced by the target's label

Nothing is written.
"""

from datetime import datetime, timezone
from typing import NamedTuple, Optional

from sqlalchemy.orm import Session

from vinscan.constants import RECORD_TRANSFER
from vinscan.errors import NotFoundError, ValidationError
from vinscan.models.asset import Asset
from vinscan.schemas.record import RecordBase
from vinscan.services import asset as asset_service


class ResolvedRecord(NamedTuple):
    date: datetime
    source: Asset
    target: Optional[Asset]
    category: str


def record_date(day: int, month: int, year: int) -> datetime:
    """
    UTC midnight of the given calendar day. Rejects days the month does
    not have (31 April, 29 February outside leap years).
    """
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        raise ValidationError(f"{day}-{month}-{year} is not a valid date")


def validate_record_payload(user_id: str, record_data: RecordBase, db: Session) -> ResolvedRecord:
    """
    Check a create/update payload against the user's assets and resolve the
    fields derived from them.

    The returned assets are fetched FOR UPDATE because the caller is about
    to move their balances.
    """
    date = record_date(record_data.day, record_data.month, record_data.year)

    source = asset_service.get_asset_by_id(user_id, record_data.asset_id, db, for_update=True)
    if source is None:
        raise NotFoundError("Asset not found")

    target = None
    category = record_data.category
    if record_data.type == RECORD_TRANSFER:
        target = asset_service.get_asset_by_id(user_id, record_data.category, db, for_update=True)
        if target is None:
            raise NotFoundError("Target asset not found")
        category = target.subcategory

    return ResolvedRecord(date=date, source=source, target=target, category=category)
