# FILE: vinscan/services/record.py

"""
vinscan/services/record.py

Core ledger logic for Vinscan: keeps every asset balance equal to its
starting value plus the effect of the user's live records.

Each record state has a fixed balance effect ("deltas"):
 - Expense  : source -= amount
 - Income   : source += amount
 - Transfer : source -= amount, target += amount

 - create : apply the new record's deltas (plus a separate Expense for a
            Transfer fee)
 - update : apply (new deltas - stored deltas), i.e. undo what the stored
            record did and apply what the new payload does, netted per asset
 - delete : apply the negated stored deltas, then remove the record

The stored record keeps the ids it was resolved from ('asset_id',
'target_asset_id'), so the undo step always hits the assets the original
write touched, even if the payload now names different ones.

Every operation runs in one session and ends in one commit, so either the
record write and all balance moves become visible together or none do.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from vinscan.constants import (
    RECORD_EXPENSE,
    RECORD_INCOME,
    RECORD_TRANSFER,
    FEE_CATEGORY,
    FEE_DESCRIPTION,
)
from vinscan.database import commit_or_rollback, utcnow
from vinscan.errors import NotFoundError
from vinscan.models.asset import Asset
from vinscan.models.record import Record
from vinscan.schemas.record import RecordCreate, RecordUpdate
from vinscan.services import asset as asset_service
from vinscan.services.validation import validate_record_payload

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Record Store Accessors
# ------------------------------------------------------------------------------
def get_all_records(user_id: str, db: Session) -> List[Record]:
    """
    Return all of the user's records ordered by date, then creation time.
    """
    return (
        db.query(Record)
        .filter(Record.user_id == user_id)
        .order_by(Record.date, Record.created_at)
        .all()
    )


def get_record_by_id(user_id: str, record_id: str, db: Session) -> Optional[Record]:
    """
    Retrieve a single Record by its ID (returns None if not found).
    """
    return (
        db.query(Record)
        .filter(Record.user_id == user_id, Record.id == record_id)
        .first()
    )


def find_records(user_id: str, db: Session, date=None, start_date=None, end_date=None,
                 month: Optional[int] = None, year: Optional[int] = None) -> List[Record]:
    """
    Fetch records through the indexed columns only: exact date, inclusive date
    range, month+year, or year. Non-indexed filters are applied by the caller.
    """
    query = db.query(Record).filter(Record.user_id == user_id)
    if date is not None:
        query = query.filter(Record.date == date)
    elif start_date is not None and end_date is not None:
        query = query.filter(Record.date >= start_date, Record.date <= end_date)
    elif month is not None and year is not None:
        query = query.filter(Record.month == month, Record.year == year)
    elif year is not None:
        query = query.filter(Record.year == year)
    return query.order_by(Record.date, Record.created_at).all()


# ------------------------------------------------------------------------------
# Balance Mutation Engine
# ------------------------------------------------------------------------------
def create_record(user_id: str, record_data: RecordCreate, db: Session) -> Record:
    """
    Creates a new Record and moves the balances it affects.

    Steps:
      1) Validate the payload and resolve source/target assets.
      2) Insert the record with the derived date and labels.
      3) Apply its deltas.
      4) Transfer with fee > 0 => add an Expense sub-record on the source.
      5) Commit once.
    """
    resolved = validate_record_payload(user_id, record_data, db)
    source, target = resolved.source, resolved.target
    record_type = record_data.type.value

    now_utc = utcnow()
    new_record = Record(
        user_id=user_id,
        day=record_data.day,
        month=record_data.month,
        year=record_data.year,
        date=resolved.date,
        asset_id=source.id,
        asset=source.subcategory,
        type=record_type,
        category=resolved.category,
        target_asset_id=target.id if target else None,
        amount=record_data.amount,
        note=record_data.note or "",
        description=record_data.description or "",
        created_at=now_utc,
    )
    db.add(new_record)

    known = _known_assets(source, target)
    _apply_deltas(
        user_id,
        record_deltas(record_type, record_data.amount, source.id, new_record.target_asset_id),
        db,
        known,
    )

    fee = record_data.fee
    if record_type == RECORD_TRANSFER and fee is not None and fee > 0:
        fee_record = Record(
            user_id=user_id,
            day=record_data.day,
            month=record_data.month,
            year=record_data.year,
            date=resolved.date,
            asset_id=source.id,
            asset=source.subcategory,
            type=RECORD_EXPENSE,
            category=FEE_CATEGORY,
            amount=fee,
            note=record_data.note or "",
            description=FEE_DESCRIPTION,
            created_at=now_utc,
        )
        db.add(fee_record)
        _apply_deltas(user_id, record_deltas(RECORD_EXPENSE, fee, source.id), db, known)
        logger.info(f"Transfer fee {fee} booked as separate expense on asset {source.id}")

    commit_or_rollback(db, "record create")
    db.refresh(new_record)
    logger.info(f"Created {record_type} record {new_record.id} ({record_data.amount}) for user {user_id}")
    return new_record


def update_record(user_id: str, record_id: str, record_data: RecordUpdate, db: Session) -> Record:
    """
    Replace an existing Record and correct the balances.

    The correction is (new deltas - stored deltas) per asset. With the same
    source asset this gives, e.g.:
      Expense 50 -> Income 30   : A + 50 + 30
      Income 50  -> Expense 30  : A - 50 - 30
      Transfer 50 -> Expense 30 : A + 50 - 30, old target T - 50
    and an unchanged type/amount nets to zero everywhere.
    """
    record = get_record_by_id(user_id, record_id, db)
    if not record:
        raise NotFoundError("Record not found")

    resolved = validate_record_payload(user_id, record_data, db)
    source, target = resolved.source, resolved.target
    new_type = record_data.type.value

    old_deltas = stored_deltas(record)
    new_deltas = record_deltas(new_type, record_data.amount, source.id, target.id if target else None)
    net = defaultdict(Decimal)
    for asset_id, delta in new_deltas.items():
        net[asset_id] += delta
    for asset_id, delta in old_deltas.items():
        net[asset_id] -= delta

    old_type, old_amount = record.type, record.amount

    record.day = record_data.day
    record.month = record_data.month
    record.year = record_data.year
    record.date = resolved.date
    record.asset_id = source.id
    record.asset = source.subcategory
    record.type = new_type
    record.category = resolved.category
    record.target_asset_id = target.id if target else None
    record.amount = record_data.amount
    record.note = record_data.note or record.note
    record.description = record_data.description or record.description

    _apply_deltas(user_id, net, db, _known_assets(source, target))

    commit_or_rollback(db, "record update")
    db.refresh(record)
    logger.info(
        f"Updated record {record_id}: {old_type} {old_amount} => {new_type} {record_data.amount}"
    )
    return record


def delete_record(user_id: str, record_id: str, db: Session) -> None:
    """
    Delete a record and undo its balance effect on the assets that still exist.
    A fee sub-record is an independent record and is not touched.
    """
    record = get_record_by_id(user_id, record_id, db)
    if not record:
        raise NotFoundError("Record not found")

    record_type = record.type
    reversal = {asset_id: -delta for asset_id, delta in stored_deltas(record).items()}
    _apply_deltas(user_id, reversal, db)

    db.delete(record)
    commit_or_rollback(db, "record delete")
    logger.info(f"Deleted {record_type} record {record_id} for user {user_id}")


# ------------------------------------------------------------------------------
# Internal Helpers
# ------------------------------------------------------------------------------
def record_deltas(record_type: str, amount: Decimal, source_id: str,
                  target_id: Optional[str] = None) -> Dict[str, Decimal]:
    """
    Signed balance change per asset id for one record state.
    A Transfer to its own source nets to zero.
    """
    amount = Decimal(amount)
    deltas: Dict[str, Decimal] = defaultdict(Decimal)
    if record_type == RECORD_EXPENSE:
        deltas[source_id] -= amount
    elif record_type == RECORD_INCOME:
        deltas[source_id] += amount
    elif record_type == RECORD_TRANSFER:
        deltas[source_id] -= amount
        if target_id:
            deltas[target_id] += amount
    return dict(deltas)


def stored_deltas(record: Record) -> Dict[str, Decimal]:
    """Deltas the persisted record applied when it was written."""
    return record_deltas(record.type, record.amount, record.asset_id, record.target_asset_id)


def _known_assets(*assets: Optional[Asset]) -> Dict[str, Asset]:
    return {a.id: a for a in assets if a is not None}


def _apply_deltas(user_id: str, deltas: Dict[str, Decimal], db: Session,
                  known: Optional[Dict[str, Asset]] = None) -> None:
    """
    Move each asset's balance by its delta. Assets already loaded (and locked)
    by validation are reused; others are fetched FOR UPDATE. An asset that has
    been deleted since the record was written cannot be corrected and is skipped.
    """
    known = known or {}
    for asset_id, delta in deltas.items():
        if delta == 0:
            continue
        asset = known.get(asset_id)
        if asset is None:
            asset = asset_service.get_asset_by_id(user_id, asset_id, db, for_update=True)
        if asset is None:
            logger.warning(f"Asset {asset_id} no longer exists; skipping balance change {delta:+}")
            continue
        before = asset.amount
        after = asset_service.apply_delta(asset, delta)
        logger.info(f"Asset {asset_id} balance {before} => {after} ({delta:+})")
