"""
vinscan/services/query.py

Listing records: turns the loose GET /records parameters into one indexed
fetch, narrows the result in memory, and buckets it for display.

Resolution order for the date part:
  1) date                 -> records on that day
  2) start_date..end_date -> inclusive range
  3) month + year         -> that month
  4) year                 -> that year
  5) nothing              -> every record
'asset', 'type' and 'category' are not indexed and are applied afterwards.

Grouping shape:
  { 3: { "5-3-2024": [rec, rec], "6-3-2024": [rec] } }
outer key = month number, inner key = "day-month-year" without zero padding.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from vinscan.constants import RECORD_EXPENSE, RECORD_INCOME, RECORD_TRANSFER
from vinscan.errors import ValidationError
from vinscan.models.record import Record
from vinscan.schemas.record import RecordFilters, MonthSummary
from vinscan.services import record as record_service

logger = logging.getLogger(__name__)

DAY_FIRST_FORMAT = "%d-%m-%Y"


def parse_date_param(value: str, name: str) -> datetime:
    """
    Accepts 'YYYY-MM-DD' (or a full ISO timestamp) and 'DD-MM-YYYY'.
    Returns UTC midnight of that day, the same form record dates are stored in.
    """
    value = value.strip()
    parsed = None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.strptime(value, DAY_FIRST_FORMAT)
        except ValueError:
            raise ValidationError(f"{name} must be a date in YYYY-MM-DD or DD-MM-YYYY format")
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


def resolve_filters(filters: RecordFilters) -> dict:
    """
    Check which filter combinations were given and pick the single indexed
    query to run. Returns keyword arguments for record_service.find_records().
    """
    has_start = bool(filters.start_date)
    has_end = bool(filters.end_date)

    if has_start != has_end:
        raise ValidationError("startDate and endDate must be provided together")
    if filters.date and (filters.month is not None or filters.year is not None):
        raise ValidationError("date cannot be provided together with month or year")
    if filters.month is not None and filters.year is None:
        raise ValidationError("month and year must be provided together")
    if filters.month is not None and not 1 <= filters.month <= 12:
        raise ValidationError("month must be between 1 and 12")

    if filters.date:
        return {"date": parse_date_param(filters.date, "date")}
    if has_start:
        start = parse_date_param(filters.start_date, "startDate")
        end = parse_date_param(filters.end_date, "endDate")
        if start > end:
            raise ValidationError("startDate must not be after endDate")
        return {"start_date": start, "end_date": end}
    if filters.month is not None:
        return {"month": filters.month, "year": filters.year}
    if filters.year is not None:
        return {"year": filters.year}
    return {}


def query_records(user_id: str, filters: RecordFilters, db: Session) -> List[Record]:
    criteria = resolve_filters(filters)
    logger.debug(f"Record query for user {user_id}: indexed={criteria}")
    records = record_service.find_records(user_id, db, **criteria)

    if filters.asset:
        records = [r for r in records if r.asset == filters.asset]
    if filters.type:
        records = [r for r in records if r.type == filters.type]
    if filters.category:
        records = [r for r in records if r.category == filters.category]
    return records


def group_records(records: List[Record]) -> Dict[int, Dict[str, List[Record]]]:
    grouped: Dict[int, Dict[str, List[Record]]] = OrderedDict()
    for record in records:
        d = record.date
        date_key = f"{d.day}-{d.month}-{d.year}"
        grouped.setdefault(d.month, OrderedDict()).setdefault(date_key, []).append(record)
    return grouped


def get_grouped_records(user_id: str, filters: RecordFilters, db: Session) -> Dict[int, Dict[str, List[Record]]]:
    return group_records(query_records(user_id, filters, db))


def get_annual_summary(user_id: str, year: Optional[int], db: Session) -> List[MonthSummary]:
    """
    Per-month totals for one year: sums of Expense, Income and Transfer
    amounts and the number of records. All twelve months are returned.
    """
    if year is None:
        raise ValidationError("year is required")

    months = {m: MonthSummary(month=m) for m in range(1, 13)}
    for record in record_service.find_records(user_id, db, year=year):
        summary = months[record.month]
        amount = Decimal(record.amount)
        if record.type == RECORD_EXPENSE:
            summary.expense += amount
        elif record.type == RECORD_INCOME:
            summary.income += amount
        elif record.type == RECORD_TRANSFER:
            summary.transfer += amount
        summary.count += 1
    return list(months.values())
