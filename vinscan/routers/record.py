"""
vinscan/routers/record.py

Router for Record endpoints. The balance bookkeeping (asset deltas, transfer
targets, fee sub-records, reversal on update/delete) lives in the service
layer; these endpoints only parse input and shape output.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vinscan.schemas.record import (
    RecordCreate,
    RecordUpdate,
    RecordRead,
    RecordFilters,
    MonthSummary,
)
from vinscan.schemas.user import CreatedResponse, MessageResponse
from vinscan.services import record as record_service
from vinscan.services import query as query_service
from vinscan.database import get_db
from vinscan.errors import NotFoundError
from vinscan.models.user import User
from vinscan.utils.auth import get_current_user

router = APIRouter(tags=["records"])


@router.post("", response_model=CreatedResponse, status_code=201)
def create_record(
    record: RecordCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a record and apply it to the asset balances.

    - Expense/Income: 'category' is a free-text label.
    - Transfer: 'category' is the target asset id; 'fee' (optional) is booked
      as an extra Expense on the source asset.
    - 404 if the source or target asset does not exist.
    """
    new_record = record_service.create_record(current_user.id, record, db)
    return {"message": "record created successfully", "id": new_record.id}


@router.get("", response_model=Dict[int, Dict[str, List[RecordRead]]])
def list_records(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    date: Optional[str] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    type: Optional[str] = None,
    category: Optional[str] = None,
    asset: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List records grouped by month, then by "day-month-year".

    Date filters (one of): date | startDate+endDate | month+year | year.
    Extra filters: type, category, asset (asset label).
    Conflicting combinations answer 400.
    """
    filters = RecordFilters(
        start_date=start_date,
        end_date=end_date,
        date=date,
        month=month,
        year=year,
        type=type,
        category=category,
        asset=asset,
    )
    return query_service.get_grouped_records(current_user.id, filters, db)


@router.get("/annual", response_model=List[MonthSummary])
def annual_summary(
    year: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Totals per month (Expense, Income, Transfer, count) for ?year=YYYY.
    """
    return query_service.get_annual_summary(current_user.id, year, db)


@router.get("/{record_id}", response_model=RecordRead)
def get_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = record_service.get_record_by_id(current_user.id, record_id, db)
    if not record:
        raise NotFoundError("Record not found")
    return record


@router.put("/{record_id}", response_model=RecordRead)
def update_record(
    record_id: str,
    record: RecordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Replace a record. The service undoes the stored record's balance effect
    and applies the new one in the same commit.
    """
    return record_service.update_record(current_user.id, record_id, record, db)


@router.delete("/{record_id}", response_model=MessageResponse)
def delete_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete a record and reverse its balance effect.
    """
    record_service.delete_record(current_user.id, record_id, db)
    return {"message": "record deleted successfully"}
