"""
vinscan/schemas/record.py

Pydantic schemas for Records and for the record listing filters.

- RecordType: Expense / Income / Transfer
- RecordCreate: create payload; 'fee' only matters for Transfer
- RecordUpdate: same body as create; 'fee' is not accepted on update
- RecordRead: output, with the resolved 'asset' and 'category' labels
- RecordFilters: query parameters of GET /records
- MonthSummary: one month of the annual overview

'asset_id' is also accepted as 'assetId' on input.
For a Transfer, 'category' carries the *target asset id* on input; the
service resolves it to the target's label before anything is stored.
"""

from enum import Enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from vinscan.constants import EXPENSE_CATEGORIES, INCOME_CATEGORIES
from vinscan.schemas.asset import validate_money_decimal

CATEGORY_HELP = (
    "Expense = " + ", ".join(EXPENSE_CATEGORIES) + "; "
    "Income = " + ", ".join(INCOME_CATEGORIES) + "; "
    "Transfer = id of the target asset"
)


class RecordType(str, Enum):
    EXPENSE = "Expense"
    INCOME = "Income"
    TRANSFER = "Transfer"


class RecordBase(BaseModel):
    """
    Shared input fields. All but note/description are required; an amount
    of 0 is valid, a missing amount is not.
    """
    day: int = Field(..., ge=1, le=31)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    asset_id: str = Field(..., alias="assetId", min_length=1)
    type: RecordType
    category: str = Field(..., min_length=1, description=CATEGORY_HELP)
    amount: Decimal = Field(..., ge=0)
    note: Optional[str] = None
    description: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("category")
    def category_not_blank(cls, v):
        if not v.strip():
            raise ValueError("category is required")
        return v

    @field_validator("amount")
    def validate_amount(cls, v):
        return validate_money_decimal(v)


class RecordCreate(RecordBase):
    fee: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Transfer fee, booked as a separate Expense on the source asset."
    )

    @field_validator("fee")
    def validate_fee(cls, v):
        if v is not None:
            return validate_money_decimal(v)
        return v


class RecordUpdate(RecordBase):
    """
    Replaces the record. Omitted or empty note/description keep their
    previous values.
    """


class RecordRead(BaseModel):
    id: str
    day: int
    month: int
    year: int
    date: datetime
    asset_id: str
    asset: str
    type: str
    category: str
    target_asset_id: Optional[str] = None
    amount: Decimal
    note: str = ""
    description: str = ""
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecordFilters(BaseModel):
    """
    Filters for GET /records. Dates are raw strings here; the query engine
    parses them and checks which combinations are allowed.
    """
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    date: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    type: Optional[str] = None
    category: Optional[str] = None
    asset: Optional[str] = None


class MonthSummary(BaseModel):
    month: int
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    transfer: Decimal = Decimal("0")
    count: int = 0
