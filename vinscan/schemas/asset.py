"""
vinscan/schemas/asset.py

Defines Pydantic schemas for creating, updating, and reading Asset objects.
'category' is restricted to Cash / Bank / E-Wallet and 'amount' to a
non-negative value with at most 2 decimal places. A failing validator
surfaces as HTTP 400 (see main.py).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from vinscan.constants import ASSET_CATEGORIES


# 16 integer digits + 2 decimals = 18, the range the Money column stores exactly
MONEY_LIMIT = Decimal("1E16")
CENT = Decimal("0.01")


def validate_money_decimal(value: Decimal) -> Decimal:
    """
    Enforces max 2 decimal places and max 18 total digits for balances
    and record amounts, whatever notation the number came in
    (e.g. "1E+30" or a bare integer).
    """
    if not value.is_finite():
        raise ValueError("amount must be a finite number.")
    if abs(value) >= MONEY_LIMIT:
        raise ValueError("amount cannot exceed 18 total digits.")
    if value != value.quantize(CENT):
        raise ValueError("amount cannot exceed 2 decimal places.")
    return value


class AssetBase(BaseModel):
    """
    Common fields for an Asset.
    - 'category': "Cash", "Bank" or "E-Wallet"
    - 'subcategory': a label like "BCA" or "OVO"
    - 'amount': current balance
    """
    category: str
    subcategory: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)

    @field_validator("category")
    def category_must_be_valid(cls, v):
        if v not in ASSET_CATEGORIES:
            raise ValueError("category must be Cash, Bank, or E-Wallet")
        return v

    @field_validator("subcategory")
    def subcategory_not_blank(cls, v):
        if not v.strip():
            raise ValueError("subcategory is required")
        return v

    @field_validator("amount")
    def validate_amount(cls, v):
        return validate_money_decimal(v)


class AssetCreate(AssetBase):
    """Schema for creating a new Asset. The owner comes from the bearer token."""


class AssetUpdate(AssetBase):
    """
    Schema for PUT /assets/{id}. All three fields are replaced, so all
    three are required, exactly as on create.
    """


class AssetRead(BaseModel):
    """
    Schema returned after fetching an Asset. The balance may be negative
    here, since expenses can overdraw it.
    """
    id: str
    category: str
    subcategory: str
    amount: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
