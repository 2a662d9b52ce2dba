"""
vinscan/services/asset.py

Manages creation, update, deletion, and retrieval of Assets, always scoped by
the owning user: an asset id that belongs to somebody else behaves exactly
like one that does not exist.

The balance itself is only moved here through apply_delta(), which the record
engine calls while it holds the asset row (see get_asset_by_id(for_update=True)).
Explicit PUT /assets/{id} calls overwrite the balance directly.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from vinscan.constants import ASSET_CATEGORIES
from vinscan.database import commit_or_rollback
from vinscan.errors import NotFoundError
from vinscan.models.asset import Asset
from vinscan.schemas.asset import AssetCreate, AssetUpdate

logger = logging.getLogger(__name__)


def get_all_assets(user_id: str, db: Session) -> List[Asset]:
    """
    Fetch all assets owned by the user, oldest first.
    """
    return (
        db.query(Asset)
        .filter(Asset.user_id == user_id)
        .order_by(Asset.created_at)
        .all()
    )


def get_assets_grouped(user_id: str, db: Session) -> Dict[str, List[Asset]]:
    """
    Same assets keyed by category. Every category is present, possibly empty.
    """
    grouped: Dict[str, List[Asset]] = defaultdict(list)
    for category in ASSET_CATEGORIES:
        grouped[category] = []
    for asset in get_all_assets(user_id, db):
        grouped[asset.category].append(asset)
    return dict(grouped)


def get_asset_by_id(user_id: str, asset_id: str, db: Session, for_update: bool = False) -> Optional[Asset]:
    """
    Return the user's Asset with the specified ID, or None if it doesn't exist.

    With for_update=True the row is selected FOR UPDATE on backends that
    support it, so two requests moving the same balance are serialized.
    """
    query = db.query(Asset).filter(Asset.user_id == user_id, Asset.id == asset_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def create_asset(user_id: str, asset_data: AssetCreate, db: Session) -> Asset:
    new_asset = Asset(
        user_id=user_id,
        category=asset_data.category,
        subcategory=asset_data.subcategory,
        amount=asset_data.amount,
    )
    db.add(new_asset)
    commit_or_rollback(db, "asset create")
    db.refresh(new_asset)
    logger.info(f"Created asset {new_asset.id} ({new_asset.category}/{new_asset.subcategory}) for user {user_id}")
    return new_asset


def update_asset(user_id: str, asset_id: str, asset_data: AssetUpdate, db: Session) -> Asset:
    """
    Replace category, subcategory and balance of an existing asset.
    Records written earlier keep the label they were written with.
    """
    asset = get_asset_by_id(user_id, asset_id, db, for_update=True)
    if not asset:
        raise NotFoundError("Asset not found")

    asset.category = asset_data.category
    asset.subcategory = asset_data.subcategory
    asset.amount = asset_data.amount

    commit_or_rollback(db, "asset update")
    db.refresh(asset)
    logger.info(f"Updated asset {asset_id} for user {user_id}")
    return asset


def delete_asset(user_id: str, asset_id: str, db: Session) -> None:
    """
    Delete the asset. Records that reference it are left in place; their
    stored labels keep them readable.
    """
    asset = get_asset_by_id(user_id, asset_id, db)
    if not asset:
        raise NotFoundError("Asset not found")

    db.delete(asset)
    commit_or_rollback(db, "asset delete")
    logger.info(f"Deleted asset {asset_id} for user {user_id}")


def apply_delta(asset: Asset, delta: Decimal) -> Decimal:
    """
    Move the balance by a signed delta (not committed). Returns the new balance.
    """
    current = Decimal(asset.amount or 0)
    asset.amount = current + delta
    return asset.amount
