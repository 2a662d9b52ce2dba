"""
vinscan/routers/asset.py

FastAPI router handling Asset endpoints. Every route is scoped to the
authenticated user; another user's asset id answers 404.
"""

from typing import Dict, List, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vinscan.schemas.asset import AssetCreate, AssetUpdate, AssetRead
from vinscan.schemas.user import CreatedResponse, MessageResponse
from vinscan.services import asset as asset_service
from vinscan.database import get_db
from vinscan.errors import NotFoundError
from vinscan.models.user import User
from vinscan.utils.auth import get_current_user

router = APIRouter(tags=["assets"])


@router.post("", response_model=CreatedResponse, status_code=201)
def create_asset(
    asset: AssetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a new Asset. The request body (AssetCreate) includes:
      - category: "Cash", "Bank" or "E-Wallet"
      - subcategory: e.g. "BCA", "OVO"
      - amount: opening balance
    """
    new_asset = asset_service.create_asset(current_user.id, asset, db)
    return {"message": f"Asset created successfully with ID: {new_asset.id}", "id": new_asset.id}


@router.get("", response_model=Union[Dict[str, List[AssetRead]], List[AssetRead]])
def list_assets(
    grouped: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Retrieve the user's Assets as a list, or keyed by category with ?grouped=true.
    """
    if grouped:
        return asset_service.get_assets_grouped(current_user.id, db)
    return asset_service.get_all_assets(current_user.id, db)


@router.get("/{asset_id}", response_model=AssetRead)
def get_asset(
    asset_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Retrieve a specific Asset by its ID, or return 404 if not found.
    """
    asset = asset_service.get_asset_by_id(current_user.id, asset_id, db)
    if not asset:
        raise NotFoundError("Asset not found")
    return asset


@router.put("/{asset_id}", response_model=AssetRead)
def update_asset(
    asset_id: str,
    asset: AssetUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Replace an Asset's category, subcategory and balance.
    Returns 404 if no such asset exists.
    """
    return asset_service.update_asset(current_user.id, asset_id, asset, db)


@router.delete("/{asset_id}", response_model=MessageResponse)
def delete_asset(
    asset_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete an existing Asset by ID. Records referencing it are kept.
    """
    asset_service.delete_asset(current_user.id, asset_id, db)
    return {"message": "Asset deleted successfully"}
