"""Inventory API endpoints."""
import logging
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from app.core.dependencies import get_app_state
from app.core.errors import (
    DuplicateInventoryItemError,
    NegativeQuantityError,
    UnknownInventoryItemError,
)
from app.services.catalog.models import InventoryItem, StockLevel
from app.services.state import AppState


router = APIRouter()
logger = logging.getLogger(__name__)


class InventoryItemResponse(BaseModel):
    """Inventory item response model."""
    id: str
    name: str
    quantity: float
    unit: str
    min_level: float
    category: str
    wastage: float
    stock_level: StockLevel

    model_config = ConfigDict(from_attributes=True)


class CreateInventoryItemRequest(BaseModel):
    """Create inventory item request."""
    id: Optional[str] = None
    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str = "pieces"
    min_level: float = Field(default=0, ge=0)
    category: str = "other"


class SetQuantityRequest(BaseModel):
    """Set inventory quantity request."""
    quantity: float


class WastageRequest(BaseModel):
    """Record wastage request."""
    amount: float


@router.get("/api/inventory", response_model=List[InventoryItemResponse])
async def list_inventory(state: AppState = Depends(get_app_state)):
    """Get every inventory item with its stock level."""
    return [InventoryItemResponse.model_validate(item) for item in state.catalog.inventory_items]


@router.get("/api/inventory/low-stock", response_model=List[InventoryItemResponse])
async def list_low_stock(state: AppState = Depends(get_app_state)):
    """Get inventory items at or below their minimum level."""
    return [InventoryItemResponse.model_validate(item) for item in state.catalog.low_stock_items()]


@router.post("/api/inventory/items", response_model=InventoryItemResponse)
async def create_inventory_item(
    body: CreateInventoryItemRequest,
    state: AppState = Depends(get_app_state),
):
    """Add an inventory item."""
    item = InventoryItem(id=body.id or str(uuid4()), **body.model_dump(exclude={"id"}))
    try:
        state.catalog_manager.add_inventory_item(item)
    except DuplicateInventoryItemError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return InventoryItemResponse.model_validate(item)


@router.put("/api/inventory/items/{item_id}/quantity", response_model=InventoryItemResponse)
async def set_inventory_quantity(
    item_id: str,
    body: SetQuantityRequest,
    state: AppState = Depends(get_app_state),
):
    """Set the stock level of an inventory item (restock or correction)."""
    try:
        item = state.inventory.set_quantity(item_id, body.quantity)
    except NegativeQuantityError as e:
        logger.info(f"[INVENTORY] Update rejected - {item_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownInventoryItemError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return InventoryItemResponse.model_validate(item)


@router.post("/api/inventory/items/{item_id}/wastage", response_model=InventoryItemResponse)
async def record_wastage(
    item_id: str,
    body: WastageRequest,
    state: AppState = Depends(get_app_state),
):
    """Record wasted stock. Does not change the stock quantity."""
    try:
        item = state.inventory.record_wastage(item_id, body.amount)
    except NegativeQuantityError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownInventoryItemError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return InventoryItemResponse.model_validate(item)
