"""Cart API endpoints."""
import logging
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.core.dependencies import get_app_state
from app.core.errors import UnknownMenuItemError
from app.services.state import AppState


router = APIRouter()
logger = logging.getLogger(__name__)


class CartEntryResponse(BaseModel):
    """Cart entry response model."""
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int
    line_total: Decimal


class StockCheckResponse(BaseModel):
    """Stock sufficiency response model."""
    sufficient: bool
    insufficient_item_names: List[str] = []


class CartResponse(BaseModel):
    """Cart response model."""
    items: List[CartEntryResponse]
    total: Decimal
    stock: StockCheckResponse


class AddToCartRequest(BaseModel):
    """Add one unit of a menu item to the cart."""
    menu_item_id: str


class SetCartQuantityRequest(BaseModel):
    """Replace a cart entry quantity; 0 removes the entry."""
    quantity: int = Field(ge=0)


def _cart_response(state: AppState) -> CartResponse:
    verdict = state.orders.check_stock()
    return CartResponse(
        items=[
            CartEntryResponse(
                menu_item_id=entry.menu_item.id,
                name=entry.menu_item.name,
                price=entry.menu_item.price,
                quantity=entry.quantity,
                line_total=entry.line_total,
            )
            for entry in state.cart.entries
        ],
        total=state.cart.total(),
        stock=StockCheckResponse(**verdict.model_dump()),
    )


@router.get("/api/cart", response_model=CartResponse)
async def get_cart(state: AppState = Depends(get_app_state)):
    """Get the cart with its total and a fresh stock check."""
    return _cart_response(state)


@router.post("/api/cart/items", response_model=CartResponse)
async def add_to_cart(
    body: AddToCartRequest,
    state: AppState = Depends(get_app_state),
):
    """Add one unit of a menu item."""
    try:
        menu_item = state.catalog.get_menu_item(body.menu_item_id)
    except UnknownMenuItemError as e:
        logger.info(f"[CART] Add rejected - {e}")
        raise HTTPException(status_code=404, detail=str(e))

    state.cart.add(menu_item)
    return _cart_response(state)


@router.put("/api/cart/items/{item_id}", response_model=CartResponse)
async def set_cart_quantity(
    item_id: str,
    body: SetCartQuantityRequest,
    state: AppState = Depends(get_app_state),
):
    """Replace the quantity of a cart entry."""
    state.cart.set_quantity(item_id, body.quantity)
    return _cart_response(state)


@router.delete("/api/cart/items/{item_id}", response_model=CartResponse)
async def remove_from_cart(item_id: str, state: AppState = Depends(get_app_state)):
    """Remove a cart entry. Removing an absent entry is not an error."""
    state.cart.remove(item_id)
    return _cart_response(state)


@router.get("/api/cart/stock-check", response_model=StockCheckResponse)
async def check_cart_stock(state: AppState = Depends(get_app_state)):
    """Check the cart against current inventory."""
    verdict = state.orders.check_stock()
    return StockCheckResponse(**verdict.model_dump())
