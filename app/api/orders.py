"""Order API endpoints."""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict

from app.core.config import settings
from app.core.dependencies import get_app_state
from app.core.errors import EmptyCartError, InsufficientStockError
from app.services.state import AppState


router = APIRouter()
logger = logging.getLogger(__name__)


class OrderItemResponse(BaseModel):
    """Order line item response model."""
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Order response model."""
    id: str
    items: List[OrderItemResponse] = []
    total: Decimal
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class CommitResponse(BaseModel):
    """Commit response model. success is true once the order is committed locally."""
    success: bool
    stage: str
    order: OrderResponse
    message: str


class OrderStatsResponse(BaseModel):
    """Lifetime order aggregates."""
    total_orders: int
    total_revenue: Decimal


@router.post("/api/orders", response_model=CommitResponse)
async def place_order(
    request: Request,
    state: AppState = Depends(get_app_state),
):
    """Commit the current cart as an order."""
    logger.info(
        f"[ORDERS] Commit requested - {len(state.cart)} cart entries, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        result = state.orders.commit()
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "insufficient_item_names": e.short_items},
        )

    order = result.order
    return CommitResponse(
        success=result.success,
        stage=str(result.stage),
        order=OrderResponse.model_validate(order),
        message=f"Order placed successfully. Total: {settings.currency_symbol}{order.total:.2f}",
    )


@router.get("/api/orders", response_model=List[OrderResponse])
async def list_orders(
    day: Optional[date] = None,
    state: AppState = Depends(get_app_state),
):
    """List committed orders, optionally for a single day (UTC)."""
    orders = state.history.orders_on(day) if day else state.history.orders
    logger.debug(f"[ORDERS] Returning {len(orders)} orders (day: {day or 'all'})")
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/api/orders/stats", response_model=OrderStatsResponse)
async def order_stats(state: AppState = Depends(get_app_state)):
    """Lifetime order count and revenue."""
    return OrderStatsResponse(**state.history.aggregates.model_dump())
