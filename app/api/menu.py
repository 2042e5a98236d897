"""Menu API endpoints."""
import logging
from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from app.core.dependencies import get_app_state
from app.core.errors import UnknownMenuItemError
from app.services.catalog.models import IngredientRequirement, MenuCategory, MenuItem
from app.services.state import AppState


router = APIRouter()
logger = logging.getLogger(__name__)


class MenuItemResponse(BaseModel):
    """Menu item response model."""
    id: str
    name: str
    description: str = ""
    price: Decimal
    category: MenuCategory
    ingredients: List[IngredientRequirement] = []
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MenuResponse(BaseModel):
    """Menu response model."""
    items: List[MenuItemResponse]
    categories: List[str] = []


class MenuItemRequest(BaseModel):
    """Create or edit menu item request."""
    name: str = Field(min_length=1)
    description: str = ""
    price: Decimal = Field(ge=0, decimal_places=2)
    category: MenuCategory
    ingredients: List[IngredientRequirement] = []
    image_url: Optional[str] = None


class CreateMenuItemRequest(MenuItemRequest):
    """Create menu item request; a uuid is generated when no id is given."""
    id: Optional[str] = None


@router.get("/api/menu", response_model=MenuResponse)
async def get_menu(
    request: Request,
    state: AppState = Depends(get_app_state),
):
    """Get the full menu."""
    logger.info(
        f"[MENU] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )
    items = state.catalog.menu_items
    logger.debug(f"[MENU] Menu loaded - {len(items)} items")
    return MenuResponse(
        items=[MenuItemResponse.model_validate(item) for item in items],
        categories=state.catalog.categories,
    )


@router.post("/api/menu/items", response_model=MenuItemResponse)
async def create_menu_item(
    body: CreateMenuItemRequest,
    state: AppState = Depends(get_app_state),
):
    """Add a menu item."""
    item_id = body.id or str(uuid4())
    if item_id in {item.id for item in state.catalog.menu_items}:
        raise HTTPException(status_code=409, detail=f"Menu item '{item_id}' already exists")

    item = MenuItem(id=item_id, **body.model_dump(exclude={"id"}))
    state.catalog_manager.upsert_menu_item(item)
    logger.info(f"[MENU] Menu item created - {item.id} ({item.name})")
    return MenuItemResponse.model_validate(item)


@router.put("/api/menu/items/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: str,
    body: MenuItemRequest,
    state: AppState = Depends(get_app_state),
):
    """Edit a menu item. Carts and past orders keep the values they captured."""
    try:
        state.catalog.get_menu_item(item_id)
    except UnknownMenuItemError as e:
        raise HTTPException(status_code=404, detail=str(e))

    item = MenuItem(id=item_id, **body.model_dump())
    state.catalog_manager.upsert_menu_item(item)
    logger.info(f"[MENU] Menu item updated - {item.id} ({item.name})")
    return MenuItemResponse.model_validate(item)
