"""Menu catalog persistence service."""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.models import InventoryItem, MenuItem, MenuItemIngredient
from app.services.catalog import models


class CatalogPersistenceService:
    """Service for persisting menu items and their ingredients."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_menu_item(self, item_id: str) -> Optional[MenuItem]:
        """Get menu item by ID with ingredients."""
        result = await self.db.execute(
            select(MenuItem)
            .where(MenuItem.id == item_id)
            .options(selectinload(MenuItem.ingredients))
        )
        return result.scalar_one_or_none()

    async def list_menu_items(self) -> List[models.MenuItem]:
        """List menu items with ingredient requirements, ordered by name."""
        result = await self.db.execute(
            select(MenuItem)
            .options(selectinload(MenuItem.ingredients))
            .order_by(MenuItem.name)
        )
        items = result.scalars().all()

        names_result = await self.db.execute(select(InventoryItem.id, InventoryItem.name))
        inventory_names = {row.id: row.name for row in names_result}

        return [
            models.MenuItem(
                id=item.id,
                name=item.name,
                description=item.description or "",
                price=item.price,
                category=item.category,
                image_url=item.image_url,
                ingredients=[
                    models.IngredientRequirement(
                        inventory_item_id=ingredient.inventory_item_id,
                        quantity=ingredient.quantity,
                        name=inventory_names.get(ingredient.inventory_item_id),
                    )
                    for ingredient in sorted(item.ingredients, key=lambda i: i.id)
                ],
            )
            for item in items
        ]

    async def upsert_menu_item(self, item: models.MenuItem) -> MenuItem:
        """Insert a menu item or replace an existing one, ingredients included."""
        ingredients = [
            MenuItemIngredient(
                inventory_item_id=requirement.inventory_item_id,
                quantity=requirement.quantity,
            )
            for requirement in item.ingredients
        ]

        record = await self.get_menu_item(item.id)
        if record is None:
            record = MenuItem(id=item.id, ingredients=ingredients)
            self.db.add(record)
        else:
            # delete-orphan drops the previous ingredient rows
            record.ingredients = ingredients

        record.name = item.name
        record.description = item.description
        record.price = item.price
        record.category = item.category.value
        record.image_url = item.image_url

        await self.db.commit()
        return record
