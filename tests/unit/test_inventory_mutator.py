"""Unit tests for manual inventory adjustments."""
import pytest
from unittest.mock import AsyncMock

from app.core.errors import NegativeQuantityError, UnknownInventoryItemError


class TestSetQuantity:
    """Test restocks and corrections."""

    @pytest.mark.asyncio
    async def test_set_quantity_local_and_remote(self, app_state, sql_store):
        """Test the new quantity is applied locally and saved to the backend."""
        item = app_state.inventory.set_quantity("chicken-patty", 75)

        assert item.quantity == 75
        assert app_state.catalog.get_inventory_item("chicken-patty").quantity == 75

        await app_state.writer.drain()
        assert await sql_store.get_inventory_quantity("chicken-patty") == 75
        assert len(app_state.warnings) == 0

    @pytest.mark.asyncio
    async def test_set_quantity_zero_allowed(self, app_state):
        """Test zero is a valid stock level."""
        item = app_state.inventory.set_quantity("onion", 0)
        await app_state.writer.drain()

        assert item.quantity == 0

    @pytest.mark.asyncio
    async def test_negative_quantity_rejected(self, app_state, sql_store):
        """Test a negative value is refused and nothing is written."""
        with pytest.raises(NegativeQuantityError):
            app_state.inventory.set_quantity("chicken-patty", -5)

        assert app_state.catalog.get_inventory_item("chicken-patty").quantity == 50
        assert app_state.writer.pending == 0
        assert await sql_store.get_inventory_quantity("chicken-patty") == 50

    @pytest.mark.asyncio
    async def test_non_numeric_quantity_rejected(self, app_state):
        """Test non-numeric values are refused."""
        with pytest.raises(TypeError):
            app_state.inventory.set_quantity("chicken-patty", "12")

        assert app_state.catalog.get_inventory_item("chicken-patty").quantity == 50

    @pytest.mark.asyncio
    async def test_unknown_item(self, app_state):
        """Test unknown ids raise and spawn nothing."""
        with pytest.raises(UnknownInventoryItemError):
            app_state.inventory.set_quantity("truffle", 3)

        assert app_state.writer.pending == 0

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_local_value(self, app_state, sql_store, monkeypatch):
        """Test a failed backend update leaves the local value and reports a warning."""
        monkeypatch.setattr(
            sql_store, "update_inventory_item", AsyncMock(side_effect=ConnectionError("offline"))
        )

        app_state.inventory.set_quantity("cheese", 5)
        await app_state.writer.drain()

        assert app_state.catalog.get_inventory_item("cheese").quantity == 5
        [warning] = app_state.warnings.warnings
        assert warning.stage == "inventory_update"
        assert warning.subject == "cheese"

    @pytest.mark.asyncio
    async def test_missing_backend_row_reports_warning(self, app_state, sql_store, monkeypatch):
        """Test an update that matches no backend row is reported."""
        monkeypatch.setattr(sql_store, "update_inventory_item", AsyncMock(return_value=False))

        app_state.inventory.set_quantity("cheese", 5)
        await app_state.writer.drain()

        assert len(app_state.warnings) == 1
        assert isinstance(app_state.warnings.warnings[0].cause, LookupError)


class TestRecordWastage:
    """Test wastage bookkeeping."""

    @pytest.mark.asyncio
    async def test_wastage_accumulates(self, app_state, sql_store):
        """Test wastage adds up and leaves the stock quantity alone."""
        app_state.inventory.record_wastage("burger-bun", 2)
        await app_state.writer.drain()
        item =app_state.inventory.record_wastage("burger-bun", 1.5)
        await app_state.writer.drain()

        assert item.wastage == 3.5
        assert item.quantity == 40

        [remote] = [i for i in await sql_store.fetch_inventory_items() if i.id == "burger-bun"]
        assert remote.wastage == 3.5
        assert remote.quantity == 40

    @pytest.mark.asyncio
    async def test_negative_wastage_rejected(self, app_state):
        """Test negative wastage is refused."""
        with pytest.raises(NegativeQuantityError):
            app_state.inventory.record_wastage("burger-bun", -1)

        assert app_state.catalog.get_inventory_item("burger-bun").wastage == 0

    @pytest.mark.asyncio
    async def test_wastage_unknown_item(self, app_state):
        """Test unknown ids raise."""
        with pytest.raises(UnknownInventoryItemError):
            app_state.inventory.record_wastage("truffle", 1)
