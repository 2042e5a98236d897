"""Backend sync endpoints: manual refresh and persistence warnings."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.core.dependencies import get_app_state
from app.core.errors import RemoteFetchError
from app.services.state import AppState


router = APIRouter()
logger = logging.getLogger(__name__)


class WarningResponse(BaseModel):
    """Persistence warning response model."""
    index: int
    stage: str
    subject: Optional[str] = None
    message: str


class RefreshResponse(BaseModel):
    """Refresh result."""
    menu_items: int
    inventory_items: int
    orders: int


@router.get("/api/warnings", response_model=List[WarningResponse])
async def list_warnings(after: int = 0, state: AppState = Depends(get_app_state)):
    """Persistence warnings reported after the first ``after`` ones."""
    start = max(after, 0)
    return [
        WarningResponse(
            index=start + offset,
            stage=warning.stage,
            subject=warning.subject,
            message=str(warning),
        )
        for offset, warning in enumerate(state.warnings.since(start))
    ]


@router.post("/api/catalog/refresh", response_model=RefreshResponse)
async def refresh_catalog(state: AppState = Depends(get_app_state)):
    """Re-fetch menu, inventory and orders from the backend."""
    try:
        await state.catalog_manager.refresh()
    except RemoteFetchError as e:
        logger.error(f"[SYNC] Refresh failed - {e}")
        raise HTTPException(status_code=503, detail=str(e))

    return RefreshResponse(
        menu_items=len(state.catalog.menu_items),
        inventory_items=len(state.catalog.inventory_items),
        orders=len(state.history),
    )
