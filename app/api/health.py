"""Health check endpoint."""
import logging
from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_app_state
from app.services.state import AppState

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request, state: AppState = Depends(get_app_state)):
    """Health check endpoint."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {"status": "healthy", "pending_remote_writes": state.writer.pending}
