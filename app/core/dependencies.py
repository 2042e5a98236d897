"""FastAPI dependencies."""
from fastapi import Request

from app.services.state import AppState


def get_app_state(request: Request) -> AppState:
    """Get the application state built at startup."""
    return request.app.state.pos
