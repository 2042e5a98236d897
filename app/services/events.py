"""In-process change events."""
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Any], None]

CART_CHANGED = "cart.changed"
MENU_CHANGED = "menu.changed"
INVENTORY_CHANGED = "inventory.changed"
ORDERS_CHANGED = "orders.changed"


class EventBus:
    """
    Synchronous fan-out of state change notifications.

    Handlers run inline in subscription order. A failing handler is logged
    and does not stop the others or the mutation that emitted the event.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[ChangeHandler]] = {}

    def subscribe(self, event_name: str, handler: ChangeHandler) -> None:
        """Register a handler for an event name."""
        self._subscribers.setdefault(event_name, []).append(handler)

    def emit(self, event_name: str, payload: Any = None) -> None:
        """Notify every handler subscribed to ``event_name``."""
        subscribers = list(self._subscribers.get(event_name, ()))
        if not subscribers:
            logger.debug(f"[EVENTS] No subscribers for {event_name}")
            return
        for handler in subscribers:
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"[EVENTS] Subscriber failed for {event_name} - "
                    f"Error: {type(e).__name__}: {str(e)}",
                    exc_info=True,
                )
