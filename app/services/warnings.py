"""Append-only channel for remote persistence warnings."""
import logging
from typing import Callable, List, Tuple

from app.core.errors import RemotePersistenceWarning

logger = logging.getLogger(__name__)

WarningHandler = Callable[[RemotePersistenceWarning], None]


class WarningSink:
    """
    Reporting capability handed to background writes.

    It only lets a task append a warning. Tasks never receive a handle on the
    state they were persisting, so a failed write cannot roll anything back.
    """

    def __init__(self, channel: "WarningChannel"):
        self._channel = channel

    def report(self, warning: RemotePersistenceWarning) -> None:
        self._channel.report(warning)


class WarningChannel:
    """Collects persistence warnings and fans them out to subscribers."""

    def __init__(self) -> None:
        self._warnings: List[RemotePersistenceWarning] = []
        self._handlers: List[WarningHandler] = []

    def report(self, warning: RemotePersistenceWarning) -> None:
        """Record a warning and notify subscribers."""
        self._warnings.append(warning)
        logger.warning(
            f"[WARNINGS] {warning} (subject: {warning.subject or 'n/a'})"
        )
        for handler in list(self._handlers):
            try:
                handler(warning)
            except Exception:
                logger.exception("[WARNINGS] Warning handler failed")

    def subscribe(self, handler: WarningHandler) -> None:
        self._handlers.append(handler)

    def sink(self) -> WarningSink:
        return WarningSink(self)

    @property
    def warnings(self) -> Tuple[RemotePersistenceWarning, ...]:
        return tuple(self._warnings)

    def since(self, index: int) -> List[RemotePersistenceWarning]:
        """Warnings reported after the first ``index`` ones."""
        return self._warnings[max(index, 0):]

    def __len__(self) -> int:
        return len(self._warnings)
