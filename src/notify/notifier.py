"""Contract for the messaging transport. Delivery is best effort, at least once, unordered across targets."""

import itertools
from typing import Optional, Protocol

from src.core.logging import get_logger
from src.notify.view import BoardView

logger = get_logger(__name__)


class Notifier(Protocol):
    """
    Transport adapters raise NotificationError when a delivery fails.
    Returned message ids let the channel view be edited in place later on.
    """

    async def render_and_send(
        self, target_id: str, view: BoardView, show_controls: bool
    ) -> Optional[str]: ...

    async def render_and_update(
        self, target_id: str, message_id: str, view: BoardView
    ) -> Optional[str]: ...

    async def send_text(self, target_id: str, text: str) -> None: ...


class LoggingNotifier:
    """Default notifier when no transport is wired in: every delivery becomes a log event."""

    def __init__(self) -> None:
        self._message_ids = itertools.count(1)

    async def render_and_send(
        self, target_id: str, view: BoardView, show_controls: bool
    ) -> Optional[str]:
        message_id = str(next(self._message_ids))
        logger.info(
            "board_sent",
            target=target_id,
            key=view.key,
            fen=view.fen,
            controls=show_controls,
            message_id=message_id,
        )
        return message_id

    async def render_and_update(
        self, target_id: str, message_id: str, view: BoardView
    ) -> Optional[str]:
        logger.info("board_updated", target=target_id, key=view.key, message_id=message_id)
        return message_id

    async def send_text(self, target_id: str, text: str) -> None:
        logger.info("text_sent", target=target_id, text=text)
