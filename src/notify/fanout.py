"""
Push a session's new state to everyone watching it.

Order: the acting actor (with controls), the channel view (no controls, edited in place),
then every other attached actor (with controls).
A failed delivery is logged and reported, never raised: the move already happened.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from src.chess.oracle import RulesOracle
from src.core.exceptions import NotificationError
from src.core.logging import get_logger
from src.game.session import GameSession
from src.notify.notifier import Notifier
from src.notify.view import BoardView, build_board_view

logger = get_logger(__name__)


@dataclass
class DeliveryReport:
    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return len(self.failed) > 0


class FanOut:
    def __init__(
        self,
        notifier: Notifier,
        oracle: RulesOracle,
        clock: Callable[[], int],
        recent_moves: int = 5,
        buttons_per_row: int = 3,
    ) -> None:
        self.notifier = notifier
        self.oracle = oracle
        self.clock = clock
        self.recent_moves = recent_moves
        self.buttons_per_row = buttons_per_row

    def view(self, session: GameSession) -> BoardView:
        return build_board_view(
            session,
            self.oracle,
            now_ms=self.clock(),
            recent_moves=self.recent_moves,
            per_row=self.buttons_per_row,
        )

    async def push(
        self, session: GameSession, actor_id: Optional[str] = None
    ) -> DeliveryReport:
        report = DeliveryReport()
        view = self.view(session)
        channel_key = session.channel_binding.channel_key if session.channel_binding else None

        if actor_id is not None and actor_id != channel_key:
            await self._send(report, actor_id, view, show_controls=True)

        if session.channel_binding is not None:
            await self._update_channel(report, session, view)

        for attached in session.attached_actors:
            if attached in (actor_id, channel_key):
                continue
            await self._send(report, attached, view, show_controls=True)

        if report.degraded:
            logger.warning("delivery_degraded", key=session.key, failed=report.failed)
        return report

    async def send_to(self, session: GameSession, target_id: str) -> DeliveryReport:
        """Board for a single target (refresh)."""
        report = DeliveryReport()
        channel_key = session.channel_binding.channel_key if session.channel_binding else None
        view = self.view(session)
        if target_id == channel_key:
            await self._update_channel(report, session, view)
        else:
            await self._send(report, target_id, view, show_controls=True)
        return report

    async def announce(self, session: GameSession, text: str) -> DeliveryReport:
        report = DeliveryReport()
        targets: list[str] = []
        if session.channel_binding is not None:
            targets.append(session.channel_binding.channel_key)
        targets.extend(a for a in session.attached_actors if a not in targets)

        for target in targets:
            try:
                await self.notifier.send_text(target, text)
            except NotificationError:
                logger.exception("delivery_failed", key=session.key, target=target)
                report.failed.append(target)
            else:
                report.delivered.append(target)
        return report

    # -- PRIVATE HELPERS ---
    async def _send(
        self, report: DeliveryReport, target_id: str, view: BoardView, show_controls: bool
    ) -> Optional[str]:
        try:
            message_id = await self.notifier.render_and_send(target_id, view, show_controls)
        except NotificationError:
            logger.exception("delivery_failed", key=view.key, target=target_id)
            report.failed.append(target_id)
            return None
        report.delivered.append(target_id)
        return message_id

    async def _update_channel(
        self, report: DeliveryReport, session: GameSession, view: BoardView
    ) -> None:
        """Edit the channel message in place, fall back to a new message."""
        binding = session.channel_binding
        if binding.last_rendered_message_id is not None:
            try:
                message_id = await self.notifier.render_and_update(
                    binding.channel_key, binding.last_rendered_message_id, view
                )
            except NotificationError:
                logger.warning(
                    "channel_update_failed",
                    key=session.key,
                    message_id=binding.last_rendered_message_id,
                )
            else:
                report.delivered.append(binding.channel_key)
                if message_id is not None:
                    binding.last_rendered_message_id = message_id
                return

        message_id = await self._send(report, binding.channel_key, view, show_controls=False)
        if message_id is not None:
            binding.last_rendered_message_id = message_id
