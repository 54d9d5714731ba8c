"""Orchestration of communication from the transport / API layer to the session domain, notifications and persistence."""

import time
from typing import Awaitable, Callable, Optional

from src.api.actions import (
    HELP_TEXT,
    Action,
    CreateGameAction,
    HelpAction,
    HistoryAction,
    JoinTeamAction,
    MoveAction,
    RefreshAction,
    ResignAction,
)
from src.api.models import (
    ActionResult,
    GameStateResponse,
    HistoryResponse,
    MoveEntry,
    MoveResponse,
    VoteResponse,
)
from src.chess.oracle import RulesOracle
from src.core.config import Settings
from src.core.exceptions import GameError, GameStateError, IllegalMoveError
from src.core.logging import get_logger
from src.core.shared_types import Team
from src.game import moves, resignation, teams
from src.game.registry import SessionRegistry
from src.game.routing import ActorRoutingTable, resolve_session_for_actor
from src.game.session import ChannelBinding, GameSession, MoveRecord, PacingConfig
from src.notify.fanout import DeliveryReport, FanOut
from src.notify.view import legal_moves_text

logger = get_logger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Wall clock in milliseconds."""
    return time.time_ns() // 1_000_000


class SessionService:
    """
    The action surface of the game coordinator.
    ----

    Every public method returns an ActionResult. Domain failures (GameError) become failure results,
    anything else propagates.
    Public methods take the game key itself. Transport actions, which only know the chat they came
    from, go through `dispatch`, which resolves the chat to a game first.
    Mutations of one session run under that session's lock: the check-then-apply sequence of a move
    cannot interleave with another action on the same game.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        routing: ActorRoutingTable,
        oracle: RulesOracle,
        fanout: FanOut,
        settings: Settings,
        clock: Clock = system_clock,
    ) -> None:
        self.registry = registry
        self.routing = routing
        self.oracle = oracle
        self.fanout = fanout
        self.settings = settings
        self.clock = clock

    # -- ACTION SURFACE ---
    async def create_game(
        self,
        key: str,
        channel_name: Optional[str] = None,
        pacing: Optional[PacingConfig] = None,
        bind_channel: bool = True,
    ) -> ActionResult:
        """Start a new game for `key`. Fails if one is live already."""
        return await self._guarded(
            self._create_game(key, channel_name, pacing, bind_channel)
        )

    async def join_team(
        self, key: str, actor_id: str, team: Optional[Team] = None
    ) -> ActionResult:
        """Join (or switch to) a team. Without a team, the smaller one is picked."""
        return await self._guarded(self._join_team(key, actor_id, team))

    async def submit_move(self, key: str, actor_id: str, notation: str) -> ActionResult:
        return await self._guarded(self._submit_move(key, actor_id, notation))

    async def vote_resign(self, key: str, actor_id: str) -> ActionResult:
        return await self._guarded(self._vote_resign(key, actor_id))

    async def refresh(
        self, key: str, actor_id: str, target_id: Optional[str] = None
    ) -> ActionResult:
        """Send the current board again, to the actor unless another target (the channel) is given."""
        return await self._guarded(self._refresh(key, target_id or actor_id))

    async def get_history(self, key: str) -> ActionResult:
        return await self._guarded(self._get_history(key))

    async def legal_moves(self, key: str) -> ActionResult:
        return await self._guarded(self._legal_moves(key))

    async def list_games(self) -> ActionResult:
        games = [self._state_response(session) for session in self.registry.sessions()]
        return ActionResult(ok=True, games=games)

    async def dispatch(self, action: Action) -> ActionResult:
        """
        Run a decoded transport action.

        `action.key` is the chat the action came from: the channel of a game, or the private chat
        of an actor playing somewhere else.
        """
        match action:
            case HelpAction():
                return ActionResult(ok=True, message=HELP_TEXT)
            case CreateGameAction(key=key, actor_id=actor_id, channel_name=channel_name):
                # a private chat has the id of its actor, there is no channel to bind
                return await self.create_game(
                    key, channel_name=channel_name, bind_channel=key != actor_id
                )

        try:
            key = resolve_session_for_actor(
                self.registry, self.routing, action.actor_id, key_hint=action.key
            ).key
        except GameError as exc:
            return ActionResult.failure(exc)

        match action:
            case JoinTeamAction(actor_id=actor_id, team=team):
                return await self.join_team(key, actor_id, team)
            case MoveAction(actor_id=actor_id, notation=notation):
                return await self.submit_move(key, actor_id, notation)
            case ResignAction(actor_id=actor_id):
                return await self.vote_resign(key, actor_id)
            case RefreshAction(actor_id=actor_id):
                target = action.key if action.key == key else actor_id
                return await self.refresh(key, actor_id, target_id=target)
            case HistoryAction():
                return await self.get_history(key)

    def restore_sessions(self) -> int:
        """Load every stored game back into the registry. Returns the number restored."""
        if self.registry.repo is None:
            return 0

        restored = 0
        for record in self.registry.repo.list_games():
            if self.registry.contains(record.key):
                continue
            try:
                session = GameSession.from_record(record, self.oracle)
            except GameStateError:
                logger.exception("restore_failed", key=record.key)
                continue
            self.registry.add(session)
            for actor_id in session.attached_actors:
                if actor_id != session.key:
                    self.routing.attach(actor_id, session.key)
            restored += 1
        logger.info("sessions_restored", count=restored)
        return restored

    # -- ACTIONS ---
    async def _create_game(
        self,
        key: str,
        channel_name: Optional[str],
        pacing: Optional[PacingConfig],
        bind_channel: bool,
    ) -> ActionResult:
        binding = (
            ChannelBinding(channel_key=key, channel_name=channel_name)
            if bind_channel
            else None
        )
        async with self.registry.lock(key):
            session = self.registry.create_session(
                key,
                pacing or PacingConfig.from_settings(self.settings),
                channel_binding=binding,
            )
            persisted = self.registry.persist(session)
            report = await self.fanout.push(session)
            # the channel message id is only known after the first push
            persisted = self._persist_if_rerendered(session, None) and persisted
        return self._success(session, report, persisted)

    async def _join_team(
        self, key: str, actor_id: str, team: Optional[Team]
    ) -> ActionResult:
        async with self.registry.lock(key):
            session = self.registry.get(key)
            chosen = team or self._smaller_team(session)
            teams.join(session, self.routing, actor_id, chosen)
            persisted = self.registry.persist(session)
            report = await self.fanout.send_to(session, actor_id)
        return self._success(session, report, persisted)

    async def _submit_move(self, key: str, actor_id: str, notation: str) -> ActionResult:
        async with self.registry.lock(key):
            session = self.registry.get(key)
            try:
                outcome = moves.submit_move(
                    session, self.oracle, actor_id, notation, self.clock()
                )
            except GameError as exc:
                logger.info(
                    "move_rejected",
                    key=session.key,
                    actor=actor_id,
                    notation=notation,
                    reason=exc.kind,
                )
                if isinstance(exc, IllegalMoveError):
                    raise IllegalMoveError(
                        f"❌ Invalid move: {notation}\n\n"
                        f"Legal moves: {legal_moves_text(session, self.oracle)}"
                    ) from exc
                raise

            message_id = self._channel_message_id(session)
            persisted = True
            if not outcome.is_game_over:
                persisted = self.registry.persist(session)
            report = await self.fanout.push(session, actor_id)
            if outcome.is_game_over:
                report = self._merge(report, await self._terminate(session))
            else:
                persisted = self._persist_if_rerendered(session, message_id) and persisted
        if outcome.is_game_over:
            self.registry.discard_lock(key)

        result = self._success(session, report, persisted)
        result.move = MoveResponse(
            move=self._move_entry(outcome.move),
            is_check=outcome.is_check,
            game_over=outcome.is_game_over,
        )
        return result

    async def _vote_resign(self, key: str, actor_id: str) -> ActionResult:
        async with self.registry.lock(key):
            session = self.registry.get(key)
            tally = resignation.vote(session, actor_id)

            persisted = True
            if tally.resigned:
                report = await self.fanout.push(session, actor_id)
                report = self._merge(report, await self._terminate(session))
            else:
                persisted = self.registry.persist(session)
                report = await self.fanout.announce(
                    session,
                    f"🏳️ {actor_id} voted to resign for {tally.team.capitalize()} "
                    f"({tally.votes}/{tally.needed}).",
                )
        if tally.resigned:
            self.registry.discard_lock(key)

        result = self._success(session, report, persisted)
        result.vote = VoteResponse(
            team=tally.team, votes=tally.votes, needed=tally.needed, resigned=tally.resigned
        )
        return result

    async def _refresh(self, key: str, target_id: str) -> ActionResult:
        async with self.registry.lock(key):
            session = self.registry.get(key)
            message_id = self._channel_message_id(session)
            report = await self.fanout.send_to(session, target_id)
            persisted = self._persist_if_rerendered(session, message_id)
        return self._success(session, report, persisted)

    async def _get_history(self, key: str) -> ActionResult:
        session = self.registry.get(key)
        history = HistoryResponse(
            key=session.key,
            moves=[self._move_entry(move) for move in session.move_history],
        )
        return ActionResult(ok=True, state=self._state_response(session), history=history)

    async def _legal_moves(self, key: str) -> ActionResult:
        session = self.registry.get(key)
        legal = [move.to_notation() for move in self.oracle.legal_moves(session.position)]
        return ActionResult(
            ok=True, state=self._state_response(session), legal_moves=legal
        )

    # -- Internal helpers --
    async def _guarded(self, operation: Awaitable[ActionResult]) -> ActionResult:
        try:
            return await operation
        except GameError as exc:
            return ActionResult.failure(exc)

    async def _terminate(self, session: GameSession) -> DeliveryReport:
        """Final notice first, then the session disappears (registry, persisted copy, routing)."""
        report = await self.fanout.announce(session, session.result.describe())
        self.registry.remove(session.key)
        detached = self.routing.detach_key(session.key)
        logger.info(
            "session_terminated",
            key=session.key,
            result=session.result.kind,
            winner=session.result.winner,
            detached_actors=len(detached),
        )
        return report

    def _channel_message_id(self, session: GameSession) -> Optional[str]:
        binding = session.channel_binding
        return binding.last_rendered_message_id if binding else None

    def _persist_if_rerendered(
        self, session: GameSession, previous_message_id: Optional[str]
    ) -> bool:
        """The channel view moved to a new message: store its id, or the next edit targets a stale one."""
        if self._channel_message_id(session) == previous_message_id:
            return True
        return self.registry.persist(session)

    def _smaller_team(self, session: GameSession) -> Team:
        if len(session.black_team) < len(session.white_team):
            return Team.BLACK
        return Team.WHITE

    def _merge(self, first: DeliveryReport, second: DeliveryReport) -> DeliveryReport:
        return DeliveryReport(
            delivered=first.delivered + second.delivered,
            failed=first.failed + second.failed,
        )

    def _success(
        self, session: GameSession, report: DeliveryReport, persisted: bool = True
    ) -> ActionResult:
        return ActionResult(
            ok=True,
            state=self._state_response(session),
            delivery_degraded=report.degraded or not persisted,
        )

    def _state_response(self, session: GameSession) -> GameStateResponse:
        result = session.result
        return GameStateResponse(
            key=session.key,
            fen=self.oracle.serialize(session.position),
            side_to_move=self.oracle.side_to_move(session.position),
            white_team=list(session.white_team),
            black_team=list(session.black_team),
            move_number=session.move_number,
            round_end_time_ms=session.round_end_time_ms,
            captured_pieces={
                team: [piece.value for piece in pieces]
                for team, pieces in session.captured_pieces.items()
            },
            channel_bound=session.is_channel_bound,
            result=result.kind if result else None,
            winner=result.winner if result else None,
        )

    def _move_entry(self, move: MoveRecord) -> MoveEntry:
        return MoveEntry(
            sequence=move.sequence,
            actor=move.actor,
            from_square=move.from_square,
            to_square=move.to_square,
            san=move.san,
            captured=move.captured.value if move.captured else None,
            promotion=move.promotion.value if move.promotion else None,
            timestamp_ms=move.timestamp_ms,
        )
