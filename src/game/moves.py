"""
Turn & move pipeline
-----

All checks run before any mutation, in this order (the user-facing message differs per case):
1. game over?            -> SessionTerminalError
2. actor on a team?      -> NotOnAnyTeamError
3. round cooldown over?  -> PacingBlockedError
4. actor's team to move? -> WrongTeamError
5. legal?                -> IllegalMoveError (the oracle decides, unparseable or illegal alike)
"""

from dataclasses import dataclass
from typing import Optional

from src.chess.oracle import GameResult, RulesOracle
from src.core.exceptions import (
    NotOnAnyTeamError,
    PacingBlockedError,
    SessionTerminalError,
    WrongTeamError,
)
from src.core.logging import get_logger
from src.game.pacing import is_move_allowed, remaining_seconds
from src.game.session import GameSession, MoveRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class MoveOutcome:
    move: MoveRecord
    is_check: bool
    result: Optional[GameResult]

    @property
    def is_game_over(self) -> bool:
        return self.result is not None


def submit_move(
    session: GameSession,
    oracle: RulesOracle,
    actor_id: str,
    notation: str,
    now_ms: int,
) -> MoveOutcome:
    """Validate and apply a move for `actor_id`. Session state changes only if every check passed."""

    if session.is_terminated or oracle.is_over(session.position):
        raise SessionTerminalError("Game is over.")

    team = session.team_of(actor_id)
    if team is None:
        raise NotOnAnyTeamError(
            f"{actor_id} has not joined a team. Join White or Black first."
        )

    if not is_move_allowed(session, now_ms):
        raise PacingBlockedError(remaining_seconds(session, now_ms))

    side_to_move = oracle.side_to_move(session.position)
    if team != side_to_move:
        raise WrongTeamError(
            f"It is not your team's turn. Waiting for {side_to_move.capitalize()} to move."
        )

    applied = oracle.apply_move(session.position, notation.strip())

    # --- every check passed: mutate
    record = MoveRecord(
        sequence=len(session.move_history) + 1,
        actor=actor_id,
        from_square=applied.from_square,
        to_square=applied.to_square,
        san=applied.san,
        captured=applied.captured,
        promotion=applied.promotion,
        timestamp_ms=now_ms,
    )
    session.position = applied.position
    session.move_history.append(record)
    session.move_number += 1
    if session.move_number % 2 == 0:
        session.round_end_time_ms = now_ms
    if applied.captured is not None:
        session.captured_pieces[team.opponent].append(applied.captured)

    result = oracle.outcome(session.position)
    session.result = result
    logger.info(
        "move_applied",
        key=session.key,
        actor=actor_id,
        san=applied.san,
        move_number=session.move_number,
        result=result.kind if result else None,
    )
    return MoveOutcome(move=record, is_check=applied.is_check, result=result)
