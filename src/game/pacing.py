"""
Round pacing: after each full round (one move per side) play pauses for a cooldown.
The cooldown grows linearly: base delay for round 1, one more increment for every round after that.

This is a gate evaluated on each move attempt, not a timer. Nothing fires when a cooldown expires.
"""

import math

from src.game.session import GameSession, PacingConfig


def required_delay_seconds(pacing: PacingConfig, round_number: int) -> int:
    """Round 1 waits the base delay (no increment), round n adds (n - 1) increments."""
    return pacing.base_delay_seconds + pacing.increment_seconds * (round_number - 1)


def _elapsed_and_required(session: GameSession, now_ms: int) -> tuple[float, int] | None:
    """None when the gate does not apply."""
    if not session.pacing.enabled:
        return None
    # odd: the round is in progress, the second side may answer immediately
    if session.move_number % 2 == 1:
        return None
    if session.round_end_time_ms is None:
        return None

    round_number = session.move_number // 2
    elapsed = (now_ms - session.round_end_time_ms) / 1000
    return elapsed, required_delay_seconds(session.pacing, round_number)


def is_move_allowed(session: GameSession, now_ms: int) -> bool:
    timing = _elapsed_and_required(session, now_ms)
    if timing is None:
        return True
    elapsed, required = timing
    return elapsed >= required


def remaining_seconds(session: GameSession, now_ms: int) -> int:
    timing = _elapsed_and_required(session, now_ms)
    if timing is None:
        return 0
    elapsed, required = timing
    return max(0, math.ceil(required - elapsed))
