"""Resignation by majority vote of a team."""

import math
from dataclasses import dataclass
from typing import Optional

from src.chess.oracle import GameResult
from src.core.exceptions import AlreadyVotedError, NotOnAnyTeamError
from src.core.logging import get_logger
from src.core.shared_types import ResultKind, Team
from src.game.session import GameSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class VoteTally:
    team: Team
    votes: int
    needed: int
    result: Optional[GameResult] = None

    @property
    def resigned(self) -> bool:
        return self.result is not None


def majority_needed(team_size: int) -> int:
    return math.ceil(team_size / 2)


def tally(session: GameSession, team: Team) -> VoteTally:
    """Team size is read now, not frozen at the first vote."""
    return VoteTally(
        team=team,
        votes=len(session.resign_votes[team]),
        needed=majority_needed(len(session.members(team))),
    )


def vote(session: GameSession, actor_id: str) -> VoteTally:
    """
    Record a resign vote for the actor's team.
    Reaching the majority sets the session result to Resigned(team). Terminating is up to the caller.
    """
    team = session.team_of(actor_id)
    if team is None:
        raise NotOnAnyTeamError(f"{actor_id} is not on a team and cannot vote to resign.")

    if actor_id in session.resign_votes[team]:
        raise AlreadyVotedError(
            f"{actor_id} already voted to resign.", tally=tally(session, team)
        )

    session.resign_votes[team].add(actor_id)
    current = tally(session, team)
    logger.info(
        "resign_vote",
        key=session.key,
        actor=actor_id,
        team=team,
        votes=current.votes,
        needed=current.needed,
    )
    if current.votes < current.needed:
        return current

    result = GameResult(ResultKind.RESIGNED, winner=team.opponent)
    session.result = result
    return VoteTally(team=team, votes=current.votes, needed=current.needed, result=result)
