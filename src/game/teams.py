"""Team membership: an actor plays for White, for Black, or for nobody. Never both."""

from enum import StrEnum

from src.core.logging import get_logger
from src.core.shared_types import Team
from src.game.routing import ActorRoutingTable
from src.game.session import GameSession

logger = get_logger(__name__)


class JoinOutcome(StrEnum):
    JOINED = "joined"
    SWITCHED = "switched"
    ALREADY_MEMBER = "already member"


def join(
    session: GameSession,
    routing: ActorRoutingTable,
    actor_id: str,
    team: Team,
) -> JoinOutcome:
    """
    Put `actor_id` on `team`.
    ----

    - already on `team` -> nothing changes
    - on the other team -> removed there first (together with any resign vote cast for that team)
    - otherwise -> appended at the end of the team
    No capacity limit.
    """
    current = session.team_of(actor_id)

    if current == team:
        outcome = JoinOutcome.ALREADY_MEMBER
    elif current is not None:
        session.members(current).remove(actor_id)
        session.resign_votes[current].discard(actor_id)
        session.members(team).append(actor_id)
        outcome = JoinOutcome.SWITCHED
    else:
        session.members(team).append(actor_id)
        outcome = JoinOutcome.JOINED

    session.attach(actor_id)
    # acting from the channel itself needs no routing entry
    if actor_id != session.key:
        routing.attach(actor_id, session.key)

    logger.info(
        "team_joined", key=session.key, actor=actor_id, team=team, outcome=outcome
    )
    return outcome
