"""Unit tests for src/game/resignation.py"""

import pytest

from src.chess.python_chess_oracle import PythonChessOracle
from src.core.exceptions import AlreadyVotedError, NotOnAnyTeamError
from src.core.shared_types import ResultKind, Team
from src.game.resignation import majority_needed, vote
from src.game.session import GameSession


@pytest.fixture
def session(oracle: PythonChessOracle) -> GameSession:
    return GameSession(
        key="ch1",
        position=oracle.new_position(),
        white_team=["alice", "carol", "dave"],
        black_team=["bob"],
    )


@pytest.mark.parametrize(
    "team_size, needed", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3)]
)
def test_majority_needed(team_size: int, needed: int) -> None:
    assert majority_needed(team_size) == needed


def test_team_of_three_needs_two_votes(session: GameSession) -> None:
    first = vote(session, "alice")
    assert first.votes == 1
    assert first.needed == 2
    assert not first.resigned
    assert session.result is None

    second = vote(session, "carol")
    assert second.resigned
    assert second.result.kind == ResultKind.RESIGNED
    assert second.result.loser == Team.WHITE
    assert second.result.winner == Team.BLACK
    assert session.result == second.result


def test_single_player_team_resigns_at_once(session: GameSession) -> None:
    tally = vote(session, "bob")
    assert tally.resigned
    assert tally.result.winner == Team.WHITE


def test_duplicate_vote_changes_nothing(session: GameSession) -> None:
    vote(session, "alice")
    with pytest.raises(AlreadyVotedError) as exc_info:
        vote(session, "alice")

    assert exc_info.value.tally.votes == 1
    assert exc_info.value.tally.needed == 2
    assert session.resign_votes[Team.WHITE] == {"alice"}
    assert session.result is None


def test_non_member_cannot_vote(session: GameSession) -> None:
    with pytest.raises(NotOnAnyTeamError):
        vote(session, "mallory")
    assert session.resign_votes == {Team.WHITE: set(), Team.BLACK: set()}


def test_team_size_is_read_at_vote_time(session: GameSession) -> None:
    """Team grows after the first vote: more votes are needed."""
    vote(session, "alice")
    session.white_team.extend(["erin", "frank"])

    tally = vote(session, "carol")
    assert tally.needed == 3
    assert not tally.resigned

    assert vote(session, "dave").resigned
