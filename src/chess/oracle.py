"""
Contract between the session domain and whatever knows the rules of chess.

The session holds a position by reference and only ever looks at it through these queries.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from src.core.shared_types import PieceType, ResultKind, Team

Position = Any


@dataclass(frozen=True)
class LegalMove:
    from_square: str
    to_square: str
    promotion: Optional[PieceType] = None

    def to_notation(self) -> str:
        """Coordinate notation with '=' promotion suffix, e.g. e2e4 or e7e8=q"""
        notation = f"{self.from_square}{self.to_square}"
        if self.promotion:
            notation += f"={_PROMOTION_LETTERS[self.promotion]}"
        return notation


@dataclass(frozen=True)
class MoveApplied:
    """Result of a legal move. `position` is a new position, the old one is left untouched."""

    position: Position
    from_square: str
    to_square: str
    san: str
    captured: Optional[PieceType] = None
    promotion: Optional[PieceType] = None
    is_check: bool = False


@dataclass(frozen=True)
class GameResult:
    kind: ResultKind
    winner: Optional[Team] = None

    @property
    def loser(self) -> Optional[Team]:
        return self.winner.opponent if self.winner else None

    def describe(self) -> str:
        match self.kind:
            case ResultKind.CHECKMATE:
                return f"Checkmate! {self.winner.capitalize()} wins!"
            case ResultKind.RESIGNED:
                return f"{self.loser.capitalize()} resigned. {self.winner.capitalize()} wins!"
            case ResultKind.STALEMATE:
                return "Stalemate!"
            case ResultKind.DRAW:
                return "Game is a draw!"


class RulesOracle(Protocol):
    """Legality and game-over queries over an opaque position."""

    def new_position(self) -> Position: ...

    def is_over(self, position: Position) -> bool: ...

    def outcome(self, position: Position) -> Optional[GameResult]:
        """None while the game is in progress."""
        ...

    def legal_moves(self, position: Position) -> list[LegalMove]: ...

    def apply_move(self, position: Position, notation: str) -> MoveApplied:
        """Raise IllegalMoveError if the notation cannot be parsed or is not legal."""
        ...

    def side_to_move(self, position: Position) -> Team: ...

    def is_check(self, position: Position) -> bool: ...

    def serialize(self, position: Position) -> str: ...

    def deserialize(self, text: str) -> Position: ...


_PROMOTION_LETTERS: dict[PieceType, str] = {
    PieceType.QUEEN: "q",
    PieceType.ROOK: "r",
    PieceType.BISHOP: "b",
    PieceType.KNIGHT: "n",
}
