"""RulesOracle implemented with python-chess. Positions are chess.Board objects."""

import re
from typing import Optional

import chess

from src.chess.oracle import GameResult, LegalMove, MoveApplied
from src.core.exceptions import GameStateError, IllegalMoveError
from src.core.shared_types import PieceType, ResultKind, Team

# e2e4, e7e8q (after stripping "=" from the button form e7e8=q)
_COORDINATE_PATTERN = re.compile(r"[a-h][1-8][a-h][1-8][qrbn]?")


def _piece_type(piece_type: Optional[chess.PieceType]) -> Optional[PieceType]:
    if piece_type is None:
        return None
    return PieceType(chess.piece_name(piece_type))


def _team(color: chess.Color) -> Team:
    return Team.WHITE if color == chess.WHITE else Team.BLACK


class PythonChessOracle:
    """Thin adapter: python-chess answers every rules question, we only translate the types."""

    def new_position(self) -> chess.Board:
        return chess.Board()

    def is_over(self, position: chess.Board) -> bool:
        return position.is_game_over()

    def outcome(self, position: chess.Board) -> Optional[GameResult]:
        outcome = position.outcome()
        if outcome is None:
            return None
        if outcome.termination == chess.Termination.CHECKMATE:
            return GameResult(ResultKind.CHECKMATE, winner=_team(outcome.winner))
        if outcome.termination == chess.Termination.STALEMATE:
            return GameResult(ResultKind.STALEMATE)
        # insufficient material, fifty moves, repetition ...
        return GameResult(ResultKind.DRAW)

    def legal_moves(self, position: chess.Board) -> list[LegalMove]:
        return [
            LegalMove(
                from_square=chess.square_name(move.from_square),
                to_square=chess.square_name(move.to_square),
                promotion=_piece_type(move.promotion),
            )
            for move in position.legal_moves
        ]

    def apply_move(self, position: chess.Board, notation: str) -> MoveApplied:
        move = self._parse(position, notation)
        if move not in position.legal_moves:
            raise IllegalMoveError(f"Invalid move: {notation}")

        captured = None
        if position.is_en_passant(move):
            captured = PieceType.PAWN
        elif position.is_capture(move):
            captured = _piece_type(position.piece_type_at(move.to_square))
        san = position.san(move)

        new_position = position.copy()
        new_position.push(move)
        return MoveApplied(
            position=new_position,
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            san=san,
            captured=captured,
            promotion=_piece_type(move.promotion),
            is_check=new_position.is_check(),
        )

    def side_to_move(self, position: chess.Board) -> Team:
        return _team(position.turn)

    def is_check(self, position: chess.Board) -> bool:
        return position.is_check()

    def serialize(self, position: chess.Board) -> str:
        return position.fen()

    def deserialize(self, text: str) -> chess.Board:
        try:
            return chess.Board(text)
        except ValueError as exc:
            raise GameStateError(f"Cannot restore position from {text!r}") from exc

    # -- PRIVATE HELPERS ---
    def _parse(self, position: chess.Board, notation: str) -> chess.Move:
        """Coordinate pair (with optional promotion) first, SAN second."""
        text = notation.strip()
        coordinates = text.replace("=", "").lower()
        try:
            if _COORDINATE_PATTERN.fullmatch(coordinates):
                move = chess.Move.from_uci(coordinates)
                return self._default_promotion(position, move)
            return position.parse_san(text)
        except ValueError as exc:
            raise IllegalMoveError(f"Invalid move: {notation}") from exc

    def _default_promotion(self, position: chess.Board, move: chess.Move) -> chess.Move:
        """Pawn push to the last rank without a suffix becomes a queen."""
        if move.promotion is not None or move in position.legal_moves:
            return move
        queen = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        if queen in position.legal_moves:
            return queen
        return move
