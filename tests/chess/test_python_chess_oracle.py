"""Unit tests for src/chess/python_chess_oracle.py"""

import pytest

from src.chess.oracle import GameResult, LegalMove
from src.chess.python_chess_oracle import PythonChessOracle
from src.core.exceptions import GameStateError, IllegalMoveError
from src.core.shared_types import PieceType, ResultKind, Team

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
PROMOTION_FEN = "8/P7/8/8/8/8/8/k6K w - - 0 1"
STALEMATE_FEN = "k7/8/1Q6/8/8/8/8/7K b - - 0 1"
BARE_KINGS_FEN = "8/8/8/8/8/8/8/K6k w - - 0 1"


def play(oracle: PythonChessOracle, *notations: str):
    position = oracle.new_position()
    for notation in notations:
        position = oracle.apply_move(position, notation).position
    return position


def test_new_position(oracle: PythonChessOracle) -> None:
    position = oracle.new_position()
    assert oracle.serialize(position) == STARTING_FEN
    assert oracle.side_to_move(position) == Team.WHITE
    assert not oracle.is_over(position)
    assert oracle.outcome(position) is None
    assert len(oracle.legal_moves(position)) == 20


def test_apply_coordinate_move(oracle: PythonChessOracle) -> None:
    position = oracle.new_position()
    applied = oracle.apply_move(position, "e2e4")

    assert applied.from_square == "e2"
    assert applied.to_square == "e4"
    assert applied.san == "e4"
    assert applied.captured is None
    assert applied.promotion is None
    assert not applied.is_check
    assert oracle.side_to_move(applied.position) == Team.BLACK


def test_apply_move_leaves_original_position_untouched(
    oracle: PythonChessOracle,
) -> None:
    position = oracle.new_position()
    _ = oracle.apply_move(position, "e2e4")
    assert oracle.serialize(position) == STARTING_FEN


@pytest.mark.parametrize("notation", ["Nf3", "g1f3", "G1F3", " g1f3 "])
def test_accepted_notations(oracle: PythonChessOracle, notation: str) -> None:
    """SAN, coordinates in either case, surrounding whitespace."""
    applied = oracle.apply_move(oracle.new_position(), notation)
    assert (applied.from_square, applied.to_square) == ("g1", "f3")


@pytest.mark.parametrize("notation", ["e2e5", "e7e5", "hello", "z9z9", "Ke2"])
def test_rejected_notations(oracle: PythonChessOracle, notation: str) -> None:
    """Unparseable and illegal moves are both IllegalMoveError."""
    with pytest.raises(IllegalMoveError):
        oracle.apply_move(oracle.new_position(), notation)


def test_capture_is_reported(oracle: PythonChessOracle) -> None:
    position = play(oracle, "e2e4", "d7d5")
    applied = oracle.apply_move(position, "e4d5")
    assert applied.captured == PieceType.PAWN
    assert applied.san == "exd5"


def test_en_passant_capture_is_reported(oracle: PythonChessOracle) -> None:
    position = play(oracle, "e2e4", "a7a6", "e4e5", "d7d5")
    applied = oracle.apply_move(position, "e5d6")
    assert applied.captured == PieceType.PAWN


def test_promotion_defaults_to_queen(oracle: PythonChessOracle) -> None:
    position = oracle.deserialize(PROMOTION_FEN)
    applied = oracle.apply_move(position, "a7a8")
    assert applied.promotion == PieceType.QUEEN
    assert applied.san == "a8=Q+"
    assert applied.is_check


def test_promotion_with_button_suffix(oracle: PythonChessOracle) -> None:
    position = oracle.deserialize(PROMOTION_FEN)
    applied = oracle.apply_move(position, "a7a8=n")
    assert applied.promotion == PieceType.KNIGHT


def test_legal_moves_include_every_promotion(oracle: PythonChessOracle) -> None:
    position = oracle.deserialize(PROMOTION_FEN)
    promotions = {
        move.promotion for move in oracle.legal_moves(position) if move.from_square == "a7"
    }
    assert promotions == {
        PieceType.QUEEN,
        PieceType.ROOK,
        PieceType.BISHOP,
        PieceType.KNIGHT,
    }


def test_checkmate_outcome(oracle: PythonChessOracle) -> None:
    """Fool's mate: Black wins."""
    position = play(oracle, "f2f3", "e7e5", "g2g4")
    applied = oracle.apply_move(position, "d8h4")

    assert applied.is_check
    assert oracle.is_over(applied.position)
    assert oracle.outcome(applied.position) == GameResult(
        ResultKind.CHECKMATE, winner=Team.BLACK
    )


def test_stalemate_outcome(oracle: PythonChessOracle) -> None:
    position = oracle.deserialize(STALEMATE_FEN)
    assert oracle.is_over(position)
    assert oracle.outcome(position) == GameResult(ResultKind.STALEMATE)
    assert oracle.legal_moves(position) == []


def test_insufficient_material_is_a_draw(oracle: PythonChessOracle) -> None:
    position = oracle.deserialize(BARE_KINGS_FEN)
    assert oracle.outcome(position) == GameResult(ResultKind.DRAW)


def test_invalid_fen(oracle: PythonChessOracle) -> None:
    with pytest.raises(GameStateError):
        oracle.deserialize("not a fen at all")


def test_legal_move_notation() -> None:
    assert LegalMove("e2", "e4").to_notation() == "e2e4"
    assert LegalMove("e7", "e8", PieceType.QUEEN).to_notation() == "e7e8=q"
    assert LegalMove("b2", "a1", PieceType.KNIGHT).to_notation() == "b2a1=n"
