"""
Snapshot of a session as the transport shows it: caption text, move buttons, control buttons.
Rendering the board image is left to the transport; this module only decides WHAT is shown.
"""

from dataclasses import dataclass, field
from src.chess.oracle import RulesOracle
from src.core.shared_types import PIECE_VALUES, Team
from src.game.pacing import remaining_seconds
from src.game.session import GameSession

CONTROL_BUTTONS: tuple[tuple[str, str], ...] = (
    ("🏠 Home", "home"),
    ("🔄 Refresh", "refresh"),
    ("❌ Resign", "resign"),
)


@dataclass(frozen=True)
class Button:
    label: str
    callback_data: str


@dataclass(frozen=True)
class BoardView:
    key: str
    fen: str
    side_to_move: Team
    caption: str
    white_team: list[str]
    black_team: list[str]
    score: dict[Team, int]
    move_rows: list[list[Button]] = field(default_factory=list)
    controls: list[Button] = field(default_factory=list)
    is_game_over: bool = False


def material_score(session: GameSession) -> dict[Team, int]:
    """Points won by each side: value of the opponent's pieces it captured."""
    return {
        team: sum(PIECE_VALUES[piece] for piece in session.captured_pieces[team.opponent])
        for team in Team
    }


def status_line(session: GameSession, oracle: RulesOracle) -> str:
    result = session.result or oracle.outcome(session.position)
    if result is not None:
        return result.describe()
    status = f"Current turn: {oracle.side_to_move(session.position).capitalize()}"
    if oracle.is_check(session.position):
        status += " ⚠️ (Check!)"
    return status


def build_caption(
    session: GameSession, oracle: RulesOracle, now_ms: int, recent_moves: int = 5
) -> str:
    lines = [status_line(session, oracle)]

    wait = remaining_seconds(session, now_ms)
    if wait > 0 and session.result is None:
        lines.append(f"⏳ Next round opens in {wait}s")

    lines.append("")
    lines.append(f"⚪ White: {', '.join(session.white_team) or '-'}")
    lines.append(f"⚫ Black: {', '.join(session.black_team) or '-'}")
    score = material_score(session)
    lines.append(f"Score: White {score[Team.WHITE]} · Black {score[Team.BLACK]}")

    if session.move_history:
        lines.append("")
        lines.append("📜 Recent moves:")
        for move in session.move_history[-recent_moves:]:
            lines.append(f"{move.sequence}. {move.actor}: {move.from_square} → {move.to_square}")
        earlier = len(session.move_history) - recent_moves
        if earlier > 0:
            lines.append(f"... ({earlier} earlier moves)")
    return "\n".join(lines)


def move_buttons(
    session: GameSession, oracle: RulesOracle, per_row: int = 3
) -> list[list[Button]]:
    if session.result is not None or oracle.is_over(session.position):
        return []
    buttons = [
        Button(
            label=f"{move.from_square}→{move.to_square}",
            callback_data=f"move_{move.to_notation()}",
        )
        for move in oracle.legal_moves(session.position)
    ]
    return [buttons[i : i + per_row] for i in range(0, len(buttons), per_row)]


def legal_moves_text(session: GameSession, oracle: RulesOracle) -> str:
    """Plain list for text replies, e.g. after an invalid /move."""
    moves = oracle.legal_moves(session.position)
    if not moves:
        return "No legal moves available."
    return ", ".join(
        f"{move.from_square}{move.to_square}"
        + (f"={move.to_notation()[-1].upper()}" if move.promotion else "")
        for move in moves
    )


def build_board_view(
    session: GameSession,
    oracle: RulesOracle,
    now_ms: int,
    recent_moves: int = 5,
    per_row: int = 3,
) -> BoardView:
    return BoardView(
        key=session.key,
        fen=oracle.serialize(session.position),
        side_to_move=oracle.side_to_move(session.position),
        caption=build_caption(session, oracle, now_ms, recent_moves),
        white_team=list(session.white_team),
        black_team=list(session.black_team),
        score=material_score(session),
        move_rows=move_buttons(session, oracle, per_row),
        controls=[Button(label, data) for label, data in CONTROL_BUTTONS],
        is_game_over=session.result is not None or oracle.is_over(session.position),
    )
