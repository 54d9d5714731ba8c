"""
Typed actions, decoded once at the transport boundary.

Button callback data ("move_e2e4", "resign", ...) and text commands ("/move e2e4") both become
one of the Action models below; the service dispatches on the type, never on string prefixes.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Team


class CreateGameAction(BaseModel):
    type: Literal["create_game"] = "create_game"
    key: str
    actor_id: str
    channel_name: Optional[str] = None


class JoinTeamAction(BaseModel):
    type: Literal["join_team"] = "join_team"
    key: str
    actor_id: str
    team: Optional[Team] = None


class MoveAction(BaseModel):
    type: Literal["move"] = "move"
    key: str
    actor_id: str
    notation: str


class ResignAction(BaseModel):
    type: Literal["resign"] = "resign"
    key: str
    actor_id: str


class RefreshAction(BaseModel):
    type: Literal["refresh"] = "refresh"
    key: str
    actor_id: str


class HistoryAction(BaseModel):
    type: Literal["history"] = "history"
    key: str
    actor_id: str


class HelpAction(BaseModel):
    type: Literal["help"] = "help"
    key: str
    actor_id: str


Action = Annotated[
    Union[
        CreateGameAction,
        JoinTeamAction,
        MoveAction,
        ResignAction,
        RefreshAction,
        HistoryAction,
        HelpAction,
    ],
    Field(discriminator="type"),
]

HELP_TEXT = (
    "📚 Chess Bot Commands:\n\n"
    "/newgame - Start a new chess game\n"
    "/join [white|black] - Join a team of the current game\n"
    "/move <move> - Make a move (e.g., /move e2e4)\n"
    "/resign - Vote to resign for your team\n"
    "/refresh - Show the board again\n"
    "/history - Show all moves played\n"
    "/help - Show this help message\n\n"
    "📖 How to play:\n"
    "1. Start a game in the channel\n"
    "2. Pick a team: anyone can play, teams have no size limit\n"
    "3. Make moves with the buttons below the board\n"
    "4. After each full round the next one opens after a cooldown"
)

_MOVE_PREFIX = "move_"


def decode_callback(data: str, actor_id: str, chat_id: str) -> Action:
    """Inline button payload -> Action. The chat the button lives in is the key hint."""
    common = {"key": chat_id, "actor_id": actor_id}

    if data.startswith(_MOVE_PREFIX):
        notation = data.removeprefix(_MOVE_PREFIX)
        if not notation:
            raise InvalidRequestError("Move button without a move.")
        return MoveAction(notation=notation, **common)

    match data:
        case "start_newgame":
            return CreateGameAction(**common)
        case "start_join":
            return JoinTeamAction(**common)
        case "join_white":
            return JoinTeamAction(team=Team.WHITE, **common)
        case "join_black":
            return JoinTeamAction(team=Team.BLACK, **common)
        case "resign":
            return ResignAction(**common)
        case "refresh":
            return RefreshAction(**common)
        case "history":
            return HistoryAction(**common)
        case "home" | "start_help":
            return HelpAction(**common)
    raise InvalidRequestError(f"Unknown button: {data!r}")


def decode_command(text: str, actor_id: str, chat_id: str) -> Action:
    """'/move e2e4' style text -> Action."""
    parts = text.strip().split()
    if not parts or not parts[0].startswith("/"):
        raise InvalidRequestError(f"Not a command: {text!r}")

    # "/move@SomeBot e2e4" in group chats
    command = parts[0][1:].split("@", 1)[0].lower()
    args = parts[1:]
    common = {"key": chat_id, "actor_id": actor_id}

    match command, args:
        case "newgame", _:
            return CreateGameAction(**common)
        case "join", []:
            return JoinTeamAction(**common)
        case "join", [team, *_] if team.lower() in [t.value for t in Team]:
            return JoinTeamAction(team=Team(team.lower()), **common)
        case "move", [notation, *_]:
            return MoveAction(notation=notation, **common)
        case "resign", _:
            return ResignAction(**common)
        case "refresh", _:
            return RefreshAction(**common)
        case "history", _:
            return HistoryAction(**common)
        case "help" | "start", _:
            return HelpAction(**common)
    raise InvalidRequestError(f"Cannot interpret command: {text!r}")
