"""HTTP routes. Thin: decode the request, call the service, map failure kinds to status codes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from src.api.actions import decode_callback, decode_command
from src.api.models import (
    ActionResult,
    ActorRequest,
    CallbackRequest,
    CommandRequest,
    CreateGameRequest,
    JoinTeamRequest,
    MoveRequest,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import ErrorKind
from src.game.session import PacingConfig
from src.services.session_service import SessionService

router = APIRouter(prefix="/games", tags=["games"])
callbacks_router = APIRouter(tags=["transport"])

STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.SESSION_TERMINAL: 409,
    ErrorKind.ALREADY_VOTED: 409,
    ErrorKind.NOT_ON_ANY_TEAM: 403,
    ErrorKind.WRONG_TEAM: 403,
    ErrorKind.PACING_BLOCKED: 429,
    ErrorKind.ILLEGAL_MOVE: 422,
    ErrorKind.INVALID_REQUEST: 422,
    ErrorKind.REPOSITORY: 503,
    ErrorKind.NOTIFICATION: 503,
}


def get_service(request: Request) -> SessionService:
    return request.app.state.service


ServiceDep = Annotated[SessionService, Depends(get_service)]


def _respond(result: ActionResult, response: Response) -> ActionResult:
    if not result.ok and result.error is not None:
        response.status_code = STATUS_CODES[result.error]
    return result


@router.get("")
async def list_games(service: ServiceDep) -> ActionResult:
    return await service.list_games()


@router.post("", status_code=201)
async def create_game(
    body: CreateGameRequest, service: ServiceDep, response: Response
) -> ActionResult:
    pacing = PacingConfig(**body.pacing.model_dump()) if body.pacing else None
    result = await service.create_game(
        body.key,
        channel_name=body.channel_name,
        pacing=pacing,
        bind_channel=body.bind_channel,
    )
    return _respond(result, response)


@router.post("/{key}/join")
async def join_team(
    key: str, body: JoinTeamRequest, service: ServiceDep, response: Response
) -> ActionResult:
    return _respond(await service.join_team(key, body.actor_id, body.team), response)


@router.post("/{key}/moves")
async def submit_move(
    key: str, body: MoveRequest, service: ServiceDep, response: Response
) -> ActionResult:
    return _respond(
        await service.submit_move(key, body.actor_id, body.notation), response
    )


@router.get("/{key}/moves")
async def legal_moves(key: str, service: ServiceDep, response: Response) -> ActionResult:
    return _respond(await service.legal_moves(key), response)


@router.post("/{key}/resign")
async def vote_resign(
    key: str, body: ActorRequest, service: ServiceDep, response: Response
) -> ActionResult:
    return _respond(await service.vote_resign(key, body.actor_id), response)


@router.post("/{key}/refresh")
async def refresh(
    key: str, body: ActorRequest, service: ServiceDep, response: Response
) -> ActionResult:
    return _respond(await service.refresh(key, body.actor_id), response)


@router.get("/{key}/history")
async def get_history(key: str, service: ServiceDep, response: Response) -> ActionResult:
    return _respond(await service.get_history(key), response)


@callbacks_router.post("/callbacks")
async def handle_callback(
    body: CallbackRequest, service: ServiceDep, response: Response
) -> ActionResult:
    """Inline button presses forwarded by the messaging transport."""
    try:
        action = decode_callback(body.data, body.actor_id, body.chat_id)
    except InvalidRequestError as exc:
        return _respond(ActionResult.failure(exc), response)
    return _respond(await service.dispatch(action), response)


@callbacks_router.post("/commands")
async def handle_command(
    body: CommandRequest, service: ServiceDep, response: Response
) -> ActionResult:
    """Slash commands ("/move e2e4") typed in a chat."""
    try:
        action = decode_command(body.text, body.actor_id, body.chat_id)
    except InvalidRequestError as exc:
        return _respond(ActionResult.failure(exc), response)
    return _respond(await service.dispatch(action), response)
