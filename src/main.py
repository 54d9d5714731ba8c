"""Application factory: wires settings, logging, persistence, rules oracle and notifier into the service."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.models import ActionResult
from src.api.routes import STATUS_CODES, callbacks_router, router
from src.chess.python_chess_oracle import PythonChessOracle
from src.core.config import Settings, get_settings
from src.core.exceptions import InvalidRequestError
from src.core.logging import get_logger, setup_logging
from src.db.database import build_engine, build_session_factory
from src.db.sql_repository import SQLGameRepository
from src.game.registry import SessionRegistry
from src.game.routing import ActorRoutingTable
from src.notify.fanout import FanOut
from src.notify.notifier import LoggingNotifier, Notifier
from src.services.session_service import SessionService, system_clock

logger = get_logger(__name__)


def build_service(
    settings: Settings, notifier: Optional[Notifier] = None
) -> SessionService:
    engine = build_engine(settings)
    db_session = build_session_factory(engine)()
    oracle = PythonChessOracle()
    registry = SessionRegistry(oracle, SQLGameRepository(db_session))
    fanout = FanOut(
        notifier or LoggingNotifier(),
        oracle,
        clock=system_clock,
        recent_moves=settings.recent_moves_shown,
        buttons_per_row=settings.move_buttons_per_row,
    )
    return SessionService(registry, ActorRoutingTable(), oracle, fanout, settings)


def create_app(
    settings: Optional[Settings] = None, notifier: Optional[Notifier] = None
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service = build_service(settings, notifier)
        service.restore_sessions()
        app.state.service = service
        logger.info("chess_coordinator_started", games=len(service.registry.keys()))
        yield
        service.registry.repo.db.close()

    app = FastAPI(title="Team chess coordinator", lifespan=lifespan)
    app.include_router(router)
    app.include_router(callbacks_router)

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(
        request: Request, exc: InvalidRequestError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=STATUS_CODES[exc.kind],
            content=ActionResult.failure(exc).model_dump(mode="json"),
        )

    return app
