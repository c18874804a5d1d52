"""
Tic-tac-toe API и WebSocket.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .bot import choose_move
from .config import get_config
from .constants import BOARD_SIZE
from .registry import SessionRegistry
from .rules import Mark
from .sweeper import LifecycleSweeper
from .ws_handlers import GameCoordinator

config = get_config()

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg = get_config()
    registry = SessionRegistry()
    sweeper = LifecycleSweeper(registry, max_age=cfg.match_max_age_sec, interval=cfg.sweep_interval_sec)
    app.state.registry = registry
    app.state.sweeper = sweeper
    app.state.coordinator = GameCoordinator(registry, sweeper, grace_sec=cfg.disconnect_grace_sec)
    sweeper.start()
    logger.info("server ready")
    try:
        yield
    finally:
        await sweeper.stop()


app = FastAPI(title="Tic-tac-toe API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class BotMoveRequest(BaseModel):
    board: list[Mark | None] = Field(min_length=BOARD_SIZE, max_length=BOARD_SIZE)
    mark: Mark


@app.get("/health")
def health(request: Request):
    return {"status": "healthy", **request.app.state.registry.counts()}


@app.post("/bot/move")
def bot_move(body: BotMoveRequest):
    try:
        position = choose_move(body.board, body.mark)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"position": position}


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    logger.info("WS: connection attempt from %s", ws.client)
    await ws.app.state.coordinator.serve(ws)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("tictactoe.main:app", host=config.host, port=config.port, reload=config.debug)
