"""FastAPI app: create, list and inspect games; players connect over /ws."""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from api import game_store
from api.models import GameCreateResponse, GameSummary
from api.websocket import router as ws_router
from game import config

logging.basicConfig(level=config.log_level())
logger = logging.getLogger(__name__)

app = FastAPI(title="Mafia API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ws_router)


@app.post("/games", response_model=GameCreateResponse, tags=["Games"], summary="Create game")
async def create_game():
    """Create a new game in the lobby. Players join over the WebSocket."""
    game_id = game_store.create_session()
    logger.info("Created game %s", game_id)
    return GameCreateResponse(game_id=game_id)


@app.get("/games", response_model=list[str], tags=["Games"], summary="List game IDs")
async def list_games_route():
    return game_store.list_games()


@app.get("/games/{game_id}", response_model=GameSummary, tags=["Games"], summary="Get game summary")
async def get_game(game_id: str):
    """Phase, day and head count; roles are never exposed here."""
    session = game_store.get(game_id)
    if session is None:
        raise HTTPException(404, "Game not found")
    view = await session.snapshot()
    return GameSummary(
        game_id=game_id,
        phase=view.phase,
        day=view.day,
        players=len(view.players),
        winner=view.winner,
    )


@app.get("/health", tags=["System"], summary="Health check")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000)
