"""In-memory session registry. Replace with something shared if the server ever scales out."""

from game.session import GameSession
from game.state import generate_game_id

# game_id -> session
_store: dict[str, GameSession] = {}


def create_session() -> str:
    """Create a new session in the lobby and return its id."""
    game_id = generate_game_id()
    while game_id in _store:
        game_id = generate_game_id()
    _store[game_id] = GameSession(game_id)
    return game_id


def get(game_id: str) -> GameSession | None:
    return _store.get(game_id)


def delete(game_id: str) -> None:
    session = _store.pop(game_id, None)
    if session is not None:
        session.close()


def list_games() -> list[str]:
    return list(_store.keys())
