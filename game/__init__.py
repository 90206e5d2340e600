"""Game core for the Mafia party game."""

from game.engine import (
    assign_roles,
    mafia_count_for,
    resolve_night,
    resolve_day,
    check_winner,
    NightOutcome,
    DayOutcome,
)
from game.intents import SetReady, StartGame, NightAction, Vote, ChatMessage
from game.rules import Role, Phase, Winner, Alignment, NightActionKind
from game.session import GameSession, GameError, JoinRejected
from game.state import Player, Roster, NightIntents
from game.view import build_view, build_lobby_state

__all__ = [
    "assign_roles",
    "mafia_count_for",
    "resolve_night",
    "resolve_day",
    "check_winner",
    "NightOutcome",
    "DayOutcome",
    "SetReady",
    "StartGame",
    "NightAction",
    "Vote",
    "ChatMessage",
    "Role",
    "Phase",
    "Winner",
    "Alignment",
    "NightActionKind",
    "GameSession",
    "GameError",
    "JoinRejected",
    "Player",
    "Roster",
    "NightIntents",
    "build_view",
    "build_lobby_state",
]
