"""Pydantic request/response models for the API and WebSocket messages."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from game.intents import ChatMessage, Intent, NightAction, SetReady, StartGame, Vote
from game.rules import MAX_CHAT_LENGTH, NightActionKind, Phase, Winner

MAX_PLAYER_NAME_LENGTH = 50


class GameCreateResponse(BaseModel):
    game_id: str


class GameSummary(BaseModel):
    """Public summary for GET /games/{id}: no roles, no names."""

    game_id: str
    phase: Phase
    day: int
    players: int = Field(description="Number of players in the roster")
    winner: Winner | None = None


class SetReadyMessage(BaseModel):
    type: Literal["set_ready"]
    ready: bool = True

    def to_intent(self) -> Intent:
        return SetReady(ready=self.ready)


class StartGameMessage(BaseModel):
    type: Literal["start_game"]

    def to_intent(self) -> Intent:
        return StartGame()


class NightActionMessage(BaseModel):
    type: Literal["night_action"]
    target_id: str
    action: NightActionKind | None = Field(
        default=None,
        description="kill or check; defaults from your role",
    )

    def to_intent(self) -> Intent:
        return NightAction(target_id=self.target_id, action=self.action)


class VoteMessage(BaseModel):
    type: Literal["vote"]
    target_id: str

    def to_intent(self) -> Intent:
        return Vote(target_id=self.target_id)


class ChatMessageIn(BaseModel):
    type: Literal["chat"]
    text: str = Field(..., max_length=MAX_CHAT_LENGTH)

    def to_intent(self) -> Intent:
        return ChatMessage(text=self.text)


InboundMessage = Annotated[
    Union[SetReadyMessage, StartGameMessage, NightActionMessage, VoteMessage, ChatMessageIn],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)


class ErrorMessage(BaseModel):
    """Sent on the socket before closing it when a join fails."""

    type: Literal["error"] = "error"
    message: str
