"""Outbound notifications pushed to each player's channel."""

from typing import Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field

from game.rules import Phase, Role, Winner


class PlayerView(BaseModel):
    """One roster entry as a given viewer is allowed to see it."""

    id: str
    name: str
    alive: bool
    connected: bool = True
    role: Optional[str] = Field(
        default=None,
        description="Role when revealed, alignment when investigated, otherwise empty",
    )


class GameView(BaseModel):
    phase: Phase
    day: int
    players: list[PlayerView]
    your_role: Optional[Role] = None
    winner: Optional[Winner] = None


class LobbyPlayer(BaseModel):
    id: str
    name: str
    ready: bool
    connected: bool = True


class RoleAssigned(BaseModel):
    type: Literal["role_assigned"] = "role_assigned"
    role: Role
    description: str = ""


class LobbyState(BaseModel):
    type: Literal["lobby_state"] = "lobby_state"
    players: list[LobbyPlayer]
    host_id: Optional[str] = None
    can_start: bool = False


class PhaseChanged(BaseModel):
    type: Literal["phase_changed"] = "phase_changed"
    phase: Phase
    day: int
    killed: Optional[str] = None
    eliminated: Optional[str] = None


class GameState(BaseModel):
    type: Literal["game_state"] = "game_state"
    view: GameView


class GameEnded(BaseModel):
    type: Literal["game_ended"] = "game_ended"
    winner: Winner


class HostStatus(BaseModel):
    type: Literal["host_status"] = "host_status"
    is_host: bool


class Chat(BaseModel):
    type: Literal["chat"] = "chat"
    sender: str
    text: str
    time: str


class Notice(BaseModel):
    """Soft rejection echoed back to the sender of an intent."""

    type: Literal["notice"] = "notice"
    reason: str


Notification = Union[
    RoleAssigned, LobbyState, PhaseChanged, GameState, GameEnded, HostStatus, Chat, Notice
]


class OutboundChannel(Protocol):
    """Per-player delivery handle supplied by the transport."""

    async def send(self, message: Notification) -> None: ...
