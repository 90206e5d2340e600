"""Player intents accepted by a session."""

from dataclasses import dataclass
from typing import Optional, Union

from game.rules import NightActionKind


@dataclass(frozen=True)
class SetReady:
    ready: bool = True


@dataclass(frozen=True)
class StartGame:
    pass


@dataclass(frozen=True)
class NightAction:
    """Night target; action defaults from the actor's role when omitted."""

    target_id: str
    action: Optional[NightActionKind] = None


@dataclass(frozen=True)
class Vote:
    target_id: str


@dataclass(frozen=True)
class ChatMessage:
    text: str


Intent = Union[SetReady, StartGame, NightAction, Vote, ChatMessage]
