"""Session state types: players, roster and pending night intents."""

import random
import string
from dataclasses import dataclass, field
from typing import Iterator, Optional

from game.messages import OutboundChannel
from game.rules import Role

_GAME_ID_CHARS = string.ascii_uppercase + string.digits
_PLAYER_ID_CHARS = string.ascii_letters + string.digits


def generate_game_id() -> str:
    """Short code players type to find a session."""
    return "".join(random.choices(_GAME_ID_CHARS, k=6))


def generate_player_id() -> str:
    return "".join(random.choices(_PLAYER_ID_CHARS, k=16))


@dataclass(eq=False)
class Player:
    """A participant in one session. Mutated only under the session lock."""

    id: str
    name: str
    role: Role = Role.UNASSIGNED
    alive: bool = True
    ready: bool = False
    channel: Optional[OutboundChannel] = field(default=None, repr=False)

    @property
    def connected(self) -> bool:
        return self.channel is not None

    @property
    def is_mafia_aligned(self) -> bool:
        return self.role.is_mafia_aligned


class Roster:
    """Players in a session, kept in join order."""

    def __init__(self) -> None:
        self._players: dict[str, Player] = {}

    def add(self, player: Player) -> None:
        self._players[player.id] = player

    def remove(self, player_id: str) -> Optional[Player]:
        """Remove a player; absent ids are ignored."""
        return self._players.pop(player_id, None)

    def get(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def by_name(self, name: str) -> Optional[Player]:
        for p in self._players.values():
            if p.name == name:
                return p
        return None

    def alive_players(self) -> list[Player]:
        return [p for p in self._players.values() if p.alive]

    def is_alive(self, player_id: str) -> bool:
        p = self._players.get(player_id)
        return p is not None and p.alive

    def count(self) -> int:
        return len(self._players)

    def alive_count(self) -> int:
        return sum(1 for p in self._players.values() if p.alive)

    def ready_count(self) -> int:
        return sum(1 for p in self._players.values() if p.ready)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players


@dataclass
class NightIntents:
    """Night submissions collected before resolution (actor id -> target id)."""

    kills: dict[str, str] = field(default_factory=dict)
    checks: dict[str, str] = field(default_factory=dict)

    def discard(self, player_id: str) -> None:
        self.kills.pop(player_id, None)
        self.checks.pop(player_id, None)

    def clear(self) -> None:
        self.kills.clear()
        self.checks.clear()

    def is_empty(self) -> bool:
        return not self.kills and not self.checks
