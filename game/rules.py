"""Game rules and constants for the Mafia party game."""

from enum import Enum


class Role(str, Enum):
    """Player roles in the game."""

    DON = "don"
    MAFIA = "mafia"
    SHERIFF = "sheriff"
    CIVILIAN = "civilian"
    UNASSIGNED = "unassigned"

    @property
    def is_mafia_aligned(self) -> bool:
        return self in (Role.DON, Role.MAFIA)

    @property
    def can_kill(self) -> bool:
        """Roles that vote on the mafia's night target."""
        return self in (Role.DON, Role.MAFIA)

    @property
    def can_investigate(self) -> bool:
        """Roles that check one player per night."""
        return self in (Role.DON, Role.SHERIFF)

    @property
    def has_night_action(self) -> bool:
        return self.can_kill or self.can_investigate

    @property
    def default_night_action(self) -> "NightActionKind | None":
        """Action a bare night submission means for this role."""
        if self.can_kill:
            return NightActionKind.KILL
        if self.can_investigate:
            return NightActionKind.CHECK
        return None


class Phase(str, Enum):
    """Current session phase."""

    LOBBY = "lobby"
    NIGHT = "night"
    DAY = "day"
    ENDED = "ended"


class Winner(str, Enum):
    """Winning side once the game has ended."""

    MAFIA = "mafia"
    CIVILIANS = "civilians"


class Alignment(str, Enum):
    """Coarse investigation result; never the exact role."""

    MAFIA = "mafia"
    CIVILIAN = "civilian"


class NightActionKind(str, Enum):
    """What a night submission asks for."""

    KILL = "kill"
    CHECK = "check"


def alignment_of(role: Role) -> Alignment:
    return Alignment.MAFIA if role.is_mafia_aligned else Alignment.CIVILIAN


ROLE_DESCRIPTIONS = {
    Role.DON: "Head of the mafia. Votes on the night kill and may check one player each night.",
    Role.MAFIA: "Takes part in the night kill.",
    Role.SHERIFF: "Checks one player each night to learn whether they are with the mafia.",
    Role.CIVILIAN: "Survive and find the mafia.",
}

# Minimum players to start
MIN_PLAYERS = 4

# Longest chat message accepted from a player
MAX_CHAT_LENGTH = 500

# Phases in which living players may chat
CHAT_PHASES = (Phase.LOBBY, Phase.DAY)
