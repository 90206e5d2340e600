"""Per-player projections of session state."""

from typing import TYPE_CHECKING, Optional

from game.messages import GameView, LobbyPlayer, LobbyState, PlayerView
from game.rules import MIN_PLAYERS, Phase, Role
from game.state import Player

if TYPE_CHECKING:
    from game.session import GameSession


def revealed_role(session: "GameSession", viewer: Optional[Player], target: Player) -> Optional[str]:
    """
    What viewer may know about target's role: the role itself once the game
    is over, the target is dead, or the target is the viewer; the alignment
    if viewer checked the target; otherwise nothing.
    """
    if target.role == Role.UNASSIGNED:
        return None
    if viewer is not None and viewer.id == target.id:
        return target.role.value
    if session.phase == Phase.ENDED or not target.alive:
        return target.role.value
    if viewer is not None and viewer.role.can_investigate:
        alignment = session.investigations.get(viewer.id, {}).get(target.id)
        if alignment is not None:
            return alignment.value
    return None


def build_view(session: "GameSession", viewer: Optional[Player]) -> GameView:
    """Build the game view for one viewer (None for an anonymous observer)."""
    players = [
        PlayerView(
            id=p.id,
            name=p.name,
            alive=p.alive,
            connected=p.connected,
            role=revealed_role(session, viewer, p),
        )
        for p in session.roster
    ]
    your_role = None
    if viewer is not None and viewer.role != Role.UNASSIGNED:
        your_role = viewer.role
    return GameView(
        phase=session.phase,
        day=session.day,
        players=players,
        your_role=your_role,
        winner=session.winner,
    )


def can_start(session: "GameSession") -> bool:
    roster = session.roster
    return (
        session.phase == Phase.LOBBY
        and roster.count() >= MIN_PLAYERS
        and roster.ready_count() == roster.count()
    )


def build_lobby_state(session: "GameSession") -> LobbyState:
    return LobbyState(
        players=[
            LobbyPlayer(id=p.id, name=p.name, ready=p.ready, connected=p.connected)
            for p in session.roster
        ],
        host_id=session.host_id,
        can_start=can_start(session),
    )
