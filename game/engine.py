"""Game engine: role assignment, round resolution and win check. No I/O."""

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from game.rules import MIN_PLAYERS, Alignment, Role, Winner, alignment_of
from game.state import NightIntents, Roster


@dataclass
class NightOutcome:
    """Result of one night. investigations maps viewer id -> (target id, alignment)."""

    killed_id: Optional[str] = None
    investigations: dict[str, tuple[str, Alignment]] = field(default_factory=dict)


@dataclass
class DayOutcome:
    eliminated_id: Optional[str] = None
    tally: dict[str, int] = field(default_factory=dict)


def mafia_count_for(num_players: int) -> int:
    """Plain mafia members (Don excluded) for a roster of num_players."""
    return max(1, (num_players - 5) // 2)


def build_role_pool(num_players: int) -> list[Role]:
    mafia_count = mafia_count_for(num_players)
    roles = [Role.DON] + [Role.MAFIA] * mafia_count + [Role.SHERIFF]
    roles.extend([Role.CIVILIAN] * (num_players - len(roles)))
    return roles


def assign_roles(roster: Roster, rng: Optional[random.Random] = None) -> bool:
    """
    Give every player a role. Returns False (and changes nothing) when the
    roster is too small or roles were already handed out.
    """
    players = list(roster)
    if len(players) < MIN_PLAYERS:
        return False
    if any(p.role != Role.UNASSIGNED for p in players):
        return False

    roles = build_role_pool(len(players))
    (rng or random.Random()).shuffle(roles)
    for player, role in zip(players, roles):
        player.role = role
    return True


def _plurality(targets: Iterable[str]) -> tuple[Optional[str], Counter]:
    """Target with the strictly highest count, or None on a tie or no targets."""
    counts = Counter(targets)
    if not counts:
        return None, counts
    ranked = counts.most_common(2)
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return None, counts
    return ranked[0][0], counts


def resolve_night(intents: NightIntents, roster: Roster) -> NightOutcome:
    """
    Resolve the mafia kill and the night checks, then clear the intents.
    Checks see the roster as it was before the kill.
    """
    outcome = NightOutcome()

    for actor_id, target_id in intents.checks.items():
        actor = roster.get(actor_id)
        target = roster.get(target_id)
        if actor is None or target is None or not actor.alive:
            continue
        if not actor.role.can_investigate:
            continue
        outcome.investigations[actor_id] = (target_id, alignment_of(target.role))

    kill_votes = []
    for actor_id, target_id in intents.kills.items():
        actor = roster.get(actor_id)
        if actor is None or not actor.alive or not actor.role.can_kill:
            continue
        if not roster.is_alive(target_id):
            continue
        kill_votes.append(target_id)

    target_id, _ = _plurality(kill_votes)
    if target_id is not None:
        roster.get(target_id).alive = False
        outcome.killed_id = target_id

    intents.clear()
    return outcome


def resolve_day(votes: dict[str, str], roster: Roster) -> DayOutcome:
    """
    Eliminate the plurality target if it holds a strict majority of the
    living players. Votes are cleared either way.
    """
    alive_count = roster.alive_count()
    valid = [
        target_id
        for voter_id, target_id in votes.items()
        if roster.is_alive(voter_id) and roster.is_alive(target_id)
    ]
    target_id, counts = _plurality(valid)
    outcome = DayOutcome(tally=dict(counts))
    if target_id is not None and counts[target_id] > alive_count // 2:
        roster.get(target_id).alive = False
        outcome.eliminated_id = target_id

    votes.clear()
    return outcome


def check_winner(roster: Roster) -> Optional[Winner]:
    """Return the winning side, or None while the game goes on."""
    alive = roster.alive_players()
    mafia_alive = sum(1 for p in alive if p.is_mafia_aligned)
    civilians_alive = len(alive) - mafia_alive
    if mafia_alive == 0:
        return Winner.CIVILIANS
    if mafia_alive >= civilians_alive:
        return Winner.MAFIA
    return None
