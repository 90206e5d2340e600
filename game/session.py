"""
Session state machine: lobby, role assignment, night/day cycle and end of game.

All state lives on one GameSession and is guarded by that session's lock.
Phase timeouts are asyncio tasks armed on phase entry; each captures the
phase sequence number and does nothing if the session has moved on by the
time it fires.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Optional

from game import config
from game.engine import assign_roles, check_winner, resolve_day, resolve_night
from game.intents import ChatMessage, Intent, NightAction, SetReady, StartGame, Vote
from game.messages import (
    Chat,
    GameEnded,
    GameState,
    GameView,
    HostStatus,
    Notice,
    Notification,
    OutboundChannel,
    PhaseChanged,
    RoleAssigned,
)
from game.rules import (
    CHAT_PHASES,
    MAX_CHAT_LENGTH,
    MIN_PLAYERS,
    ROLE_DESCRIPTIONS,
    Alignment,
    NightActionKind,
    Phase,
    Winner,
)
from game.state import NightIntents, Player, Roster, generate_player_id
from game.view import build_lobby_state, build_view

logger = logging.getLogger(__name__)


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class GameError(Exception):
    """Base error raised by a game session."""


class JoinRejected(GameError):
    """A player could not join the session."""


class GameSession:
    """One game: roster, phase, day counter and pending round state."""

    def __init__(
        self,
        session_id: str,
        night_seconds: Optional[float] = None,
        day_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
        send_timeout: Optional[float] = None,
    ) -> None:
        self.id = session_id
        self.phase = Phase.LOBBY
        self.day = 0
        self.winner: Optional[Winner] = None
        self.roster = Roster()
        self.host_id: Optional[str] = None
        self.night_intents = NightIntents()
        self.day_votes: dict[str, str] = {}
        # viewer id -> {target id -> alignment}
        self.investigations: dict[str, dict[str, Alignment]] = {}
        self.night_seconds = night_seconds if night_seconds is not None else config.night_seconds()
        self.day_seconds = day_seconds if day_seconds is not None else config.day_seconds()
        if self.day_seconds <= self.night_seconds:
            logger.warning(
                "Session %s: day (%ss) is not longer than night (%ss)",
                session_id, self.day_seconds, self.night_seconds,
            )
        self.send_timeout = send_timeout if send_timeout is not None else config.send_timeout()
        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()
        self._seq = 0
        self._timer: Optional[asyncio.Task] = None

    @property
    def sequence(self) -> int:
        """Bumped on every phase change."""
        return self._seq

    # ── Public operations ────────────────────────────────────────────────────

    async def join(self, name: str, channel: Optional[OutboundChannel] = None) -> str:
        """Add a player to the lobby and return their id."""
        name = (name or "").strip()
        async with self._lock:
            if self.phase != Phase.LOBBY:
                raise JoinRejected("Game already started")
            if not name:
                raise JoinRejected("Name is required")
            if self.roster.by_name(name) is not None:
                raise JoinRejected(f"Name {name!r} is already taken")

            player_id = generate_player_id()
            while player_id in self.roster:
                player_id = generate_player_id()
            player = Player(id=player_id, name=name, channel=channel)
            self.roster.add(player)
            if self.host_id is None:
                self.host_id = player.id
            logger.info("Player %s (%s) joined session %s", player.id, name, self.id)

            await self._send(player, HostStatus(is_host=self.host_id == player.id))
            await self._broadcast(build_lobby_state(self))
            return player.id

    async def disconnect(self, player_id: str) -> None:
        """Remove a player. After the game has ended only their channel is dropped."""
        async with self._lock:
            player = self.roster.get(player_id)
            if player is None:
                return
            if self.phase == Phase.ENDED:
                player.channel = None
                return

            self.roster.remove(player_id)
            self.night_intents.discard(player_id)
            self.day_votes.pop(player_id, None)
            self.investigations.pop(player_id, None)
            logger.info("Player %s left session %s during %s", player_id, self.id, self.phase.value)

            if self.host_id == player_id:
                remaining = list(self.roster)
                self.host_id = remaining[0].id if remaining else None
                if remaining:
                    await self._send(remaining[0], HostStatus(is_host=True))

            if self.phase == Phase.LOBBY:
                await self._broadcast(build_lobby_state(self))
            else:
                await self._broadcast_state()

    async def submit_intent(self, player_id: str, intent: Intent) -> bool:
        """
        Validate and record one intent. Returns whether it was accepted;
        rejected intents change nothing and earn the sender a Notice.
        """
        async with self._lock:
            if self.phase == Phase.ENDED:
                return False
            player = self.roster.get(player_id)
            if player is None:
                logger.debug("Intent from unknown player %s in session %s", player_id, self.id)
                return False

            reason = await self._apply(player, intent)
            if reason is None:
                return True
            logger.debug(
                "Rejected %s from %s in session %s: %s",
                type(intent).__name__, player_id, self.id, reason,
            )
            await self._send(player, Notice(reason=reason))
            return False

    async def advance_phase(self) -> bool:
        """Resolve the current night or day now instead of waiting for its timer."""
        async with self._lock:
            return await self._advance()

    async def snapshot(self, viewer_id: Optional[str] = None) -> GameView:
        async with self._lock:
            viewer = self.roster.get(viewer_id) if viewer_id else None
            return build_view(self, viewer)

    async def notify(self, player_id: str, message: Notification) -> None:
        """Send one message to one player, ordered with the session's broadcasts."""
        async with self._lock:
            player = self.roster.get(player_id)
            if player is not None:
                await self._send(player, message)

    async def is_abandoned(self) -> bool:
        """True once no player in the session still has a working channel."""
        async with self._lock:
            return not any(p.connected for p in self.roster)

    def close(self) -> None:
        """Cancel any pending phase timer."""
        self._cancel_timer()

    # ── Intents ──────────────────────────────────────────────────────────────

    async def _apply(self, player: Player, intent: Intent) -> Optional[str]:
        if isinstance(intent, SetReady):
            return await self._set_ready(player, intent)
        if isinstance(intent, StartGame):
            return await self._start(player)
        if isinstance(intent, NightAction):
            return self._night_action(player, intent)
        if isinstance(intent, Vote):
            return self._vote(player, intent)
        if isinstance(intent, ChatMessage):
            return await self._chat(player, intent)
        return "Unknown intent"

    async def _set_ready(self, player: Player, intent: SetReady) -> Optional[str]:
        if self.phase != Phase.LOBBY:
            return "Ready can only be set in the lobby"
        player.ready = intent.ready
        await self._broadcast(build_lobby_state(self))
        return None

    async def _start(self, player: Player) -> Optional[str]:
        if self.phase != Phase.LOBBY:
            return "Game already started"
        if player.id != self.host_id:
            return "Only the host can start the game"
        if self.roster.count() < MIN_PLAYERS:
            return f"At least {MIN_PLAYERS} players required"
        if self.roster.ready_count() != self.roster.count():
            return "Not every player is ready"
        if not assign_roles(self.roster, self._rng):
            return "Roles could not be assigned"

        self.day = 1
        logger.info("Session %s started with %d players", self.id, self.roster.count())
        for p in self.roster:
            await self._send(p, RoleAssigned(role=p.role, description=ROLE_DESCRIPTIONS[p.role]))
        self._enter_phase(Phase.NIGHT)
        await self._broadcast(PhaseChanged(phase=Phase.NIGHT, day=self.day))
        await self._broadcast_state()
        return None

    def _night_action(self, player: Player, intent: NightAction) -> Optional[str]:
        if self.phase != Phase.NIGHT:
            return "Night actions are only accepted at night"
        if not player.alive:
            return "Dead players cannot act"
        action = intent.action or player.role.default_night_action
        if action is None:
            return "Your role has no night action"
        if action == NightActionKind.KILL and not player.role.can_kill:
            return "Your role cannot choose the night kill"
        if action == NightActionKind.CHECK and not player.role.can_investigate:
            return "Your role cannot check players"
        if not self.roster.is_alive(intent.target_id):
            return "Target must be a living player"

        if action == NightActionKind.KILL:
            self.night_intents.kills[player.id] = intent.target_id
        else:
            self.night_intents.checks[player.id] = intent.target_id
        return None

    def _vote(self, player: Player, intent: Vote) -> Optional[str]:
        if self.phase != Phase.DAY:
            return "Votes are only accepted during the day"
        if not player.alive:
            return "Dead players cannot vote"
        if not self.roster.is_alive(intent.target_id):
            return "Target must be a living player"
        self.day_votes[player.id] = intent.target_id
        return None

    async def _chat(self, player: Player, intent: ChatMessage) -> Optional[str]:
        if self.phase not in CHAT_PHASES:
            return "Chat is closed right now"
        if not player.alive:
            return "Dead players cannot chat"
        text = (intent.text or "").strip()
        if not text:
            return "Message is empty"
        if len(text) > MAX_CHAT_LENGTH:
            return f"Message is longer than {MAX_CHAT_LENGTH} characters"
        await self._broadcast(
            Chat(sender=player.name, text=text, time=datetime.now(timezone.utc).isoformat())
        )
        return None

    # ── Phase transitions ────────────────────────────────────────────────────

    async def _advance(self) -> bool:
        if self.phase == Phase.NIGHT:
            await self._finish_night()
            return True
        if self.phase == Phase.DAY:
            await self._finish_day()
            return True
        return False

    async def _finish_night(self) -> None:
        outcome = resolve_night(self.night_intents, self.roster)
        for viewer_id, (target_id, alignment) in outcome.investigations.items():
            self.investigations.setdefault(viewer_id, {})[target_id] = alignment
        if outcome.killed_id:
            logger.info("Session %s night %d: %s was killed", self.id, self.day, outcome.killed_id)

        winner = check_winner(self.roster)
        if winner is not None:
            await self._end(winner, killed=outcome.killed_id)
            return

        self.day_votes.clear()
        self._enter_phase(Phase.DAY)
        await self._broadcast(PhaseChanged(phase=Phase.DAY, day=self.day, killed=outcome.killed_id))
        await self._broadcast_state()

    async def _finish_day(self) -> None:
        outcome = resolve_day(self.day_votes, self.roster)
        if outcome.eliminated_id:
            logger.info(
                "Session %s day %d: %s eliminated (%s)",
                self.id, self.day, outcome.eliminated_id, outcome.tally,
            )

        winner = check_winner(self.roster)
        if winner is not None:
            await self._end(winner, eliminated=outcome.eliminated_id)
            return

        self.day += 1
        self.night_intents.clear()
        self._enter_phase(Phase.NIGHT)
        await self._broadcast(
            PhaseChanged(phase=Phase.NIGHT, day=self.day, eliminated=outcome.eliminated_id)
        )
        await self._broadcast_state()

    async def _end(
        self,
        winner: Winner,
        killed: Optional[str] = None,
        eliminated: Optional[str] = None,
    ) -> None:
        self.winner = winner
        self.night_intents.clear()
        self.day_votes.clear()
        self._enter_phase(Phase.ENDED)
        logger.info("Session %s ended on day %d: %s win", self.id, self.day, winner.value)
        await self._broadcast(
            PhaseChanged(phase=Phase.ENDED, day=self.day, killed=killed, eliminated=eliminated)
        )
        await self._broadcast(GameEnded(winner=winner))
        await self._broadcast_state()

    def _enter_phase(self, phase: Phase) -> None:
        self.phase = phase
        self._seq += 1
        self._cancel_timer()
        if phase == Phase.NIGHT:
            self._arm_timer(self.night_seconds)
        elif phase == Phase.DAY:
            self._arm_timer(self.day_seconds)

    # ── Timers ───────────────────────────────────────────────────────────────

    def _arm_timer(self, delay: float) -> None:
        seq = self._seq
        self._timer = asyncio.get_running_loop().create_task(
            self._run_timer(seq, delay), name=f"session-{self.id}-phase-{seq}"
        )

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return
        # A timer that is resolving the round must not cancel itself.
        if timer is _current_task():
            return
        timer.cancel()

    async def _run_timer(self, seq: int, delay: float) -> None:
        await asyncio.sleep(delay)
        async with self._lock:
            if seq != self._seq:
                logger.debug("Session %s: stale timer for phase %d ignored", self.id, seq)
                return
            try:
                await self._advance()
            except Exception:
                logger.exception("Session %s: phase timer failed", self.id)

    # ── Delivery ─────────────────────────────────────────────────────────────

    async def _send(self, player: Player, message: Notification) -> None:
        """
        Deliver to one player; a broken or stalled channel marks them
        disconnected. Sends are bounded so one slow socket cannot hold the lock.
        """
        channel = player.channel
        if channel is None:
            return
        try:
            await asyncio.wait_for(channel.send(message), self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Send of %s to %s in session %s timed out after %ss",
                message.type, player.id, self.id, self.send_timeout,
            )
            player.channel = None
        except Exception as e:
            logger.warning(
                "Send of %s to %s in session %s failed: %s",
                message.type, player.id, self.id, e,
            )
            player.channel = None

    async def _broadcast(self, message: Notification) -> None:
        for p in self.roster:
            await self._send(p, message)

    async def _broadcast_state(self) -> None:
        for p in self.roster:
            await self._send(p, GameState(view=build_view(self, p)))
