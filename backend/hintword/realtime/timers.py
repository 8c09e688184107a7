"""Round timers: hint cadence and round timeout.

At most one ``RoundTimers`` set is armed per lobby. Each set is tagged with the
round it was armed for; a firing re-reads the lobby under the registry lock and
does nothing if its set was disarmed or the round moved on.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from ..game.errors import InvalidStateError, LobbyNotFoundError
from ..game.registry import LobbyRegistry
from ..game.session import LobbySession
from ..game.views import round_public_state
from . import events
from .gateway import BroadcastGateway

logger = logging.getLogger(__name__)

TICK_SEC = 1.0


@dataclass
class RoundTimers:
    lobby_id: str
    round: int
    generation: int
    hint_interval: int
    time_limit: int
    session: LobbySession = field(repr=False, compare=False)
    cancelled: bool = False
    hints_done: bool = False

    @property
    def tag(self) -> str:
        return f"{self.lobby_id}#{self.round}.{self.generation}"


class RoundTimerCoordinator:
    def __init__(
        self,
        registry: LobbyRegistry,
        gateway: BroadcastGateway,
        start_task: Callable[..., Any],
        sleep: Callable[[float], Any],
        background: bool = True,
    ) -> None:
        self._registry = registry
        self._gateway = gateway
        self._start_task = start_task
        self._sleep = sleep
        self._background = background
        self._armed: dict[str, RoundTimers] = {}
        self._generations = itertools.count(1)

    def armed(self, lobby_id: str) -> RoundTimers | None:
        with self._registry.lock:
            return self._armed.get(lobby_id)

    def arm(self, lobby_id: str) -> RoundTimers:
        """Arm timers for the lobby's current round and release the first hint."""
        with self._registry.lock:
            session = self._registry.get_session(lobby_id)
            state = session.lobby.state
            if state.status != "playing":
                raise InvalidStateError("No round in progress")

            self.disarm(session.id)
            timers = RoundTimers(
                lobby_id=session.id,
                round=state.round,
                generation=next(self._generations),
                hint_interval=session.lobby.settings.hint_interval,
                time_limit=session.lobby.settings.time_limit,
                session=session,
            )
            self._armed[session.id] = timers
            logger.info(
                "[timer-set] lobby=%s round=%d hint_interval=%ds time_limit=%ds",
                session.id,
                timers.round,
                timers.hint_interval,
                timers.time_limit,
            )
            self.fire_hint(timers)

        if self._background:
            if not timers.hints_done:
                self._start_task(self._run_hints, timers)
            self._start_task(self._run_timeout, timers)
        return timers

    def disarm(self, lobby_id: str) -> bool:
        with self._registry.lock:
            timers = self._armed.pop(lobby_id, None)
            if timers is None:
                return False
            timers.cancelled = True
            logger.info("[timer-cancel] %s", timers.tag)
            return True

    def finish_round(self, session: LobbySession) -> bool:
        """End the session's round, disarming its timers before anything is sent."""
        with session.lock:
            self.disarm(session.id)
            if not session.end_round():
                return False
            self._gateway.to_lobby(session.id, events.ROUND_ENDED, round_public_state(session))
            return True

    def fire_hint(self, timers: RoundTimers) -> str | None:
        with self._registry.lock:
            session = self._live_session(timers)
            if session is None:
                timers.hints_done = True
                return None

            hint = session.reveal_next_hint()
            if session.lobby.state.hints_exhausted:
                timers.hints_done = True
            if hint is None:
                return None

            logger.info("[hint] %s %d/%d", timers.tag, session.lobby.state.hint_index, len(session.lobby.state.hint_list))
            self._gateway.to_lobby(timers.lobby_id, events.HINT, hint)
            return hint

    def fire_timeout(self, timers: RoundTimers) -> bool:
        with self._registry.lock:
            session = self._live_session(timers)
            if session is None:
                return False
            logger.info("[timer-fire] %s round timeout", timers.tag)
            return self.finish_round(session)

    def _live_session(self, timers: RoundTimers) -> LobbySession | None:
        if timers.cancelled or self._armed.get(timers.lobby_id) is not timers:
            logger.debug("[timer-abort] %s disarmed", timers.tag)
            return None
        try:
            session = self._registry.get_session(timers.lobby_id)
        except LobbyNotFoundError:
            self._armed.pop(timers.lobby_id, None)
            timers.cancelled = True
            logger.info("[timer-abort] %s lobby gone", timers.tag)
            return None

        if session is not timers.session:
            self._armed.pop(timers.lobby_id, None)
            timers.cancelled = True
            logger.info("[timer-abort] %s lobby replaced", timers.tag)
            return None

        state = session.lobby.state
        if state.status != "playing" or state.round != timers.round:
            logger.info("[timer-abort] %s status=%s round=%d", timers.tag, state.status, state.round)
            return None
        return session

    def _wait(self, timers: RoundTimers, seconds: float) -> bool:
        """Sleep in ticks; False as soon as the set is cancelled."""
        remaining = float(seconds)
        while remaining > 0:
            if timers.cancelled:
                return False
            step = min(TICK_SEC, remaining)
            self._sleep(step)
            remaining -= step
        return not timers.cancelled

    def _run_hints(self, timers: RoundTimers) -> None:
        try:
            while not timers.hints_done:
                if not self._wait(timers, timers.hint_interval):
                    return
                self.fire_hint(timers)
        except Exception:
            logger.exception("[timer-error] %s hint task failed", timers.tag)

    def _run_timeout(self, timers: RoundTimers) -> None:
        try:
            if self._wait(timers, timers.time_limit):
                self.fire_timeout(timers)
        except Exception:
            logger.exception("[timer-error] %s timeout task failed", timers.tag)
