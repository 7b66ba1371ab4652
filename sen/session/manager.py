"""
Room Manager - Host side of the engine.

Runs the load -> validate -> apply -> commit cycle for every action.
A commit that loses to a concurrent writer is retried against freshly
read state, which also re-validates the action: a move that became
illegal in the meantime (two simultaneous first draws) is rejected
rather than overwriting the winner.

Out of scope: lobbies, identity, seat assignment, reconnection.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Sequence
import logging

from ..config import Settings
from ..engine_core.action import Action, RejectReason
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import Reducer, set_player_connected
from ..engine_core.setup import create_initial_state, start_new_round
from ..engine_core.state import GameState
from ..engine_core.view import PlayerView, derive_view
from ..errors import CommitRetriesExhausted, VersionConflictError
from .store import RoomStore

logger = logging.getLogger(__name__)

Listener = Callable[[str, GameState], None]


@dataclass
class SubmitOutcome:
    """Outcome of submitting one action to a room."""
    accepted: bool
    state: GameState
    reason: RejectReason | None = None
    attempts: int = 1
    changes: list[str] = field(default_factory=list)


class RoomManager:
    """
    Owns the versioned store and notifies listeners after each commit.

    Usage:
        manager = RoomManager()
        manager.start_game("room-1", [("p1", "Ada"), ("p2", "Bo")])
        outcome = manager.submit_action("room-1", "p1", AcknowledgeInitialPeek())
        view = manager.view("room-1", "p1")
    """

    def __init__(
        self,
        store: RoomStore | None = None,
        settings: Settings | None = None,
        reducer: Reducer | None = None,
    ):
        self.store = store or RoomStore()
        self.settings = settings or Settings.from_env()
        self.reducer = reducer or Reducer()
        self._listeners: list[Listener] = []

    @property
    def max_retries(self) -> int:
        return max(1, self.settings.max_commit_retries)

    def start_game(
        self,
        room_id: str,
        players: Sequence[tuple[str, str]],
        target_score: int | None = None,
        seed: int | None = None,
    ) -> GameState:
        state = create_initial_state(
            room_id,
            players,
            target_score=target_score or self.settings.target_score,
            seed=seed,
        )
        self.store.create(room_id, state)
        logger.info("Room %s: game started with %d players", room_id, len(players))
        self._notify(room_id, state)
        return state

    def submit_action(self, room_id: str, player_id: str, action: Action) -> SubmitOutcome:
        """
        Validate, apply and commit one action.

        Rejected actions leave the store untouched and report the reason.
        Raises CommitRetriesExhausted if every attempt conflicts.
        """
        for attempt in range(1, self.max_retries + 1):
            state = self.store.load(room_id)
            result = self.reducer.apply(state, player_id, action)
            if not result.success:
                return SubmitOutcome(
                    accepted=False, state=state, reason=result.reason, attempts=attempt
                )
            try:
                committed = self.store.commit(room_id, state.version, result.new_state)
            except VersionConflictError as e:
                logger.warning("%s; retrying (%d/%d)", e, attempt, self.max_retries)
                continue

            self._notify(room_id, committed)
            return SubmitOutcome(
                accepted=True, state=committed, attempts=attempt, changes=result.state_changes
            )

        logger.error("Room %s: %s by %s lost every commit", room_id, action.action_type.value, player_id)
        raise CommitRetriesExhausted(room_id, self.max_retries)

    def new_round(self, room_id: str) -> GameState:
        """Deal the next round. Raises RoundNotOverError mid-round."""
        return self._transact(room_id, start_new_round)

    def set_connected(self, room_id: str, player_id: str, connected: bool) -> GameState:
        return self._transact(
            room_id, lambda state: set_player_connected(state, player_id, connected)
        )

    def load(self, room_id: str) -> GameState:
        return self.store.load(room_id)

    def view(self, room_id: str, viewer_id: str) -> PlayerView:
        return derive_view(self.store.load(room_id), viewer_id)

    def legal_actions(self, room_id: str, player_id: str) -> list[Action]:
        return legal_actions(self.store.load(room_id), player_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _transact(self, room_id: str, transition: Callable[[GameState], GameState]) -> GameState:
        for attempt in range(1, self.max_retries + 1):
            state = self.store.load(room_id)
            new_state = transition(state)
            if new_state is state:
                return state
            try:
                committed = self.store.commit(room_id, state.version, new_state)
            except VersionConflictError as e:
                logger.warning("%s; retrying (%d/%d)", e, attempt, self.max_retries)
                continue
            self._notify(room_id, committed)
            return committed

        raise CommitRetriesExhausted(room_id, self.max_retries)

    def _notify(self, room_id: str, state: GameState) -> None:
        for listener in list(self._listeners):
            listener(room_id, state)
