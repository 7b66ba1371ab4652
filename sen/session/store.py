"""
Room Store - Versioned, in-memory storage of one GameState per room.

Commits are compare-and-set on the version: a writer states the version
it read, and the commit only lands if that is still the stored version.
There is no other locking; nothing blocks longer than the swap itself.
"""

from __future__ import annotations
import threading

from ..engine_core.state import GameState
from ..errors import InvariantViolation, RoomExistsError, RoomNotFoundError, VersionConflictError


class RoomStore:
    """
    In-memory store keyed by room id.

    No persistence - rooms live for the lifetime of the process.
    """

    def __init__(self):
        self._states: dict[str, GameState] = {}
        self._lock = threading.Lock()

    def create(self, room_id: str, state: GameState) -> GameState:
        with self._lock:
            if room_id in self._states:
                raise RoomExistsError(room_id)
            self._states[room_id] = state
        return state

    def load(self, room_id: str) -> GameState:
        """Get the current state. Raises RoomNotFoundError."""
        try:
            return self._states[room_id]
        except KeyError:
            raise RoomNotFoundError(room_id) from None

    def commit(self, room_id: str, expected_version: int, new_state: GameState) -> GameState:
        """
        Store new_state if the room is still at expected_version.

        Raises VersionConflictError when another writer got there first.
        """
        if new_state.version != expected_version + 1:
            raise InvariantViolation(
                f"Commit to room {room_id} skips versions: {expected_version} -> {new_state.version}"
            )
        with self._lock:
            current = self._states.get(room_id)
            if current is None:
                raise RoomNotFoundError(room_id)
            if current.version != expected_version:
                raise VersionConflictError(room_id, expected_version, current.version)
            self._states[room_id] = new_state
        return new_state

    def delete(self, room_id: str) -> None:
        with self._lock:
            self._states.pop(room_id, None)

    def list_rooms(self) -> list[str]:
        return list(self._states)
