"""
Engine errors.

Rule violations are not exceptions: the validator reports them as
values and the reducer treats them as no-ops. The exceptions here cover
contract breaches inside the engine and failures in the host layer.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every error raised by the engine or its host."""


class CardNotFoundError(EngineError, LookupError):
    """A card definition id is not in the catalog."""

    def __init__(self, definition_id: str):
        self.definition_id = definition_id
        super().__init__(f"Unknown card definition: {definition_id}")


class InvariantViolation(EngineError):
    """
    A structural invariant was broken (e.g. drawing from an empty pile).

    This is an implementation defect, never a player mistake. It is not
    caught anywhere inside the engine.
    """


class RoundNotOverError(EngineError):
    """A new round was requested while the current one is still running."""

    def __init__(self, phase: str):
        self.phase = phase
        super().__init__(f"Cannot start a new round during phase '{phase}'")


# =============================================================================
# Host errors
# =============================================================================

class RoomNotFoundError(EngineError, LookupError):
    """No game state is stored for the room."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class VersionConflictError(EngineError):
    """The stored version moved on between read and commit."""

    def __init__(self, room_id: str, expected: int, actual: int):
        self.room_id = room_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Version conflict in room {room_id}: expected {expected}, found {actual}"
        )


class CommitRetriesExhausted(EngineError):
    """Every optimistic commit attempt lost to a concurrent writer."""

    def __init__(self, room_id: str, attempts: int):
        self.room_id = room_id
        self.attempts = attempts
        super().__init__(f"Gave up on room {room_id} after {attempts} conflicting commits")


class RoomExistsError(EngineError, ValueError):
    """A game is already stored under the room id."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} already has a game")
