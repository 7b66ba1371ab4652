"""
Session Module - The host collaborator around the engine.

Holds one GameState per room under optimistic concurrency:
- RoomStore: versioned compare-and-set storage (in-memory)
- RoomManager: validate/apply/commit with retry, change listeners
"""

from .store import RoomStore
from .manager import RoomManager, SubmitOutcome

__all__ = [
    "RoomStore",
    "RoomManager",
    "SubmitOutcome",
]
