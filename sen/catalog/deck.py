"""
Deck building and shuffling.

Instance ids come from an explicit generator passed in by the caller,
so a seeded game deals the same ids every time. Shuffling takes an
injectable random source for the same reason.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar
import random
import uuid

from ..errors import InvariantViolation
from .cards import CardDefinition, DECK_COMPOSITION, lookup_definition

T = TypeVar("T")

IdSource = Callable[[], str]


@dataclass(frozen=True)
class CardInstance:
    """
    A physical card dealt in a game.

    Created once per built deck and moved between zones for the rest of
    the round; never duplicated or lost.
    """
    instance_id: str
    definition_id: str

    @property
    def definition(self) -> CardDefinition:
        return lookup_definition(self.definition_id)


class InstanceIdGenerator:
    """
    Seeded counter producing collision-free instance ids.

    Use a distinct prefix per built deck (e.g. per round) to keep ids
    unique across decks.
    """

    def __init__(self, prefix: str = "card", start: int = 0):
        self.prefix = prefix
        self._counter = start

    def __call__(self) -> str:
        self._counter += 1
        return f"{self.prefix}-{self._counter:03d}"


def uuid_instance_id() -> str:
    """Random id source; fresh on every call."""
    return uuid.uuid4().hex


def build_deck(next_id: IdSource | None = None) -> list[CardInstance]:
    """
    Build an unshuffled deck following DECK_COMPOSITION.

    Args:
        next_id: Id source; defaults to random UUIDs so every call
            yields fresh ids.

    Returns:
        Cards in composition order.
    """
    next_id = next_id or uuid_instance_id
    deck = [
        CardInstance(instance_id=next_id(), definition_id=definition_id)
        for definition_id, copies in DECK_COMPOSITION.items()
        for _ in range(copies)
    ]

    if len({card.instance_id for card in deck}) != len(deck):
        raise InvariantViolation("Id source produced duplicate instance ids")

    return deck


def shuffle(cards: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly shuffled copy; the input is left untouched."""
    shuffled = list(cards)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled
