"""
Pytest fixtures for Sen tests.
"""

import itertools

import pytest

from ..catalog import CardInstance
from ..engine_core.action import AcknowledgeInitialPeek
from ..engine_core.reducer import apply_action
from ..engine_core.setup import create_initial_state
from ..engine_core.state import DreamSlot, GamePhase, GameState, PlayerState


class StateFactory:
    """
    Builds hand-made states with known cards.

    Cards are given by definition id. Piles list the bottom card first,
    so the last entry is the top of the pile.
    """

    def __init__(self):
        self._counter = itertools.count(1)

    def card(self, definition_id: str) -> CardInstance:
        return CardInstance(f"{definition_id}#{next(self._counter)}", definition_id)

    def state(
        self,
        hands: dict[str, list[str]] | None = None,
        deck: list[str] | None = None,
        discard: list[str] | None = None,
        phase: GamePhase = GamePhase.PLAYING,
        **overrides,
    ) -> GameState:
        hands = hands or {
            "alice": ["crow_1", "crow_2", "crow_3", "crow_4"],
            "bob": ["crow_5", "crow_6", "crow_7", "crow_8"],
        }
        players = tuple(
            PlayerState(
                player_id=player_id,
                display_name=player_id.title(),
                seat_index=seat,
                slots=tuple(DreamSlot(card=self.card(d)) for d in definitions),
                has_seen_initial_cards=phase is not GamePhase.INITIAL_PEEK,
            )
            for seat, (player_id, definitions) in enumerate(hands.items())
        )
        return GameState(
            room_id="room-test",
            players=players,
            phase=phase,
            deck=tuple(self.card(d) for d in (deck if deck is not None else ["crow_0", "crow_9"])),
            discard=tuple(self.card(d) for d in (discard if discard is not None else ["crow_5"])),
            random_seed=1234,
            **overrides,
        )


@pytest.fixture
def factory() -> StateFactory:
    """Hand-built states with fixed slots."""
    return StateFactory()


@pytest.fixture
def two_player_state() -> GameState:
    """A freshly dealt 2-player game with a known seed."""
    return create_initial_state("room-1", [("alice", "Alice"), ("bob", "Bob")], seed=7)


@pytest.fixture
def three_player_state() -> GameState:
    """A freshly dealt 3-player game with a known seed."""
    return create_initial_state(
        "room-3", [("alice", "Alice"), ("bob", "Bob"), ("carol", "Carol")], seed=11
    )


@pytest.fixture
def playing_state(two_player_state: GameState) -> GameState:
    """The 2-player game after both players acknowledged their peek."""
    state = apply_action(two_player_state, "alice", AcknowledgeInitialPeek())
    return apply_action(state, "bob", AcknowledgeInitialPeek())
