"""
Game State - Authoritative, server-side state for one room.

Design principles:
- Immutable: every dataclass is frozen; transitions return new objects
- Structurally shared: a transition copies only the branch it touches
  (players tuple -> player -> slots tuple), everything else is reused
- Complete truth: hidden cards live here; the view projector decides
  what each viewer may see
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum

from ..catalog import CardInstance, EffectKind
from ..errors import InvariantViolation

DREAM_SLOT_COUNT = 4
MIN_PLAYERS = 2
MAX_PLAYERS = 5
DEFAULT_TARGET_SCORE = 100


class GamePhase(Enum):
    """High-level round phases."""
    INITIAL_PEEK = "initial_peek"
    PLAYING = "playing"
    SCORING = "scoring"
    GAME_OVER = "game_over"


class TurnPhase(Enum):
    """Sub-phases of the active player's turn."""
    DRAW = "draw"
    ACTION = "action"
    TAKE_TWO_CHOOSE = "take_two_choose"
    EFFECT = "effect"


class AwaitingSelection(Enum):
    """Which slot selection a pending effect still needs."""
    ANY_SLOT = "any_slot"
    SECOND_SLOT = "second_slot"


@dataclass(frozen=True)
class SlotRef:
    """Address of one dream slot."""
    player_id: str
    slot_index: int


@dataclass(frozen=True)
class DreamSlot:
    """One face-down card position."""
    card: CardInstance | None = None
    revealed: bool = False

    def with_card(self, card: CardInstance | None) -> DreamSlot:
        return replace(self, card=card)

    def reveal(self) -> DreamSlot:
        return self if self.revealed else replace(self, revealed=True)


def _empty_slots() -> tuple[DreamSlot, ...]:
    return tuple(DreamSlot() for _ in range(DREAM_SLOT_COUNT))


@dataclass(frozen=True)
class PlayerState:
    """
    State for a single seated player.

    total_score accumulates across rounds; round_score is reset at the
    start of each round and filled in at round end.
    """
    player_id: str
    display_name: str
    seat_index: int
    slots: tuple[DreamSlot, ...] = field(default_factory=_empty_slots)
    connected: bool = True
    round_score: int = 0
    total_score: int = 0
    has_seen_initial_cards: bool = False

    def __post_init__(self):
        if len(self.slots) != DREAM_SLOT_COUNT:
            raise InvariantViolation(
                f"Player {self.player_id} has {len(self.slots)} dream slots"
            )

    def slot(self, index: int) -> DreamSlot:
        return self.slots[index]

    def with_slot(self, index: int, slot: DreamSlot) -> PlayerState:
        """Return new player state with one slot replaced."""
        new_slots = self.slots[:index] + (slot,) + self.slots[index + 1:]
        return replace(self, slots=new_slots)

    def cards(self) -> list[CardInstance]:
        return [slot.card for slot in self.slots if slot.card is not None]

    def _copy_with(self, **kwargs) -> PlayerState:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class PendingEffect:
    """
    Server-side record of a multi-step effect in flight.

    peeked_card is only ever set by a peek effect; blind swaps never
    populate it.
    """
    effect_kind: EffectKind
    source_player_id: str
    selected: tuple[SlotRef, ...] = ()
    peeked_card: CardInstance | None = None
    awaiting_selection: AwaitingSelection | None = AwaitingSelection.ANY_SLOT

    def _copy_with(self, **kwargs) -> PendingEffect:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class GameState:
    """
    Complete game state for one room at one version.

    Piles are tuples whose last element is the top card. All state
    changes go through the reducer; version grows by exactly one per
    accepted transition.
    """
    room_id: str
    players: tuple[PlayerState, ...]

    # Round phase
    phase: GamePhase = GamePhase.INITIAL_PEEK
    round_number: int = 1

    # Shared piles (top = last)
    deck: tuple[CardInstance, ...] = ()
    discard: tuple[CardInstance, ...] = ()

    # Turn state
    active_player_index: int = 0
    turn_phase: TurnPhase = TurnPhase.DRAW
    drawn_card: CardInstance | None = None
    drawn_from_discard: bool = False
    take_two_cards: tuple[CardInstance, CardInstance] | None = None
    pending_effect: PendingEffect | None = None

    wake_up_caller_id: str | None = None
    target_score: int = DEFAULT_TARGET_SCORE

    # Seed for deals and reshuffles (determinism)
    random_seed: int = 0

    version: int = 1

    @property
    def active_player(self) -> PlayerState:
        return self.players[self.active_player_index]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def top_discard(self) -> CardInstance | None:
        return self.discard[-1] if self.discard else None

    @property
    def round_over(self) -> bool:
        return self.phase in (GamePhase.SCORING, GamePhase.GAME_OVER)

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int | None:
        for index, p in enumerate(self.players):
            if p.player_id == player_id:
                return index
        return None

    def slot_card(self, ref: SlotRef) -> CardInstance | None:
        player = self.get_player(ref.player_id)
        if player is None:
            raise InvariantViolation(f"Slot reference to unseated player {ref.player_id}")
        return player.slot(ref.slot_index).card

    def with_player(self, player: PlayerState) -> GameState:
        """Return new state with updated player."""
        new_players = tuple(
            player if p.player_id == player.player_id else p
            for p in self.players
        )
        return self._copy_with(players=new_players)

    def all_cards(self) -> list[CardInstance]:
        """Every card in every zone, for conservation checks."""
        cards = list(self.deck) + list(self.discard)
        for player in self.players:
            cards.extend(player.cards())
        if self.drawn_card is not None:
            cards.append(self.drawn_card)
        if self.take_two_cards is not None:
            cards.extend(self.take_two_cards)
        return cards

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
