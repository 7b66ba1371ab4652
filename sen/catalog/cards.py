"""
Sen Cards - Static card definitions.

Every card carries a crow value (0-9, lower is better) and, for the
three special cards, an effect unlocked when the card is played from
the hand:
- take_two: draw two cards, keep one
- peek_any: look at any single dream card
- swap_blind: swap any two dream cards without looking

The deck composition is a design constant: 54 cards in total.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import CardNotFoundError

if TYPE_CHECKING:
    from .deck import CardInstance


class EffectKind(Enum):
    """Bonus action unlocked by a card played from the hand."""
    NONE = "none"
    TAKE_TWO = "take_two"
    PEEK_ANY = "peek_any"
    SWAP_BLIND = "swap_blind"


@dataclass(frozen=True)
class CardDefinition:
    """
    Immutable card definition owned by the catalog.

    Runtime cards are CardInstance objects that reference a definition
    by id.
    """
    id: str
    name: str
    crow_value: int
    effect_kind: EffectKind = EffectKind.NONE
    description: str = ""

    @property
    def has_effect(self) -> bool:
        return self.effect_kind is not EffectKind.NONE


# ============================================================================
# Catalog
# ============================================================================

CARD_DEFINITIONS: tuple[CardDefinition, ...] = (
    CardDefinition("crow_0", "Peaceful Sleep", 0, description="A dreamless slumber. Zero crows."),
    CardDefinition("crow_1", "Quiet Dream", 1, description="A whisper in the night."),
    CardDefinition("crow_2", "Soft Moonlight", 2, description="Gentle silver glow."),
    CardDefinition("crow_3", "Distant Stars", 3, description="Twinkling far away."),
    CardDefinition("crow_4", "Wandering Cloud", 4, description="Drifting through dreams."),
    CardDefinition("crow_5", "Restless Wind", 5, description="Stirring the night."),
    CardDefinition("crow_6", "Fading Echo", 6, description="Sounds of memory."),
    CardDefinition("crow_7", "Shadowy Figure", 7, description="A presence lurking."),
    CardDefinition("crow_8", "Dark Clouds", 8, description="Storm approaching."),
    CardDefinition("crow_9", "Nightmare", 9, description="Terror in the night. Nine crows!"),
    CardDefinition(
        "take_2", "Take Two", 7, EffectKind.TAKE_TWO,
        "Draw 2 cards, keep 1.",
    ),
    CardDefinition(
        "peek_1", "Peek One", 7, EffectKind.PEEK_ANY,
        "Peek at any dream card.",
    ),
    CardDefinition(
        "swap_2", "Swap Two", 8, EffectKind.SWAP_BLIND,
        "Swap any 2 dream cards blindly.",
    ),
)

# Copies of each definition in a freshly built deck (54 cards)
DECK_COMPOSITION: dict[str, int] = {
    "crow_0": 4,
    "crow_1": 4,
    "crow_2": 4,
    "crow_3": 4,
    "crow_4": 4,
    "crow_5": 4,
    "crow_6": 4,
    "crow_7": 4,
    "crow_8": 4,
    "crow_9": 9,
    "take_2": 3,
    "peek_1": 3,
    "swap_2": 3,
}

DECK_SIZE = sum(DECK_COMPOSITION.values())

_DEFINITIONS_BY_ID: dict[str, CardDefinition] = {card.id: card for card in CARD_DEFINITIONS}


def lookup_definition(definition_id: str) -> CardDefinition:
    """Get a card definition by id. Raises CardNotFoundError if unknown."""
    try:
        return _DEFINITIONS_BY_ID[definition_id]
    except KeyError:
        raise CardNotFoundError(definition_id) from None


def crow_value(card: CardInstance) -> int:
    return lookup_definition(card.definition_id).crow_value


def effect_kind(card: CardInstance) -> EffectKind:
    return lookup_definition(card.definition_id).effect_kind
