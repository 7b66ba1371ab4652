"""
Card Catalog - Static card data and deck construction.

Read-only and shared by every room; needs no synchronization.
"""

from .cards import (
    EffectKind,
    CardDefinition,
    CARD_DEFINITIONS,
    DECK_COMPOSITION,
    DECK_SIZE,
    lookup_definition,
    crow_value,
    effect_kind,
)
from .deck import CardInstance, InstanceIdGenerator, build_deck, shuffle, uuid_instance_id

__all__ = [
    "EffectKind",
    "CardDefinition",
    "CARD_DEFINITIONS",
    "DECK_COMPOSITION",
    "DECK_SIZE",
    "lookup_definition",
    "crow_value",
    "effect_kind",
    "CardInstance",
    "InstanceIdGenerator",
    "build_deck",
    "shuffle",
    "uuid_instance_id",
]
