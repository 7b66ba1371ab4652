"""
Tests for the card catalog and deck construction.
"""

from collections import Counter
import random

import pytest

from ..catalog import (
    CARD_DEFINITIONS,
    DECK_COMPOSITION,
    DECK_SIZE,
    CardInstance,
    EffectKind,
    InstanceIdGenerator,
    build_deck,
    crow_value,
    effect_kind,
    lookup_definition,
    shuffle,
)
from ..errors import CardNotFoundError, InvariantViolation


class TestDefinitions:
    """Tests for static card data."""

    def test_crow_cards_score_their_number(self):
        for n in range(10):
            assert lookup_definition(f"crow_{n}").crow_value == n

    def test_special_cards(self):
        assert lookup_definition("take_2").effect_kind is EffectKind.TAKE_TWO
        assert lookup_definition("peek_1").effect_kind is EffectKind.PEEK_ANY
        assert lookup_definition("swap_2").effect_kind is EffectKind.SWAP_BLIND
        assert lookup_definition("take_2").crow_value == 7
        assert lookup_definition("peek_1").crow_value == 7
        assert lookup_definition("swap_2").crow_value == 8

    def test_plain_cards_have_no_effect(self):
        plain = [d for d in CARD_DEFINITIONS if d.id.startswith("crow_")]
        assert plain
        assert not any(d.has_effect for d in plain)

    def test_unknown_definition_raises(self):
        with pytest.raises(CardNotFoundError) as exc:
            lookup_definition("crow_10")
        assert exc.value.definition_id == "crow_10"
        # Callers may treat it as a lookup miss
        assert isinstance(exc.value, LookupError)

    def test_instance_helpers(self):
        card = CardInstance("x", "swap_2")
        assert crow_value(card) == 8
        assert effect_kind(card) is EffectKind.SWAP_BLIND
        assert card.definition.name == "Swap Two"


class TestDeck:
    """Tests for building and shuffling decks."""

    def test_deck_size(self):
        assert DECK_SIZE == 54
        assert len(build_deck()) == DECK_SIZE

    def test_deck_follows_composition(self):
        counts = Counter(card.definition_id for card in build_deck())
        assert counts == Counter(DECK_COMPOSITION)

    def test_every_definition_is_dealt(self):
        assert set(DECK_COMPOSITION) == {d.id for d in CARD_DEFINITIONS}

    def test_instance_ids_unique(self):
        deck = build_deck()
        assert len({card.instance_id for card in deck}) == len(deck)

    def test_default_ids_fresh_per_build(self):
        first = {card.instance_id for card in build_deck()}
        second = {card.instance_id for card in build_deck()}
        assert not first & second

    def test_counter_ids(self):
        deck = build_deck(InstanceIdGenerator(prefix="r1"))
        assert deck[0].instance_id == "r1-001"
        assert deck[-1].instance_id == "r1-054"

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvariantViolation):
            build_deck(lambda: "same")

    def test_shuffle_is_permutation(self):
        deck = build_deck()
        shuffled = shuffle(deck, random.Random(3))
        assert sorted(c.instance_id for c in shuffled) == sorted(c.instance_id for c in deck)

    def test_shuffle_leaves_input_untouched(self):
        deck = build_deck()
        before = list(deck)
        shuffle(deck, random.Random(3))
        assert deck == before

    def test_seeded_shuffle_is_deterministic(self):
        deck = build_deck(InstanceIdGenerator())
        assert shuffle(deck, random.Random(42)) == shuffle(deck, random.Random(42))
