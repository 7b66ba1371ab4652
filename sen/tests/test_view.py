"""
Tests for the view projector.

The view is the only thing a client ever receives, so these tests
check what each viewer can and cannot see.
"""

from ..catalog import EffectKind
from ..engine_core.action import (
    AcknowledgeInitialPeek,
    DeclareWakeUp,
    DrawFromDeck,
    SelectSlot,
    UseCardEffect,
)
from ..engine_core.reducer import apply_action
from ..engine_core.state import GamePhase, TurnPhase
from ..engine_core.view import FACE_DOWN, derive_view, visible_instance_ids
from .test_reducer import play


def ids_of(cards):
    return {card.instance_id for card in cards}


def slot_ids(state, player_id):
    return ids_of(state.get_player(player_id).cards())


class TestInitialPeek:
    """Each player sees two of their own cards until they acknowledge."""

    def test_own_first_and_last_slots_visible(self, two_player_state):
        view = derive_view(two_player_state, "alice")
        alice = two_player_state.get_player("alice")

        assert view.my_slots[0].card.definition == alice.slot(0).card.definition
        assert view.my_slots[3].card.instance_id == alice.slot(3).card.instance_id
        assert view.my_slots[1].card == FACE_DOWN
        assert view.my_slots[2].card == FACE_DOWN

    def test_opponent_slots_hidden(self, two_player_state):
        view = derive_view(two_player_state, "alice")
        bob = next(p for p in view.players if p.player_id == "bob")
        assert all(slot.card == FACE_DOWN for slot in bob.slots)
        assert not visible_instance_ids(view) & slot_ids(two_player_state, "bob")

    def test_peek_ends_on_acknowledge(self, two_player_state):
        state = apply_action(two_player_state, "alice", AcknowledgeInitialPeek())
        view = derive_view(state, "alice")
        assert all(slot.card == FACE_DOWN for slot in view.my_slots)
        assert view.has_seen_initial_cards

        # Bob has not acknowledged yet and still sees his pair
        assert derive_view(state, "bob").my_slots[0].card.face_up

    def test_peek_does_not_flip_revealed(self, two_player_state):
        view = derive_view(two_player_state, "alice")
        assert not any(slot.revealed for slot in view.my_slots)


class TestHiddenInformation:
    """Cards that must never reach the wrong viewer."""

    def test_face_down_carries_no_identity(self, playing_state):
        view = derive_view(playing_state, "alice")
        for player in view.players:
            for slot in player.slots:
                assert slot.has_card
                assert slot.card.instance_id is None
                assert slot.card.definition is None

    def test_deck_exposes_only_its_size(self, playing_state):
        view = derive_view(playing_state, "alice")
        assert view.deck_count == len(playing_state.deck)
        assert not visible_instance_ids(view) & ids_of(playing_state.deck)

    def test_top_discard_is_public(self, playing_state):
        top = playing_state.top_discard
        for viewer in ("alice", "bob", "spectator"):
            view = derive_view(playing_state, viewer)
            assert view.top_discard.instance_id == top.instance_id
            assert view.discard_count == len(playing_state.discard)

    def test_drawn_card_only_for_active_player(self, playing_state):
        state = apply_action(playing_state, "alice", DrawFromDeck())

        mine = derive_view(state, "alice")
        assert mine.is_my_turn
        assert mine.drawn_card.instance_id == state.drawn_card.instance_id

        theirs = derive_view(state, "bob")
        assert not theirs.is_my_turn
        assert theirs.has_drawn_card
        assert theirs.drawn_card is None
        assert state.drawn_card.instance_id not in visible_instance_ids(theirs)

    def test_take_two_only_for_active_player(self, factory):
        state = factory.state(deck=["crow_3", "crow_0", "take_2"])
        state = play(state, ("alice", DrawFromDeck()), ("alice", UseCardEffect()))
        assert state.turn_phase is TurnPhase.TAKE_TWO_CHOOSE

        assert len(derive_view(state, "alice").take_two_cards) == 2
        bob_view = derive_view(state, "bob")
        assert bob_view.take_two_cards is None
        assert not visible_instance_ids(bob_view) & ids_of(state.take_two_cards)

    def test_pending_effect_only_for_source(self, factory):
        state = factory.state(deck=["crow_0", "peek_1"])
        state = play(
            state,
            ("alice", DrawFromDeck()),
            ("alice", UseCardEffect()),
            ("alice", SelectSlot("bob", 2)),
        )
        peeked = state.pending_effect.peeked_card

        pending = derive_view(state, "alice").pending_effect
        assert pending.effect_kind is EffectKind.PEEK_ANY
        assert pending.peeked_card.instance_id == peeked.instance_id

        bob_view = derive_view(state, "bob")
        assert bob_view.pending_effect is None
        assert peeked.instance_id not in visible_instance_ids(bob_view)

    def test_peeked_slot_stays_face_down(self, factory):
        state = factory.state(deck=["crow_0", "peek_1"])
        state = play(
            state,
            ("alice", DrawFromDeck()),
            ("alice", UseCardEffect()),
            ("alice", SelectSlot("bob", 2)),
        )
        bob = next(p for p in derive_view(state, "alice").players if p.player_id == "bob")
        assert bob.slots[2].card == FACE_DOWN

    def test_spectator_sees_public_state_only(self, playing_state):
        view = derive_view(playing_state, "spectator")
        assert view.my_slots == ()
        assert not view.is_my_turn
        assert visible_instance_ids(view) == {playing_state.top_discard.instance_id}


class TestRoundOver:
    """Everything is face up once the round ends."""

    def test_all_slots_visible_to_everyone(self, playing_state):
        state = apply_action(playing_state, "alice", DeclareWakeUp())
        assert state.phase is GamePhase.SCORING

        all_slot_ids = slot_ids(state, "alice") | slot_ids(state, "bob")
        for viewer in ("alice", "bob"):
            view = derive_view(state, viewer)
            assert all_slot_ids <= visible_instance_ids(view)
            assert view.wake_up_caller_id == "alice"


class TestSummary:
    """Public fields of the view."""

    def test_turn_fields(self, playing_state):
        view = derive_view(playing_state, "bob")
        assert view.active_player_id == "alice"
        assert view.active_player_index == 0
        assert view.turn_phase is TurnPhase.DRAW
        assert view.version == playing_state.version
        assert [p.is_active for p in view.players] == [True, False]

    def test_scores_are_public(self, factory):
        state = factory.state()
        state = state.with_player(state.get_player("bob")._copy_with(total_score=12))
        view = derive_view(state, "alice")
        assert next(p for p in view.players if p.player_id == "bob").total_score == 12
