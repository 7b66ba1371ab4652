"""
Reducer - Applies validated actions to game state.

The reducer is the single point of state transition.
All in-round state changes must go through apply_action().

Design principles:
- Pure function: (state, actor, action) -> new_state
- Validates before applying; a rejected action returns the input state
  untouched (same object, same version)
- Each accepted action bumps version by exactly one
- Structural breaches (popping an empty pile) raise InvariantViolation
  and are never patched over
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import random

from ..catalog import CardInstance, EffectKind, effect_kind, shuffle
from ..errors import InvariantViolation
from .action import (
    Action,
    ActionResult,
    ActionType,
    ReplaceDreamSlot,
    SelectSlot,
    ChooseTakeTwoCard,
)
from .scoring import end_round
from .state import AwaitingSelection, GamePhase, GameState, PendingEffect, SlotRef, TurnPhase
from .validator import validate_action

logger = logging.getLogger(__name__)

Handler = Callable[[GameState, str, Action, random.Random], ActionResult]


def reshuffle_rng(state: GameState) -> random.Random:
    """Random source derived from the seed and version of the state being reduced."""
    return random.Random(f"{state.random_seed}:{state.version}")


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState. An explicit rng replaces the
    seed-derived source used for reshuffles (handy in tests).
    """
    rng: random.Random | None = None

    def apply(self, state: GameState, player_id: str, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or the rejection reason.
        """
        validity = validate_action(state, player_id, action)
        if not validity:
            logger.debug(
                "Rejected %s by %s in room %s: %s",
                action.action_type.value, player_id, state.room_id, validity.reason.value,
            )
            return ActionResult.failure(
                f"{action.action_type.value} rejected: {validity.reason.value}",
                reason=validity.reason,
            )

        handler = self._get_handler(action.action_type)
        result = handler(state, player_id, action, self.rng or reshuffle_rng(state))
        result.new_state = result.new_state._copy_with(version=state.version + 1)
        return result

    def _get_handler(self, action_type: ActionType) -> Handler:
        handlers = {
            ActionType.ACKNOWLEDGE_INITIAL_PEEK: self._handle_acknowledge,
            ActionType.DRAW_FROM_DECK: self._handle_draw_from_deck,
            ActionType.DRAW_FROM_DISCARD: self._handle_draw_from_discard,
            ActionType.REPLACE_DREAM_SLOT: self._handle_replace,
            ActionType.DISCARD_DRAWN_CARD: self._handle_discard_drawn,
            ActionType.USE_CARD_EFFECT: self._handle_use_effect,
            ActionType.DECLARE_WAKE_UP: self._handle_wake_up,
            ActionType.SELECT_SLOT: self._handle_select_slot,
            ActionType.CANCEL_EFFECT: self._handle_cancel_effect,
            ActionType.CHOOSE_TAKE_TWO_CARD: self._handle_choose_take_two,
        }
        try:
            return handlers[action_type]
        except KeyError:
            raise TypeError(f"No handler for action type: {action_type}") from None

    # =========================================================================
    # Initial peek
    # =========================================================================

    def _handle_acknowledge(self, state, player_id, action, rng) -> ActionResult:
        player = state.get_player(player_id)
        new_state = state.with_player(player._copy_with(has_seen_initial_cards=True))
        changes = [f"{player.display_name} has seen their initial cards"]

        if all(p.has_seen_initial_cards for p in new_state.players):
            new_state = new_state._copy_with(
                phase=GamePhase.PLAYING,
                turn_phase=TurnPhase.DRAW,
                active_player_index=0,
            )
            changes.append("All players ready, play begins")

        return ActionResult.success_with_state(new_state, changes=changes)

    # =========================================================================
    # Draw
    # =========================================================================

    def _handle_draw_from_deck(self, state, player_id, action, rng) -> ActionResult:
        card, deck = _pop(state.deck, "deck")
        new_state = state._copy_with(
            deck=deck,
            drawn_card=card,
            drawn_from_discard=False,
            turn_phase=TurnPhase.ACTION,
        )
        return ActionResult.success_with_state(new_state, changes=[f"{player_id} drew from the deck"])

    def _handle_draw_from_discard(self, state, player_id, action, rng) -> ActionResult:
        card, discard = _pop(state.discard, "discard pile")
        new_state = state._copy_with(
            discard=discard,
            drawn_card=card,
            drawn_from_discard=True,
            turn_phase=TurnPhase.ACTION,
        )
        return ActionResult.success_with_state(
            new_state, changes=[f"{player_id} took {card.definition.name} from the discard pile"]
        )

    # =========================================================================
    # Action (turn-ending)
    # =========================================================================

    def _handle_replace(self, state, player_id, action: ReplaceDreamSlot, rng) -> ActionResult:
        player = state.get_player(player_id)
        slot = player.slot(action.slot_index)
        discard = state.discard + ((slot.card,) if slot.card is not None else ())

        new_state = state.with_player(
            player.with_slot(action.slot_index, slot.with_card(state.drawn_card))
        )._copy_with(discard=discard, drawn_card=None)

        return ActionResult.success_with_state(
            _end_turn(new_state, rng),
            changes=[f"{player_id} replaced dream slot {action.slot_index}"],
        )

    def _handle_discard_drawn(self, state, player_id, action, rng) -> ActionResult:
        new_state = state._copy_with(
            discard=state.discard + (state.drawn_card,),
            drawn_card=None,
        )
        return ActionResult.success_with_state(
            _end_turn(new_state, rng),
            changes=[f"{player_id} discarded {state.drawn_card.definition.name}"],
        )

    # =========================================================================
    # Effects
    # =========================================================================

    def _handle_use_effect(self, state, player_id, action, rng) -> ActionResult:
        card = state.drawn_card
        kind = effect_kind(card)
        new_state = state._copy_with(
            discard=state.discard + (card,),
            drawn_card=None,
        )

        if kind is EffectKind.TAKE_TWO:
            if len(new_state.deck) < 2:
                return ActionResult.success_with_state(
                    _end_turn(new_state, rng),
                    changes=[f"{player_id} played {card.definition.name} but the deck is too thin"],
                )
            first, deck = _pop(new_state.deck, "deck")
            second, deck = _pop(deck, "deck")
            new_state = new_state._copy_with(
                deck=deck,
                take_two_cards=(first, second),
                turn_phase=TurnPhase.TAKE_TWO_CHOOSE,
            )
        else:
            new_state = new_state._copy_with(
                pending_effect=PendingEffect(effect_kind=kind, source_player_id=player_id),
                turn_phase=TurnPhase.EFFECT,
            )

        return ActionResult.success_with_state(
            new_state, changes=[f"{player_id} played {card.definition.name}"]
        )

    def _handle_select_slot(self, state, player_id, action: SelectSlot, rng) -> ActionResult:
        pending = state.pending_effect
        ref = SlotRef(action.target_player_id, action.slot_index)
        selected = pending.selected + (ref,)

        if pending.effect_kind is EffectKind.PEEK_ANY:
            new_pending = pending._copy_with(
                selected=selected,
                peeked_card=state.slot_card(ref),
                awaiting_selection=None,
            )
            return ActionResult.success_with_state(
                state._copy_with(pending_effect=new_pending),
                changes=[f"{player_id} peeked at {ref.player_id}'s slot {ref.slot_index}"],
            )

        if pending.effect_kind is EffectKind.SWAP_BLIND:
            if len(selected) < 2:
                new_pending = pending._copy_with(
                    selected=selected,
                    awaiting_selection=AwaitingSelection.SECOND_SLOT,
                )
                return ActionResult.success_with_state(state._copy_with(pending_effect=new_pending))

            first, second = selected
            new_state = _swap_slots(state, first, second)._copy_with(pending_effect=None)
            return ActionResult.success_with_state(
                _end_turn(new_state, rng),
                changes=[
                    f"{player_id} swapped {first.player_id}'s slot {first.slot_index} "
                    f"with {second.player_id}'s slot {second.slot_index}"
                ],
            )

        raise InvariantViolation(f"Pending effect of kind {pending.effect_kind.value} cannot take selections")

    def _handle_cancel_effect(self, state, player_id, action, rng) -> ActionResult:
        new_state = state._copy_with(pending_effect=None)
        return ActionResult.success_with_state(
            _end_turn(new_state, rng), changes=[f"{player_id} closed their effect"]
        )

    def _handle_choose_take_two(self, state, player_id, action: ChooseTakeTwoCard, rng) -> ActionResult:
        kept = state.take_two_cards[action.card_index]
        other = state.take_two_cards[1 - action.card_index]
        new_state = state._copy_with(
            discard=state.discard + (other,),
            drawn_card=kept,
            drawn_from_discard=False,
            take_two_cards=None,
            turn_phase=TurnPhase.ACTION,
        )
        return ActionResult.success_with_state(
            new_state, changes=[f"{player_id} kept one card and discarded {other.definition.name}"]
        )

    # =========================================================================
    # Wake-up
    # =========================================================================

    def _handle_wake_up(self, state, player_id, action, rng) -> ActionResult:
        new_state = end_round(state._copy_with(wake_up_caller_id=player_id))
        return ActionResult.success_with_state(
            new_state, changes=[f"{player_id} called wake-up, round over"]
        )


# =============================================================================
# Helpers
# =============================================================================

def _pop(pile: tuple[CardInstance, ...], name: str) -> tuple[CardInstance, tuple[CardInstance, ...]]:
    """Return (top card, remaining pile)."""
    if not pile:
        raise InvariantViolation(f"Cannot take a card from an empty {name}")
    return pile[-1], pile[:-1]


def _swap_slots(state: GameState, first: SlotRef, second: SlotRef) -> GameState:
    """Exchange the card references of two slots, whoever owns them."""
    first_card = state.slot_card(first)
    second_card = state.slot_card(second)

    owner = state.get_player(first.player_id)
    state = state.with_player(
        owner.with_slot(first.slot_index, owner.slot(first.slot_index).with_card(second_card))
    )
    # Re-read: both refs may belong to the same player
    owner = state.get_player(second.player_id)
    return state.with_player(
        owner.with_slot(second.slot_index, owner.slot(second.slot_index).with_card(first_card))
    )


def _end_turn(state: GameState, rng: random.Random) -> GameState:
    """
    Turn-end bookkeeping: clear the turn, pass to the next seat and
    rebuild an empty deck from all but the top discard.
    """
    state = state._copy_with(
        turn_phase=TurnPhase.DRAW,
        drawn_card=None,
        drawn_from_discard=False,
        pending_effect=None,
        take_two_cards=None,
        active_player_index=(state.active_player_index + 1) % state.num_players,
    )

    if not state.deck and len(state.discard) > 1:
        top = state.discard[-1]
        logger.debug(
            "Room %s: reshuffling %d discards into the deck",
            state.room_id, len(state.discard) - 1,
        )
        state = state._copy_with(
            deck=tuple(shuffle(state.discard[:-1], rng)),
            discard=(top,),
        )

    return state


def set_player_connected(state: GameState, player_id: str, connected: bool) -> GameState:
    """
    Host-driven transition recording a player's connection status.

    Returns the state unchanged when nothing changes.
    """
    player = state.get_player(player_id)
    if player is None or player.connected == connected:
        return state
    return state.with_player(player._copy_with(connected=connected))._copy_with(
        version=state.version + 1
    )


def apply_action(
    state: GameState,
    player_id: str,
    action: Action,
    rng: random.Random | None = None,
) -> GameState:
    """
    Convenience function to apply an action.

    Returns the next state, or the unchanged input state when the action
    is rejected. Call validate_action first to learn why.
    """
    result = Reducer(rng=rng).apply(state, player_id, action)
    return result.new_state if result.success else state
