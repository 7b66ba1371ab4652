"""
Action Validator - Pure legality check.

(state, actor, action) -> Validity. Never mutates state and has no side
effects; the reducer and the host both call it before applying anything.
"""

from __future__ import annotations
from typing import Callable

from ..catalog import EffectKind, effect_kind
from .action import (
    Action,
    ActionType,
    RejectReason,
    Validity,
    VALID,
    AcknowledgeInitialPeek,
    DrawFromDeck,
    DrawFromDiscard,
    ReplaceDreamSlot,
    DiscardDrawnCard,
    UseCardEffect,
    DeclareWakeUp,
    SelectSlot,
    CancelEffect,
    ChooseTakeTwoCard,
)
from .state import DREAM_SLOT_COUNT, AwaitingSelection, GamePhase, GameState, PlayerState, SlotRef, TurnPhase

Check = Callable[[GameState, PlayerState, Action], Validity]


def validate_action(state: GameState, player_id: str, action: Action) -> Validity:
    """
    Check whether player_id may take action in state.

    Returns VALID, or Validity.invalid(reason).
    """
    player = state.get_player(player_id)
    if player is None:
        return Validity.invalid(RejectReason.UNKNOWN_PLAYER)

    check = _CHECKS.get(action.action_type)
    if check is None:
        raise TypeError(f"No validator for action type: {action.action_type}")
    return check(state, player, action)


def is_action_valid(state: GameState, player_id: str, action: Action) -> bool:
    return validate_action(state, player_id, action).is_valid


def _slot_in_range(slot_index: int) -> bool:
    return 0 <= slot_index < DREAM_SLOT_COUNT


def _check_turn(state: GameState, player: PlayerState, turn_phase: TurnPhase) -> Validity:
    """Shared preconditions for the active player's in-round actions."""
    if state.phase is not GamePhase.PLAYING:
        return Validity.invalid(RejectReason.WRONG_PHASE)
    if state.active_player.player_id != player.player_id:
        return Validity.invalid(RejectReason.NOT_YOUR_TURN)
    if state.turn_phase is not turn_phase:
        return Validity.invalid(RejectReason.WRONG_TURN_PHASE)
    return VALID


def _check_holding(state: GameState, player: PlayerState) -> Validity:
    validity = _check_turn(state, player, TurnPhase.ACTION)
    if validity and state.drawn_card is None:
        return Validity.invalid(RejectReason.WRONG_TURN_PHASE)
    return validity


def _check_pending_owner(state: GameState, player: PlayerState) -> Validity:
    if state.phase is not GamePhase.PLAYING:
        return Validity.invalid(RejectReason.WRONG_PHASE)
    if state.pending_effect is None:
        return Validity.invalid(RejectReason.NO_PENDING_EFFECT)
    if state.pending_effect.source_player_id != player.player_id:
        return Validity.invalid(RejectReason.NOT_YOUR_TURN)
    return VALID


# =============================================================================
# Per-action checks
# =============================================================================

def _check_acknowledge(state: GameState, player: PlayerState, action: AcknowledgeInitialPeek) -> Validity:
    if state.phase is not GamePhase.INITIAL_PEEK:
        return Validity.invalid(RejectReason.WRONG_PHASE)
    if player.has_seen_initial_cards:
        return Validity.invalid(RejectReason.ALREADY_ACKNOWLEDGED)
    return VALID


def _check_draw_from_deck(state: GameState, player: PlayerState, action: DrawFromDeck) -> Validity:
    validity = _check_turn(state, player, TurnPhase.DRAW)
    if validity and not state.deck:
        return Validity.invalid(RejectReason.EMPTY_DECK)
    return validity


def _check_draw_from_discard(state: GameState, player: PlayerState, action: DrawFromDiscard) -> Validity:
    validity = _check_turn(state, player, TurnPhase.DRAW)
    if validity and not state.discard:
        return Validity.invalid(RejectReason.EMPTY_DISCARD)
    return validity


def _check_replace(state: GameState, player: PlayerState, action: ReplaceDreamSlot) -> Validity:
    validity = _check_holding(state, player)
    if validity and not _slot_in_range(action.slot_index):
        return Validity.invalid(RejectReason.OUT_OF_RANGE)
    return validity


def _check_discard_drawn(state: GameState, player: PlayerState, action: DiscardDrawnCard) -> Validity:
    validity = _check_holding(state, player)
    if validity and state.drawn_from_discard:
        return Validity.invalid(RejectReason.MUST_REPLACE)
    return validity


def _check_use_effect(state: GameState, player: PlayerState, action: UseCardEffect) -> Validity:
    validity = _check_holding(state, player)
    if not validity:
        return validity
    if state.drawn_from_discard:
        return Validity.invalid(RejectReason.MUST_REPLACE)
    if effect_kind(state.drawn_card) is EffectKind.NONE:
        return Validity.invalid(RejectReason.EFFECT_MISMATCH)
    return VALID


def _check_wake_up(state: GameState, player: PlayerState, action: DeclareWakeUp) -> Validity:
    return _check_turn(state, player, TurnPhase.DRAW)


def _check_select_slot(state: GameState, player: PlayerState, action: SelectSlot) -> Validity:
    validity = _check_pending_owner(state, player)
    if not validity:
        return validity

    pending = state.pending_effect
    if pending.awaiting_selection is None:
        return Validity.invalid(RejectReason.EFFECT_MISMATCH)
    if state.get_player(action.target_player_id) is None:
        return Validity.invalid(RejectReason.OUT_OF_RANGE)
    if not _slot_in_range(action.slot_index):
        return Validity.invalid(RejectReason.OUT_OF_RANGE)

    ref = SlotRef(action.target_player_id, action.slot_index)
    if pending.awaiting_selection is AwaitingSelection.SECOND_SLOT and ref in pending.selected:
        return Validity.invalid(RejectReason.EFFECT_MISMATCH)
    return VALID


def _check_cancel(state: GameState, player: PlayerState, action: CancelEffect) -> Validity:
    return _check_pending_owner(state, player)


def _check_choose_take_two(state: GameState, player: PlayerState, action: ChooseTakeTwoCard) -> Validity:
    validity = _check_turn(state, player, TurnPhase.TAKE_TWO_CHOOSE)
    if not validity:
        return validity
    if state.take_two_cards is None:
        return Validity.invalid(RejectReason.NO_PENDING_EFFECT)
    if action.card_index not in (0, 1):
        return Validity.invalid(RejectReason.OUT_OF_RANGE)
    return VALID


_CHECKS: dict[ActionType, Check] = {
    ActionType.ACKNOWLEDGE_INITIAL_PEEK: _check_acknowledge,
    ActionType.DRAW_FROM_DECK: _check_draw_from_deck,
    ActionType.DRAW_FROM_DISCARD: _check_draw_from_discard,
    ActionType.REPLACE_DREAM_SLOT: _check_replace,
    ActionType.DISCARD_DRAWN_CARD: _check_discard_drawn,
    ActionType.USE_CARD_EFFECT: _check_use_effect,
    ActionType.DECLARE_WAKE_UP: _check_wake_up,
    ActionType.SELECT_SLOT: _check_select_slot,
    ActionType.CANCEL_EFFECT: _check_cancel,
    ActionType.CHOOSE_TAKE_TWO_CARD: _check_choose_take_two,
}
