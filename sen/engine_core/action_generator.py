"""
Action Generator - Enumerates every legal action for a player.

Used by:
1. Bots to pick moves
2. Clients to highlight what is available
3. Property tests that drive random games

Candidates are expanded over all slots and targets, then filtered
through the validator, so generation can never disagree with it.
"""

from __future__ import annotations

from .action import (
    Action,
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
from .state import DREAM_SLOT_COUNT, GamePhase, GameState, TurnPhase
from .validator import is_action_valid


def _candidates(state: GameState) -> list[Action]:
    if state.phase is GamePhase.INITIAL_PEEK:
        return [AcknowledgeInitialPeek()]
    if state.phase is not GamePhase.PLAYING:
        return []

    if state.pending_effect is not None:
        return [
            SelectSlot(target_player_id=p.player_id, slot_index=i)
            for p in state.players
            for i in range(DREAM_SLOT_COUNT)
        ] + [CancelEffect()]

    if state.turn_phase is TurnPhase.DRAW:
        return [DrawFromDeck(), DrawFromDiscard(), DeclareWakeUp()]
    if state.turn_phase is TurnPhase.TAKE_TWO_CHOOSE:
        return [ChooseTakeTwoCard(card_index=0), ChooseTakeTwoCard(card_index=1)]
    if state.turn_phase is TurnPhase.ACTION:
        return [ReplaceDreamSlot(slot_index=i) for i in range(DREAM_SLOT_COUNT)] + [
            DiscardDrawnCard(),
            UseCardEffect(),
        ]
    return []


def legal_actions(state: GameState, player_id: str) -> list[Action]:
    """All actions player_id may take right now, in a stable order."""
    return [a for a in _candidates(state) if is_action_valid(state, player_id, a)]


def next_actor(state: GameState) -> str | None:
    """
    The player the game is waiting on, or None once the round is over.

    During the initial peek this is the first player who has not yet
    acknowledged.
    """
    if state.phase is GamePhase.INITIAL_PEEK:
        for p in state.players:
            if not p.has_seen_initial_cards:
                return p.player_id
        return None
    if state.phase is not GamePhase.PLAYING:
        return None
    if state.pending_effect is not None:
        return state.pending_effect.source_player_id
    return state.active_player.player_id
