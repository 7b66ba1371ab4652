"""
Engine Core - Authoritative game state, rules and projections.

The host:
1. Creates a state with create_initial_state
2. Validates each incoming action with validate_action
3. Applies it with apply_action (version + 1)
4. Commits under optimistic concurrency
5. Projects the result per viewer with derive_view

Everything here is synchronous and side-effect free.
"""

from .state import (
    GameState,
    PlayerState,
    DreamSlot,
    PendingEffect,
    SlotRef,
    GamePhase,
    TurnPhase,
    AwaitingSelection,
    DREAM_SLOT_COUNT,
    DEFAULT_TARGET_SCORE,
)
from .action import (
    Action,
    ActionType,
    ActionResult,
    RejectReason,
    Validity,
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
    action_from_dict,
    action_to_dict,
)
from .validator import validate_action, is_action_valid
from .reducer import Reducer, apply_action, set_player_connected
from .scoring import end_round, winners, WAKE_UP_PENALTY
from .setup import create_initial_state, start_new_round
from .view import PlayerView, derive_view
from .action_generator import legal_actions, next_actor

__all__ = [
    "GameState",
    "PlayerState",
    "DreamSlot",
    "PendingEffect",
    "SlotRef",
    "GamePhase",
    "TurnPhase",
    "AwaitingSelection",
    "DREAM_SLOT_COUNT",
    "DEFAULT_TARGET_SCORE",
    "Action",
    "ActionType",
    "ActionResult",
    "RejectReason",
    "Validity",
    "AcknowledgeInitialPeek",
    "DrawFromDeck",
    "DrawFromDiscard",
    "ReplaceDreamSlot",
    "DiscardDrawnCard",
    "UseCardEffect",
    "DeclareWakeUp",
    "SelectSlot",
    "CancelEffect",
    "ChooseTakeTwoCard",
    "action_from_dict",
    "action_to_dict",
    "validate_action",
    "is_action_valid",
    "Reducer",
    "apply_action",
    "set_player_connected",
    "end_round",
    "winners",
    "WAKE_UP_PENALTY",
    "create_initial_state",
    "start_new_round",
    "PlayerView",
    "derive_view",
    "legal_actions",
    "next_actor",
]
