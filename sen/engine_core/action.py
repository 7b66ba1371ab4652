"""
Action System - The closed action vocabulary, validity and results.

Every player intent is one of ten frozen action classes; Action is
their union. Each class carries its ActionType tag, which is also the
"type" field of the wire form.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState


class ActionType(Enum):
    """Tags of the action vocabulary."""
    ACKNOWLEDGE_INITIAL_PEEK = "acknowledge_initial_peek"
    DRAW_FROM_DECK = "draw_from_deck"
    DRAW_FROM_DISCARD = "draw_from_discard"
    REPLACE_DREAM_SLOT = "replace_dream_slot"
    DISCARD_DRAWN_CARD = "discard_drawn_card"
    USE_CARD_EFFECT = "use_card_effect"
    DECLARE_WAKE_UP = "declare_wake_up"
    SELECT_SLOT = "select_slot"
    CANCEL_EFFECT = "cancel_effect"
    CHOOSE_TAKE_TWO_CARD = "choose_take_two_card"


@dataclass(frozen=True)
class AcknowledgeInitialPeek:
    action_type: ClassVar[ActionType] = ActionType.ACKNOWLEDGE_INITIAL_PEEK


@dataclass(frozen=True)
class DrawFromDeck:
    action_type: ClassVar[ActionType] = ActionType.DRAW_FROM_DECK


@dataclass(frozen=True)
class DrawFromDiscard:
    action_type: ClassVar[ActionType] = ActionType.DRAW_FROM_DISCARD


@dataclass(frozen=True)
class ReplaceDreamSlot:
    slot_index: int
    action_type: ClassVar[ActionType] = ActionType.REPLACE_DREAM_SLOT


@dataclass(frozen=True)
class DiscardDrawnCard:
    action_type: ClassVar[ActionType] = ActionType.DISCARD_DRAWN_CARD


@dataclass(frozen=True)
class UseCardEffect:
    action_type: ClassVar[ActionType] = ActionType.USE_CARD_EFFECT


@dataclass(frozen=True)
class DeclareWakeUp:
    action_type: ClassVar[ActionType] = ActionType.DECLARE_WAKE_UP


@dataclass(frozen=True)
class SelectSlot:
    target_player_id: str
    slot_index: int
    action_type: ClassVar[ActionType] = ActionType.SELECT_SLOT


@dataclass(frozen=True)
class CancelEffect:
    action_type: ClassVar[ActionType] = ActionType.CANCEL_EFFECT


@dataclass(frozen=True)
class ChooseTakeTwoCard:
    card_index: int
    action_type: ClassVar[ActionType] = ActionType.CHOOSE_TAKE_TWO_CARD


Action = Union[
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
]

ACTION_CLASSES: dict[ActionType, type] = {
    cls.action_type: cls
    for cls in (
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
}


def action_from_dict(data: Mapping[str, Any]) -> Action:
    """
    Build an action from its wire form, e.g.
    {"type": "select_slot", "target_player_id": "p2", "slot_index": 1}.

    Raises ValueError for an unknown type or missing fields.
    """
    payload = dict(data)
    try:
        action_type = ActionType(payload.pop("type"))
    except KeyError:
        raise ValueError("Action is missing its 'type'") from None
    cls = ACTION_CLASSES[action_type]
    try:
        return cls(**payload)
    except TypeError as e:
        raise ValueError(f"Invalid fields for {action_type.value}: {e}") from None


def action_to_dict(action: Action) -> dict[str, Any]:
    return {"type": action.action_type.value, **asdict(action)}


# =============================================================================
# Validity
# =============================================================================

class RejectReason(Enum):
    """Why the validator refused an action."""
    NOT_YOUR_TURN = "not_your_turn"
    WRONG_PHASE = "wrong_phase"
    WRONG_TURN_PHASE = "wrong_turn_phase"
    OUT_OF_RANGE = "out_of_range"
    NO_PENDING_EFFECT = "no_pending_effect"
    EFFECT_MISMATCH = "effect_mismatch"
    ALREADY_ACKNOWLEDGED = "already_acknowledged"
    EMPTY_DECK = "empty_deck"
    EMPTY_DISCARD = "empty_discard"
    MUST_REPLACE = "must_replace"
    UNKNOWN_PLAYER = "unknown_player"


@dataclass(frozen=True)
class Validity:
    """Valid, or Invalid with a reason. Truthy when valid."""
    reason: RejectReason | None = None

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.is_valid

    @classmethod
    def invalid(cls, reason: RejectReason) -> Validity:
        return cls(reason=reason)


VALID = Validity()


# =============================================================================
# Results
# =============================================================================

@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - New state (if accepted)
    - Rejection message and reason (if not)
    - Public, human-readable changes for logs
    """
    success: bool
    new_state: GameState | None = None
    error: str | None = None
    reason: RejectReason | None = None
    state_changes: list[str] = field(default_factory=list)

    @property
    def error_code(self) -> str | None:
        return self.reason.value if self.reason else None

    @classmethod
    def failure(cls, error: str, reason: RejectReason | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, reason=reason)

    @classmethod
    def success_with_state(
        cls,
        state: GameState,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
