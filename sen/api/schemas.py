"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the room host.
View models are filled straight from the engine's PlayerView via
from_attributes, so a client never receives anything derive_view did
not expose.

Error Codes:
- ROOM_NOT_FOUND: No game stored for the room
- ROOM_EXISTS: A game is already running in the room
- ACTION_REJECTED: The validator refused the action
- VERSION_CONFLICT: Concurrent writers kept winning the commit
- ROUND_NOT_OVER: A new round was requested mid-round
- INVALID_REQUEST: Malformed players, target score or action
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Field

from ..catalog import EffectKind
from ..engine_core.action import Action, action_from_dict, action_to_dict
from ..engine_core.state import AwaitingSelection, GamePhase, TurnPhase


class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_EXISTS = "ROOM_EXISTS"
    ACTION_REJECTED = "ACTION_REJECTED"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    ROUND_NOT_OVER = "ROUND_NOT_OVER"
    INVALID_REQUEST = "INVALID_REQUEST"


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


# =============================================================================
# View Models
# =============================================================================

class CardInfo(BaseModel):
    """A card's printed face."""
    id: str
    name: str
    crow_value: int
    effect_kind: EffectKind
    description: str = ""

    model_config = {"from_attributes": True}


class CardViewInfo(BaseModel):
    """A card as one viewer sees it. Face-down cards carry no identity."""
    face_up: bool
    instance_id: Optional[str] = None
    definition: Optional[CardInfo] = None

    model_config = {"from_attributes": True}


class SlotInfo(BaseModel):
    slot_index: int
    has_card: bool
    revealed: bool
    card: Optional[CardViewInfo] = None

    model_config = {"from_attributes": True}


class SlotRefInfo(BaseModel):
    player_id: str
    slot_index: int

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """Public information about a seated player."""
    player_id: str
    display_name: str
    seat_index: int
    slots: list[SlotInfo]
    connected: bool
    round_score: int
    total_score: int
    has_seen_initial_cards: bool
    is_active: bool

    model_config = {"from_attributes": True}


class PendingEffectInfo(BaseModel):
    effect_kind: EffectKind
    awaiting_selection: Optional[AwaitingSelection] = None
    selected: list[SlotRefInfo] = Field(default_factory=list)
    peeked_card: Optional[CardViewInfo] = None

    model_config = {"from_attributes": True}


class PlayerViewResponse(BaseModel):
    """The game as seen by one viewer."""
    room_id: str
    viewer_id: str
    phase: GamePhase
    round_number: int
    version: int
    target_score: int

    players: list[PlayerInfo]
    my_slots: list[SlotInfo]
    has_seen_initial_cards: bool

    deck_count: int
    discard_count: int
    top_discard: Optional[CardViewInfo] = None

    active_player_index: int
    active_player_id: str
    is_my_turn: bool
    turn_phase: TurnPhase
    has_drawn_card: bool

    drawn_card: Optional[CardViewInfo] = None
    take_two_cards: Optional[list[CardViewInfo]] = None
    pending_effect: Optional[PendingEffectInfo] = None
    wake_up_caller_id: Optional[str] = None

    api_version: str = "v1"

    model_config = {"from_attributes": True}


# =============================================================================
# Action Requests
# =============================================================================

class _ActionBody(BaseModel):
    def to_action(self) -> Action:
        """Build the engine action. Raises ValueError on bad fields."""
        return action_from_dict(self.model_dump())


class AcknowledgeInitialPeekBody(_ActionBody):
    type: Literal["acknowledge_initial_peek"]


class DrawFromDeckBody(_ActionBody):
    type: Literal["draw_from_deck"]


class DrawFromDiscardBody(_ActionBody):
    type: Literal["draw_from_discard"]


class ReplaceDreamSlotBody(_ActionBody):
    type: Literal["replace_dream_slot"]
    slot_index: int


class DiscardDrawnCardBody(_ActionBody):
    type: Literal["discard_drawn_card"]


class UseCardEffectBody(_ActionBody):
    type: Literal["use_card_effect"]


class DeclareWakeUpBody(_ActionBody):
    type: Literal["declare_wake_up"]


class SelectSlotBody(_ActionBody):
    type: Literal["select_slot"]
    target_player_id: str
    slot_index: int


class CancelEffectBody(_ActionBody):
    type: Literal["cancel_effect"]


class ChooseTakeTwoCardBody(_ActionBody):
    type: Literal["choose_take_two_card"]
    card_index: int


ActionBody = Annotated[
    Union[
        AcknowledgeInitialPeekBody,
        DrawFromDeckBody,
        DrawFromDiscardBody,
        ReplaceDreamSlotBody,
        DiscardDrawnCardBody,
        UseCardEffectBody,
        DeclareWakeUpBody,
        SelectSlotBody,
        CancelEffectBody,
        ChooseTakeTwoCardBody,
    ],
    Field(discriminator="type"),
]


class ActionRequest(BaseModel):
    """A player's intent, tagged by its "type" field."""
    player_id: str
    action: ActionBody


# =============================================================================
# Room Requests/Responses
# =============================================================================

class SeatRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    display_name: str


class CreateRoomRequest(BaseModel):
    """Request to start a game in a room."""
    room_id: str = Field(..., min_length=1)
    players: list[SeatRequest] = Field(..., description="Players in seat order (2-5)")
    target_score: Optional[int] = Field(None, gt=0, description="Defaults to SEN_TARGET_SCORE")
    seed: Optional[int] = Field(None, description="Seed for deals and reshuffles (development and test only)")


class RoomResponse(BaseModel):
    """Viewer-neutral summary of a room."""
    room_id: str
    version: int
    phase: GamePhase
    round_number: int
    player_ids: list[str]
    target_score: int
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Response after an accepted action."""
    accepted: bool
    version: int
    changes: list[str] = Field(default_factory=list)
    view: Optional[PlayerViewResponse] = None
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """Actions the player may take right now, in wire form."""
    room_id: str
    player_id: str
    version: int
    actions: list[dict[str, Any]]

    @classmethod
    def from_actions(cls, room_id: str, player_id: str, version: int, actions: list[Action]):
        return cls(
            room_id=room_id,
            player_id=player_id,
            version=version,
            actions=[action_to_dict(a) for a in actions],
        )


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
