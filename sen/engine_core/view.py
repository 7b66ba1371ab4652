"""
View Projector - What one viewer is allowed to see.

derive_view(state, viewer_id) is the security boundary between the
authoritative state and a client. A face-down card is projected as a
bare placeholder: no definition and no instance id, since instance ids
are assigned in deck-composition order and would identify the card.

Visibility rules:
- Any slot: face up if revealed, or once the round is over
- Viewer's own slots: also slots 0 and 3 during the initial peek,
  until the viewer acknowledges
- Top discard: always face up; the deck exposes only its size
- Drawn card: active player only
- Take-two offer: active player only, while choosing
- Pending effect: its source player only
"""

from __future__ import annotations
from dataclasses import dataclass

from ..catalog import CardDefinition, CardInstance, EffectKind
from .state import AwaitingSelection, GamePhase, GameState, PendingEffect, PlayerState, SlotRef, TurnPhase

# Slots a player may look at during the initial peek (first and last)
INITIAL_PEEK_SLOTS: tuple[int, ...] = (0, 3)


@dataclass(frozen=True)
class CardView:
    """A card as seen by one viewer. Both fields are None when face down."""
    instance_id: str | None = None
    definition: CardDefinition | None = None

    @property
    def face_up(self) -> bool:
        return self.definition is not None


FACE_DOWN = CardView()


@dataclass(frozen=True)
class SlotView:
    slot_index: int
    has_card: bool
    revealed: bool
    card: CardView | None = None


@dataclass(frozen=True)
class PlayerSummary:
    player_id: str
    display_name: str
    seat_index: int
    slots: tuple[SlotView, ...]
    connected: bool
    round_score: int
    total_score: int
    has_seen_initial_cards: bool
    is_active: bool


@dataclass(frozen=True)
class PendingEffectView:
    effect_kind: EffectKind
    awaiting_selection: AwaitingSelection | None
    selected: tuple[SlotRef, ...]
    peeked_card: CardView | None = None


@dataclass(frozen=True)
class PlayerView:
    """The filtered state sent to one viewer."""
    room_id: str
    viewer_id: str
    phase: GamePhase
    round_number: int
    version: int
    target_score: int

    players: tuple[PlayerSummary, ...]
    my_slots: tuple[SlotView, ...]
    has_seen_initial_cards: bool

    deck_count: int
    discard_count: int
    top_discard: CardView | None

    active_player_index: int
    active_player_id: str
    is_my_turn: bool
    turn_phase: TurnPhase
    has_drawn_card: bool

    drawn_card: CardView | None = None
    take_two_cards: tuple[CardView, ...] | None = None
    pending_effect: PendingEffectView | None = None
    wake_up_caller_id: str | None = None


def face_up(card: CardInstance) -> CardView:
    return CardView(instance_id=card.instance_id, definition=card.definition)


def _slot_views(state: GameState, player: PlayerState, viewer_id: str) -> tuple[SlotView, ...]:
    round_over = state.round_over
    peeking = (
        player.player_id == viewer_id
        and state.phase is GamePhase.INITIAL_PEEK
        and not player.has_seen_initial_cards
    )

    views = []
    for index, slot in enumerate(player.slots):
        card_view = None
        if slot.card is not None:
            visible = slot.revealed or round_over or (peeking and index in INITIAL_PEEK_SLOTS)
            card_view = face_up(slot.card) if visible else FACE_DOWN
        views.append(SlotView(
            slot_index=index,
            has_card=slot.card is not None,
            revealed=slot.revealed,
            card=card_view,
        ))
    return tuple(views)


def _pending_view(pending: PendingEffect | None, viewer_id: str) -> PendingEffectView | None:
    if pending is None or pending.source_player_id != viewer_id:
        return None
    return PendingEffectView(
        effect_kind=pending.effect_kind,
        awaiting_selection=pending.awaiting_selection,
        selected=pending.selected,
        peeked_card=face_up(pending.peeked_card) if pending.peeked_card else None,
    )


def derive_view(state: GameState, viewer_id: str) -> PlayerView:
    """
    Project the full state for one viewer.

    Unknown viewers (spectators) get the public projection only.
    """
    active = state.active_player
    is_my_turn = active.player_id == viewer_id
    viewer = state.get_player(viewer_id)

    players = tuple(
        PlayerSummary(
            player_id=p.player_id,
            display_name=p.display_name,
            seat_index=p.seat_index,
            slots=_slot_views(state, p, viewer_id),
            connected=p.connected,
            round_score=p.round_score,
            total_score=p.total_score,
            has_seen_initial_cards=p.has_seen_initial_cards,
            is_active=p.player_id == active.player_id,
        )
        for p in state.players
    )
    my_slots = next((p.slots for p in players if p.player_id == viewer_id), ())

    drawn_card = None
    if is_my_turn and state.drawn_card is not None:
        drawn_card = face_up(state.drawn_card)

    take_two_cards = None
    if is_my_turn and state.turn_phase is TurnPhase.TAKE_TWO_CHOOSE and state.take_two_cards:
        take_two_cards = tuple(face_up(card) for card in state.take_two_cards)

    return PlayerView(
        room_id=state.room_id,
        viewer_id=viewer_id,
        phase=state.phase,
        round_number=state.round_number,
        version=state.version,
        target_score=state.target_score,
        players=players,
        my_slots=my_slots,
        has_seen_initial_cards=viewer.has_seen_initial_cards if viewer else False,
        deck_count=len(state.deck),
        discard_count=len(state.discard),
        top_discard=face_up(state.top_discard) if state.top_discard else None,
        active_player_index=state.active_player_index,
        active_player_id=active.player_id,
        is_my_turn=is_my_turn,
        turn_phase=state.turn_phase,
        has_drawn_card=state.drawn_card is not None,
        drawn_card=drawn_card,
        take_two_cards=take_two_cards,
        pending_effect=_pending_view(state.pending_effect, viewer_id),
        wake_up_caller_id=state.wake_up_caller_id,
    )


def visible_instance_ids(view: PlayerView) -> set[str]:
    """Every instance id a view exposes, for leak checks."""
    cards: list[CardView | None] = [view.top_discard, view.drawn_card]
    for player in view.players:
        cards.extend(slot.card for slot in player.slots)
    if view.take_two_cards:
        cards.extend(view.take_two_cards)
    if view.pending_effect:
        cards.append(view.pending_effect.peeked_card)
    return {card.instance_id for card in cards if card is not None and card.instance_id is not None}
