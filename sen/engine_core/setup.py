"""
Round Setup - Creates the state for a new game and for each new round.

This module handles:
- Building a fresh deck with round-scoped instance ids
- Shuffling with a seed for determinism
- Dealing four dream cards per player and one face-up discard
- Carrying total scores into the next round
"""

from __future__ import annotations
from typing import Sequence
import logging
import random
import secrets

from ..catalog import CardInstance, InstanceIdGenerator, build_deck, shuffle
from ..catalog.deck import IdSource
from ..errors import RoundNotOverError
from .state import (
    DEFAULT_TARGET_SCORE,
    DREAM_SLOT_COUNT,
    MAX_PLAYERS,
    MIN_PLAYERS,
    DreamSlot,
    GamePhase,
    GameState,
    PlayerState,
    TurnPhase,
)

logger = logging.getLogger(__name__)


def create_initial_state(
    room_id: str,
    players: Sequence[tuple[str, str]],
    target_score: int = DEFAULT_TARGET_SCORE,
    seed: int | None = None,
    next_id: IdSource | None = None,
) -> GameState:
    """
    Set up round one of a new game.

    Args:
        room_id: Room the game belongs to
        players: (player_id, display_name) pairs in seat order
        target_score: Total at which the game ends
        seed: Seed for deals and reshuffles (random if omitted)
        next_id: Instance id source (round-scoped counter if omitted)

    Returns:
        State in the initial_peek phase at version 1
    """
    if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
        raise ValueError(f"Sen supports {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(players)}")
    player_ids = [player_id for player_id, _ in players]
    if len(set(player_ids)) != len(player_ids):
        raise ValueError("Player ids must be unique")
    if target_score <= 0:
        raise ValueError("target_score must be positive")

    if seed is None:
        seed = secrets.randbits(128)

    seated = tuple(
        PlayerState(player_id=player_id, display_name=display_name, seat_index=index)
        for index, (player_id, display_name) in enumerate(players)
    )
    dealt, deck, discard = _deal(seated, round_number=1, seed=seed, next_id=next_id)

    logger.info("Room %s: dealt round 1 to %d players", room_id, len(seated))

    return GameState(
        room_id=room_id,
        players=dealt,
        phase=GamePhase.INITIAL_PEEK,
        round_number=1,
        deck=deck,
        discard=discard,
        target_score=target_score,
        random_seed=seed,
        version=1,
    )


def start_new_round(state: GameState, next_id: IdSource | None = None) -> GameState:
    """
    Replace the finished round with a fresh deal.

    Total scores and connection status carry over; everything else that
    belongs to a round is reset. Only legal from the scoring phase.
    """
    if state.phase is not GamePhase.SCORING:
        raise RoundNotOverError(state.phase.value)

    round_number = state.round_number + 1
    reset = tuple(
        p._copy_with(round_score=0, has_seen_initial_cards=False)
        for p in state.players
    )
    dealt, deck, discard = _deal(reset, round_number, state.random_seed, next_id)

    logger.info("Room %s: dealt round %d", state.room_id, round_number)

    return state._copy_with(
        players=dealt,
        phase=GamePhase.INITIAL_PEEK,
        round_number=round_number,
        deck=deck,
        discard=discard,
        active_player_index=0,
        turn_phase=TurnPhase.DRAW,
        drawn_card=None,
        drawn_from_discard=False,
        take_two_cards=None,
        pending_effect=None,
        wake_up_caller_id=None,
        version=state.version + 1,
    )


def _deal(
    players: tuple[PlayerState, ...],
    round_number: int,
    seed: int,
    next_id: IdSource | None,
) -> tuple[tuple[PlayerState, ...], tuple[CardInstance, ...], tuple[CardInstance, ...]]:
    """Shuffle a fresh deck, deal four cards per seat and flip one to the discard."""
    rng = random.Random(f"{seed}:deal:{round_number}")
    deck = shuffle(build_deck(next_id or InstanceIdGenerator(prefix=f"r{round_number}")), rng)

    dealt = []
    for player in players:
        slots = tuple(DreamSlot(card=deck.pop()) for _ in range(DREAM_SLOT_COUNT))
        dealt.append(player._copy_with(slots=slots))

    first_discard = deck.pop()
    return tuple(dealt), tuple(deck), (first_discard,)
