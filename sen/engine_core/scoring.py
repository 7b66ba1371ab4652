"""
Round scoring.

At round end every slot is revealed and each player's crow values are
summed. A wake-up caller who does not hold the lowest (or tied lowest)
round score takes a fixed penalty, added to the round score before it
is accumulated into the total.
"""

from __future__ import annotations
import logging

from ..catalog import crow_value
from .state import GamePhase, GameState, PlayerState, TurnPhase

logger = logging.getLogger(__name__)

WAKE_UP_PENALTY = 5


def slot_total(player: PlayerState) -> int:
    """Sum of crow values in a player's dream slots."""
    return sum(crow_value(card) for card in player.cards())


def end_round(state: GameState) -> GameState:
    """
    Reveal, score and close the round.

    Moves to GAME_OVER if any total reaches the target score, otherwise
    to SCORING. Does not touch the version; the reducer owns that.
    """
    raw_scores = {p.player_id: slot_total(p) for p in state.players}
    lowest = min(raw_scores.values())

    scored = []
    for player in state.players:
        round_score = raw_scores[player.player_id]
        if player.player_id == state.wake_up_caller_id and round_score > lowest:
            round_score += WAKE_UP_PENALTY
            logger.info(
                "Room %s: wake-up caller %s penalised (%d > lowest %d)",
                state.room_id, player.player_id, raw_scores[player.player_id], lowest,
            )
        scored.append(player._copy_with(
            slots=tuple(slot.reveal() for slot in player.slots),
            round_score=round_score,
            total_score=player.total_score + round_score,
        ))

    game_over = any(p.total_score >= state.target_score for p in scored)
    phase = GamePhase.GAME_OVER if game_over else GamePhase.SCORING

    logger.info(
        "Room %s round %d ended (%s): %s",
        state.room_id,
        state.round_number,
        phase.value,
        ", ".join(f"{p.player_id}={p.round_score}/{p.total_score}" for p in scored),
    )

    return state._copy_with(
        players=tuple(scored),
        phase=phase,
        turn_phase=TurnPhase.DRAW,
        drawn_card=None,
        drawn_from_discard=False,
        take_two_cards=None,
        pending_effect=None,
    )


def winners(state: GameState) -> list[PlayerState]:
    """Players with the lowest total score (meaningful once the game is over)."""
    best = min(p.total_score for p in state.players)
    return [p for p in state.players if p.total_score == best]
