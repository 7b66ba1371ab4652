"""
Bot Runner - Drives a room to the end of a round with bot policies.

Used by the CLI simulator and by property tests.
"""

from __future__ import annotations
from typing import Callable, Mapping
import logging

from ..engine_core.action_generator import legal_actions, next_actor
from ..engine_core.reducer import Reducer
from ..engine_core.setup import start_new_round
from ..engine_core.state import GamePhase, GameState
from .policy import BotPolicy

logger = logging.getLogger(__name__)

StepHook = Callable[[GameState, GameState], None]


class StepLimitExceeded(RuntimeError):
    """The round did not finish within the allowed number of steps."""


def play_until_round_end(
    state: GameState,
    policies: Mapping[str, BotPolicy],
    reducer: Reducer | None = None,
    max_steps: int = 2000,
    on_step: StepHook | None = None,
) -> GameState:
    """
    Let each player's policy act until the round is over.

    Args:
        state: Starting state (initial peek or mid-round)
        policies: Policy per player id; every seated player needs one
        reducer: Reducer to apply actions with
        max_steps: Upper bound on applied actions
        on_step: Called with (before, after) for every applied action

    Returns:
        The state in the scoring or game-over phase
    """
    reducer = reducer or Reducer()

    for _ in range(max_steps):
        actor = next_actor(state)
        if actor is None:
            return state

        actions = legal_actions(state, actor)
        decision = policies[actor].select_action(state, actor, actions)
        result = reducer.apply(state, actor, decision.action)
        if not result.success:
            raise ValueError(f"Policy for {actor} chose an illegal action: {result.error}")

        if on_step is not None:
            on_step(state, result.new_state)
        state = result.new_state

    raise StepLimitExceeded(f"Round {state.round_number} not finished after {max_steps} steps")


def play_game(
    state: GameState,
    policies: Mapping[str, BotPolicy],
    max_rounds: int = 20,
    reducer: Reducer | None = None,
    max_steps: int = 2000,
) -> GameState:
    """Play rounds until someone reaches the target score or max_rounds is hit."""
    for _ in range(max_rounds):
        state = play_until_round_end(state, policies, reducer=reducer, max_steps=max_steps)
        logger.info(
            "Round %d finished: %s",
            state.round_number,
            ", ".join(f"{p.player_id}={p.total_score}" for p in state.players),
        )
        if state.phase is GamePhase.GAME_OVER:
            break
        state = start_new_round(state)
    return state
