"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a game state and the actor's legal actions and
returns a decision. Policies see the full state; a fair bot should
look only at what derive_view would show it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import random

from ..engine_core.action import ActionType

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for UI/debugging)
    - How many actions were considered
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Implementations range from simple baselines to search.
    """

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: Current game state
            player_id: The acting player
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects actions uniformly at random.

    wake_up_chance, when set, is the probability of calling wake-up
    whenever it is legal; otherwise it competes equally with the
    other actions. A low chance gives long rounds that run the deck dry.
    """

    def __init__(self, seed: int | None = None, wake_up_chance: float | None = None):
        self.rng = random.Random(seed)
        self.wake_up_chance = wake_up_chance

    def select_action(
        self,
        state: GameState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        candidates = legal_actions
        if self.wake_up_chance is not None:
            wake_up = [a for a in legal_actions if a.action_type is ActionType.DECLARE_WAKE_UP]
            others = [a for a in legal_actions if a.action_type is not ActionType.DECLARE_WAKE_UP]
            if wake_up and (not others or self.rng.random() < self.wake_up_chance):
                candidates = wake_up
            elif others:
                candidates = others

        return BotDecision(
            action=self.rng.choice(candidates),
            explanation="Selected randomly",
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for deterministic testing. Since drawing from the deck is
    listed first, this policy never calls wake-up on its own.
    """

    def select_action(
        self,
        state: GameState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        return BotDecision(
            action=legal_actions[0],
            explanation="Selected first legal action",
            evaluated_actions=1,
        )
