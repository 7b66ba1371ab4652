"""
Bots module - Automated players.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy / FirstLegalPolicy: Baselines
- play_until_round_end / play_game: Drive a state with policies
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .runner import StepLimitExceeded, play_game, play_until_round_end

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "StepLimitExceeded",
    "play_game",
    "play_until_round_end",
]
