"""
Ability Estimator: fast-converging theta tracking.

Uses the logistic IRT response model

    P(correct | theta, b) = 1 / (1 + exp(b - theta))

for information-gain scoring, but updates theta with an asymmetric
binary-search heuristic rather than a calibrated estimator:

- correct on an item harder than theta   -> jump up toward it
- correct on an easier item              -> small confirming nudge
- wrong on an item easier than theta     -> jump down toward it
- wrong on a harder item                 -> snap just below it

Jumps scale with uncertainty (0.5x when confident, 1.0x when not), and
uncertainty shrinks a little after every response.
"""

from __future__ import annotations

import math
from dataclasses import replace

from loguru import logger

from ..config import AbilityConfig
from ..models import LearnerState

DEFAULT_ABILITY_CONFIG = AbilityConfig()


def probability_correct(theta: float, difficulty: float) -> float:
    """Logistic probability of a correct answer; never overflows for extreme gaps."""
    x = difficulty - theta
    # Split on sign so exp() never overflows
    if x >= 0:
        z = math.exp(-x)
        return z / (1 + z)
    return 1 / (1 + math.exp(x))


def information_gain(theta: float, difficulty: float, uncertainty: float) -> float:
    """Expected information from asking an item: uncertainty * p * (1 - p)."""
    p = probability_correct(theta, difficulty)
    return uncertainty * p * (1 - p)


def jump_factor(uncertainty: float) -> float:
    """Step multiplier: 0.5 when fully confident, 1.0 when fully uncertain."""
    return 0.5 + uncertainty * 0.5


def apply_response(
    learner: LearnerState,
    item_difficulty: float,
    correct: bool,
    config: AbilityConfig = DEFAULT_ABILITY_CONFIG,
) -> LearnerState:
    """
    Update theta, uncertainty and rolling accuracy after a response.

    Args:
        learner: Current learner state (not modified)
        item_difficulty: Difficulty of the answered item
        correct: Whether the answer was correct

    Returns:
        New LearnerState
    """
    theta = max(config.min_theta, min(config.max_theta, learner.theta))
    uncertainty = max(config.min_uncertainty, min(config.max_uncertainty, learner.uncertainty))
    gap = item_difficulty - theta
    factor = jump_factor(uncertainty)

    if correct:
        if gap > 0:
            new_theta = theta + gap * factor
        else:
            new_theta = theta + config.confirmation_step * uncertainty
    else:
        if gap < 0:
            new_theta = theta + gap * factor
        else:
            new_theta = item_difficulty - config.miss_margin

    new_theta = max(config.min_theta, min(config.max_theta, new_theta))

    # Items near theta tell us more, so uncertainty shrinks faster
    informative = abs(gap) < config.informative_band
    decay = config.uncertainty_decay
    if not informative:
        decay *= config.uninformative_decay_factor
    new_uncertainty = max(config.min_uncertainty, min(config.max_uncertainty, uncertainty * decay))

    alpha = config.accuracy_alpha
    accuracy = alpha * (1.0 if correct else 0.0) + (1 - alpha) * learner.average_accuracy
    accuracy = max(0.0, min(1.0, accuracy))

    logger.debug(
        f"theta {theta:.2f} -> {new_theta:.2f}, uncertainty {uncertainty:.2f} -> "
        f"{new_uncertainty:.2f} (b={item_difficulty:.2f}, correct={correct})"
    )

    return replace(
        learner,
        theta=new_theta,
        uncertainty=new_uncertainty,
        average_accuracy=accuracy,
    )
