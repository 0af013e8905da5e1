"""
Memory Model: simplified FSRS forgetting curve per item.

Retrievability decays exponentially with time since the last exposure:

    R(t) = exp(-t / S)

where t is elapsed days and S is the item's stability. A correct recall
multiplies stability (more when the recall was hard, i.e. R was low);
a miss shrinks it. Items graduate from learning to known after enough
correct recalls with at least a day of stability, and known items lapse
on the first miss.

All functions are pure and total: inputs are never mutated and
out-of-range values are clamped instead of rejected.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from ..config import MemoryConfig
from ..models import ItemMemoryState, ItemStatus, LastResponse

DEFAULT_MEMORY_CONFIG = MemoryConfig()

SECONDS_PER_DAY = 24 * 60 * 60


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def retrievability(
    last_seen: datetime | None,
    stability: float,
    now: datetime,
) -> float:
    """
    Probability the item would be recalled right now.

    Returns 0 for items never seen or with non-positive stability.
    """
    if last_seen is None or stability <= 0:
        return 0.0
    days_elapsed = (now - last_seen).total_seconds() / SECONDS_PER_DAY
    # A clock that runs backwards counts as "just seen"
    days_elapsed = max(0.0, days_elapsed)
    return _clamp(math.exp(-days_elapsed / stability), 0.0, 1.0)


def apply_response(
    state: ItemMemoryState,
    correct: bool,
    now: datetime,
    config: MemoryConfig = DEFAULT_MEMORY_CONFIG,
) -> ItemMemoryState:
    """
    Update an item's memory state after a quiz response.

    Args:
        state: Current state (not modified)
        correct: Whether the learner answered correctly
        now: Time of the response
        config: Memory model parameters

    Returns:
        New ItemMemoryState with lastSeen advanced to ``now``
    """
    base_stability = state.stability if state.stability > 0 else config.initial_stability
    difficulty = _clamp(state.difficulty, config.min_difficulty, config.max_difficulty)
    status = state.status
    correct_count = state.correct_count
    lapse_count = state.lapse_count

    if correct:
        correct_count += 1

        # Harder recall (lower R) earns a bigger stability gain
        prior_r = retrievability(state.last_seen, state.stability, now)
        bonus = 1 + (1 - prior_r) * config.retrievability_bonus
        stability = base_stability * config.stability_growth * bonus
        difficulty = max(config.min_difficulty, difficulty - config.difficulty_decrease)
    else:
        stability = base_stability * config.stability_decay
        difficulty = min(config.max_difficulty, difficulty + config.difficulty_increase)

    stability = _clamp(stability, config.min_stability, config.max_stability)

    if correct:
        if (
            status is ItemStatus.LEARNING
            and correct_count >= config.graduation_correct
            and stability >= config.graduation_stability
        ):
            status = ItemStatus.KNOWN
    elif status is ItemStatus.KNOWN:
        status = ItemStatus.LAPSED
        lapse_count += 1

    return replace(
        state,
        status=status,
        stability=stability,
        difficulty=difficulty,
        last_seen=now,
        retrievability=1.0,
        exposure_count=state.exposure_count + 1,
        correct_count=correct_count,
        lapse_count=lapse_count,
        last_response=LastResponse.CORRECT if correct else LastResponse.INCORRECT,
    )


def initialize_after_teaching(
    item_id: str,
    base_difficulty: float,
    now: datetime,
    config: MemoryConfig = DEFAULT_MEMORY_CONFIG,
) -> ItemMemoryState:
    """
    Memory state for an item that was just taught.

    Schedules the short-delay reinforcement re-exposures.
    """
    return ItemMemoryState(
        item_id=item_id,
        status=ItemStatus.LEARNING,
        stability=config.initial_stability,
        difficulty=_clamp(base_difficulty, config.min_difficulty, config.max_difficulty),
        last_seen=now,
        retrievability=1.0,
        exposure_count=1,
        reinforcements_due=tuple(now + offset for offset in config.reinforcement_offsets),
    )


def pop_reinforcement(state: ItemMemoryState) -> ItemMemoryState:
    """Drop the earliest pending reinforcement timestamp."""
    if not state.reinforcements_due:
        return state
    pending = sorted(state.reinforcements_due)
    return replace(state, reinforcements_due=tuple(pending[1:]))


def recalculate_retrievabilities(
    states: Iterable[ItemMemoryState],
    now: datetime,
) -> list[ItemMemoryState]:
    """Refresh the cached retrievability on every state (e.g. after a long absence)."""
    return [
        replace(s, retrievability=retrievability(s.last_seen, s.stability, now))
        for s in states
    ]
