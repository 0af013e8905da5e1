"""
Engine facade: the three calls an application makes per card.

- select_next_card: which card to show next (or None)
- apply_quiz_response: new (LearnerState, ItemMemoryState) after a quiz
- apply_teaching_ack: new ItemMemoryState after a teaching card

Nothing here performs I/O; callers load and persist the snapshots.
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import datetime

from .config import AbilityConfig, CardConfig, MemoryConfig, SelectorConfig
from .delivery.scheduler import ItemSelector
from .learning import ability_estimator, memory_model
from .models import (
    Card,
    CardKind,
    Item,
    ItemMemoryState,
    ItemStatus,
    LearnerState,
    SessionState,
)


def select_next_card(
    learner: LearnerState,
    item_states: Mapping[str, ItemMemoryState],
    session: SessionState,
    corpus: Sequence[Item],
    distractor_pool: Mapping[str, Sequence[str]],
    now: datetime,
    *,
    rng: random.Random | None = None,
    config: SelectorConfig | None = None,
    card_config: CardConfig | None = None,
) -> Card | None:
    """Pick the next card for the learner, or None when nothing is available."""
    selector = ItemSelector(config=config, card_config=card_config, rng=rng)
    return selector.select_next_card(learner, item_states, session, corpus, distractor_pool, now)


def apply_quiz_response(
    learner: LearnerState,
    item_state: ItemMemoryState,
    item_difficulty: float,
    correct: bool,
    now: datetime,
    *,
    kind: CardKind | None = None,
    memory_config: MemoryConfig = memory_model.DEFAULT_MEMORY_CONFIG,
    ability_config: AbilityConfig = ability_estimator.DEFAULT_ABILITY_CONFIG,
) -> tuple[LearnerState, ItemMemoryState]:
    """
    Apply one quiz answer to both the learner and the item.

    Args:
        learner: Learner snapshot before the answer
        item_state: Item snapshot before the answer
        item_difficulty: Corpus difficulty of the item
        correct: Whether the answer was correct
        now: Time of the answer
        kind: Card kind; a REINFORCEMENT answer consumes one pending
            reinforcement

    Returns:
        (new learner state, new item state), to be persisted together
    """
    new_learner = ability_estimator.apply_response(learner, item_difficulty, correct, ability_config)
    new_item = memory_model.apply_response(item_state, correct, now, memory_config)

    if kind is CardKind.REINFORCEMENT:
        new_item = memory_model.pop_reinforcement(new_item)

    if new_item.status is ItemStatus.KNOWN and item_state.status is not ItemStatus.KNOWN:
        new_learner = replace(
            new_learner,
            total_known=new_learner.total_known + 1,
            total_learning=max(0, new_learner.total_learning - 1),
        )

    return new_learner, new_item


def apply_teaching_ack(
    item_id: str,
    item_difficulty: float,
    now: datetime,
    *,
    memory_config: MemoryConfig = memory_model.DEFAULT_MEMORY_CONFIG,
) -> ItemMemoryState:
    """Item state for a freshly taught item (status learning, reinforcements scheduled)."""
    return memory_model.initialize_after_teaching(item_id, item_difficulty, now, memory_config)


def count_teaching(learner: LearnerState) -> LearnerState:
    """Learner counters after a teaching card: one more learning and seen item."""
    return replace(
        learner,
        total_learning=learner.total_learning + 1,
        total_seen=learner.total_seen + 1,
    )
