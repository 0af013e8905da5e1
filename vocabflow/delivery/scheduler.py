"""
Item Selector: priority auction for the next card.

Each call re-scores candidate actions from the current snapshot:

1. Reinforcement - a taught item has a short-delay re-exposure due.
   Fixed top priority.
2. Review - a known/lapsed item whose retrievability fell below target.
   Priority grows with the retention shortfall.
3. Probe - an item above theta chosen to calibrate the ability estimate.
   Always considered while uncertainty is high, otherwise every Nth card.
   Priority is the expected information gain.
4. Teach - a new item slightly below theta. Only once calibrated, and
   only while the session's new-item and learning-queue caps allow.

Candidates shown recently, or whose card kind dominates the last few
cards, are penalized. The winner is materialized by the card factory.
No scheduler state survives between calls.
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from ..config import CardConfig, SelectorConfig
from ..learning.ability_estimator import information_gain
from ..learning.memory_model import retrievability
from ..models import (
    Card,
    CardKind,
    Item,
    ItemMemoryState,
    ItemStatus,
    LearnerState,
    SessionState,
)
from .card_factory import DEFAULT_CARD_CONFIG, create_card, create_teaching_card


@dataclass
class Candidate:
    """A scored proposal for the next card."""

    item: Item
    kind: CardKind
    priority: float


class ItemSelector:
    """
    Picks the single best next card for a learner.

    Balances retention risk (reviews), calibration (probes), new
    learning (teaching) and variety. Randomness only breaks ties among
    near-equal items and shuffles quiz options; inject a seeded
    ``random.Random`` for reproducible runs.
    """

    def __init__(
        self,
        config: SelectorConfig | None = None,
        card_config: CardConfig | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the selector.

        Args:
            config: Selection weights and thresholds (defaults if None)
            card_config: Quiz card construction parameters
            rng: Random source for tie-breaking and option shuffling
        """
        self.config = config or SelectorConfig()
        self.card_config = card_config or DEFAULT_CARD_CONFIG
        self.rng = rng or random.Random()

    # =========================================================================
    # Public API
    # =========================================================================

    def select_next_card(
        self,
        learner: LearnerState,
        item_states: Mapping[str, ItemMemoryState],
        session: SessionState,
        corpus: Sequence[Item],
        distractor_pool: Mapping[str, Sequence[str]],
        now: datetime,
    ) -> Card | None:
        """
        Choose and build the next card.

        Returns:
            A TeachingCard or QuizCard, or None when nothing is available
        """
        items_by_id = {item.id: item for item in corpus}
        candidates = self.collect_candidates(learner, item_states, session, corpus, now, items_by_id)
        self.apply_variety_penalties(candidates, session)

        if not candidates:
            fallback = self.select_teaching_item(learner, item_states, corpus, session.recent_item_ids)
            if fallback is None:
                logger.debug("No candidates and no teachable item - nothing to show")
                return None
            logger.debug(f"No candidates, falling back to teaching {fallback.id}")
            return create_teaching_card(fallback)

        candidates.sort(key=lambda c: c.priority, reverse=True)
        best = candidates[0]

        logger.debug(
            f"Selected {best.kind.value} card for {best.item.id} "
            f"(priority={best.priority:.2f}, {len(candidates)} candidates)"
        )

        return create_card(
            best.item,
            best.kind,
            corpus,
            distractor_pool,
            rng=self.rng,
            config=self.card_config,
        )

    def collect_candidates(
        self,
        learner: LearnerState,
        item_states: Mapping[str, ItemMemoryState],
        session: SessionState,
        corpus: Sequence[Item],
        now: datetime,
        items_by_id: Mapping[str, Item] | None = None,
    ) -> list[Candidate]:
        """Gather unpenalized reinforcement, review, probe and teaching candidates."""
        cfg = self.config
        if items_by_id is None:
            items_by_id = {item.id: item for item in corpus}
        candidates: list[Candidate] = []

        # 1. Reinforcements (highest priority)
        for item_id, state in item_states.items():
            item = items_by_id.get(item_id)
            if item is not None and state.reinforcement_due(now):
                candidates.append(Candidate(item, CardKind.REINFORCEMENT, cfg.reinforcement_priority))

        # 2. Reviews (retention risk)
        for item_id, state in item_states.items():
            if state.status not in (ItemStatus.KNOWN, ItemStatus.LAPSED) or state.stability <= 0:
                continue
            r = retrievability(state.last_seen, state.stability, now)
            if r >= cfg.target_retrievability:
                continue
            item = items_by_id.get(item_id)
            if item is not None:
                urgency = max(0.0, cfg.target_retrievability - r)
                priority = urgency * cfg.priority_scale * cfg.urgency_weight
                candidates.append(Candidate(item, CardKind.REVIEW, priority))

        # 3. Probe (calibrate theta)
        if self.should_probe(learner, session):
            probe = self.select_probe_item(learner, item_states, corpus, session.recent_item_ids)
            if probe is not None:
                gain = information_gain(learner.theta, probe.difficulty, learner.uncertainty)
                priority = gain * cfg.priority_scale * cfg.information_weight
                candidates.append(Candidate(probe, CardKind.PROBE, priority))

        # 4. Teach (new material)
        if self.should_teach(learner, item_states, session):
            new_item = self.select_teaching_item(learner, item_states, corpus, session.recent_item_ids)
            if new_item is not None:
                level_match = 1 - abs(new_item.difficulty - learner.theta) / cfg.difficulty_range
                priority = level_match * cfg.priority_scale * cfg.learning_value_weight
                candidates.append(Candidate(new_item, CardKind.TEACHING, priority))

        return candidates

    # =========================================================================
    # Gates
    # =========================================================================

    def is_calibrating(self, learner: LearnerState) -> bool:
        """High uncertainty: find the learner's level before teaching."""
        return learner.uncertainty > self.config.calibration_threshold

    def should_probe(self, learner: LearnerState, session: SessionState) -> bool:
        if self.is_calibrating(learner):
            return True
        every = self.config.probe_every_n_cards
        return every > 0 and session.cards_shown % every == 0

    def should_teach(
        self,
        learner: LearnerState,
        item_states: Mapping[str, ItemMemoryState],
        session: SessionState,
    ) -> bool:
        if self.is_calibrating(learner):
            return False
        if session.new_items_taught >= self.config.max_new_per_session:
            return False
        learning = sum(1 for s in item_states.values() if s.status is ItemStatus.LEARNING)
        return learning < self.config.max_learning_queue

    # =========================================================================
    # Item Choice
    # =========================================================================

    def select_probe_item(
        self,
        learner: LearnerState,
        item_states: Mapping[str, ItemMemoryState],
        corpus: Sequence[Item],
        recent_item_ids: Sequence[str] = (),
    ) -> Item | None:
        """
        Pick an unseen or barely-seen item above theta.

        The jump above theta grows with uncertainty, like a binary search
        for the learner's ceiling. Items well below theta are skipped.
        """
        cfg = self.config
        target = learner.theta + learner.uncertainty * cfg.probe_jump_factor
        floor = learner.theta - cfg.probe_floor_offset
        recent = set(recent_item_ids)

        pool: list[tuple[float, Item]] = []
        for item in corpus:
            if item.id in recent or item.difficulty < floor:
                continue
            state = item_states.get(item.id)
            if state is None or state.status is ItemStatus.UNSEEN or state.exposure_count < cfg.probe_max_exposures:
                pool.append((abs(item.difficulty - target), item))

        pool.sort(key=lambda pair: pair[0])
        return self._pick_among_top(pool[: cfg.probe_pool_size], cfg.probe_pick_top)

    def select_teaching_item(
        self,
        learner: LearnerState,
        item_states: Mapping[str, ItemMemoryState],
        corpus: Sequence[Item],
        recent_item_ids: Sequence[str] = (),
    ) -> Item | None:
        """Pick an unseen item slightly below theta, skipping trivially easy ones."""
        cfg = self.config
        target = learner.theta - cfg.teach_target_offset
        floor = learner.theta - cfg.teach_floor_offset
        recent = set(recent_item_ids)

        pool: list[tuple[float, Item]] = []
        for item in corpus:
            if item.id in recent or item.difficulty < floor:
                continue
            state = item_states.get(item.id)
            if state is None or state.status is ItemStatus.UNSEEN:
                score = 1 - abs(item.difficulty - target) / cfg.difficulty_range
                pool.append((score, item))

        pool.sort(key=lambda pair: pair[0], reverse=True)
        return self._pick_among_top(pool[: cfg.teach_pool_size], cfg.teach_pick_top)

    def _pick_among_top(self, ranked: list[tuple[float, Item]], top: int) -> Item | None:
        if not ranked:
            return None
        index = self.rng.randrange(min(top, len(ranked)))
        return ranked[index][1]

    # =========================================================================
    # Variety
    # =========================================================================

    def apply_variety_penalties(self, candidates: list[Candidate], session: SessionState) -> None:
        """Dampen recently shown items and over-represented card kinds in place."""
        cfg = self.config
        recent_items = set(session.recent_item_ids)
        recent_kinds = session.recent_kinds[-cfg.kind_window :] if cfg.kind_window > 0 else ()

        for candidate in candidates:
            if candidate.item.id in recent_items:
                candidate.priority *= cfg.recent_item_penalty
            if sum(1 for k in recent_kinds if k is candidate.kind) >= cfg.kind_repeat_threshold:
                candidate.priority *= cfg.kind_repeat_penalty
