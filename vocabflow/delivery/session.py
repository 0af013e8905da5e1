"""
Study Session: drives the select -> render -> respond -> update loop.

Holds the learner snapshot, item states and in-memory session history,
calls the engine for each step and writes every resulting state pair
back to the store in one save.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from loguru import logger

from ..config import AbilityConfig, MemoryConfig
from ..engine import apply_quiz_response, apply_teaching_ack, count_teaching
from ..learning.ability_estimator import DEFAULT_ABILITY_CONFIG
from ..learning.memory_model import DEFAULT_MEMORY_CONFIG
from ..models import (
    Card,
    ItemMemoryState,
    ItemStatus,
    LearnerState,
    QuizCard,
    ResponseOutcome,
    SessionState,
    TeachingCard,
    default_item_state,
    utcnow,
)
from .corpus import Corpus
from .scheduler import ItemSelector
from .state_store import StateStore
from .telemetry import SessionTelemetry


class StudySession:
    """
    One learner's active study session.

    Usage:
        session = StudySession(corpus, store)
        session.start()
        card = session.next_card()
        ... render, collect answer ...
        session.answer(card, correct=True)
        session.end()
    """

    def __init__(
        self,
        corpus: Corpus,
        store: StateStore,
        selector: ItemSelector | None = None,
        telemetry: SessionTelemetry | None = None,
        memory_config: MemoryConfig = DEFAULT_MEMORY_CONFIG,
        ability_config: AbilityConfig = DEFAULT_ABILITY_CONFIG,
        recent_items_tracked: int = 10,
        recent_kinds_tracked: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the session.

        Args:
            corpus: Items and distractor pool
            store: Persistence for learner and item state
            selector: Item selector (default config if None)
            telemetry: Event log (debug-log only if None)
            clock: Source of "now" when a call does not pass one
        """
        self.corpus = corpus
        self.store = store
        self.selector = selector or ItemSelector()
        self.telemetry = telemetry or SessionTelemetry()
        self.memory_config = memory_config
        self.ability_config = ability_config
        self.clock = clock
        self._recent_items_tracked = recent_items_tracked
        self._recent_kinds_tracked = recent_kinds_tracked

        self.learner: LearnerState | None = None
        self.item_states: dict[str, ItemMemoryState] = {}
        self.state = SessionState(
            max_recent_items=recent_items_tracked,
            max_recent_kinds=recent_kinds_tracked,
        )

    @property
    def active(self) -> bool:
        return self.learner is not None

    def start(self, now: datetime | None = None) -> LearnerState:
        """Load state from the store and open a new session."""
        now = now or self.clock()
        learner, self.item_states = self.store.load()
        self.learner = replace(
            learner,
            session_count=learner.session_count + 1,
            last_session_at=now,
        )
        self.state = SessionState(
            started_at=now,
            max_recent_items=self._recent_items_tracked,
            max_recent_kinds=self._recent_kinds_tracked,
        )
        self.store.save(self.learner, {})
        self.telemetry.start_session(self.learner, now)

        logger.info(
            f"Session started: theta={self.learner.theta:.2f}, "
            f"uncertainty={self.learner.uncertainty:.2f}, {len(self.item_states)} tracked items"
        )
        return self.learner

    def next_card(self, now: datetime | None = None) -> Card | None:
        """Select the next card, or None when nothing can be shown."""
        learner = self._require_learner()
        return self.selector.select_next_card(
            learner,
            self.item_states,
            self.state,
            self.corpus,
            self.corpus.distractor_pool,
            now or self.clock(),
        )

    def answer(
        self,
        card: QuizCard,
        correct: bool,
        now: datetime | None = None,
        response_ms: int | None = None,
    ) -> ResponseOutcome:
        """
        Record a quiz answer and persist the updated states.

        Raises:
            ValueError: If ``card`` is a teaching card
            UnknownItemError: If the card's item is not in the corpus
        """
        if not isinstance(card, QuizCard):
            raise ValueError("Teaching cards are acknowledged, not answered")
        learner = self._require_learner()
        item = self.corpus.get(card.item_id)
        now = now or self.clock()

        self.telemetry.log_quiz_response(card, correct, learner, self.state, response_ms)

        before = self.item_states.get(item.id) or default_item_state(item.id, item.difficulty)
        new_learner, new_item = apply_quiz_response(
            learner,
            before,
            item.difficulty,
            correct,
            now,
            kind=card.kind,
            memory_config=self.memory_config,
            ability_config=self.ability_config,
        )

        self.telemetry.log_theta_update(learner, new_learner, item.difficulty, correct)
        self._commit(new_learner, new_item)
        self.state = self.state.after_quiz(card, correct)

        return ResponseOutcome(
            learner=new_learner,
            item_state=new_item,
            session=self.state,
            correct=correct,
            graduated=new_item.status is ItemStatus.KNOWN and before.status is not ItemStatus.KNOWN,
            lapsed=new_item.status is ItemStatus.LAPSED and before.status is ItemStatus.KNOWN,
        )

    def acknowledge(self, card: TeachingCard, now: datetime | None = None) -> ItemMemoryState:
        """Record that a teaching card was read; the item enters learning."""
        learner = self._require_learner()
        item = self.corpus.get(card.item_id)
        now = now or self.clock()

        self.telemetry.log_teaching(card, learner, self.state)

        new_item = apply_teaching_ack(item.id, item.difficulty, now, memory_config=self.memory_config)
        self._commit(count_teaching(learner), new_item)
        self.state = self.state.after_teaching(card)
        return new_item

    def end(self) -> SessionState:
        """Close the session and return its final history."""
        learner = self._require_learner()
        self.telemetry.end_session(learner, self.state)
        logger.info(
            f"Session ended: {self.state.cards_shown} cards, "
            f"{self.state.accuracy:.0%} accuracy, {self.state.new_items_taught} new items"
        )
        self.learner = None
        return self.state

    def reset(self) -> None:
        """Erase all stored progress for the learner."""
        self.store.clear()
        self.learner = None
        self.item_states = {}

    def _commit(self, learner: LearnerState, item_state: ItemMemoryState) -> None:
        self.store.save(learner, {item_state.item_id: item_state})
        self.learner = learner
        self.item_states[item_state.item_id] = item_state

    def _require_learner(self) -> LearnerState:
        if self.learner is None:
            raise RuntimeError("Session not started - call start() first")
        return self.learner
