"""
Session telemetry: structured JSONL event log.

One file per session, one event per line, for offline tuning of the
selector and estimator.

File Structure:
    <telemetry_dir>/
        2026-01-05_session_ab12cd34ef56.jsonl

Event Types:
    - session_start: learner snapshot at the start
    - quiz_response: item, card kind, correctness, learner level
    - theta_update: ability before/after a response
    - teaching_shown: a new item was introduced
    - session_end: counts and accuracy
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from ..models import LearnerState, QuizCard, SessionState, TeachingCard, utcnow

# =============================================================================
# Event Schemas
# =============================================================================


@dataclass
class QuizResponseEvent:
    """A single quiz answer."""

    word: str
    item_id: str
    kind: str
    correct: bool
    item_difficulty: float
    item_rank: int
    theta: float
    uncertainty: float
    session_cards: int
    response_ms: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ThetaUpdateEvent:
    """Ability estimate movement caused by one answer."""

    old_theta: float
    new_theta: float
    old_uncertainty: float
    new_uncertainty: float
    item_difficulty: float
    correct: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Telemetry Logger
# =============================================================================


class SessionTelemetry:
    """
    Writes session events to a JSONL file.

    With no directory configured, events are only sent to the debug log.
    """

    def __init__(self, log_dir: Path | None = None):
        self.log_dir = log_dir
        self.session_id: str | None = None
        self.session_file: Path | None = None
        self.events_written = 0

    def start_session(self, learner: LearnerState, now: datetime | None = None) -> str:
        """Open a new session file and record the starting learner snapshot."""
        now = now or utcnow()
        self.session_id = uuid.uuid4().hex[:12]
        self.events_written = 0
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.session_file = self.log_dir / f"{now:%Y-%m-%d}_session_{self.session_id}.jsonl"

        self._write_event("session_start", {"learner": learner.to_dict()}, now)
        logger.debug(f"Telemetry session started: {self.session_id}")
        return self.session_id

    def log_quiz_response(
        self,
        card: QuizCard,
        correct: bool,
        learner: LearnerState,
        session: SessionState,
        response_ms: int | None = None,
    ) -> None:
        event = QuizResponseEvent(
            word=card.item.word,
            item_id=card.item_id,
            kind=card.kind.value,
            correct=correct,
            item_difficulty=card.item.difficulty,
            item_rank=card.item.rank,
            theta=learner.theta,
            uncertainty=learner.uncertainty,
            session_cards=session.cards_shown,
            response_ms=response_ms,
        )
        self._write_event("quiz_response", event.to_dict())

    def log_theta_update(
        self,
        before: LearnerState,
        after: LearnerState,
        item_difficulty: float,
        correct: bool,
    ) -> None:
        event = ThetaUpdateEvent(
            old_theta=before.theta,
            new_theta=after.theta,
            old_uncertainty=before.uncertainty,
            new_uncertainty=after.uncertainty,
            item_difficulty=item_difficulty,
            correct=correct,
        )
        self._write_event("theta_update", event.to_dict())

    def log_teaching(self, card: TeachingCard, learner: LearnerState, session: SessionState) -> None:
        self._write_event(
            "teaching_shown",
            {
                "word": card.item.word,
                "item_id": card.item_id,
                "item_difficulty": card.item.difficulty,
                "item_rank": card.item.rank,
                "theta": learner.theta,
                "session_cards": session.cards_shown,
                "new_items_this_session": session.new_items_taught,
            },
        )

    def end_session(self, learner: LearnerState, session: SessionState) -> None:
        self._write_event(
            "session_end",
            {
                "cards_shown": session.cards_shown,
                "correct": session.correct_count,
                "incorrect": session.incorrect_count,
                "accuracy": round(session.accuracy, 4),
                "new_items": session.new_items_taught,
                "final_theta": learner.theta,
                "final_uncertainty": learner.uncertainty,
            },
        )
        logger.debug(f"Telemetry session ended: {self.session_id} ({self.events_written} events)")
        self.session_id = None

    def _write_event(self, event_type: str, payload: dict[str, Any], now: datetime | None = None) -> None:
        record = {
            "timestamp": (now or utcnow()).isoformat(),
            "session_id": self.session_id,
            "event": event_type,
            **payload,
        }
        self.events_written += 1
        if self.session_file is None:
            logger.debug(f"telemetry {event_type}: {payload}")
            return
        try:
            with open(self.session_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, default=str) + "\n")
        except OSError as e:
            # Telemetry loss must not interrupt a study session
            logger.warning(f"Failed to write telemetry event {event_type}: {e}")
