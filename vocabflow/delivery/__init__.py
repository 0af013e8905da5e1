"""
Delivery: turning learner state into cards and persisting the results.

Components:
- Corpus: static items and the banded distractor pool
- ItemSelector: priority auction for the next card
- card_factory: teaching and multiple-choice quiz cards
- StateStore: persistence contract for learner and item state
- SessionTelemetry: JSONL event log

StudySession lives in ``delivery.session`` and is imported from there.
"""

from .card_factory import band_key, create_card, create_quiz_card, create_teaching_card
from .corpus import Corpus, synthetic_corpus
from .scheduler import Candidate, ItemSelector
from .state_store import InMemoryStateStore, StateStore, export_snapshot, import_snapshot
from .telemetry import SessionTelemetry

__all__ = [
    # Corpus
    "Corpus",
    "synthetic_corpus",
    # Selection
    "ItemSelector",
    "Candidate",
    # Cards
    "band_key",
    "create_card",
    "create_quiz_card",
    "create_teaching_card",
    # Persistence
    "StateStore",
    "InMemoryStateStore",
    "export_snapshot",
    "import_snapshot",
    # Telemetry
    "SessionTelemetry",
]
