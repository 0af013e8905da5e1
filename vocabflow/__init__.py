"""
vocabflow: adaptive vocabulary learning engine.

Decides which word to show next, how to present it, and how a learner's
answer updates their ability estimate and the item's forgetting curve.
"""

from .engine import apply_quiz_response, apply_teaching_ack, select_next_card
from .models import (
    Card,
    CardKind,
    CorpusError,
    Item,
    ItemMemoryState,
    ItemStatus,
    LearnerState,
    QuizCard,
    SessionState,
    StoreError,
    TeachingCard,
    UnknownItemError,
    VocabflowError,
    default_item_state,
    default_learner_state,
)
from .delivery.corpus import Corpus
from .delivery.scheduler import ItemSelector
from .delivery.session import StudySession
from .delivery.state_store import InMemoryStateStore, StateStore

__version__ = "1.0.0"

__all__ = [
    # Engine
    "select_next_card",
    "apply_quiz_response",
    "apply_teaching_ack",
    # Models
    "Item",
    "LearnerState",
    "ItemMemoryState",
    "SessionState",
    "ItemStatus",
    "CardKind",
    "Card",
    "TeachingCard",
    "QuizCard",
    "default_item_state",
    "default_learner_state",
    # Errors
    "VocabflowError",
    "CorpusError",
    "UnknownItemError",
    "StoreError",
    # Delivery
    "Corpus",
    "ItemSelector",
    "StudySession",
    "StateStore",
    "InMemoryStateStore",
]
