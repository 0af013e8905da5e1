"""
Domain models for the adaptive vocabulary engine.

- Item: static corpus entry (word, difficulty, definitions)
- LearnerState: ability estimate and counters for one learner
- ItemMemoryState: forgetting-curve state for one learner/item pair
- SessionState: in-memory history of the current study session
- TeachingCard / QuizCard: presentable units produced by the card factory

State records are frozen; every update returns a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from .config import AbilityConfig

# =============================================================================
# Enums
# =============================================================================


class ItemStatus(Enum):
    """Learning status of an item for one learner."""

    UNSEEN = "unseen"
    LEARNING = "learning"
    KNOWN = "known"
    LAPSED = "lapsed"


class CardKind(Enum):
    """Why a card is being shown."""

    TEACHING = "teaching"
    PROBE = "probe"
    REVIEW = "review"
    REINFORCEMENT = "reinforcement"

    @property
    def is_quiz(self) -> bool:
        return self is not CardKind.TEACHING


class LastResponse(Enum):
    """Outcome of the most recent quiz on an item."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    NONE = "none"


# =============================================================================
# Exceptions
# =============================================================================


class VocabflowError(Exception):
    """Base class for errors raised at the engine's boundaries."""
    pass


class CorpusError(VocabflowError):
    """Raised when a corpus or distractor file is missing or malformed."""
    pass


class UnknownItemError(VocabflowError):
    """Raised when an item id is not present in the corpus."""

    def __init__(self, item_id: str):
        super().__init__(f"Unknown item: {item_id}")
        self.item_id = item_id


class StoreError(VocabflowError):
    """Raised by state store implementations on I/O failure."""
    pass


# =============================================================================
# Helpers
# =============================================================================


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _keep_last(values: tuple, limit: int) -> tuple:
    """Last ``limit`` entries; a non-positive limit keeps none."""
    return values[max(0, len(values) - limit) :] if limit > 0 else ()


# =============================================================================
# Corpus Items
# =============================================================================


@dataclass(frozen=True)
class Definition:
    """One sense of a word."""

    pos: str
    gloss: str
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class Item:
    """
    A vocabulary item loaded from the static corpus.

    Difficulty is frequency-derived and sits on the same scale as the
    learner's theta (roughly -3 to 3).
    """

    id: str
    word: str
    difficulty: float
    rank: int = 0
    pos: tuple[str, ...] = ()
    definitions: tuple[Definition, ...] = ()
    ipa: str | None = None
    sentences: tuple[str, ...] = ()
    cefr: str | None = None

    @property
    def primary_gloss(self) -> str | None:
        """First definition gloss, the answer shown on quiz cards."""
        if not self.definitions:
            return None
        return self.definitions[0].gloss or None

    @classmethod
    def from_dict(cls, data: dict) -> Item:
        """
        Create an Item from a corpus record.

        Accepts the corpus JSON shape: definitions as a list of
        {"pos", "def", "examples"} objects.

        Raises:
            KeyError: If ``id`` or ``word`` is missing
            TypeError: If a definition is not an object
            ValueError: If ``word`` is not a non-empty string
        """
        word = data["word"]
        if not isinstance(word, str) or not word.strip():
            raise ValueError(f"word must be a non-empty string, got {word!r}")
        raw_definitions = data.get("definitions") or []
        for d in raw_definitions:
            if not isinstance(d, dict):
                raise TypeError(f"definition must be an object, got {type(d).__name__}")

        definitions = tuple(
            Definition(
                pos=d.get("pos", ""),
                gloss=d.get("def") or d.get("gloss") or "",
                examples=tuple(d.get("examples") or ()),
            )
            for d in raw_definitions
        )
        return cls(
            id=str(data["id"]),
            word=word,
            difficulty=float(data.get("difficulty", 0.0)),
            rank=int(data.get("rank", 0)),
            pos=tuple(data.get("pos") or ()),
            definitions=definitions,
            ipa=data.get("ipa"),
            sentences=tuple(data.get("sentences") or ()),
            cefr=data.get("cefr"),
        )


# =============================================================================
# Learner State
# =============================================================================


@dataclass(frozen=True)
class LearnerState:
    """Global learning state for a single learner."""

    theta: float = 0.5
    uncertainty: float = 1.0  # 1.0 = no idea, floor = confident
    total_known: int = 0
    total_learning: int = 0
    total_seen: int = 0
    average_accuracy: float = 0.5
    session_count: int = 0
    created_at: datetime | None = None
    last_session_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "theta": self.theta,
            "uncertainty": self.uncertainty,
            "total_known": self.total_known,
            "total_learning": self.total_learning,
            "total_seen": self.total_seen,
            "average_accuracy": self.average_accuracy,
            "session_count": self.session_count,
            "created_at": _to_iso(self.created_at),
            "last_session_at": _to_iso(self.last_session_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> LearnerState:
        return cls(
            theta=float(data.get("theta", 0.5)),
            uncertainty=float(data.get("uncertainty", 1.0)),
            total_known=int(data.get("total_known", 0)),
            total_learning=int(data.get("total_learning", 0)),
            total_seen=int(data.get("total_seen", 0)),
            average_accuracy=float(data.get("average_accuracy", 0.5)),
            session_count=int(data.get("session_count", 0)),
            created_at=_from_iso(data.get("created_at")),
            last_session_at=_from_iso(data.get("last_session_at")),
        )


def default_learner_state(
    now: datetime | None = None,
    theta: float | None = None,
    uncertainty: float | None = None,
    config: AbilityConfig | None = None,
) -> LearnerState:
    """
    State for a learner on first use.

    Starting theta, uncertainty and accuracy come from ``config``;
    ``theta`` and ``uncertainty`` override them when given.
    """
    config = config or AbilityConfig()
    now = now or utcnow()
    return LearnerState(
        theta=config.initial_theta if theta is None else theta,
        uncertainty=config.initial_uncertainty if uncertainty is None else uncertainty,
        average_accuracy=config.initial_accuracy,
        created_at=now,
        last_session_at=now,
    )


# =============================================================================
# Item Memory State
# =============================================================================


@dataclass(frozen=True)
class ItemMemoryState:
    """Forgetting-curve state for one learner/item pair."""

    item_id: str
    status: ItemStatus = ItemStatus.UNSEEN
    stability: float = 0.0  # Days; 0 until first exposure
    difficulty: float = 0.0  # Learner-specific, drifts from base difficulty
    last_seen: datetime | None = None
    retrievability: float = 0.0
    exposure_count: int = 0
    correct_count: int = 0
    lapse_count: int = 0
    last_response: LastResponse = LastResponse.NONE
    reinforcements_due: tuple[datetime, ...] = ()

    def next_reinforcement(self) -> datetime | None:
        """Earliest pending reinforcement, if any."""
        if not self.reinforcements_due:
            return None
        return min(self.reinforcements_due)

    def reinforcement_due(self, now: datetime) -> bool:
        nxt = self.next_reinforcement()
        return nxt is not None and nxt <= now

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "status": self.status.value,
            "stability": self.stability,
            "difficulty": self.difficulty,
            "last_seen": _to_iso(self.last_seen),
            "retrievability": self.retrievability,
            "exposure_count": self.exposure_count,
            "correct_count": self.correct_count,
            "lapse_count": self.lapse_count,
            "last_response": self.last_response.value,
            "reinforcements_due": [ts.isoformat() for ts in self.reinforcements_due],
        }

    @classmethod
    def from_dict(cls, data: dict) -> ItemMemoryState:
        return cls(
            item_id=str(data["item_id"]),
            status=ItemStatus(data.get("status", "unseen")),
            stability=float(data.get("stability", 0.0)),
            difficulty=float(data.get("difficulty", 0.0)),
            last_seen=_from_iso(data.get("last_seen")),
            retrievability=float(data.get("retrievability", 0.0)),
            exposure_count=int(data.get("exposure_count", 0)),
            correct_count=int(data.get("correct_count", 0)),
            lapse_count=int(data.get("lapse_count", 0)),
            last_response=LastResponse(data.get("last_response") or "none"),
            reinforcements_due=tuple(
                ts for ts in (_from_iso(v) for v in data.get("reinforcements_due") or []) if ts
            ),
        )


def default_item_state(item_id: str, base_difficulty: float) -> ItemMemoryState:
    """Placeholder state for an item the learner has never touched."""
    return ItemMemoryState(item_id=item_id, difficulty=base_difficulty)


# =============================================================================
# Cards
# =============================================================================


@dataclass(frozen=True)
class QuizOption:
    """One answer option on a quiz card."""

    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class TeachingCard:
    """Reveal card introducing a new item. No options."""

    item: Item
    kind: CardKind = CardKind.TEACHING

    @property
    def item_id(self) -> str:
        return self.item.id


@dataclass(frozen=True)
class QuizCard:
    """Multiple-choice card: one correct gloss among distractors."""

    item: Item
    kind: CardKind
    options: tuple[QuizOption, ...]
    correct_index: int

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def correct_option(self) -> QuizOption:
        return self.options[self.correct_index]

    def is_correct(self, choice: int) -> bool:
        """Grade a chosen option index."""
        return 0 <= choice < len(self.options) and self.options[choice].is_correct


Card = Union[TeachingCard, QuizCard]


# =============================================================================
# Session State
# =============================================================================


@dataclass(frozen=True)
class SessionState:
    """
    In-memory session tracking (never persisted).

    The recent_* windows feed the selector's variety penalties.
    """

    cards_shown: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    new_items_taught: int = 0
    recent_item_ids: tuple[str, ...] = ()
    recent_kinds: tuple[CardKind, ...] = ()
    started_at: datetime | None = None
    max_recent_items: int = 10
    max_recent_kinds: int = 10

    @property
    def accuracy(self) -> float:
        answered = self.correct_count + self.incorrect_count
        return self.correct_count / answered if answered else 0.0

    def _with_history(self, card: Card) -> SessionState:
        return replace(
            self,
            cards_shown=self.cards_shown + 1,
            recent_item_ids=_keep_last(self.recent_item_ids + (card.item_id,), self.max_recent_items),
            recent_kinds=_keep_last(self.recent_kinds + (card.kind,), self.max_recent_kinds),
        )

    def after_quiz(self, card: Card, correct: bool) -> SessionState:
        """Session state after a quiz card was answered."""
        updated = self._with_history(card)
        return replace(
            updated,
            correct_count=self.correct_count + (1 if correct else 0),
            incorrect_count=self.incorrect_count + (0 if correct else 1),
        )

    def after_teaching(self, card: Card) -> SessionState:
        """Session state after a teaching card was acknowledged."""
        updated = self._with_history(card)
        return replace(updated, new_items_taught=self.new_items_taught + 1)


@dataclass
class ResponseOutcome:
    """Result of applying a quiz response."""

    learner: LearnerState
    item_state: ItemMemoryState
    session: SessionState
    correct: bool
    graduated: bool = False
    lapsed: bool = False
