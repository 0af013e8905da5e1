"""
Card Factory: turns a chosen item into a presentable card.

Teaching cards are a plain reveal. Quiz cards (probe, review,
reinforcement) show the item's first gloss among distractors drawn from
a difficulty-banded pool:

1. Filter the band's pool (drop the answer, glosses containing the word,
   and glosses whose first word appears in the answer).
2. Backfill from first glosses of nearby-difficulty items if short.
3. Shuffle, take three, pad with placeholders, and insert the answer at
   a random slot.

Every quiz card has exactly ``option_count`` options, one of them correct.
"""

from __future__ import annotations

import math
import random
from collections.abc import Mapping, Sequence

from ..config import CardConfig
from ..models import CardKind, Item, QuizCard, QuizOption, TeachingCard

DEFAULT_CARD_CONFIG = CardConfig()


def band_key(difficulty: float, band_width: float = 0.5) -> str:
    """
    Distractor pool key for a difficulty: nearest band, one decimal.

    Halves round up, e.g. 0.25 -> "0.5", -0.25 -> "0.0".
    """
    banded = math.floor(difficulty / band_width + 0.5) * band_width
    # + 0.0 turns -0.0 into 0.0 so the key never reads "-0.0"
    return f"{banded + 0.0:.1f}"


def filter_distractors(candidates: Sequence[str], item: Item, correct: str) -> list[str]:
    """Drop glosses that would give the answer away or duplicate it."""
    word = (item.word or "").lower()
    correct_lower = correct.lower()
    kept: list[str] = []
    for gloss in candidates:
        if not gloss or gloss == correct or gloss in kept:
            continue
        lowered = gloss.lower()
        if word and word in lowered:
            continue
        if lowered.split(" ")[0] in correct_lower:
            continue
        kept.append(gloss)
    return kept


def backfill_distractors(
    pool: list[str],
    item: Item,
    correct: str,
    corpus: Sequence[Item],
    config: CardConfig = DEFAULT_CARD_CONFIG,
) -> list[str]:
    """Top up a short pool with first glosses of items of similar difficulty."""
    needed = config.option_count - 1
    if len(pool) >= needed:
        return pool

    nearby = [
        other
        for other in corpus
        if other.id != item.id
        and abs(other.difficulty - item.difficulty) < config.fallback_radius
        and other.definitions
    ][: config.fallback_scan]

    result = list(pool)
    for other in nearby:
        if len(result) >= config.fallback_pool_cap:
            break
        gloss = other.primary_gloss
        if gloss and gloss != correct and gloss not in result:
            result.append(gloss)
    return result


def create_teaching_card(item: Item) -> TeachingCard:
    return TeachingCard(item=item)


def create_quiz_card(
    item: Item,
    kind: CardKind,
    corpus: Sequence[Item],
    distractor_pool: Mapping[str, Sequence[str]],
    rng: random.Random | None = None,
    config: CardConfig = DEFAULT_CARD_CONFIG,
) -> QuizCard:
    """
    Build a multiple-choice card for ``item``.

    Args:
        item: Item being quizzed
        kind: PROBE, REVIEW or REINFORCEMENT
        corpus: All items (backfill source)
        distractor_pool: band key -> candidate glosses
        rng: Random source; seed it for reproducible option order

    Returns:
        QuizCard with exactly ``config.option_count`` options
    """
    rng = rng or random.Random()
    correct = item.primary_gloss or config.placeholder

    band = distractor_pool.get(band_key(item.difficulty, config.band_width))
    if band is None:
        band = distractor_pool.get(config.default_band, ())

    pool = filter_distractors(band, item, correct)
    pool = backfill_distractors(pool, item, correct, corpus, config)

    rng.shuffle(pool)
    distractors = pool[: config.option_count - 1]
    while len(distractors) < config.option_count - 1:
        distractors.append(config.placeholder)

    options = [QuizOption(text=d, is_correct=False) for d in distractors]
    correct_index = rng.randrange(config.option_count)
    options.insert(correct_index, QuizOption(text=correct, is_correct=True))

    return QuizCard(
        item=item,
        kind=kind,
        options=tuple(options),
        correct_index=correct_index,
    )


def create_card(
    item: Item,
    kind: CardKind,
    corpus: Sequence[Item],
    distractor_pool: Mapping[str, Sequence[str]],
    rng: random.Random | None = None,
    config: CardConfig = DEFAULT_CARD_CONFIG,
) -> TeachingCard | QuizCard:
    """Materialize a card of the given kind."""
    if kind is CardKind.TEACHING:
        return create_teaching_card(item)
    return create_quiz_card(item, kind, corpus, distractor_pool, rng=rng, config=config)
