"""
Corpus: static vocabulary items and distractor pool.

Loads the two read-only inputs the engine consumes:
- words.json: list of item records (id, word, difficulty, definitions...)
- distractors.json: band key ("-1.5", "0.0", ...) -> candidate glosses

The corpus is never mutated after loading.
"""

from __future__ import annotations

import json
import random
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path

from loguru import logger

from ..models import CorpusError, Item, UnknownItemError
from .card_factory import band_key


class Corpus:
    """
    Ordered collection of items plus the banded distractor pool.

    Behaves as a sequence of Items so it can be handed straight to the
    selector and card factory.
    """

    def __init__(
        self,
        items: Iterable[Item],
        distractor_pool: Mapping[str, Sequence[str]] | None = None,
    ):
        self._items: list[Item] = list(items)
        self._by_id: dict[str, Item] = {}
        for item in self._items:
            if item.id in self._by_id:
                logger.warning(f"Duplicate item id {item.id} in corpus - keeping first")
                continue
            self._by_id[item.id] = item
        self.distractor_pool: dict[str, list[str]] = {
            key: list(glosses) for key, glosses in (distractor_pool or {}).items()
        }

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict],
        distractor_pool: Mapping[str, Sequence[str]] | None = None,
    ) -> Corpus:
        """Build a corpus from raw JSON-shaped records."""
        items = []
        for i, record in enumerate(records):
            try:
                items.append(Item.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                raise CorpusError(f"Malformed item record at index {i}: {e}") from e
        return cls(items, distractor_pool)

    @classmethod
    def from_files(cls, words_path: Path, distractors_path: Path | None = None) -> Corpus:
        """
        Load the corpus from JSON files.

        Args:
            words_path: JSON array of item records
            distractors_path: JSON object of band key -> glosses (optional)

        Raises:
            CorpusError: If a file is missing or not valid JSON of the right shape
        """
        records = _read_json(words_path)
        if not isinstance(records, list):
            raise CorpusError(f"{words_path} must contain a JSON array of items")

        pool: dict[str, list[str]] = {}
        if distractors_path is not None:
            raw_pool = _read_json(distractors_path)
            if not isinstance(raw_pool, dict):
                raise CorpusError(f"{distractors_path} must contain a JSON object")
            pool = {str(k): [str(g) for g in v] for k, v in raw_pool.items() if isinstance(v, list)}

        corpus = cls.from_records(records, pool)
        logger.info(
            f"Loaded {len(corpus)} items and {len(corpus.distractor_pool)} distractor bands "
            f"from {words_path}"
        )
        return corpus

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    def get(self, item_id: str) -> Item:
        """Look up an item by id, raising UnknownItemError if absent."""
        try:
            return self._by_id[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Item:
        return self._items[index]

    def get_stats(self) -> dict[str, object]:
        """Summary of the loaded corpus."""
        difficulties = [item.difficulty for item in self._items]
        return {
            "items": len(self._items),
            "with_definitions": sum(1 for item in self._items if item.definitions),
            "min_difficulty": min(difficulties) if difficulties else None,
            "max_difficulty": max(difficulties) if difficulties else None,
            "distractor_bands": len(self.distractor_pool),
        }


def _read_json(path: Path) -> object:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CorpusError(f"Corpus file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CorpusError(f"Invalid JSON in {path}: {e}") from e


def synthetic_corpus(count: int = 200, seed: int | None = None) -> Corpus:
    """
    Generate a corpus of placeholder words spread over [-3, 3].

    Used by the simulator and tests when no real corpus is at hand.
    Distractor bands are filled from the generated glosses.
    """
    rng = random.Random(seed)
    records = []
    for i in range(count):
        difficulty = round(rng.uniform(-3.0, 3.0), 2)
        records.append(
            {
                "id": f"w{i:04d}",
                "word": f"word{i:04d}",
                "rank": i + 1,
                "difficulty": difficulty,
                "pos": ["noun"],
                "definitions": [{"pos": "noun", "def": f"meaning number {i}"}],
            }
        )

    pool: dict[str, list[str]] = {}
    for record in records:
        key = band_key(record["difficulty"])
        pool.setdefault(key, []).append(f"sense {record['id']} alternative")

    return Corpus.from_records(records, pool)
