"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from vocabflow.delivery.corpus import Corpus  # noqa: E402
from vocabflow.models import Definition, Item  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def _make_item(item_id: str, difficulty: float, gloss: str | None = None, word: str | None = None) -> Item:
    """Build a corpus item with a single definition (none if gloss is empty)."""
    gloss = f"gloss for {item_id}" if gloss is None else gloss
    return Item(
        id=item_id,
        word=word or f"word_{item_id}",
        difficulty=difficulty,
        rank=1,
        pos=("noun",),
        definitions=(Definition(pos="noun", gloss=gloss),) if gloss else (),
    )


@pytest.fixture
def make_item():
    """Factory for single-definition items."""
    return _make_item


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time."""
    return datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def sample_items():
    """Twenty-five items spread evenly over [-3, 3]."""
    return [_make_item(f"i{n:02d}", round(-3.0 + n * 0.25, 2)) for n in range(25)]


@pytest.fixture
def distractor_pool():
    """Small banded distractor pool."""
    return {
        "0.0": ["ocean tide", "mountain pass", "violin string", "paper lantern"],
        "0.5": ["silver spoon", "winter coat", "garden hose"],
        "-1.0": ["broken clock", "quiet library"],
    }


@pytest.fixture
def sample_corpus(sample_items, distractor_pool):
    """Corpus over sample_items with the sample distractor pool."""
    return Corpus(sample_items, distractor_pool)


@pytest.fixture
def sample_records():
    """Raw JSON-shaped corpus records."""
    return [
        {
            "id": "1",
            "word": "house",
            "rank": 120,
            "difficulty": -1.2,
            "pos": ["noun"],
            "definitions": [{"pos": "noun", "def": "a building for people to live in"}],
            "cefr": "A1",
        },
        {
            "id": "2",
            "word": "ephemeral",
            "rank": 18000,
            "difficulty": 2.4,
            "pos": ["adjective"],
            "definitions": [
                {"pos": "adjective", "def": "lasting a very short time", "examples": ["ephemeral fame"]}
            ],
            "ipa": "/ɪˈfɛm(ə)rəl/",
        },
        {
            "id": "3",
            "word": "run",
            "rank": 300,
            "difficulty": -0.4,
            "pos": ["verb"],
            "definitions": [],
        },
    ]
