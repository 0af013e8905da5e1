"""
State Store: persistence boundary for learner and item state.

The engine never performs I/O. Applications supply a StateStore that
loads and saves the (LearnerState, item id -> ItemMemoryState) snapshot
and can clear it for an explicit reset.

Provides:
- StateStore: abstract contract (load / save / clear)
- InMemoryStateStore: dictionary-backed store for tests and simulation
- export_snapshot / import_snapshot: JSON-ready backup format
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from loguru import logger

from ..config import AbilityConfig
from ..models import (
    ItemMemoryState,
    LearnerState,
    StoreError,
    default_learner_state,
    utcnow,
)

SNAPSHOT_VERSION = 1


class StateStore(ABC):
    """Load/save contract for one learner's state."""

    @abstractmethod
    def load(self) -> tuple[LearnerState, dict[str, ItemMemoryState]]:
        """
        Load the learner snapshot.

        Returns a default learner (and no item states) on first use.
        """

    @abstractmethod
    def save(self, learner: LearnerState, item_states: Mapping[str, ItemMemoryState]) -> None:
        """
        Persist the learner and the given item states together.

        Only the passed item states are written; others are left as-is.
        """

    @abstractmethod
    def clear(self) -> None:
        """Delete all state for the learner."""


class InMemoryStateStore(StateStore):
    """
    Dictionary-backed store.

    Holds snapshots by value, so callers never share references with it.
    """

    def __init__(self, config: AbilityConfig | None = None):
        self.config = config or AbilityConfig()
        self._learner: LearnerState | None = None
        self._items: dict[str, ItemMemoryState] = {}
        self.save_count = 0

    def load(self) -> tuple[LearnerState, dict[str, ItemMemoryState]]:
        if self._learner is None:
            self._learner = default_learner_state(config=self.config)
            logger.debug("No stored learner - created default state")
        return self._learner, dict(self._items)

    def save(self, learner: LearnerState, item_states: Mapping[str, ItemMemoryState]) -> None:
        self._learner = learner
        self._items.update(item_states)
        self.save_count += 1

    def clear(self) -> None:
        self._learner = None
        self._items.clear()
        logger.info("State store cleared")


# =============================================================================
# Backup Format
# =============================================================================


def export_snapshot(
    learner: LearnerState,
    item_states: Mapping[str, ItemMemoryState],
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    """Serialize state to a JSON-ready dict."""
    return {
        "version": SNAPSHOT_VERSION,
        "exported_at": (exported_at or utcnow()).isoformat(),
        "learner": learner.to_dict(),
        "item_states": [state.to_dict() for state in item_states.values()],
    }


def import_snapshot(data: Mapping[str, Any]) -> tuple[LearnerState, dict[str, ItemMemoryState]]:
    """
    Restore state from an export_snapshot dict.

    Raises:
        StoreError: If the snapshot is malformed or from a newer version
    """
    version = data.get("version", SNAPSHOT_VERSION)
    if version > SNAPSHOT_VERSION:
        raise StoreError(f"Snapshot version {version} is newer than supported ({SNAPSHOT_VERSION})")

    try:
        learner = LearnerState.from_dict(data["learner"])
        states = [ItemMemoryState.from_dict(raw) for raw in data.get("item_states") or []]
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Malformed snapshot: {e}") from e

    return learner, {state.item_id: state for state in states}
