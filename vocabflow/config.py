"""
Configuration for the vocabflow adaptive learning engine.

Two layers:
- Plain dataclasses holding the tuning constants of each algorithm
  (memory model, ability estimator, item selector, card factory).
  These are what the core functions accept.
- A Pydantic Settings class for environment / .env overrides, logging
  and data paths. It builds the dataclass configs.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# Algorithm Configs
# =============================================================================


@dataclass(frozen=True)
class MemoryConfig:
    """Forgetting-curve parameters (simplified FSRS)."""

    initial_stability: float = 0.5  # Days
    stability_growth: float = 2.5  # Multiplier on successful recall
    stability_decay: float = 0.3  # Multiplier on failure
    retrievability_bonus: float = 0.5  # Extra growth for low-R recalls
    difficulty_increase: float = 0.2
    difficulty_decrease: float = 0.05
    min_stability: float = 0.1
    max_stability: float = 365.0
    min_difficulty: float = -3.0
    max_difficulty: float = 3.0
    graduation_correct: int = 2
    graduation_stability: float = 1.0  # Days
    reinforcement_offsets: tuple[timedelta, ...] = (
        timedelta(minutes=1),
        timedelta(minutes=5),
        timedelta(minutes=15),
    )


@dataclass(frozen=True)
class AbilityConfig:
    """Ability (theta) estimator parameters."""

    min_theta: float = -3.0
    max_theta: float = 3.0
    min_uncertainty: float = 0.1
    max_uncertainty: float = 1.0
    uncertainty_decay: float = 0.85
    uninformative_decay_factor: float = 1.05  # Slower decay off-level
    informative_band: float = 1.0
    confirmation_step: float = 0.1  # Fraction of uncertainty
    miss_margin: float = 0.3  # Snap below a missed hard item
    accuracy_alpha: float = 0.1
    initial_theta: float = 0.5
    initial_uncertainty: float = 1.0
    initial_accuracy: float = 0.5


@dataclass(frozen=True)
class SelectorConfig:
    """Priority-auction parameters for next-card selection."""

    reinforcement_priority: float = 1000.0
    target_retrievability: float = 0.85
    priority_scale: float = 100.0

    # Candidate weights
    urgency_weight: float = 0.4
    information_weight: float = 0.25
    learning_value_weight: float = 0.25

    # Probing
    calibration_threshold: float = 0.3  # Uncertainty above this = calibrating
    probe_every_n_cards: int = 5
    probe_jump_factor: float = 1.5
    probe_floor_offset: float = 0.5
    probe_pool_size: int = 10
    probe_pick_top: int = 3
    probe_max_exposures: int = 2

    # Teaching
    teach_target_offset: float = 0.3
    teach_floor_offset: float = 1.5
    teach_pool_size: int = 10
    teach_pick_top: int = 5
    max_new_per_session: int = 10
    max_learning_queue: int = 10

    # Variety
    recent_item_penalty: float = 0.3
    kind_window: int = 5
    kind_repeat_threshold: int = 3
    kind_repeat_penalty: float = 0.5

    difficulty_range: float = 3.0  # Width used to normalise level match


@dataclass(frozen=True)
class CardConfig:
    """Quiz card construction parameters."""

    option_count: int = 4
    band_width: float = 0.5
    default_band: str = "0.0"
    fallback_radius: float = 1.0
    fallback_scan: int = 20
    fallback_pool_cap: int = 10
    placeholder: str = "No definition available"


# =============================================================================
# Settings
# =============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="VOCABFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Data
    # ========================================
    words_path: str = Field(
        default="data/vocab/words.json",
        description="Static corpus of vocabulary items",
    )
    distractors_path: str = Field(
        default="data/vocab/distractors.json",
        description="Difficulty-banded distractor glosses",
    )
    telemetry_dir: str | None = Field(
        default=None,
        description="Directory for JSONL session telemetry (None disables)",
    )

    # ========================================
    # Session History
    # ========================================
    recent_items_tracked: int = Field(
        default=10,
        ge=1,
        description="Item ids kept in the session variety window",
    )
    recent_kinds_tracked: int = Field(
        default=10,
        ge=1,
        description="Card kinds kept in the session variety window",
    )

    # ========================================
    # Tuning Overrides
    # ========================================
    target_retrievability: float = Field(
        default=0.85,
        gt=0.0,
        le=1.0,
        description="Review items whose retrievability falls below this",
    )
    calibration_threshold: float = Field(
        default=0.3,
        description="Uncertainty above which the selector only probes",
    )
    max_new_per_session: int = Field(
        default=10,
        ge=0,
        description="Cap on teaching cards per session",
    )
    max_learning_queue: int = Field(
        default=10,
        ge=0,
        description="Stop teaching while this many items are in learning",
    )
    uncertainty_floor: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Lowest uncertainty the ability estimator reaches",
    )
    initial_theta: float = Field(
        default=0.5,
        ge=-3.0,
        le=3.0,
        description="Starting ability for a new learner",
    )

    def get_memory_config(self) -> MemoryConfig:
        """Build the memory model config."""
        return MemoryConfig()

    def get_ability_config(self) -> AbilityConfig:
        """Build the ability estimator config."""
        return AbilityConfig(
            min_uncertainty=self.uncertainty_floor,
            initial_theta=self.initial_theta,
        )

    def get_selector_config(self) -> SelectorConfig:
        """Build the item selector config."""
        return SelectorConfig(
            target_retrievability=self.target_retrievability,
            calibration_threshold=self.calibration_threshold,
            max_new_per_session=self.max_new_per_session,
            max_learning_queue=self.max_learning_queue,
        )

    def get_card_config(self) -> CardConfig:
        """Build the card factory config."""
        return CardConfig()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
