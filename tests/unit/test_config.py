"""
Unit tests for configuration.

Tests:
- Default algorithm constants
- Environment overrides flowing into the dataclass configs
- Validation of out-of-range settings
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from vocabflow.config import (
    AbilityConfig,
    CardConfig,
    MemoryConfig,
    SelectorConfig,
    Settings,
    get_settings,
)
from vocabflow.models import default_learner_state


class TestDefaults:
    """Tests for the built-in tuning constants."""

    def test_memory_defaults(self):
        config = MemoryConfig()

        assert config.initial_stability == 0.5
        assert config.stability_growth == 2.5
        assert config.stability_decay == 0.3
        assert config.reinforcement_offsets == (
            timedelta(minutes=1),
            timedelta(minutes=5),
            timedelta(minutes=15),
        )

    def test_ability_defaults(self):
        config = AbilityConfig()

        assert config.uncertainty_decay == 0.85
        assert config.min_uncertainty == 0.1
        assert config.initial_theta == 0.5

    def test_selector_defaults(self):
        config = SelectorConfig()

        assert config.reinforcement_priority == 1000.0
        assert config.target_retrievability == 0.85
        assert config.max_new_per_session == 10
        assert config.max_learning_queue == 10

    def test_card_defaults(self):
        assert CardConfig().option_count == 4

    def test_configs_are_frozen(self):
        with pytest.raises(AttributeError):
            SelectorConfig().max_new_per_session = 3


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("VOCABFLOW_LOG_LEVEL", raising=False)
        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.telemetry_dir is None
        assert settings.get_selector_config() == SelectorConfig()

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("VOCABFLOW_MAX_NEW_PER_SESSION", "4")
        monkeypatch.setenv("VOCABFLOW_CALIBRATION_THRESHOLD", "0.5")
        monkeypatch.setenv("VOCABFLOW_UNCERTAINTY_FLOOR", "0.2")

        settings = Settings()
        selector = settings.get_selector_config()

        assert selector.max_new_per_session == 4
        assert selector.calibration_threshold == 0.5
        assert settings.get_ability_config().min_uncertainty == 0.2

    def test_invalid_target_rejected(self, monkeypatch):
        monkeypatch.setenv("VOCABFLOW_TARGET_RETRIEVABILITY", "1.5")

        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestInitialLearner:
    """Tests for the first-use learner built from AbilityConfig."""

    def test_defaults_from_config(self, now):
        config = AbilityConfig(initial_theta=-2.0, initial_uncertainty=0.7, initial_accuracy=0.9)
        learner = default_learner_state(now, config=config)

        assert learner.theta == -2.0
        assert learner.uncertainty == 0.7
        assert learner.average_accuracy == 0.9
        assert learner.created_at == now

    def test_explicit_values_override_config(self, now):
        config = AbilityConfig(initial_theta=-2.0)
        learner = default_learner_state(now, theta=1.0, uncertainty=0.4, config=config)

        assert learner.theta == 1.0
        assert learner.uncertainty == 0.4

    def test_settings_initial_theta_reaches_learner(self, monkeypatch, now):
        monkeypatch.setenv("VOCABFLOW_INITIAL_THETA", "-1.5")
        learner = default_learner_state(now, config=Settings().get_ability_config())

        assert learner.theta == -1.5
