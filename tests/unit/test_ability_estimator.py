"""
Unit tests for the ability estimator.

Tests:
- Logistic response probability and information gain
- Theta jumps in all four correct/incorrect x easier/harder cases
- Uncertainty decay and floor
- Rolling accuracy
"""

import pytest

from vocabflow.learning.ability_estimator import (
    apply_response,
    information_gain,
    jump_factor,
    probability_correct,
)
from vocabflow.models import LearnerState


def learner(theta=0.0, uncertainty=1.0, accuracy=0.5):
    return LearnerState(theta=theta, uncertainty=uncertainty, average_accuracy=accuracy)


class TestResponseModel:
    """Tests for the IRT probability helpers."""

    def test_even_match_is_half(self):
        assert probability_correct(0.7, 0.7) == pytest.approx(0.5)

    def test_easier_item_more_likely(self):
        assert probability_correct(1.0, -1.0) > probability_correct(1.0, 2.0)

    def test_extreme_gaps_do_not_overflow(self):
        assert probability_correct(0.0, 1000.0) == pytest.approx(0.0)
        assert probability_correct(0.0, -1000.0) == pytest.approx(1.0)

    def test_information_peaks_at_theta(self):
        assert information_gain(0.0, 0.0, 1.0) == pytest.approx(0.25)
        assert information_gain(0.0, 2.0, 1.0) < 0.25

    def test_information_scales_with_uncertainty(self):
        assert information_gain(0.0, 0.0, 0.4) == pytest.approx(0.1)

    def test_jump_factor_range(self):
        assert jump_factor(1.0) == pytest.approx(1.0)
        assert jump_factor(0.1) == pytest.approx(0.55)


class TestThetaUpdate:
    """Tests for the asymmetric theta jumps."""

    def test_correct_on_harder_item_jumps_fully_when_uncertain(self):
        """theta 0, u 1, correct on b = 1.5 moves theta all the way to 1.5."""
        result = apply_response(learner(0.0, 1.0), 1.5, True)
        assert result.theta == pytest.approx(1.5)

    def test_correct_on_harder_item_half_jump_when_confident(self):
        result = apply_response(learner(0.0, 0.1), 1.0, True)
        assert result.theta == pytest.approx(0.55)

    def test_correct_on_easier_item_small_nudge(self):
        result = apply_response(learner(1.0, 1.0), 0.0, True)
        assert result.theta == pytest.approx(1.1)

    def test_incorrect_on_easier_item_jumps_down(self):
        result = apply_response(learner(1.0, 0.5), 0.0, False)
        assert result.theta == pytest.approx(0.25)

    def test_incorrect_on_harder_item_snaps_below_it(self):
        result = apply_response(learner(0.0, 1.0), 1.0, False)
        assert result.theta == pytest.approx(0.7)

    def test_theta_clamped(self):
        assert apply_response(learner(0.0, 1.0), 10.0, True).theta == 3.0
        assert apply_response(learner(0.0, 1.0), -10.0, False).theta == -3.0

    def test_out_of_range_input_clamped(self):
        """An out-of-range stored theta is treated as the bound."""
        result = apply_response(learner(9.0, 1.0), 3.0, True)
        assert result.theta == pytest.approx(3.0)


class TestUncertainty:
    """Tests for uncertainty decay."""

    def test_informative_item_decays_fully(self):
        result = apply_response(learner(0.0, 1.0), 0.5, True)
        assert result.uncertainty == pytest.approx(0.85)

    def test_off_level_item_decays_slower(self):
        result = apply_response(learner(0.0, 1.0), 1.5, True)
        assert result.uncertainty == pytest.approx(0.85 * 1.05)

    def test_floor(self):
        result = apply_response(learner(0.0, 0.1), 0.0, True)
        assert result.uncertainty == pytest.approx(0.1)

    def test_monotonic_over_many_answers(self):
        state = learner(0.0, 1.0)
        previous = state.uncertainty
        for i in range(30):
            state = apply_response(state, (i % 7) - 3.0, i % 2 == 0)
            assert state.uncertainty <= previous
            previous = state.uncertainty
        assert state.uncertainty == pytest.approx(0.1)


class TestAccuracy:
    """Tests for the rolling accuracy average."""

    def test_correct_raises_accuracy(self):
        assert apply_response(learner(), 0.0, True).average_accuracy == pytest.approx(0.55)

    def test_incorrect_lowers_accuracy(self):
        assert apply_response(learner(), 0.0, False).average_accuracy == pytest.approx(0.45)

    def test_other_fields_preserved(self):
        state = LearnerState(theta=0.0, total_known=7, total_learning=3, session_count=2)
        result = apply_response(state, 1.0, True)

        assert result.total_known == 7
        assert result.total_learning == 3
        assert result.session_count == 2
        assert state.theta == 0.0
