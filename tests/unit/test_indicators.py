"""
Unit tests for the technical indicators.
"""

import pytest

from principia.analytics.indicators import (
    DEFAULT_LEVEL_VOLUME,
    compute_momentum,
    compute_signal_strength,
    compute_sma,
    detect_key_levels,
)
from principia.decision.models import LevelType


def test_sma_uses_last_period_samples():
    assert compute_sma([1.0, 2.0, 3.0, 4.0], 2) == pytest.approx(3.5)


def test_sma_short_history_averages_everything():
    assert compute_sma([1.0, 2.0, 3.0, 4.0], 20) == pytest.approx(2.5)


def test_sma_empty_history():
    assert compute_sma([], 20) is None


@pytest.mark.parametrize("prices,expected", [
    ([], 0.0),
    ([100.0], 0.0),
    ([100.0, 105.0], 0.5),
    ([100.0, 102.0, 97.0], -0.3),
    ([100.0, 150.0], 1.0),
    ([100.0, 80.0], -1.0),
])
def test_momentum_normalized_and_clamped(prices, expected):
    assert compute_momentum(prices) == pytest.approx(expected)


def test_key_levels_need_ten_samples():
    assert detect_key_levels([100.0, 101.0, 100.0, 99.0, 100.0], 100.0) == []


def test_key_levels_are_strict_local_extrema():
    prices = [100.0, 101.0, 100.0, 99.0, 100.0, 101.0, 102.0, 101.0, 100.0, 100.0]

    levels = detect_key_levels(prices, 100.0)

    assert [(level.price, level.type) for level in levels] == [
        (101.0, LevelType.RESISTANCE),
        (99.0, LevelType.SUPPORT),
        (102.0, LevelType.RESISTANCE),
    ]
    assert all(level.volume == DEFAULT_LEVEL_VOLUME for level in levels)


def test_key_levels_far_from_price_are_dropped():
    prices = [100.0, 150.0, 100.0, 50.0, 100.0, 100.0, 100.0, 101.0, 100.0, 100.0]

    levels = detect_key_levels(prices, 100.0)

    assert [level.price for level in levels] == [101.0]


def test_signal_strength_scales_deviation():
    assert compute_signal_strength(101.0, 100.0) == pytest.approx(0.1)
    assert compute_signal_strength(99.0, 100.0) == pytest.approx(-0.1)


def test_signal_strength_is_clamped():
    assert compute_signal_strength(120.0, 100.0) == 1.0
    assert compute_signal_strength(50.0, 100.0) == -1.0


def test_signal_strength_without_sma():
    assert compute_signal_strength(100.0, None) == 0.0
