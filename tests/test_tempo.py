"""Tests for atempo decomposition."""

import math

import pytest

from autoscrub.editors.tempo import atempo_chain, factorize, setpts_speedup
from autoscrub.manifest import ConfigurationError


class TestFactorize:
    def test_power_of_two(self):
        assert factorize(8.0) == [2.0, 2.0, 2.0]

    def test_remainder_stage(self):
        assert factorize(3.0) == [2.0, 1.5]

    def test_small_speedup_is_single_stage(self):
        assert factorize(1.5) == [1.5]

    def test_unity_needs_no_stage(self):
        assert factorize(1.0) == []

    def test_slowdown_uses_half_stages(self):
        assert factorize(0.25) == [0.5, 0.5]
        assert factorize(0.3) == [0.5, pytest.approx(0.6)]

    @pytest.mark.parametrize("factor", [0.1, 0.3, 0.75, 1.01, 2.5, 3.0, 7.9, 8.0, 10.0, 100.0])
    def test_product_and_bounds(self, factor):
        ratios = factorize(factor)
        assert math.prod(ratios) == pytest.approx(factor)
        assert all(0.5 <= r <= 2.0 for r in ratios)

    def test_deterministic(self):
        assert factorize(10.0) == factorize(10.0)

    @pytest.mark.parametrize("factor", [0.0, -2.0, float("nan")])
    def test_non_positive_rejected(self, factor):
        with pytest.raises(ConfigurationError):
            factorize(factor)


class TestFilterText:
    def test_atempo_chain(self):
        assert atempo_chain(3.0) == "atempo=2.0,atempo=1.5"

    def test_atempo_chain_unity(self):
        assert atempo_chain(1.0) == ""

    def test_setpts_speedup(self):
        assert setpts_speedup(8.0) == "setpts=(PTS-STARTPTS)/8.0"
