"""
Tests for shared score rounding.
"""

from asobible.scoring import round_half_up


class TestRoundHalfUp:

    def test_half_rounds_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(56.4) == 56
        assert round_half_up(0.0) == 0

    def test_whole_numbers_unchanged(self):
        assert round_half_up(100.0) == 100
