"""Tests for grid ladder generation."""

from __future__ import annotations

import pytest

from gridwatch.errors import ValidationError
from gridwatch.grid import (
    GridType,
    check_grid_bounds,
    generate_levels,
    grid_spacing_pct,
)


class TestArithmeticLadder:
    def test_btc_example(self) -> None:
        levels = generate_levels(62000, 72000, 20, "arithmetic")
        assert len(levels) == 21
        assert levels[0] == 62000
        assert levels[-1] == 72000
        assert levels == [62000 + 500 * i for i in range(21)]

    def test_equal_differences(self) -> None:
        levels = generate_levels(0.1234, 0.5678, 7, GridType.ARITHMETIC)
        diffs = [b - a for a, b in zip(levels, levels[1:])]
        for d in diffs:
            assert d == pytest.approx(diffs[0], abs=2e-8)

    def test_single_grid(self) -> None:
        assert generate_levels(10, 20, 1, "arithmetic") == [10, 20]


class TestGeometricLadder:
    def test_documented_example(self) -> None:
        levels = generate_levels(100, 200, 4, "geometric")
        assert [round(x, 2) for x in levels] == [100, 118.92, 141.42, 168.18, 200]

    def test_equal_ratios(self) -> None:
        levels = generate_levels(3100, 3800, 15, GridType.GEOMETRIC)
        ratios = [b / a for a, b in zip(levels, levels[1:])]
        for r in ratios:
            assert r == pytest.approx(ratios[0], rel=1e-9)

    def test_endpoints(self) -> None:
        levels = generate_levels(150, 200, 10, "geometric")
        assert len(levels) == 11
        assert levels[0] == pytest.approx(150, abs=1e-8)
        assert levels[-1] == pytest.approx(200, abs=1e-8)


class TestLadderProperties:
    @pytest.mark.parametrize("kind", ["arithmetic", "geometric"])
    @pytest.mark.parametrize(
        "lower,upper,count",
        [(1, 2, 1), (0.01, 0.02, 50), (62000, 72000, 20), (5, 500, 99)],
    )
    def test_strictly_increasing(
        self, kind: str, lower: float, upper: float, count: int
    ) -> None:
        levels = generate_levels(lower, upper, count, kind)
        assert len(levels) == count + 1
        assert all(a < b for a, b in zip(levels, levels[1:]))

    def test_rounded_to_eight_places(self) -> None:
        levels = generate_levels(1, 2, 3, "arithmetic")
        assert levels[1] == 1.33333333

    def test_deterministic(self) -> None:
        a = generate_levels(3100, 3800, 15, "geometric")
        b = generate_levels(3100, 3800, 15, "geometric")
        assert a == b

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValueError):
            generate_levels(1, 2, 3, "fibonacci")


class TestBounds:
    def test_valid(self) -> None:
        check_grid_bounds(1, 2, 1)

    @pytest.mark.parametrize(
        "lower,upper,count",
        [
            (100, 200, 0),
            (200, 100, 10),
            (100, 100, 10),
            (0, 100, 10),
            (-5, 100, 10),
            (float("nan"), 200, 10),
            (100, float("nan"), 10),
            (100, float("inf"), 10),
            (float("inf"), float("inf"), 10),
        ],
    )
    def test_invalid(self, lower: float, upper: float, count: int) -> None:
        with pytest.raises(ValidationError):
            check_grid_bounds(lower, upper, count)


class TestSpacing:
    def test_geometric_single_value(self) -> None:
        lo, hi = grid_spacing_pct(generate_levels(100, 200, 4, "geometric"))
        assert lo == pytest.approx(hi)
        assert lo == pytest.approx(18.92, abs=0.01)

    def test_arithmetic_range(self) -> None:
        lo, hi = grid_spacing_pct(generate_levels(100, 200, 4, "arithmetic"))
        # 25 on 175 is the smallest step, 25 on 100 the largest
        assert lo == pytest.approx(25 / 175 * 100)
        assert hi == pytest.approx(25.0)

    def test_empty(self) -> None:
        assert grid_spacing_pct([]) == (0.0, 0.0)
        assert grid_spacing_pct([100.0]) == (0.0, 0.0)
