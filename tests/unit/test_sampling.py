"""
Unit tests for shuffling and weighted sampling.
"""

import random
from collections import Counter

import pytest

from netquiz.study.sampling import WeightedItem, draw_weighted, shuffled, weighted_sample


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same point."""

    def __init__(self, point: float):
        super().__init__(0)
        self.point = point

    def random(self) -> float:
        return self.point


class TestShuffled:
    def test_returns_permutation_without_touching_input(self):
        items = list(range(50))
        result = shuffled(items, random.Random(3))

        assert items == list(range(50))
        assert sorted(result) == items
        assert result != items

    def test_empty_and_single(self):
        assert shuffled([], random.Random(1)) == []
        assert shuffled(["a"], random.Random(1)) == ["a"]

    def test_same_seed_same_order(self):
        assert shuffled(range(20), random.Random(9)) == shuffled(range(20), random.Random(9))


class TestDrawWeighted:
    POOL = (WeightedItem("a", 1), WeightedItem("b", 2), WeightedItem("c", 3))

    @pytest.mark.parametrize(
        "point,expected",
        [(0.0, "a"), (0.1, "a"), (0.2, "b"), (0.4, "b"), (0.5, "c"), (0.99, "c")],
    )
    def test_cumulative_walk(self, point, expected):
        item, _ = draw_weighted(self.POOL, FixedRandom(point))
        assert item == expected

    def test_returns_pool_without_drawn_item(self):
        item, rest = draw_weighted(self.POOL, FixedRandom(0.25))

        assert item == "b"
        assert [e.item for e in rest] == ["a", "c"]
        assert len(self.POOL) == 3

    def test_point_at_total_falls_back_to_last(self):
        item, _ = draw_weighted(self.POOL, FixedRandom(1.0))
        assert item == "c"

    def test_empty_pool_raises(self):
        with pytest.raises(ValueError):
            draw_weighted((), random.Random(0))


class TestWeightedSample:
    def test_no_item_drawn_twice(self):
        items = [WeightedItem(i, w) for i, w in enumerate([1, 10, 100, 1000, 5])]
        rng = random.Random(11)
        for _ in range(200):
            picked = weighted_sample(items, 4, rng)
            assert len(picked) == len(set(picked)) == 4

    def test_stops_when_pool_runs_out(self):
        items = [WeightedItem("x", 1), WeightedItem("y", 1)]
        assert sorted(weighted_sample(items, 10, random.Random(0))) == ["x", "y"]

    def test_non_positive_weights_never_drawn(self):
        items = [WeightedItem("zero", 0), WeightedItem("neg", -3), WeightedItem("one", 1)]
        assert weighted_sample(items, 3, random.Random(0)) == ["one"]

    def test_count_zero(self):
        assert weighted_sample([WeightedItem("x", 1)], 0, random.Random(0)) == []

    @pytest.mark.slow
    def test_single_draw_probability_follows_weight(self):
        weights = {"a": 1, "b": 2, "c": 3, "d": 4}
        items = [WeightedItem(k, w) for k, w in weights.items()]
        rng = random.Random(42)
        trials = 20000

        hits = Counter(weighted_sample(items, 1, rng)[0] for _ in range(trials))

        total = sum(weights.values())
        for key, weight in weights.items():
            assert abs(hits[key] / trials - weight / total) < 0.02
