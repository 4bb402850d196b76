"""
Tests for RandomLabeling.
"""

import numpy as np

from guidedAL.labeling.estimate import Estimate
from guidedAL.active.random_labeling import RandomLabeling


def _predictions(n):
    return Estimate(np.full((n, 2), 0.5))


class TestRandomLabeling:
    """Test random picks without replacement."""

    def test_picks_distinct_nodes(self):
        """Test picks are distinct estimated nodes with score 0."""
        strategy = RandomLabeling(random_seed=7)
        strategy.initialize(None, None)
        picks = strategy.pick(_predictions(10), 4)
        nodes = [ln.node for ln in picks]
        assert len(set(nodes)) == 4
        assert all(0 <= v < 10 for v in nodes)
        assert all(ln.score == 0.0 for ln in picks)

    def test_capped_at_pool_size(self):
        """Test asking for more nodes than exist returns all of them."""
        strategy = RandomLabeling(random_seed=1)
        strategy.initialize(None, None)
        picks = strategy.pick(_predictions(3), 10)
        assert sorted(ln.node for ln in picks) == [0, 1, 2]

    def test_seed_repeats_after_initialize(self):
        """Test a seeded strategy repeats its picks each round."""
        strategy = RandomLabeling(random_seed=42)
        strategy.initialize(None, None)
        first = [ln.node for ln in strategy.pick(_predictions(20), 5)]
        strategy.initialize(None, None)
        second = [ln.node for ln in strategy.pick(_predictions(20), 5)]
        assert first == second

    def test_no_predictions(self):
        """Test None without estimated nodes."""
        strategy = RandomLabeling()
        strategy.initialize(None, None)
        assert strategy.pick(None, 3) is None
        assert strategy.pick(Estimate(np.full((2, 2), np.nan)), 3) is None
