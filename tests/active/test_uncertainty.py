"""
Tests for UncertaintyLabeling.
"""

import math

import numpy as np
import pytest

from guidedAL.common.exceptions import ConfigurationError, StrategyStateError
from guidedAL.labeling.estimate import Estimate
from guidedAL.active.uncertainty import UncertaintyLabeling


class TestUncertaintyLabeling:
    """Test margin based picking."""

    def setup_method(self):
        """Five estimated nodes, margins 0.0, 0.8, 0.1, 0.1 and 0.3."""
        self.predictions = Estimate(np.array([
            [0.5, 0.5],
            [0.9, 0.1],
            [0.55, 0.45],
            [0.45, 0.55],
            [0.65, 0.35],
            [np.nan, np.nan],
        ]))
        self.strategy = UncertaintyLabeling(min_threshold=0.2)
        self.strategy.initialize(None, None)

    def test_requires_initialize(self):
        """Test picking before initialize raises."""
        with pytest.raises(StrategyStateError):
            UncertaintyLabeling().pick(self.predictions, 1)

    def test_negative_threshold(self):
        """Test the threshold must not be negative."""
        with pytest.raises(ConfigurationError):
            UncertaintyLabeling(min_threshold=-0.1)

    def test_smallest_margin_first(self):
        """Test only uncertain nodes are picked, smallest margin first."""
        picks = self.strategy.pick(self.predictions, 10)
        assert [ln.node for ln in picks] == [0, 2, 3]
        assert picks[0].score == pytest.approx(0.0)

    def test_max_picks(self):
        """Test the result is truncated."""
        assert len(self.strategy.pick(self.predictions, 2)) == 2

    def test_nothing_uncertain(self):
        """Test None when no node is below the threshold."""
        strategy = UncertaintyLabeling(min_threshold=0.0)
        strategy.initialize(None, None)
        predictions = Estimate(np.array([[0.9, 0.1]]))
        assert strategy.pick(predictions, 3) is None
        assert strategy.pick(None, 3) is None

    def test_peek_matches_pick(self):
        """Test peek returns what pick would."""
        peeked = self.strategy.peek(None, self.predictions, 2)
        picked = self.strategy.pick(self.predictions, 2)
        assert [ln.node for ln in peeked] == [ln.node for ln in picked]

    def test_rank(self):
        """Test ranks average over tied margins."""
        assert self.strategy.rank(None, self.predictions, 0) == 1.0
        assert self.strategy.rank(None, self.predictions, 2) == 1.5
        assert self.strategy.rank(None, self.predictions, 3) == 1.5
        assert math.isnan(self.strategy.rank(None, self.predictions, 1))
        assert math.isnan(self.strategy.rank(None, self.predictions, 5))
