"""
Tests for cached graph metrics.
"""

import math

import networkit as nk
import pytest

from guidedAL.network.metrics import GraphMetrics


class TestGraphMetrics:
    """Test degree, centrality and distance lookups."""

    def setup_method(self):
        """Path 0-1-2-3 plus the lone node 4."""
        self.graph = nk.Graph(5)
        self.graph.addEdge(0, 1)
        self.graph.addEdge(1, 2)
        self.graph.addEdge(2, 3)
        self.metrics = GraphMetrics(self.graph)

    def test_degree(self):
        """Test degrees are returned as floats."""
        assert self.metrics.degree(0) == 1.0
        assert self.metrics.degree(1) == 2.0
        assert self.metrics.degree(4) == 0.0

    def test_directed_degree(self):
        """Test directed degree counts in and out edges."""
        graph = nk.Graph(3, directed=True)
        graph.addEdge(0, 1)
        graph.addEdge(2, 1)
        graph.addEdge(1, 0)
        metrics = GraphMetrics(graph)
        assert metrics.degree(1) == 3.0
        assert metrics.degree(2) == 1.0

    def test_betweenness(self):
        """Test inner path nodes are more between than endpoints."""
        assert self.metrics.betweenness(0) == 0.0
        assert self.metrics.betweenness(1) > 0.0
        assert self.metrics.betweenness(1) == pytest.approx(self.metrics.betweenness(2))

    def test_closeness(self):
        """Test harmonic closeness favors the middle of the path."""
        assert self.metrics.closeness(1) > self.metrics.closeness(0)
        assert self.metrics.closeness(4) == 0.0

    def test_distances(self):
        """Test hop distances and unreachable nodes."""
        assert self.metrics.distance(0, 3) == 3.0
        assert self.metrics.distance(2, 2) == 0.0
        assert math.isinf(self.metrics.distance(0, 4))

    def test_distance_cache(self):
        """Test distances are cached per source until cleared."""
        first = self.metrics.distances_from(0)
        assert self.metrics.distances_from(0) is first
        self.metrics.clear()
        assert self.metrics.distances_from(0) is not first

    def test_weighted_distances(self):
        """Test Dijkstra uses edge weights while BFS counts hops."""
        graph = nk.Graph(3, weighted=True)
        graph.addEdge(0, 1, 5.0)
        graph.addEdge(1, 2, 0.5)
        graph.addEdge(0, 2, 10.0)
        metrics = GraphMetrics(graph)

        assert metrics.distance(0, 2, weighted=True) == pytest.approx(5.5)
        assert metrics.distance(0, 2, weighted=False) == 1.0
