"""
Tests for the lazy hierarchy frontier.
"""

from types import SimpleNamespace

import networkit as nk

from guidedAL.labeling.classification import Classification
from guidedAL.network.hierarchy import Cluster
from guidedAL.network.metrics import GraphMetrics
from guidedAL.active.candidate import CandidateBuilder
from guidedAL.active.frontier import Frontier
from guidedAL.active.scoring import get_scoring_function


def _chain(nodes, first_id):
    cluster = Cluster(nodes[0], node=nodes[0])
    for offset, node in enumerate(nodes[1:]):
        cluster = Cluster(first_id + offset, child1=cluster, child2=Cluster(node, node=node))
    return cluster


class TestFrontier:
    """Triangle {0, 1, 2} and star {3..7} joined by the edge 2-3."""

    def setup_method(self):
        """Build the frontier over two hand-made clusters."""
        graph = nk.Graph(8)
        for u, v in [(0, 1), (0, 2), (1, 2), (2, 3), (3, 4), (3, 5), (3, 6), (3, 7)]:
            graph.addEdge(u, v)
        self.truth = Classification(["a", "b"], 8, values=[0, 0, 0, 1, 1, 1, 1, 1])
        self.labels = self.truth.copy()
        self.labels.clear()

        sf = get_scoring_function("degree")
        sf.initialize(SimpleNamespace(metrics=GraphMetrics(graph), labels=self.labels, context=None, predictions=None))
        self.sf = sf
        builder = CandidateBuilder(sf, sf, 1, 8, self.labels, self.truth)
        self.frontier = Frontier(builder, sf, self.labels, self.truth)

        self.triangle = _chain([0, 1, 2], 100)
        self.star = _chain([3, 4, 5, 6, 7], 200)

    def test_seed_fills_reuse(self):
        """Test seeding builds one candidate per zero-knowledge root."""
        self.frontier.seed([self.triangle, self.star])
        assert len(self.frontier.reuse) == 2
        assert self.frontier.ready == []
        assert [c.head.node for c in self.frontier.reuse] == [2, 3]

    def test_settle_sorts_best_last(self):
        """Test settle moves reuse into ready with the best candidate last."""
        self.frontier.seed([self.star, self.triangle])
        self.frontier.settle()
        assert [c.head.node for c in self.frontier.ready] == [2, 3]
        assert [c.head.node for c in self.frontier.in_pick_order()] == [3, 2]

    def test_picks_label_nodes(self):
        """Test a pick returns the candidate score and sets the true class."""
        self.frontier.seed([self.triangle, self.star])
        picked = self.frontier.pick_next()
        assert picked.node == 3
        assert picked.score == 5.0
        assert self.labels.get_class_value(3) == 1
        assert self.frontier.pending == [self.star.child1, self.star.child2]

    def test_known_clusters_split_and_known_leaves_drop(self):
        """Test clusters with labels are split and labeled leaves vanish."""
        self.labels.set(2, 0)
        self.frontier.depth = 10
        self.frontier.add_cluster(self.triangle, 0)
        assert [c.head.node for c in self.frontier.reuse] == [0]
        assert self.frontier.reuse[0].level == 1

    def test_pending_expands_one_level_at_a_time(self):
        """Test depth grows only when nothing shallower is left."""
        self.frontier.seed([self.triangle, self.star])
        nodes = [self.frontier.pick_next().node for _ in range(3)]
        assert nodes == [3, 2, 0]
        assert self.frontier.depth == 2

    def test_exhaustion(self):
        """Test every eligible node is picked exactly once."""
        self.frontier.seed([self.triangle, self.star])
        picked = []
        while True:
            ln = self.frontier.pick_next()
            if ln is None:
                break
            picked.append(ln.node)
        assert sorted(picked) == list(range(8))
        assert self.frontier.is_empty
        assert self.frontier.pick_next() is None

    def test_transaction_restores_state(self):
        """Test picks inside a transaction leave no trace."""
        self.frontier.seed([self.triangle, self.star])
        self.frontier.settle()
        before = repr(self.frontier)
        heads = [c.head.node for c in self.frontier.ready]

        with self.frontier.transaction():
            for _ in range(5):
                self.frontier.pick_next()
            assert self.labels.size == 5

        assert repr(self.frontier) == before
        assert [c.head.node for c in self.frontier.ready] == heads
        assert all(c.remaining == 1 for c in self.frontier.ready)
        assert self.labels.size == 0
        assert self.frontier.pick_next().node == 3

    def test_update_refreshes_waiting_candidates(self):
        """Test update re-scores candidates in ready and reuse."""
        lwc = get_scoring_function("label_weighted_closeness_rank")
        lwc.initialize(SimpleNamespace(metrics=self.sf.metrics, labels=self.labels, context=None, predictions=None))
        builder = CandidateBuilder(self.sf, lwc, 1, 8, self.labels, self.truth)
        frontier = Frontier(builder, lwc, self.labels, self.truth)
        frontier.seed([self.triangle, self.star])
        frontier.settle()
        assert all(c.score == 0.0 for c in frontier.ready)

        picked = frontier.pick_next()
        frontier.update([picked.node], self.sf, lwc)
        remaining = list(frontier.ready) + list(frontier.reuse)
        assert len(remaining) == 1
        assert remaining[0].score > 0.0
