"""
Tests for candidates and the candidate builder.
"""

import logging
from types import SimpleNamespace

import networkit as nk
import pytest

from guidedAL.common.exceptions import ConfigurationError
from guidedAL.labeling.classification import Classification
from guidedAL.network.hierarchy import Cluster
from guidedAL.network.metrics import GraphMetrics
from guidedAL.active.base import LabelNode
from guidedAL.active.candidate import Candidate, CandidateBuilder
from guidedAL.active.scoring import get_scoring_function


def _chain(nodes, first_id=100):
    cluster = Cluster(nodes[0], node=nodes[0])
    for offset, node in enumerate(nodes[1:]):
        cluster = Cluster(first_id + offset, child1=cluster, child2=Cluster(node, node=node))
    return cluster


class TestCandidate:
    """Test the candidate queue."""

    def setup_method(self):
        """Queue of three nodes, best last."""
        self.queue = [LabelNode(5, 1.0), LabelNode(6, 2.0), LabelNode(7, 3.0)]
        self.candidate = Candidate(_chain([5, 6, 7]), 0, self.queue, 3.0)

    def test_draws_from_the_end(self):
        """Test nodes come out best first."""
        assert self.candidate.head.node == 7
        assert [self.candidate.pick_node().node for _ in range(3)] == [7, 6, 5]
        assert not self.candidate.has_node()
        assert self.candidate.pick_node() is None
        assert self.candidate.head is None

    def test_cluster_size(self):
        """Test size of the source cluster, 1 without one."""
        assert self.candidate.cluster_size == 3
        assert Candidate(None, -1, [LabelNode(1, 0.0)], 0.0).cluster_size == 1

    def test_update_discards_drawn_entries(self):
        """Test update keeps the undrawn entries and follows the new head."""
        sf = get_scoring_function("degree")
        self.candidate.pick_node()
        self.candidate.update([7], sf, sf)
        assert [ln.node for ln in self.candidate.queue] == [5, 6]
        assert self.candidate.score == 2.0

    def test_update_keeps_separate_static_rank(self):
        """Test a non-updateable cluster rank leaves the ordering score alone."""
        sf = get_scoring_function("degree")
        cr = get_scoring_function("cluster_size_rank")
        self.candidate.pick_node()
        self.candidate.update([7], sf, cr)
        assert self.candidate.score == 3.0


class TestCandidateBuilder:
    """Test candidate construction from clusters."""

    def setup_method(self):
        """Star centred on 0 with leaves 1..3, plus a tail 3-4."""
        graph = nk.Graph(5)
        for u, v in [(0, 1), (0, 2), (0, 3), (3, 4)]:
            graph.addEdge(u, v)
        self.truth = Classification.from_dict({0: "a", 1: "b", 2: "a", 3: "b"}, ["a", "b"], num_nodes=5)
        self.labels = self.truth.copy()
        self.labels.clear()
        engine = SimpleNamespace(metrics=GraphMetrics(graph), labels=self.labels, context=None, predictions=None)
        self.sf = get_scoring_function("degree")
        self.sf.initialize(engine)
        self.cluster = _chain([1, 2, 0, 3, 4])

    def _builder(self, k, test_size=4):
        return CandidateBuilder(self.sf, self.sf, k, test_size, self.labels, self.truth)

    def test_num_to_get(self):
        """Test how K resolves to a queue length."""
        assert self._builder(1).num_to_get == 1
        assert self._builder(2.5).num_to_get == 3
        assert self._builder(0.5, test_size=5).num_to_get == 3
        assert self._builder(0.01, test_size=5).num_to_get == 1

    def test_invalid_k(self):
        """Test K must be positive."""
        with pytest.raises(ConfigurationError, match="must be positive"):
            self._builder(0)

    def test_single_best(self):
        """Test K=1 keeps the highest degree node."""
        candidate = self._builder(1).build(self.cluster, 0)
        assert [ln.node for ln in candidate.queue] == [0]
        assert candidate.score == 3.0
        assert candidate.level == 0

    def test_single_tie_keeps_first_member(self):
        """Test the first member in iteration order wins a tie."""
        cluster = _chain([2, 1])
        candidate = self._builder(1).build(cluster, 0)
        assert candidate.head.node == 2

    def test_top_k(self):
        """Test K>1 keeps the best nodes with the best last."""
        candidate = self._builder(2).build(self.cluster, 1)
        assert candidate.head.node == 0
        assert candidate.remaining == 2
        assert candidate.queue[0].node == 3
        assert candidate.score == 3.0

    def test_eligibility(self):
        """Test labeled nodes and nodes without a true class are skipped."""
        self.labels.set(0, 0)
        candidate = self._builder(1).build(self.cluster, 0)
        assert candidate.head.node == 3
        assert not self._builder(1).is_eligible(4)

    def test_no_eligible_member(self, caplog):
        """Test a cluster without eligible members yields nothing."""
        logging.getLogger("guidedAL").propagate = True
        with caplog.at_level(logging.WARNING, logger="guidedAL"):
            assert self._builder(1).build(Cluster(4, node=4), 0) is None
        assert "no eligible node" in caplog.text

    def test_build_single(self):
        """Test cluster-less candidates."""
        builder = self._builder(1)
        candidate = builder.build_single(0)
        assert candidate.cluster is None
        assert candidate.level == -1
        assert candidate.score == 3.0
        self.labels.set(1, 1)
        assert builder.build_single(1) is None

    def test_nan_scores_excluded(self):
        """Test members scoring NaN are not eligible."""
        sf = get_scoring_function("uncertainty")
        sf.initialize(SimpleNamespace(metrics=None, labels=self.labels, context=None, predictions=None))
        builder = CandidateBuilder(sf, sf, 1, 4, self.labels, self.truth)
        assert builder.build(self.cluster, 0) is None
