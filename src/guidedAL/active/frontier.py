"""
The frontier of cluster-guided labeling.

The frontier explores the cluster hierarchy lazily. ``ready`` holds the
candidates competing for the next pick, sorted so the best is last.
``reuse`` collects candidates that still have nodes after being drawn,
along with fresh candidates from cluster expansion; they join ``ready``
once it runs dry. ``pending`` defers clusters found below the current
exploration ``depth`` until nothing shallower is left.
"""

from contextlib import contextmanager
from functools import cmp_to_key
from typing import Iterable, Iterator, List, Optional

from guidedAL.common.logging_config import get_logger
from guidedAL.labeling import Classification
from guidedAL.network.hierarchy import Cluster
from .base import LabelNode
from .candidate import Candidate, CandidateBuilder
from .scoring import ScoringFunction

logger = get_logger(__name__)


class Frontier:
    """
    Ready, reuse and pending state of one labeling round.

    Parameters
    ----------
    builder : CandidateBuilder
        Builds candidates for zero-knowledge clusters
    cluster_rank : ScoringFunction
        Orders candidates against each other
    labels : Classification
        Working labels; picked nodes get their true class here
    truth : Classification
        True labels
    """

    def __init__(
        self,
        builder: CandidateBuilder,
        cluster_rank: ScoringFunction,
        labels: Classification,
        truth: Classification
    ) -> None:
        self.builder = builder
        self.cluster_rank = cluster_rank
        self.labels = labels
        self.truth = truth
        self.ready: List[Candidate] = []
        self.reuse: List[Candidate] = []
        self.pending: List[Cluster] = []
        self.depth = 1

    def is_zero_knowledge(self, cluster: Cluster) -> bool:
        return all(self.labels.is_unknown(node) for node in cluster)

    def add_cluster(self, cluster: Optional[Cluster], level: int) -> None:
        """
        Place a cluster on the frontier.

        Clusters at or below the current depth are deferred. Zero-knowledge
        clusters become a candidate in ``reuse``; other internal clusters are
        split into their children one level down; known leaves are dropped.
        """
        if cluster is None:
            return

        if level >= self.depth:
            self.pending.append(cluster)
        elif self.is_zero_knowledge(cluster):
            candidate = self.builder.build(cluster, level)
            if candidate is not None:
                logger.debug(
                    "Adding cluster %d at level %d: head=%s score=%s size=%d",
                    cluster.cluster_id, level, candidate.head, candidate.score, cluster.size
                )
                self.reuse.append(candidate)
        elif not cluster.is_leaf:
            self.add_cluster(cluster.child1, level + 1)
            self.add_cluster(cluster.child2, level + 1)

    def seed(self, clusters: Iterable[Cluster]) -> None:
        """Add top-level clusters at level 0."""
        for cluster in clusters:
            self.add_cluster(cluster, 0)

    def seed_nodes(self, nodes: Iterable[int]) -> None:
        """Add one cluster-less candidate per eligible node."""
        for node in nodes:
            candidate = self.builder.build_single(node)
            if candidate is not None:
                self.reuse.append(candidate)

    def sort_ready(self) -> None:
        self.ready.sort(key=cmp_to_key(lambda a, b: self.cluster_rank.compare(a.score, b.score)))

    def _swap(self) -> None:
        self.ready, self.reuse = self.reuse, self.ready
        self.sort_ready()

    def settle(self) -> None:
        """Refill ``ready`` from ``reuse`` and then ``pending`` until it has a candidate or all are empty."""
        if not self.ready:
            self._swap()

        while not self.ready and self.pending:
            self.depth += 1
            logger.debug("Expanding %d pending clusters at depth %d", len(self.pending), self.depth)
            deferred, self.pending = self.pending, []
            for cluster in deferred:
                self.add_cluster(cluster, self.depth - 1)
            self._swap()

    def pick_next(self) -> Optional[LabelNode]:
        """
        Draw the next node and mark it labeled.

        Returns
        -------
        LabelNode or None
            The node with its candidate's ordering score, or None when the
            frontier is exhausted
        """
        self.settle()

        if not self.ready:
            logger.debug("Frontier is exhausted")
            return None

        candidate = self.ready.pop()
        picked = candidate.pick_node()

        if candidate.has_node():
            self.reuse.append(candidate)
        elif candidate.cluster is not None and not candidate.cluster.is_leaf:
            self.add_cluster(candidate.cluster.child1, candidate.level + 1)
            self.add_cluster(candidate.cluster.child2, candidate.level + 1)

        self.labels.set(picked.node, self.truth.get_class_value(picked.node))
        logger.debug(
            "Picked node %s score=%s size=%d",
            picked.node, candidate.score, candidate.cluster_size
        )
        return LabelNode(picked.node, candidate.score)

    def in_pick_order(self) -> Iterator[Candidate]:
        """Candidates of ``ready``, best first."""
        return reversed(self.ready)

    def update(
        self,
        new_picks: List[int],
        scoring_function: ScoringFunction,
        cluster_rank: ScoringFunction
    ) -> None:
        """Refresh every waiting candidate after new_picks were labeled, then re-sort ``ready``."""
        for candidate in self.ready + self.reuse:
            candidate.update(new_picks, scoring_function, cluster_rank)
        self.sort_ready()

    @property
    def is_empty(self) -> bool:
        return not (self.ready or self.reuse or self.pending)

    @contextmanager
    def transaction(self) -> Iterator['Frontier']:
        """
        Roll back every frontier and working-label change made inside the block.

        Restores the three collections, the depth, each candidate's queue,
        cursor and score, and the working label values, on every exit path.
        """
        ready, reuse, pending, depth = list(self.ready), list(self.reuse), list(self.pending), self.depth
        cursors = [(c, list(c.queue), c.remaining, c.score) for c in ready + reuse]
        values = self.labels.values.copy()
        try:
            yield self
        finally:
            self.ready, self.reuse, self.pending, self.depth = ready, reuse, pending, depth
            for candidate, queue, remaining, score in cursors:
                candidate.queue = queue
                candidate.remaining = remaining
                candidate.score = score
            self.labels.values[:] = values

    def __repr__(self) -> str:
        return (
            f"Frontier(ready={len(self.ready)}, reuse={len(self.reuse)}, "
            f"pending={len(self.pending)}, depth={self.depth})"
        )
