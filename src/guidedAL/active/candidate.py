"""
Candidates: the rankable form of a zero-knowledge cluster.

A candidate holds up to K scored nodes from one cluster (or a single node when
clustering is off) in a private queue with the next node to draw at the end,
plus the ordering score used to rank candidates against each other.
"""

import math
from functools import cmp_to_key
from typing import List, Optional, Union

from guidedAL.common.exceptions import require_positive
from guidedAL.common.logging_config import get_logger
from guidedAL.labeling import Classification
from guidedAL.network.hierarchy import Cluster
from .base import LabelNode
from .ranking import sort_best_first
from .scoring import ScoringFunction

logger = get_logger(__name__)


class Candidate:
    """
    Ranked queue of nodes drawn from one cluster.

    Attributes
    ----------
    cluster : Cluster or None
        Source cluster; None for single-node candidates
    level : int
        Hierarchy level the candidate was built at, -1 without a cluster
    queue : List[LabelNode]
        Scored nodes, highest priority last
    remaining : int
        Number of queue entries not yet drawn
    score : float
        Ordering score against other candidates
    """

    __slots__ = ("cluster", "level", "queue", "remaining", "score")

    def __init__(
        self,
        cluster: Optional[Cluster],
        level: int,
        queue: List[LabelNode],
        score: float
    ) -> None:
        self.cluster = cluster
        self.level = level
        self.queue = list(queue)
        self.remaining = len(self.queue)
        self.score = score

    @property
    def head(self) -> Optional[LabelNode]:
        """The entry the next draw returns."""
        return self.queue[self.remaining - 1] if self.remaining > 0 else None

    @property
    def cluster_size(self) -> int:
        return self.cluster.size if self.cluster is not None else 1

    def has_node(self) -> bool:
        return self.remaining > 0

    def pick_node(self) -> Optional[LabelNode]:
        if self.remaining < 1:
            return None
        self.remaining -= 1
        return self.queue[self.remaining]

    def update(
        self,
        new_picks: List[int],
        scoring_function: ScoringFunction,
        cluster_rank: ScoringFunction
    ) -> None:
        """
        Refresh scores after new_picks were labeled.

        Drawn entries are discarded first. Node scores are refreshed when the
        scoring function is updateable; the ordering score follows the head
        node, or the cluster rank function when it is separate and updateable.
        """
        if self.remaining == 0:
            return
        if self.remaining < len(self.queue):
            self.queue = self.queue[:self.remaining]

        if scoring_function.updateable:
            for ln in self.queue:
                ln.score = scoring_function.update(self.cluster, ln.score, ln.node, new_picks)
            self.queue.sort(key=cmp_to_key(scoring_function.compare_nodes))

        if self.cluster is None or cluster_rank is scoring_function:
            self.score = self.queue[-1].score
        elif cluster_rank.updateable:
            self.score = cluster_rank.update(self.cluster, self.score, self.queue[-1].node, new_picks)

    def __repr__(self) -> str:
        head = self.head
        return (
            f"Candidate(head={head.node if head else None}, score={self.score}, "
            f"remaining={self.remaining}, size={self.cluster_size}, level={self.level})"
        )


class CandidateBuilder:
    """
    Materializes candidates from clusters or single nodes.

    A member is eligible when its working label is unknown, its true label is
    known, and its score is a number.

    Parameters
    ----------
    scoring_function : ScoringFunction
        Scores individual nodes
    cluster_rank : ScoringFunction
        Scores candidates against each other; may be scoring_function
    nodes_per_cluster : float
        K. Exactly 1 keeps only the best node, above 1 keeps ``ceil(K)``
        nodes, below 1 keeps ``ceil(K * test_set_size)`` nodes
    test_set_size : int
        Size of the test set, for fractional K
    labels : Classification
        Working labels
    truth : Classification
        True labels
    """

    def __init__(
        self,
        scoring_function: ScoringFunction,
        cluster_rank: ScoringFunction,
        nodes_per_cluster: Union[int, float],
        test_set_size: int,
        labels: Classification,
        truth: Classification
    ) -> None:
        require_positive(nodes_per_cluster, "nodes_per_cluster")
        self.scoring_function = scoring_function
        self.cluster_rank = cluster_rank
        self.nodes_per_cluster = nodes_per_cluster
        self.test_set_size = test_set_size
        self.labels = labels
        self.truth = truth

    @property
    def single(self) -> bool:
        return self.nodes_per_cluster == 1

    @property
    def num_to_get(self) -> int:
        if self.single:
            return 1
        if self.nodes_per_cluster > 1:
            return int(math.ceil(self.nodes_per_cluster))
        return max(1, int(math.ceil(self.nodes_per_cluster * self.test_set_size)))

    def is_eligible(self, node: int) -> bool:
        return self.labels.is_unknown(node) and not self.truth.is_unknown(node)

    def _scored(self, cluster: Optional[Cluster], node: int) -> Optional[LabelNode]:
        if not self.is_eligible(node):
            return None
        score = self.scoring_function.score(cluster, node)
        if math.isnan(score):
            return None
        return LabelNode(node, score)

    def _ordering_score(self, cluster: Optional[Cluster], head: LabelNode) -> float:
        if cluster is None or self.cluster_rank is self.scoring_function:
            return head.score
        return self.cluster_rank.score(cluster, head.node)

    def _make(self, cluster: Optional[Cluster], level: int, queue: List[LabelNode]) -> Optional[Candidate]:
        score = self._ordering_score(cluster, queue[-1])
        if math.isnan(score):
            logger.warning(
                "Cluster of size %d has no rankable head node; dropped",
                cluster.size if cluster is not None else 1
            )
            return None
        return Candidate(cluster, level, queue, score)

    def build(self, cluster: Cluster, level: int) -> Optional[Candidate]:
        """
        Build a candidate for a zero-knowledge cluster.

        Returns
        -------
        Candidate or None
            None when no member is eligible
        """
        sf = self.scoring_function

        if self.single:
            best: Optional[LabelNode] = None
            for node in cluster:
                ln = self._scored(cluster, node)
                if ln is not None and (best is None or sf.is_better(ln.score, best.score)):
                    best = ln
            if best is None:
                logger.warning("Found no eligible node in cluster %d (size %d)", cluster.cluster_id, cluster.size)
                return None
            return self._make(cluster, level, [best])

        scored = [ln for ln in (self._scored(cluster, node) for node in cluster) if ln is not None]
        if not scored:
            logger.warning("Found no eligible node in cluster %d (size %d)", cluster.cluster_id, cluster.size)
            return None

        top = sort_best_first(scored, sf.compare)[:self.num_to_get]
        top.reverse()
        return self._make(cluster, level, top)

    def build_single(self, node: int) -> Optional[Candidate]:
        """Build a cluster-less candidate for one node, or None if it is not eligible."""
        ln = self._scored(None, node)
        if ln is None:
            return None
        return Candidate(None, -1, [ln], ln.score)
