"""
Cluster-guided graph centrality labeling.

The strategy looks for regions of the graph where no label is known yet and
asks for the most central node of each. A modularity dendrogram is walked top
down: a cluster without any known label becomes a candidate, any other cluster
is split into its children, lazily and one level at a time. Candidates are
ordered by a cluster rank function, and nodes within a candidate by a scoring
function. Without clustering, every test node is its own candidate.

Examples
--------
>>> strategy = GraphCentralityLabeling(metric="degree", cluster=True)  # doctest: +SKIP
>>> strategy.initialize(None, split)  # doctest: +SKIP
>>> strategy.peek(split, None, 3)  # doctest: +SKIP
[4:3.0, 11:2.0, 7:2.0]
>>> strategy.pick(None, 3)  # doctest: +SKIP
[4:3.0, 11:2.0, 7:2.0]
"""

import math
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Union

import networkit as nk
import polars as pl

from guidedAL.common.exceptions import require_positive
from guidedAL.common.logging_config import get_logger, log_function_entry, LoggingTimer
from guidedAL.labeling import DataSplit, Estimate
from guidedAL.network.hierarchy import ClusterHierarchy, HierarchyBuilder, build_modularity_hierarchy
from guidedAL.network.metrics import GraphMetrics
from .base import LabelNode, PickLabelStrategy
from .candidate import CandidateBuilder
from .frontier import Frontier
from .ranking import average_rank, composite_rank, sort_best_first
from .scoring import ScoringFunction, get_scoring_function

logger = get_logger(__name__)


class GraphCentralityLabeling(PickLabelStrategy):
    """
    Active labeling by central nodes of zero-knowledge clusters.

    Parameters
    ----------
    metric : str or ScoringFunction, default "weighted_betweenness"
        Scores nodes within a cluster
    cluster : bool, default False
        Walk the modularity hierarchy instead of ranking test nodes directly
    cluster_rank : str or ScoringFunction, optional
        Orders candidates against each other. Defaults to the metric.
    nodes_per_cluster : float, default 1
        Nodes each candidate may contribute before its cluster is split.
        Values below 1 are a fraction of the test set size.
    hierarchy_builder : HierarchyBuilder, optional
        Produces the cluster hierarchy. Defaults to build_modularity_hierarchy.

    Raises
    ------
    ConfigurationError
        If a scoring function name is unknown or nodes_per_cluster is not positive

    Notes
    -----
    A cluster based metric, or an explicit cluster_rank, switches clustering
    on with a warning when cluster is False.
    """

    def __init__(
        self,
        metric: Union[str, ScoringFunction] = "weighted_betweenness",
        cluster: bool = False,
        cluster_rank: Optional[Union[str, ScoringFunction]] = None,
        nodes_per_cluster: Union[int, float] = 1,
        hierarchy_builder: Optional[HierarchyBuilder] = None
    ) -> None:
        super().__init__()
        require_positive(nodes_per_cluster, "nodes_per_cluster")

        self.scoring_function = get_scoring_function(metric)
        if cluster_rank is None or cluster_rank == metric:
            self.cluster_rank = self.scoring_function
        else:
            self.cluster_rank = get_scoring_function(cluster_rank)

        self.cluster = cluster
        self.nodes_per_cluster = nodes_per_cluster
        self.hierarchy_builder = hierarchy_builder or build_modularity_hierarchy
        self.name = (
            f"GraphCentralityLabeling-metric_{self.scoring_function}"
            f"-cluster_{cluster}-rank_{self.cluster_rank}"
        )

        if self.scoring_function.cluster_based and not self.cluster:
            logger.warning("%s: scoring function is cluster based but clustering is off; clustering turned on", self.name)
            self.cluster = True

        if cluster_rank is not None and not self.cluster:
            logger.warning("%s: cluster rank is given but clustering is off; clustering turned on", self.name)
            self.cluster = True

        logger.info(
            "%s: metric=%s cluster=%s nodes_per_cluster=%s cluster_rank=%s",
            self.name, self.scoring_function, self.cluster, nodes_per_cluster, cluster_rank
        )

        self.graph: Optional[nk.Graph] = None
        self.metrics: Optional[GraphMetrics] = None
        self.truth = None
        self.labels = None
        self.predictions: Optional[Estimate] = None
        self.hierarchy: Optional[ClusterHierarchy] = None
        self.frontier: Optional[Frontier] = None
        self._seeded = False

    @classmethod
    def get_instance(
        cls,
        metric: str,
        rank: Optional[str] = None,
        nodes_per_cluster: Union[int, float] = 1
    ) -> 'GraphCentralityLabeling':
        """
        Convenience constructor: any rank turns clustering on.

        A rank equal to the metric reuses the metric for cluster ranking.
        """
        return cls(
            metric=metric,
            cluster=rank is not None,
            cluster_rank=rank if rank is not None and rank != metric else None,
            nodes_per_cluster=nodes_per_cluster
        )

    @property
    def requires_estimate(self) -> bool:
        return self.scoring_function.requires_estimate or self.cluster_rank.requires_estimate

    def initialize(self, context: Any, split: DataSplit) -> None:
        """
        Start a new round: reset working labels to the train set and rebuild the frontier.

        Parameters
        ----------
        context : Any
            Classifier context. erm_rank needs one implementing RiskEstimator.
        split : DataSplit
            Current split

        Raises
        ------
        ConfigurationError
            If a scoring function cannot work with the given context
        """
        log_function_entry("GraphCentralityLabeling.initialize", train=split.train_set_size, test=split.test_set_size)
        super().initialize(context, split)

        with LoggingTimer("GraphCentralityLabeling.initialize", {"nodes": split.graph.numberOfNodes()}):
            self.graph = split.graph
            self.metrics = GraphMetrics(self.graph)
            self.truth = split.truth
            self.labels = self.truth.copy()
            self.labels.clear()
            for node in split.train_set:
                self.labels.set(node, self.truth.get_class_value(node))
            self.predictions = None

            self.scoring_function.initialize(self)
            if self.cluster_rank is not self.scoring_function:
                self.cluster_rank.initialize(self)

            builder = CandidateBuilder(
                self.scoring_function,
                self.cluster_rank,
                self.nodes_per_cluster,
                split.test_set_size,
                self.labels,
                self.truth
            )
            self.frontier = Frontier(builder, self.cluster_rank, self.labels, self.truth)
            self.hierarchy = self.hierarchy_builder(self.graph) if self.cluster else None
            self._seeded = False

            if not self.requires_estimate:
                self._seed()

    def _seed(self) -> None:
        if self.cluster:
            self.frontier.seed(self.hierarchy.isolated_clusters)
            self.frontier.seed(self.hierarchy.connected_clusters)
        else:
            self.frontier.seed_nodes(self.split.test_set)
        self._seeded = True
        logger.debug("%s: seeded frontier %s", self.name, self.frontier)

    def _prepare(self, predictions: Optional[Estimate], operation: str) -> None:
        self._require_initialized(operation)
        self.predictions = predictions
        if self._seeded:
            return
        if self.requires_estimate and predictions is None:
            logger.warning("%s: %s without predictions; frontier is not seeded yet", self.name, operation)
            return
        self._seed()

    @contextmanager
    def _trial(self, predictions: Optional[Estimate], operation: str) -> Iterator[Frontier]:
        """Prepare and yield the frontier, then undo everything including a first seeding."""
        self._require_initialized(operation)
        saved_predictions, saved_seeded = self.predictions, self._seeded
        with self.frontier.transaction() as frontier:
            try:
                self._prepare(predictions, operation)
                yield frontier
            finally:
                self.predictions, self._seeded = saved_predictions, saved_seeded

    def pick_nodes(self, predictions: Optional[Estimate], max_picks: int) -> List[LabelNode]:
        self._prepare(predictions, "pick")

        picks: List[LabelNode] = []
        while len(picks) < max_picks:
            picked = self.frontier.pick_next()
            if picked is None:
                break
            picks.append(picked)

        if picks and (self.scoring_function.updateable or (self.cluster and self.cluster_rank.updateable)):
            self.frontier.update([ln.node for ln in picks], self.scoring_function, self.cluster_rank)

        logger.debug("%s: pick returning %d nodes", self.name, len(picks))
        return picks

    def peek(
        self,
        split: DataSplit,
        predictions: Optional[Estimate],
        max_picks: int
    ) -> List[LabelNode]:
        """
        Return what ``pick(predictions, max_picks)`` would, without changing any state.
        """
        self._require_initialized("peek")
        if max_picks == 0:
            logger.warning("%s: peek asked to return 0 picks", self.name)
            return []

        result: List[LabelNode] = []
        with self._trial(predictions, "peek") as frontier:
            while len(result) < max_picks:
                picked = frontier.pick_next()
                if picked is None:
                    break
                result.append(picked)

        logger.debug("%s: peek returning %d nodes", self.name, len(result))
        return result

    def rank(self, split: DataSplit, predictions: Optional[Estimate], node: int) -> float:
        """
        Position at which node would be picked.

        Without clustering, or with one node per cluster, this is the 1-based
        position of the candidate holding node. Otherwise it is the position
        of the candidate whose cluster contains node plus the node's rank
        within that cluster divided by 100.

        Returns
        -------
        float
            The rank, or NaN if node is not on the frontier
        """
        with self._trial(predictions, "rank"):
            self.frontier.settle()

            if not self.cluster or self.nodes_per_cluster == 1:
                for position, candidate in enumerate(self.frontier.in_pick_order(), start=1):
                    if candidate.head.node == node:
                        return float(position)
                logger.debug("%s: node %s not found on the frontier", self.name, node)
                return math.nan

            found = None
            for position, candidate in enumerate(self.frontier.in_pick_order(), start=1):
                if candidate.cluster is not None and node in candidate.cluster:
                    found = candidate
                    break
            if found is None:
                return math.nan

            target = None
            scored: List[LabelNode] = []
            for member in found.cluster:
                score = self.scoring_function.score(found.cluster, member)
                if math.isnan(score):
                    continue
                ln = LabelNode(member, score)
                if member == node:
                    target = ln
                scored.append(ln)

            local = average_rank(sort_best_first(scored, self.scoring_function.compare), target)
            return composite_rank(position, local)

    def get_frontier_summary(self) -> pl.DataFrame:
        """
        Candidates that compete for the next pick, best first.

        Returns
        -------
        pl.DataFrame
            Columns ``rank``, ``node_id``, ``score``, ``remaining``,
            ``cluster_size`` and ``level``
        """
        self._require_initialized("get_frontier_summary")
        mapper = self.split.id_mapper if self.split is not None else None

        rows = {"rank": [], "node_id": [], "score": [], "remaining": [], "cluster_size": [], "level": []}
        with self.frontier.transaction():
            self.frontier.settle()
            for position, candidate in enumerate(self.frontier.in_pick_order(), start=1):
                node = candidate.head.node
                rows["rank"].append(position)
                rows["node_id"].append(mapper.get_original(node) if mapper else node)
                rows["score"].append(float(candidate.score))
                rows["remaining"].append(candidate.remaining)
                rows["cluster_size"].append(candidate.cluster_size)
                rows["level"].append(candidate.level)

        return pl.DataFrame(rows, schema_overrides={
            "rank": pl.Int64,
            "score": pl.Float64,
            "remaining": pl.Int64,
            "cluster_size": pl.Int64,
            "level": pl.Int64,
        })
