"""
Node scoring functions for cluster-guided labeling.

A scoring function gives every candidate node a score and knows which scores
are better. Each function carries three capability flags:

- ``cluster_based``: the score depends on the cluster the node belongs to, so
  clustering must be enabled
- ``updateable``: scores change as nodes get labeled and can be refreshed
  incrementally with ``update``
- ``requires_estimate``: scores need classifier output, so candidates cannot
  be built before the first predictions arrive

Functions are selected by name through ``get_scoring_function``.
"""

import math
from typing import Dict, List, Optional, Protocol, Type, Union, runtime_checkable

from guidedAL.common.exceptions import ConfigurationError, validate_parameter
from guidedAL.common.logging_config import get_logger
from guidedAL.network.hierarchy import Cluster
from .ranking import compare_values

logger = get_logger(__name__)


@runtime_checkable
class RiskEstimator(Protocol):
    """Classifier context able to report the expected risk of labeling a node."""

    def expected_risk(self, node: int) -> float:
        ...


class ScoringFunction:
    """
    Base scoring function: smaller scores are better.

    ``compare(a, b)`` orders the better score last, so sorting ascending with
    it puts the best entry at the end of the list.
    """

    name = "scoring_function"
    cluster_based = False
    updateable = False
    requires_estimate = False

    def __init__(self) -> None:
        self.engine = None
        self.metrics = None
        self.labels = None

    def initialize(self, engine) -> None:
        """Bind to an initialized engine for its metrics and working labels."""
        self.engine = engine
        self.metrics = engine.metrics
        self.labels = engine.labels

    def score(self, cluster: Optional[Cluster], node: int) -> float:
        raise NotImplementedError

    def update(
        self,
        cluster: Optional[Cluster],
        current_score: float,
        node: int,
        new_picks: List[int]
    ) -> float:
        return current_score

    def compare(self, a: float, b: float) -> int:
        return compare_values(b, a)

    def compare_nodes(self, n1, n2) -> int:
        return self.compare(n1.score, n2.score)

    def is_better(self, a: float, b: float) -> bool:
        return self.compare(a, b) > 0

    @property
    def best_score(self) -> float:
        return -math.inf

    @property
    def worst_score(self) -> float:
        return math.inf

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReverseScoringFunction(ScoringFunction):
    """Scoring function where larger scores are better."""

    def compare(self, a: float, b: float) -> int:
        return compare_values(a, b)

    @property
    def best_score(self) -> float:
        return math.inf

    @property
    def worst_score(self) -> float:
        return -math.inf


class Degree(ReverseScoringFunction):
    name = "degree"

    def score(self, cluster, node):
        return self.metrics.degree(node)


class Betweenness(ReverseScoringFunction):
    name = "betweenness"

    def score(self, cluster, node):
        return self.metrics.betweenness(node, weighted=False)


class WeightedBetweenness(ReverseScoringFunction):
    name = "weighted_betweenness"

    def score(self, cluster, node):
        return self.metrics.betweenness(node, weighted=True)


class Closeness(ReverseScoringFunction):
    """Harmonic closeness; larger means more central."""

    name = "closeness"

    def score(self, cluster, node):
        return self.metrics.closeness(node, weighted=False)


class WeightedCloseness(ReverseScoringFunction):
    name = "weighted_closeness"

    def score(self, cluster, node):
        return self.metrics.closeness(node, weighted=True)


class ClusterCloseness(ScoringFunction):
    """
    Mean hop distance from the node to the other members of its cluster.

    Singleton clusters score ``inf``, the worst possible value.
    """

    name = "cluster_closeness"
    cluster_based = True
    weighted = False

    def score(self, cluster, node):
        if cluster is None:
            return math.nan
        others = cluster.size - 1
        if others == 0:
            return math.inf
        dist = self.metrics.distances_from(node, weighted=self.weighted)
        total = sum(float(dist[member]) for member in cluster if member != node)
        return total / others


class ClusterWeightedCloseness(ClusterCloseness):
    name = "cluster_weighted_closeness"
    weighted = True


class ClusterSizeRank(WeightedBetweenness):
    """Cluster size plus weighted betweenness: large clusters are drawn first."""

    name = "cluster_size_rank"
    cluster_based = True

    def score(self, cluster, node):
        size = cluster.size if cluster is not None else 1
        return size + super().score(cluster, node)


class LabelWeightedClosenessRank(ReverseScoringFunction):
    """
    Mean weighted distance from the node to the currently labeled nodes.

    Nodes far from everything labeled score highest. Scores are refreshed
    incrementally as picks add labels. With nothing labeled every node
    scores 0.
    """

    name = "label_weighted_closeness_rank"
    cluster_based = True
    updateable = True

    def score(self, cluster, node):
        labeled = self.labels.known_nodes()
        if labeled.size == 0:
            return 0.0
        dist = self.metrics.distances_from(node, weighted=True)
        return float(dist[labeled].sum()) / labeled.size

    def update(self, cluster, current_score, node, new_picks):
        num_labeled = self.labels.size
        if num_labeled == 0:
            return current_score
        total = current_score * (num_labeled - len(new_picks))
        for pick in new_picks:
            total += self.metrics.distance(node, pick, weighted=True)
        return total / num_labeled


class ERMRank(ScoringFunction):
    """
    Expected risk after labeling the node, as reported by the classifier.

    Requires a classifier context implementing ``RiskEstimator``.
    """

    name = "erm_rank"
    updateable = True
    requires_estimate = True

    def __init__(self) -> None:
        super().__init__()
        self.estimator: Optional[RiskEstimator] = None

    def initialize(self, engine) -> None:
        super().initialize(engine)
        if not isinstance(engine.context, RiskEstimator):
            raise ConfigurationError(
                "erm_rank requires a classifier context that implements expected_risk(node)",
                parameter="context",
                value=type(engine.context).__name__,
                function="ERMRank.initialize"
            )
        self.estimator = engine.context

    def score(self, cluster, node):
        return float(self.estimator.expected_risk(node))

    def update(self, cluster, current_score, node, new_picks):
        return self.score(cluster, node)


class Uncertainty(ScoringFunction):
    """Gap between the two most probable classes; the smallest gap is best."""

    name = "uncertainty"
    requires_estimate = True

    def score(self, cluster, node):
        predictions = self.engine.predictions
        if predictions is None:
            return math.nan
        return predictions.margin(node)


SCORING_FUNCTIONS: Dict[str, Type[ScoringFunction]] = {
    cls.name: cls
    for cls in (
        Degree,
        Betweenness,
        WeightedBetweenness,
        Closeness,
        WeightedCloseness,
        ClusterCloseness,
        ClusterWeightedCloseness,
        ClusterSizeRank,
        LabelWeightedClosenessRank,
        ERMRank,
        Uncertainty,
    )
}


def get_scoring_function(metric: Union[str, ScoringFunction]) -> ScoringFunction:
    """
    Resolve a scoring function by registry name.

    Parameters
    ----------
    metric : str or ScoringFunction
        Registry name, or an instance which is returned unchanged

    Raises
    ------
    ConfigurationError
        If the name is not registered
    """
    if isinstance(metric, ScoringFunction):
        return metric
    validate_parameter(metric, list(SCORING_FUNCTIONS), "metric", "get_scoring_function")
    return SCORING_FUNCTIONS[metric]()
