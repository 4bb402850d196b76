"""
Uncertainty sampling: label the nodes the classifier is least sure about.
"""

import math
from typing import List, Optional

from guidedAL.common.exceptions import require_positive
from guidedAL.common.logging_config import get_logger
from guidedAL.labeling import DataSplit, Estimate
from .base import LabelNode, PickLabelStrategy

logger = get_logger(__name__)


class UncertaintyLabeling(PickLabelStrategy):
    """
    Pick nodes whose two most probable classes are closest.

    Only nodes with a top-two probability gap of at most ``min_threshold``
    are considered; the smallest gap is picked first.

    Parameters
    ----------
    min_threshold : float, default 0.2
        Largest gap still counted as uncertain
    """

    name = "UncertaintyLabeling"

    def __init__(self, min_threshold: float = 0.2) -> None:
        super().__init__()
        require_positive(min_threshold, "min_threshold", allow_zero=True)
        self.min_threshold = min_threshold
        logger.info("%s configuration: min_threshold=%s", self.name, min_threshold)

    def _uncertain_nodes(self, predictions: Optional[Estimate]) -> List[LabelNode]:
        if predictions is None:
            return []
        nodes = []
        for node in predictions:
            gap = predictions.margin(node)
            if math.isnan(gap) or gap > self.min_threshold:
                continue
            nodes.append(LabelNode(node, gap))
        return nodes

    def pick_nodes(self, predictions: Optional[Estimate], max_picks: int) -> List[LabelNode]:
        nodes = sorted(self._uncertain_nodes(predictions), key=lambda ln: ln.score)[:max_picks]
        logger.debug(
            "%s: returning %d picks (max=%d out of %d)",
            self.name, len(nodes), max_picks, predictions.size if predictions is not None else 0
        )
        return nodes

    def peek(self, split: DataSplit, predictions: Optional[Estimate], max_picks: int) -> List[LabelNode]:
        return self.pick_nodes(predictions, max_picks)

    def rank(self, split: DataSplit, predictions: Optional[Estimate], node: int) -> float:
        nodes = self._uncertain_nodes(predictions)
        target = next((ln for ln in nodes if ln.node == node), None)
        return self.average_rank(nodes, target)
