"""
Random sampling baseline.
"""

from typing import List, Optional

import numpy as np

from guidedAL.common.logging_config import get_logger
from guidedAL.labeling import DataSplit, Estimate
from .base import LabelNode, PickLabelStrategy

logger = get_logger(__name__)


class RandomLabeling(PickLabelStrategy):
    """
    Pick estimated nodes uniformly at random, without replacement.

    Parameters
    ----------
    random_seed : int, optional
        Seed for the generator. It is reset on every ``initialize`` so a seeded
        strategy repeats its picks round for round.
    """

    name = "RandomLabeling"

    def __init__(self, random_seed: Optional[int] = None) -> None:
        super().__init__()
        self.random_seed = random_seed
        self.rng = np.random.default_rng(random_seed)

    def initialize(self, context, split: DataSplit) -> None:
        super().initialize(context, split)
        self.rng = np.random.default_rng(self.random_seed)

    def pick_nodes(self, predictions: Optional[Estimate], max_picks: int) -> Optional[List[LabelNode]]:
        if predictions is None or predictions.size == 0:
            return None

        nodes = list(predictions)
        chosen = self.rng.choice(len(nodes), size=min(max_picks, len(nodes)), replace=False)
        return [LabelNode(nodes[i], 0.0) for i in chosen.tolist()]
