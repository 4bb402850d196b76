"""
Active labeling strategies.

GraphCentralityLabeling is the cluster-guided strategy; UncertaintyLabeling
and RandomLabeling are the baselines it is usually compared against.
"""

from .base import LabelNode, PickLabelStrategy, picks_to_dataframe
from .ranking import average_rank, composite_rank
from .scoring import (
    ScoringFunction,
    ReverseScoringFunction,
    RiskEstimator,
    SCORING_FUNCTIONS,
    get_scoring_function,
)
from .candidate import Candidate, CandidateBuilder
from .frontier import Frontier
from .centrality_labeling import GraphCentralityLabeling
from .uncertainty import UncertaintyLabeling
from .random_labeling import RandomLabeling

__all__ = [
    "LabelNode",
    "PickLabelStrategy",
    "picks_to_dataframe",
    "average_rank",
    "composite_rank",
    "ScoringFunction",
    "ReverseScoringFunction",
    "RiskEstimator",
    "SCORING_FUNCTIONS",
    "get_scoring_function",
    "Candidate",
    "CandidateBuilder",
    "Frontier",
    "GraphCentralityLabeling",
    "UncertaintyLabeling",
    "RandomLabeling",
]
