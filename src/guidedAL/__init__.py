"""
guidedAL - Cluster-guided active labeling for partially labeled graphs.

Given a graph where the class of some nodes is known, guidedAL decides which
unknown node should be labeled next. The main strategy walks a modularity
cluster hierarchy and asks for central nodes of clusters where nothing is
known yet.

Modules:
    common: Exceptions, logging, ID mapping and validation
    network: Modularity cluster hierarchy and cached graph metrics
    labeling: Classifications, probability estimates and data splits
    active: Labeling strategies and scoring functions
"""

__version__ = "0.1.0"

from .active import (
    GraphCentralityLabeling,
    UncertaintyLabeling,
    RandomLabeling,
    LabelNode,
    get_scoring_function,
)
from .labeling import Classification, Estimate, DataSplit
from .network import build_modularity_hierarchy

__all__ = [
    "GraphCentralityLabeling",
    "UncertaintyLabeling",
    "RandomLabeling",
    "LabelNode",
    "get_scoring_function",
    "Classification",
    "Estimate",
    "DataSplit",
    "build_modularity_hierarchy",
]
