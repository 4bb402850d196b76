"""
Graph-side collaborators: modularity cluster hierarchy and cached metrics.
"""

from .hierarchy import (
    Cluster,
    ClusterHierarchy,
    HierarchyBuilder,
    ModularityClusterer,
    build_modularity_hierarchy,
    get_hierarchy_summary,
)
from .metrics import GraphMetrics

__all__ = [
    "Cluster",
    "ClusterHierarchy",
    "HierarchyBuilder",
    "ModularityClusterer",
    "build_modularity_hierarchy",
    "get_hierarchy_summary",
    "GraphMetrics",
]
