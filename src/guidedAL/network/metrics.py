"""
Lazily computed graph metrics for node scoring.

Centralities are computed once per graph on first request and then served from
cache. Shortest-path distances are cached per source node because cluster-based
scoring only ever asks for distances from a small number of sources.
"""

from typing import Dict, Optional

import networkit as nk
import numpy as np

from guidedAL.common.exceptions import ComputationError
from guidedAL.common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

# networkit reports unreachable targets with the largest double
_UNREACHABLE = np.finfo(np.float64).max


class GraphMetrics:
    """
    Cached centrality and distance metrics over one networkit graph.

    Weighted metrics read edge weights as lengths, as networkit does. The
    unweighted variants run on an unweighted copy of the graph.

    Parameters
    ----------
    graph : nk.Graph
        Graph to measure
    normalized : bool, default False
        Normalize betweenness and closeness scores

    Examples
    --------
    >>> gm = GraphMetrics(graph)  # doctest: +SKIP
    >>> gm.degree(0), gm.distance(0, 3)  # doctest: +SKIP
    (2, 2.0)
    """

    def __init__(self, graph: nk.Graph, normalized: bool = False) -> None:
        self.graph = graph
        self.normalized = normalized
        self._unweighted: Optional[nk.Graph] = None
        self._degree: Optional[np.ndarray] = None
        self._betweenness: Dict[bool, np.ndarray] = {}
        self._closeness: Dict[bool, np.ndarray] = {}
        self._distances: Dict[bool, Dict[int, np.ndarray]] = {True: {}, False: {}}

    @property
    def unweighted_graph(self) -> nk.Graph:
        if self._unweighted is None:
            if self.graph.isWeighted():
                self._unweighted = nk.graphtools.toUnweighted(self.graph)
            else:
                self._unweighted = self.graph
        return self._unweighted

    def degree(self, node: int) -> float:
        """Degree of node; in plus out degree on directed graphs."""
        if self._degree is None:
            if self.graph.isDirected():
                self._degree = np.array(
                    [self.graph.degreeIn(v) + self.graph.degreeOut(v) for v in range(self.graph.upperNodeIdBound())],
                    dtype=np.float64
                )
            else:
                self._degree = np.array(
                    [self.graph.degree(v) for v in range(self.graph.upperNodeIdBound())],
                    dtype=np.float64
                )
        return float(self._degree[node])

    def betweenness(self, node: int, weighted: bool = False) -> float:
        """Betweenness centrality of node."""
        if weighted not in self._betweenness:
            graph = self.graph if weighted else self.unweighted_graph
            with LoggingTimer("betweenness", {"nodes": graph.numberOfNodes(), "weighted": weighted}):
                try:
                    bc = nk.centrality.Betweenness(graph, normalized=self.normalized)
                    bc.run()
                    self._betweenness[weighted] = np.array(bc.scores(), dtype=np.float64)
                except Exception as e:
                    raise ComputationError(
                        f"Failed to calculate betweenness centrality: {str(e)}",
                        operation="betweenness",
                        error_type="centrality",
                        cause=e
                    ) from e
        return float(self._betweenness[weighted][node])

    def closeness(self, node: int, weighted: bool = False) -> float:
        """Harmonic closeness centrality of node; well defined on disconnected graphs."""
        if weighted not in self._closeness:
            graph = self.graph if weighted else self.unweighted_graph
            with LoggingTimer("closeness", {"nodes": graph.numberOfNodes(), "weighted": weighted}):
                try:
                    cc = nk.centrality.HarmonicCloseness(graph, normalized=self.normalized)
                    cc.run()
                    self._closeness[weighted] = np.array(cc.scores(), dtype=np.float64)
                except Exception as e:
                    raise ComputationError(
                        f"Failed to calculate closeness centrality: {str(e)}",
                        operation="closeness",
                        error_type="centrality",
                        cause=e
                    ) from e
        return float(self._closeness[weighted][node])

    def distances_from(self, source: int, weighted: bool = False) -> np.ndarray:
        """
        Shortest-path distances from source to every node.

        Parameters
        ----------
        source : int
            Source node
        weighted : bool, default False
            Use Dijkstra over edge weights instead of hop counts

        Returns
        -------
        np.ndarray
            Distance per node, ``inf`` where the node is unreachable
        """
        cache = self._distances[weighted]
        if source not in cache:
            try:
                if weighted:
                    algo = nk.distance.Dijkstra(self.graph, source, storePaths=False)
                else:
                    algo = nk.distance.BFS(self.unweighted_graph, source, storePaths=False)
                algo.run()
                dist = np.array(algo.getDistances(), dtype=np.float64)
            except Exception as e:
                raise ComputationError(
                    f"Failed to calculate distances from node {source}: {str(e)}",
                    operation="shortest_paths",
                    error_type="distance",
                    cause=e
                ) from e
            dist[dist >= _UNREACHABLE] = np.inf
            cache[source] = dist
        return cache[source]

    def distance(self, source: int, target: int, weighted: bool = False) -> float:
        """Shortest-path distance between two nodes, ``inf`` if unreachable."""
        return float(self.distances_from(source, weighted)[target])

    def clear(self) -> None:
        """Drop every cached value."""
        self._degree = None
        self._betweenness.clear()
        self._closeness.clear()
        self._distances = {True: {}, False: {}}
