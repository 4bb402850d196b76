"""
Train/test splits of a labeled graph.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

import networkit as nk
import numpy as np

from guidedAL.common.id_mapper import IDMapper
from guidedAL.common.exceptions import ValidationError
from guidedAL.common.validators import validate_node_ids
from guidedAL.common.logging_config import get_logger
from .classification import Classification

logger = get_logger(__name__)


class DataSplit:
    """
    A graph, its true classification and a train/test partition of its nodes.

    Train nodes have their class revealed to the learner; test nodes are the
    pool from which active labeling may request labels. Nodes in neither set
    are unknown but never requested.

    Parameters
    ----------
    graph : nk.Graph
        The graph
    truth : Classification
        True class of every node whose class is known at all
    train_set : Iterable[int]
        Nodes with revealed classes
    test_set : Iterable[int]
        Nodes that may be labeled; order is kept
    id_mapper : IDMapper, optional
        Mapping between original IDs and node indices

    Raises
    ------
    ValidationError
        If both sets are empty, a node is out of range, or truth does not
        cover the graph
    """

    def __init__(
        self,
        graph: nk.Graph,
        truth: Classification,
        train_set: Iterable[int],
        test_set: Iterable[int],
        id_mapper: Optional[IDMapper] = None
    ) -> None:
        num_nodes = graph.upperNodeIdBound()
        if truth.num_nodes != num_nodes:
            raise ValidationError(
                "Truth does not cover the graph",
                field="truth",
                value=truth.num_nodes,
                expected=str(num_nodes)
            )

        self.graph = graph
        self.truth = truth
        self.id_mapper = id_mapper
        self.train_set: List[int] = validate_node_ids(train_set, num_nodes, field="train_set")
        self.test_set: List[int] = validate_node_ids(test_set, num_nodes, field="test_set")

        if not self.train_set and not self.test_set:
            raise ValidationError("Both train and test sets are empty", field="split")

        overlap = set(self.train_set) & set(self.test_set)
        if overlap:
            logger.warning("%d nodes appear in both the train and the test set", len(overlap))

        train = set(self.train_set)
        self.unknown_set: List[int] = [v for v in range(num_nodes) if v not in train]

    @classmethod
    def from_labels(
        cls,
        graph: nk.Graph,
        labels: Sequence[Any],
        label_map: Dict[Any, Any],
        train_ids: Iterable[Any],
        test_ids: Optional[Iterable[Any]] = None,
        id_mapper: Optional[IDMapper] = None
    ) -> 'DataSplit':
        """
        Build a split from a label map and train IDs.

        Parameters
        ----------
        graph : nk.Graph
            The graph
        labels : Sequence[Any]
            All class values
        label_map : Dict[Any, Any]
            True class value per node ID
        train_ids : Iterable[Any]
            Node IDs whose class is revealed
        test_ids : Iterable[Any], optional
            Node IDs that may be labeled. Defaults to every labeled node
            outside the train set, in node order.
        id_mapper : IDMapper, optional
            Translates IDs to node indices; without it IDs are node indices

        Examples
        --------
        >>> split = DataSplit.from_labels(
        ...     graph, ["a", "b"], {0: "a", 1: "b", 2: "a"}, train_ids=[0]
        ... )  # doctest: +SKIP
        >>> split.test_set  # doctest: +SKIP
        [1, 2]
        """
        truth = Classification.from_dict(
            label_map, labels, num_nodes=graph.upperNodeIdBound(), id_mapper=id_mapper
        )

        def to_internal(ids: Iterable[Any]) -> List[int]:
            if id_mapper is None:
                return list(ids)
            return id_mapper.get_internal_batch(list(ids))

        train = to_internal(train_ids)
        if test_ids is None:
            train_lookup = set(train)
            test = [v for v in truth if v not in train_lookup]
        else:
            test = to_internal(test_ids)

        return cls(graph, truth, train, test, id_mapper=id_mapper)

    @property
    def train_set_size(self) -> int:
        return len(self.train_set)

    @property
    def test_set_size(self) -> int:
        return len(self.test_set)

    @property
    def unknown_set_size(self) -> int:
        return len(self.unknown_set)

    @property
    def has_truth(self) -> bool:
        """True if every test node has a known true class."""
        return all(not self.truth.is_unknown(v) for v in self.test_set)

    def get_class_distribution(self) -> np.ndarray:
        """Class distribution over the train set."""
        counts = np.zeros(len(self.truth.labels), dtype=np.float64)
        for v in self.train_set:
            if not self.truth.is_unknown(v):
                counts[self.truth.get_class_value(v)] += 1
        total = counts.sum()
        return counts / total if total > 0 else counts

    def __repr__(self) -> str:
        return f"DataSplit(train={self.train_set_size}, test={self.test_set_size}, unknown={self.unknown_set_size})"
