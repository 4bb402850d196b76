"""
Node classifications: a class index per node, or unknown.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence

import numpy as np

from guidedAL.common.id_mapper import IDMapper
from guidedAL.common.exceptions import ValidationError
from guidedAL.common.validators import validate_label_map

UNKNOWN = -1


class Classification:
    """
    Class assignment for every node of a graph, with ``-1`` meaning unknown.

    Iterating a Classification yields the nodes whose class is known, in
    increasing node order. ``size`` is the number of known nodes.

    Parameters
    ----------
    labels : Sequence[Any]
        Class values; a node's class index points into this list
    num_nodes : int
        Number of nodes in the graph
    values : np.ndarray, optional
        Initial class indices, ``-1`` for unknown. Defaults to all unknown.

    Examples
    --------
    >>> truth = Classification(["left", "right"], 4)
    >>> truth.set(0, 1)
    >>> truth.get_class_value(0), truth.is_unknown(1), truth.size
    (1, True, 1)
    >>> truth.get_label(0)
    'right'
    """

    def __init__(
        self,
        labels: Sequence[Any],
        num_nodes: int,
        values: Optional[np.ndarray] = None
    ) -> None:
        self.labels: List[Any] = list(labels)
        if values is None:
            self.values = np.full(num_nodes, UNKNOWN, dtype=np.int64)
        else:
            self.values = np.array(values, dtype=np.int64)
            if self.values.shape != (num_nodes,):
                raise ValidationError(
                    "Class value array has the wrong shape",
                    field="values",
                    value=self.values.shape,
                    expected=f"({num_nodes},)"
                )
            bad = (self.values < UNKNOWN) | (self.values >= len(self.labels))
            if np.any(bad):
                raise ValidationError(
                    "Class indices out of range",
                    field="values",
                    details={"num_invalid": int(bad.sum()), "num_labels": len(self.labels)}
                )

    @classmethod
    def from_dict(
        cls,
        mapping: Dict[Any, Any],
        labels: Sequence[Any],
        num_nodes: Optional[int] = None,
        id_mapper: Optional[IDMapper] = None
    ) -> 'Classification':
        """
        Build a Classification from a node to class value mapping.

        Parameters
        ----------
        mapping : Dict[Any, Any]
            Node ID to class value. Keys are original IDs if id_mapper is
            given, otherwise node indices.
        labels : Sequence[Any]
            All class values
        num_nodes : int, optional
            Number of nodes. Defaults to the size of id_mapper.
        id_mapper : IDMapper, optional
            Translates original IDs to node indices

        Raises
        ------
        ValidationError
            If a class value is not in labels or a node is out of range
        """
        validate_label_map(mapping, list(labels), check_balance=False)

        if num_nodes is None:
            if id_mapper is None:
                raise ValidationError(
                    "num_nodes is required without an id_mapper",
                    field="num_nodes"
                )
            num_nodes = id_mapper.size()

        index_of = {label: i for i, label in enumerate(labels)}
        result = cls(labels, num_nodes)
        for node_id, label in mapping.items():
            node = id_mapper.get_internal(node_id) if id_mapper is not None else node_id
            if not isinstance(node, (int, np.integer)) or not 0 <= node < num_nodes:
                raise ValidationError("Node id out of range", field="mapping", value=node_id)
            result.values[node] = index_of[label]
        return result

    @property
    def num_nodes(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> int:
        return int(np.count_nonzero(self.values != UNKNOWN))

    def is_unknown(self, node: int) -> bool:
        return bool(self.values[node] == UNKNOWN)

    def get_class_value(self, node: int) -> int:
        return int(self.values[node])

    def get_label(self, node: int) -> Optional[Any]:
        """Class value of node, or None if unknown."""
        idx = self.values[node]
        return None if idx == UNKNOWN else self.labels[idx]

    def set(self, node: int, class_value: int) -> None:
        if class_value != UNKNOWN and not 0 <= class_value < len(self.labels):
            raise ValidationError(
                "Class index out of range",
                field="class_value",
                value=class_value,
                expected=f"-1 or 0 <= value < {len(self.labels)}"
            )
        self.values[node] = class_value

    def set_unknown(self, node: int) -> None:
        self.values[node] = UNKNOWN

    def clear(self) -> None:
        """Mark every node unknown."""
        self.values.fill(UNKNOWN)

    def copy(self) -> 'Classification':
        return Classification(self.labels, self.num_nodes, self.values.copy())

    def known_nodes(self) -> np.ndarray:
        return np.flatnonzero(self.values != UNKNOWN)

    def get_class_distribution(self) -> np.ndarray:
        """Fraction of known nodes per class; all zeros when nothing is known."""
        counts = np.bincount(
            self.values[self.values != UNKNOWN], minlength=len(self.labels)
        ).astype(np.float64)
        total = counts.sum()
        return counts / total if total > 0 else counts

    def get_majority_class(self) -> int:
        return int(np.argmax(self.get_class_distribution()))

    def __iter__(self) -> Iterator[int]:
        return iter(self.known_nodes().tolist())

    def __repr__(self) -> str:
        return f"Classification(nodes={self.num_nodes}, known={self.size}, labels={self.labels})"
