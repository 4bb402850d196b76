"""
Class probability estimates produced by a relational classifier.
"""

from typing import Iterable, Iterator, Optional

import numpy as np

from guidedAL.common.exceptions import ValidationError
from guidedAL.common.validators import validate_probabilities, validate_node_ids
from .classification import Classification, UNKNOWN


class Estimate:
    """
    Per-node class probability vectors.

    Parameters
    ----------
    probabilities : np.ndarray
        Matrix of shape ``(num_nodes, num_labels)``. Rows of NaN mean the
        node has no estimate.
    nodes : Iterable[int], optional
        Nodes that carry an estimate. Defaults to every row without NaN.

    Examples
    --------
    >>> est = Estimate(np.array([[0.7, 0.3], [0.5, 0.5]]))
    >>> est.get_classification(0), round(est.margin(1), 3)
    (0, 0.0)
    """

    def __init__(
        self,
        probabilities: np.ndarray,
        nodes: Optional[Iterable[int]] = None
    ) -> None:
        self.probabilities = validate_probabilities(probabilities)
        if nodes is None:
            mask = ~np.isnan(self.probabilities).any(axis=1)
            self.nodes = np.flatnonzero(mask)
        else:
            self.nodes = np.array(
                sorted(set(validate_node_ids(nodes, self.probabilities.shape[0]))),
                dtype=np.int64
            )
        self._has = np.zeros(self.probabilities.shape[0], dtype=bool)
        self._has[self.nodes] = True

    @classmethod
    def from_classification(cls, labels: Classification) -> 'Estimate':
        """One-hot estimate for every known node of a classification."""
        probs = np.full((labels.num_nodes, len(labels.labels)), np.nan)
        known = labels.known_nodes()
        probs[known] = 0.0
        probs[known, labels.values[known]] = 1.0
        return cls(probs, nodes=known.tolist())

    @property
    def num_labels(self) -> int:
        return int(self.probabilities.shape[1])

    @property
    def size(self) -> int:
        return int(self.nodes.shape[0])

    def has_estimate(self, node: int) -> bool:
        return 0 <= node < self._has.shape[0] and bool(self._has[node])

    def get_estimate(self, node: int) -> Optional[np.ndarray]:
        """Probability vector of node (a copy), or None without an estimate."""
        if not self.has_estimate(node):
            return None
        return self.probabilities[node].copy()

    def get_score(self, node: int, class_value: int) -> float:
        if not self.has_estimate(node):
            return float("nan")
        return float(self.probabilities[node, class_value])

    def get_classification(self, node: int) -> int:
        """Most probable class index, the lowest on ties; -1 without an estimate."""
        if not self.has_estimate(node):
            return UNKNOWN
        return int(np.argmax(self.probabilities[node]))

    def margin(self, node: int) -> float:
        """
        Gap between the two largest class probabilities of node.

        Returns NaN when the node has no estimate or fewer than two classes
        exist.
        """
        if not self.has_estimate(node) or self.num_labels < 2:
            return float("nan")
        top_two = np.sort(self.probabilities[node])[-2:]
        return float(top_two[1] - top_two[0])

    def as_classification(self, labels) -> Classification:
        """Hard classification of every estimated node."""
        if len(labels) != self.num_labels:
            raise ValidationError(
                "Label count does not match the probability matrix",
                field="labels",
                value=len(labels),
                expected=str(self.num_labels)
            )
        result = Classification(labels, self.probabilities.shape[0])
        for node in self.nodes.tolist():
            result.set(node, self.get_classification(node))
        return result

    def __iter__(self) -> Iterator[int]:
        return iter(self.nodes.tolist())

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"Estimate(nodes={self.size}, labels={self.num_labels})"
