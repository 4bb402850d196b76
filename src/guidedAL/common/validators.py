"""
Input validation utilities for the guidedAL library.

These checks run where user data enters the library (label maps, node sets and
probability matrices) so the selection engine can assume well-formed input.
"""

from typing import Any, Dict, Iterable, List, Optional
import warnings

import numpy as np

from .exceptions import ValidationError


def validate_node_ids(
    nodes: Iterable[Any],
    num_nodes: int,
    field: str = "nodes"
) -> List[int]:
    """
    Validate that every node is an integer index into a graph of num_nodes.

    Parameters
    ----------
    nodes : Iterable[Any]
        Node indices to check
    num_nodes : int
        Number of nodes in the graph
    field : str, default "nodes"
        Field name reported in the error

    Returns
    -------
    List[int]
        The nodes as plain ints, in input order

    Raises
    ------
    ValidationError
        If a node is not an integer or lies outside ``[0, num_nodes)``

    Examples
    --------
    >>> validate_node_ids([0, 2], num_nodes=3)
    [0, 2]
    >>> validate_node_ids([5], num_nodes=3)  # doctest: +SKIP
    ValidationError: Validation error in field 'nodes': Node id out of range
    """
    result = []
    for node in nodes:
        if isinstance(node, (bool, np.bool_)) or not isinstance(node, (int, np.integer)):
            raise ValidationError(
                f"Node ids must be integers, got {type(node).__name__}",
                field=field,
                value=node
            )
        if node < 0 or node >= num_nodes:
            raise ValidationError(
                "Node id out of range",
                field=field,
                value=int(node),
                expected=f"0 <= node < {num_nodes}"
            )
        result.append(int(node))
    return result


def validate_label_map(
    label_map: Dict[Any, Any],
    labels: List[Any],
    check_balance: bool = True,
    max_imbalance_ratio: float = 10.0
) -> None:
    """
    Validate a mapping from nodes to class values.

    Parameters
    ----------
    label_map : Dict[Any, Any]
        Mapping of node ID to class value
    labels : List[Any]
        All valid class values
    check_balance : bool, default True
        Warn when class counts are strongly imbalanced
    max_imbalance_ratio : float, default 10.0
        Ratio between the most and least frequent class that triggers the warning

    Raises
    ------
    ValidationError
        If labels is empty, contains duplicates, or label_map uses an unknown class
    """
    if not labels:
        raise ValidationError("Labels list is empty", field="labels")

    if len(set(labels)) != len(labels):
        raise ValidationError(
            "Labels list contains duplicates",
            field="labels",
            value=list(labels)
        )

    valid_labels = set(labels)
    invalid = sorted({str(v) for v in label_map.values() if v not in valid_labels})
    if invalid:
        raise ValidationError(
            "Invalid labels found",
            field="label_map",
            details={"invalid_labels": invalid, "valid_labels": list(labels)}
        )

    if check_balance and label_map:
        counts = {label: 0 for label in labels}
        for value in label_map.values():
            counts[value] += 1
        present = [c for c in counts.values() if c > 0]
        if len(present) > 1 and max(present) / min(present) > max_imbalance_ratio:
            warnings.warn(
                f"Label counts are imbalanced (ratio {max(present) / min(present):.1f}). "
                "Candidate selection may under-sample the rare classes."
            )


def validate_probabilities(
    probabilities: np.ndarray,
    num_labels: Optional[int] = None,
    field: str = "probabilities"
) -> np.ndarray:
    """
    Validate a per-node class probability matrix.

    Rows of NaN are allowed and mean "no estimate for this node".

    Returns
    -------
    np.ndarray
        The matrix as a float64 array

    Raises
    ------
    ValidationError
        If the matrix is not two dimensional, has the wrong number of
        columns, or holds negative probabilities
    """
    matrix = np.asarray(probabilities, dtype=np.float64)

    if matrix.ndim != 2:
        raise ValidationError(
            f"Probability matrix must be 2-dimensional, got {matrix.ndim} dimensions",
            field=field
        )

    if num_labels is not None and matrix.shape[1] != num_labels:
        raise ValidationError(
            "Probability matrix has the wrong number of columns",
            field=field,
            value=matrix.shape[1],
            expected=str(num_labels)
        )

    if np.any(matrix[~np.isnan(matrix)] < 0):
        raise ValidationError("Probabilities must be non-negative", field=field)

    return matrix
