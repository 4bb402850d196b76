"""
Base types for active labeling strategies.

A strategy is initialized once per labeling round with the classifier context
and the current data split, then asked repeatedly which nodes should have
their labels revealed next.
"""

from functools import total_ordering
from typing import Any, List, Optional, Sequence

import numpy as np
import polars as pl

from guidedAL.common.id_mapper import IDMapper
from guidedAL.common.exceptions import StrategyStateError, require_positive
from guidedAL.common.logging_config import get_logger
from guidedAL.labeling import DataSplit, Estimate
from .ranking import average_rank, sort_best_first

logger = get_logger(__name__)


@total_ordering
class LabelNode:
    """
    A node paired with the score that got it selected.

    LabelNodes order by score only; equality is identity, so two nodes with
    the same score are still distinct entries of a ranked list.
    """

    __slots__ = ("node", "score")

    def __init__(self, node: int, score: float) -> None:
        self.node = node
        self.score = score

    def __lt__(self, other: 'LabelNode') -> bool:
        return self.score < other.score

    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"{self.node}:{self.score}"


class PickLabelStrategy:
    """
    Template for strategies that choose nodes to label.

    Subclasses implement ``pick_nodes``. The public ``pick`` wraps it with the
    initialization check, the iteration counter and truncation to
    ``max_picks``; ``peek`` and ``rank`` are optional capabilities.
    """

    name = "PickLabelStrategy"

    def __init__(self) -> None:
        self.context: Any = None
        self.split: Optional[DataSplit] = None
        self.iteration = 0
        self._initialized = False

    def initialize(self, context: Any, split: DataSplit) -> None:
        """
        Start a new labeling round.

        Parameters
        ----------
        context : Any
            The classifier context, for strategies that query it
        split : DataSplit
            Current train/test split
        """
        self.context = context
        self.split = split
        self.iteration = 0
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise StrategyStateError(
                f"{self.name} has not yet been initialized",
                strategy=self.name,
                operation=operation
            )

    def pick_nodes(self, predictions: Optional[Estimate], max_picks: int) -> Optional[List[LabelNode]]:
        raise NotImplementedError

    def pick(self, predictions: Optional[Estimate], max_picks: int) -> Optional[List[LabelNode]]:
        """
        Choose up to max_picks nodes to label.

        Returns
        -------
        List[LabelNode] or None
            Picks in order, or None when nothing is left to pick
        """
        self._require_initialized("pick")
        require_positive(max_picks, "max_picks", allow_zero=True)

        nodes = self.pick_nodes(predictions, max_picks)
        self.iteration += 1

        result = nodes[:max_picks] if nodes else nodes
        if result:
            logger.debug(
                "[iteration-%d] %s returning %d nodes, first=%s",
                self.iteration, self.name, len(result), result[0]
            )
            return result

        logger.debug("[iteration-%d] %s returning None", self.iteration, self.name)
        return None

    def get_nodes_to_label(
        self,
        split: DataSplit,
        predictions: Optional[Estimate],
        max_picks: int
    ) -> Optional[List[LabelNode]]:
        """Record the current split, then pick."""
        self.split = split
        return self.pick(predictions, max_picks)

    def peek(
        self,
        split: DataSplit,
        predictions: Optional[Estimate],
        max_picks: int
    ) -> List[LabelNode]:
        raise NotImplementedError(f"{self.name} does not support peek")

    def rank(self, split: DataSplit, predictions: Optional[Estimate], node: int) -> float:
        raise NotImplementedError(f"{self.name} does not support rank")

    @staticmethod
    def average_rank(items: Sequence[LabelNode], target: Optional[LabelNode], compare=None) -> float:
        """
        Sort items best first and return the tie-averaged rank of target.

        Without a comparator, smaller scores rank first.
        """
        if target is None:
            return float("nan")
        if compare is None:
            ordered = sorted(items, key=lambda ln: ln.score)
        else:
            ordered = sort_best_first(items, compare)
        return average_rank(ordered, target)

    def __str__(self) -> str:
        return self.name


def picks_to_dataframe(
    picks: Optional[Sequence[LabelNode]],
    id_mapper: Optional[IDMapper] = None
) -> pl.DataFrame:
    """
    Tabulate picks in pick order.

    Parameters
    ----------
    picks : Sequence[LabelNode], optional
        Result of ``pick`` or ``peek``; None gives an empty frame
    id_mapper : IDMapper, optional
        Translate node indices back to original IDs

    Returns
    -------
    pl.DataFrame
        Columns ``pick_order`` (1-based), ``node_id`` and ``score``
    """
    picks = list(picks or [])
    node_ids = [id_mapper.get_original(ln.node) if id_mapper else ln.node for ln in picks]
    return pl.DataFrame({
        "pick_order": list(range(1, len(picks) + 1)),
        "node_id": node_ids,
        "score": np.array([ln.score for ln in picks], dtype=np.float64),
    })
