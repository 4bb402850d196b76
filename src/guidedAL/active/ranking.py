"""
Rank utilities shared by the labeling strategies.

Scores are ordered through comparator functions that sort the *best* entry
last, matching how candidates are popped from the end of a sorted list.
"""

import math
from functools import cmp_to_key
from typing import Callable, List, Sequence

# clamp for the fractional part of a composite rank, so it never reaches the next integer
MAX_LOCAL_RANK = 99.9


def compare_values(a: float, b: float) -> int:
    """Three-way comparison of two floats."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def sort_best_first(items: Sequence, compare: Callable[[float, float], int]) -> List:
    """
    Sort scored items so that the best comes first.

    Parameters
    ----------
    items : Sequence
        Objects with a ``score`` attribute
    compare : Callable[[float, float], int]
        Score comparator that orders the best score last

    Returns
    -------
    List
        New list, best first; items with equal scores keep their input order
    """
    return sorted(items, key=cmp_to_key(lambda x, y: compare(x.score, y.score)), reverse=True)


def average_rank(sorted_items: Sequence, target) -> float:
    """
    Rank of target within a score-sorted list, averaged over ties.

    The tie block is the contiguous run of entries sharing the target's exact
    score. The result is ``1 + (last - first) / 2`` where first and last are
    the block's 0-based positions in the whole list, so an untied entry
    always reports 1 and a tie occupying positions 1..3 reports 2.

    Parameters
    ----------
    sorted_items : Sequence
        Objects with a ``score`` attribute, already sorted
    target : object, optional
        The entry to rank, matched by identity

    Returns
    -------
    float
        The average rank, or NaN if target is None or not in the list

    Examples
    --------
    >>> from guidedAL.active.base import LabelNode
    >>> items = [LabelNode(0, 5.0), LabelNode(1, 3.0), LabelNode(2, 3.0), LabelNode(3, 3.0)]
    >>> average_rank(items, items[2])
    2.0
    """
    if target is None:
        return math.nan

    index = next((i for i, item in enumerate(sorted_items) if item is target), -1)
    if index == -1:
        return math.nan

    score = target.score
    first = last = index
    while first > 0 and sorted_items[first - 1].score == score:
        first -= 1
    while last < len(sorted_items) - 1 and sorted_items[last + 1].score == score:
        last += 1
    return 1 + (last - first) / 2.0


def composite_rank(position: int, local_rank: float) -> float:
    """
    Combine a 1-based candidate position with a rank inside that candidate.

    ``position + local_rank / 100`` with the local rank clamped below 100.
    """
    if math.isnan(local_rank):
        return math.nan
    if local_rank >= 100:
        local_rank = MAX_LOCAL_RANK
    return position + local_rank / 100.0
