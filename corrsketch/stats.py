"""Small statistics helpers shared by the estimators, including nearest
neighbour search over sorted one-dimensional data."""
from __future__ import annotations

from typing import NamedTuple

import numpy as np
from scipy.stats import rankdata


def mean(x) -> float:
    return float(np.mean(x))


def rank(x, ties: str = "average") -> np.ndarray:
    """Ranks starting at 1. By default tied values get the average of their
    ranks; ``ties="max"`` gives them the largest one."""
    return rankdata(x, method=ties)


class NearestNeighbor(NamedTuple):
    """Result of a k-th nearest neighbour search in sorted 1-d data.

    Attributes:
        k (int): the number of neighbours actually walked, which can be
            smaller than requested for short inputs or larger for the
            non-zero variant.
        kth_nearest (float): the value of the k-th nearest neighbour.
        distance (float): its distance to the target point.
        left (bool): True if the neighbour lies left of the target.
    """

    k: int
    kth_nearest: float
    distance: float
    left: bool


def _step(data, end, c, left, right):
    # Extend the window [left, right] by one point towards the closest side.
    if left == 0:
        right += 1
        return left, right, right
    if right == end - 1:
        left -= 1
        return left, right, left
    if abs(data[left - 1] - c) < abs(data[right + 1] - c):
        left -= 1
        return left, right, left
    right += 1
    return left, right, right


def kth_nearest(data, target: int, k: int, end: int = None) -> NearestNeighbor:
    """Find the k-th nearest neighbour of ``data[target]`` in the sorted
    array ``data[:end]``. `k` is capped at ``end - 1``.
    """
    if end is None:
        end = len(data)
    local_k = min(k, end - 1)
    c = data[target]
    left = right = neighbor = target
    for _ in range(local_k):
        left, right, neighbor = _step(data, end, c, left, right)
    return NearestNeighbor(local_k, data[neighbor], abs(data[neighbor] - c),
                           neighbor == left and neighbor != target)


def kth_nearest_nonzero(data, target: int, k: int, end: int = None) -> NearestNeighbor:
    """Like :func:`kth_nearest`, but while the distance to the k-th
    neighbour is zero (repeated values) keep walking until a non-zero distance
    is found or the data is exhausted. The returned `k` counts every
    neighbour walked.
    """
    if end is None:
        end = len(data)
    max_k = end - 1
    local_k = min(k, max_k)
    c = data[target]
    left = right = neighbor = target
    for _ in range(local_k):
        left, right, neighbor = _step(data, end, c, left, right)
    distance = abs(data[neighbor] - c)
    while distance == 0 and local_k < max_k:
        left, right, neighbor = _step(data, end, c, left, right)
        local_k += 1
        distance = abs(data[neighbor] - c)
    return NearestNeighbor(local_k, data[neighbor], distance,
                           neighbor == left and neighbor != target)


def find_point(c, target: float, end: int = None) -> float:
    """Binary search for `target` in the sorted array ``c[:end]``.

    Returns a 1-based position: the position of a matching element when
    `target` is present, otherwise the midpoint between the two elements
    around it (``0.5`` below the first, ``end + 0.5`` above the last).
    """
    if end is None:
        end = len(c)
    left = 1
    right = end
    if target < c[left - 1]:
        return 0.5
    if target > c[right - 1]:
        return right + 0.5
    pt = float(left)
    while left != right:
        pt = (left + right) // 2
        if c[pt - 1] < target:
            left = pt
        else:
            right = pt
        if left + 1 == right:
            if c[left - 1] == target:
                pt = left
            elif c[right - 1] == target:
                pt = right
            else:
                pt = (right + left) / 2.0
            break
    return float(pt)


def count_points_in_range(c, lo: float, hi: float, end: int = None) -> int:
    """Count the points of the sorted array `c` between `lo` and `hi`, as
    positioned by :func:`find_point`."""
    return int(np.floor(find_point(c, hi, end) - find_point(c, lo, end)))
