"""Kendall's tau-b rank correlation in O(n log n) time.

The algorithm sorts the pairs by x, then counts the swaps a bottom-up merge
sort performs while re-sorting them by y; every swap is a discordant pair.
Ties in x, in y and in both are counted exactly and removed from the
denominator.
"""
from __future__ import annotations

import math

import numpy as np

from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate


def _pairs_sum(n: int) -> int:
    # 1 + 2 + ... + n
    return n * (n + 1) // 2


def _tied_pairs(values) -> int:
    tied = 0
    consecutive = 1
    for i in range(1, len(values)):
        if values[i] == values[i - 1]:
            consecutive += 1
        else:
            tied += _pairs_sum(consecutive - 1)
            consecutive = 1
    return tied + _pairs_sum(consecutive - 1)


def correlation(x, y) -> float:
    """Compute Kendall's tau-b of `x` and `y`.

    Returns:
        float: tau-b, NaN when either vector is constant or has fewer than
        two elements.

    Raises:
        InvalidInputError: if the dimensions do not match.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = len(x)
    if n != len(y):
        raise InvalidInputError("Dimensions do not match: x=%d y=%d" % (n, len(y)))
    if n < 2:
        return float("nan")
    num_pairs = _pairs_sum(n - 1)

    order = np.lexsort((y, x))
    pairs = list(zip(x[order].tolist(), y[order].tolist()))

    tied_x = _tied_pairs([p[0] for p in pairs])
    tied_xy = _tied_pairs(pairs)

    swaps = 0
    dest = [None] * n
    segment = 1
    while segment < n:
        for offset in range(0, n, 2 * segment):
            i = offset
            i_end = min(i + segment, n)
            j = i_end
            j_end = min(j + segment, n)
            out = offset
            while i < i_end or j < j_end:
                if i < i_end and (j >= j_end or pairs[i][1] <= pairs[j][1]):
                    dest[out] = pairs[i]
                    i += 1
                else:
                    dest[out] = pairs[j]
                    j += 1
                    swaps += i_end - i
                out += 1
        pairs, dest = dest, pairs
        segment <<= 1

    tied_y = _tied_pairs([p[1] for p in pairs])

    concordant_minus_discordant = num_pairs - tied_x - tied_y + tied_xy - 2 * swaps
    non_tied = (num_pairs - tied_x) * float(num_pairs - tied_y)
    if non_tied == 0:
        return float("nan")
    return concordant_minus_discordant / math.sqrt(non_tied)


def estimate(x, y) -> Estimate:
    return Estimate(correlation(x, y), len(x))


def kendall_to_mi(tau: float) -> float:
    """Mutual information of Kendall-transformed variables with correlation
    `tau`, following M. B. Kursa, "Kendall transformation: a robust
    representation of continuous data for information theory" (2020).
    It is a robust lower bound of the mutual information of the original
    variables.
    """
    if abs(tau) >= 1.0:
        return float("inf")
    return tau * math.log(math.sqrt((1 + tau) / (1 - tau))) + math.log(math.sqrt(1 - tau * tau))
