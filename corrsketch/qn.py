"""The Qn scale estimator proposed in P. J. Rousseeuw and C. Croux,
"Alternatives to the Median Absolute Deviation", Journal of the American
Statistical Association 88:424 (1993), and a robust correlation coefficient
built on top of it.
"""
from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate

# Asymptotic consistency factor for the Gaussian distribution. The value in
# the paper (2.2219) is a rounding of 1 / (sqrt(2) * qnorm(5/8)); this is the
# value used by the 'robustbase' R package.
GAUSSIAN_CONSISTENCY_FACTOR = 2.21914

_SQRT_OF_TWO = math.sqrt(2.0)

# Small sample correction factors, indexed by n.
_small_sample_factors = {
    2: 0.399356,
    3: 0.99365,
    4: 0.51321,
    5: 0.84401,
    6: 0.61220,
    7: 0.85877,
    8: 0.66993,
    9: 0.87344,
    10: 0.72014,
    11: 0.88906,
    12: 0.75743,
}


class QnScale(NamedTuple):
    """The corrected Qn scale and its approximate standard error."""

    value: float
    error: float


def kth_order_statistic(x, k: int) -> float:
    """The k-th smallest element (1-based) of `x`."""
    if not 1 <= k <= len(x):
        raise InvalidInputError("k=[%d] must be between 1 and n=[%d]" % (k, len(x)))
    x = np.asarray(x, dtype=np.float64)
    return float(np.partition(x, k - 1)[k - 1])


def weighted_high_median(a, weights) -> float:
    """The weighted high median: the smallest ``a[j]`` such that the sum of
    the weights of all ``a[i] <= a[j]`` is strictly greater than half of the
    total weight. Runs in O(n) expected time.

    Args:
        a: the observations.
        weights: the integer weights of the observations.
    """
    a = np.asarray(a, dtype=np.float64)
    w = np.asarray(weights, dtype=np.int64)
    if len(a) == 0:
        raise InvalidInputError("Cannot compute the weighted median of an empty array")
    wtotal = int(w.sum())
    wrest = 0
    while True:
        n = len(a)
        trial = np.partition(a, n // 2)[n // 2]
        lower = a < trial
        upper = a > trial
        wleft = int(w[lower].sum())
        wmid = int(w[a == trial].sum())
        if 2 * (wrest + wleft) > wtotal:
            a = a[lower]
            w = w[lower]
        elif 2 * (wrest + wleft + wmid) > wtotal:
            return float(trial)
        else:
            a = a[upper]
            w = w[upper]
            wrest += wleft + wmid


def _correction_factor(n: int) -> float:
    if n <= 12:
        return _small_sample_factors.get(n, 1.0)
    if n % 2 == 1:
        dn = 1.60188 + (-2.1284 - 5.172 / n) / n
    else:
        dn = 3.67561 + (1.9654 + (6.987 - 77.0 / n) / n) / n
    return 1.0 / (dn / n + 1.0)


def _raw_qn(y) -> float:
    # Time-efficient algorithm from C. Croux and P. J. Rousseeuw,
    # "Time-efficient algorithms for two highly robust estimators of scale",
    # Computational Statistics (1992). `y` must be sorted.
    n = len(y)
    h = n // 2 + 1
    k = h * (h - 1) // 2
    left = [n - i + 1 for i in range(n)]
    right = [n if i <= h else n - (i - h) for i in range(n)]
    p = [0] * n
    q = [0] * n
    n_left = n * (n + 1) // 2
    n_right = n * n
    knew = k + n_left
    while n_right - n_left > n:
        work = []
        weight = []
        for i in range(1, n):
            if left[i] <= right[i]:
                w = right[i] - left[i] + 1
                jhelp = left[i] + w // 2
                work.append(y[i] - y[n - jhelp])
                weight.append(w)
        trial = weighted_high_median(work, weight)

        j = 0
        for i in range(n - 1, -1, -1):
            while j < n and y[i] - y[n - j - 1] < trial:
                j += 1
            p[i] = j

        j = n + 1
        for i in range(n):
            while y[i] - y[n - j + 1] > trial:
                j -= 1
            q[i] = j

        sum_p = sum(p)
        sum_q = sum(q) - n
        if knew <= sum_p:
            right = list(p)
            n_right = sum_p
        elif knew > sum_q:
            left = list(q)
            n_left = sum_q
        else:
            return trial

    work = [y[i] - y[n - jj]
            for i in range(1, n)
            for jj in range(left[i], right[i] + 1)]
    return kth_order_statistic(work, knew - n_left)


def scale(x) -> QnScale:
    """Compute the Qn scale estimate of `x` in O(n log n) time, corrected
    for consistency at the Gaussian distribution and for small samples (the
    corrections follow the 'robustbase' R package).

    Returns:
        QnScale: the scale and its standard error, both NaN for fewer than
        two observations.
    """
    y = np.sort(np.asarray(x, dtype=np.float64))
    n = len(y)
    if n < 2:
        return QnScale(float("nan"), float("nan"))
    qn = _raw_qn(y.tolist())
    corrected = qn * _correction_factor(n) * GAUSSIAN_CONSISTENCY_FACTOR
    return QnScale(corrected, corrected / math.sqrt(2.0 * (n - 1) * 0.8227))


def correlation(x, y) -> float:
    """Robust correlation from the Qn scales of the rotated variables
    ``u = x/sx/sqrt(2) + y/sy/sqrt(2)`` and ``v = x/sx/sqrt(2) - y/sy/sqrt(2)``:
    ``(Qn(u)^2 - Qn(v)^2) / (Qn(u)^2 + Qn(v)^2)``.

    Returns NaN when the scale of `x` or `y` is zero.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if len(x) != len(y):
        raise InvalidInputError("x and y dimensions must match")
    sx = scale(x).value
    sy = scale(y).value
    if not (sx > 0.0 and sy > 0.0):
        return float("nan")
    xs = x / sx / _SQRT_OF_TWO
    ys = y / sy / _SQRT_OF_TWO
    us2 = scale(xs + ys).value ** 2
    vs2 = scale(xs - ys).value ** 2
    if not us2 + vs2 > 0.0:
        return float("nan")
    return (us2 - vs2) / (us2 + vs2)


def estimate(x, y) -> Estimate:
    return Estimate(correlation(x, y), len(x))
