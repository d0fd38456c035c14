from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np
from scipy.stats import norm, t as student_t

from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate


def coefficient(x, y) -> float:
    """Compute the Pearson product-moment correlation coefficient of two
    vectors in a single pass, using the numerically stabilized update that
    avoids sums of squares (adapted from the ELKI toolkit).

    Args:
        x: the first vector.
        y: the second vector.

    Returns:
        float: the correlation coefficient, or NaN when either vector is
        constant.

    Raises:
        InvalidInputError: if the vectors differ in length or are empty.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = len(x)
    if n != len(y):
        raise InvalidInputError("Invalid arguments: arrays differ in length.")
    if n == 0:
        raise InvalidInputError("Empty vector.")
    xs = x.tolist()
    ys = y.tolist()
    sum_xx = sum_yy = sum_xy = 0.0
    sum_x = xs[0]
    sum_y = ys[0]
    for i in range(1, n):
        xv = xs[i]
        yv = ys[i]
        # delta to the previous mean
        dx = xv * i - sum_x
        dy = yv * i - sum_y
        f = 1.0 / (i * (i + 1.0))
        sum_xx += f * dx * dx
        sum_yy += f * dy * dy
        sum_xy += f * dx * dy
        sum_x += xv
        sum_y += yv
    if not (sum_xx > 0.0 and sum_yy > 0.0):
        return float("nan")
    return sum_xy / math.sqrt(sum_xx * sum_yy)


def estimate(x, y) -> Estimate:
    return Estimate(coefficient(x, y), len(x))


def _t_score(r: float, n: int) -> float:
    r = abs(r)
    if r >= 1.0:
        return float("inf")
    return r * math.sqrt((n - 2) / (1.0 - r * r))


def p_value_one_tailed(r: float, n: int) -> float:
    """P-value of a one-tailed t-test against the null hypothesis that the
    correlation is zero."""
    return float(student_t.sf(_t_score(r, n), n - 2))


def p_value_two_tailed(r: float, n: int) -> float:
    return 2.0 * p_value_one_tailed(r, n)


def is_significant(r: float, n: int, significance: float = 0.05) -> bool:
    """Two-tailed significance test of the correlation coefficient `r`
    computed from `n` samples."""
    critical = student_t.ppf(1.0 - significance / 2.0, n - 2)
    return _t_score(r, n) >= critical


class ConfidenceInterval(NamedTuple):
    lower: float
    upper: float


def confidence_interval(r: float, n: int, confidence: float = 0.95) -> ConfidenceInterval:
    """Confidence interval of a correlation coefficient through Fisher's
    z-transformation.

    Raises:
        InvalidInputError: if `n` is smaller than 4.
    """
    if n < 4:
        raise InvalidInputError("At least 4 samples are needed, got n=%d" % n)
    alpha = (1.0 - confidence) / 2.0
    interval = norm.ppf(1.0 - alpha) / math.sqrt(n - 3)
    z = np.arctanh(r)
    return ConfidenceInterval(float(np.tanh(z - interval)), float(np.tanh(z + interval)))
