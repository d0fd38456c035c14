"""Chatterjee's rank correlation coefficient xi, from S. Chatterjee, "A new
coefficient of correlation", Journal of the American Statistical
Association (2021).

Unlike the other coefficients, xi is not symmetric: it measures how much
`y` is a function of `x`. It is close to 1 when `y` is a measurable function
of `x` and close to 0 when they are independent.
"""
import numpy as np

from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate
from corrsketch.stats import rank


def coefficient(x, y, random_state=None) -> float:
    """Compute xi(x, y).

    Args:
        x: the first vector.
        y: the second vector.
        random_state: a seed or :class:`numpy.random.RandomState` used to
            break ties in `x` uniformly at random. Ties are broken by input
            order when omitted.

    Returns:
        float: the coefficient, NaN for fewer than two values or a
        constant `y`.

    Raises:
        InvalidInputError: if the vectors differ in length.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = len(x)
    if n != len(y):
        raise InvalidInputError("Input vector sizes are different.")
    if n < 2:
        return float("nan")
    if random_state is not None:
        if not isinstance(random_state, np.random.RandomState):
            random_state = np.random.RandomState(random_state)
        tie_breaker = random_state.permutation(n)
    else:
        tie_breaker = np.arange(n)
    # below[i] = #{j: y[j] <= y[i]} and above[i] = #{j: y[j] >= y[i]}
    below = rank(y, ties="max")
    above = rank(-y, ties="max")
    denominator = np.sum(above * (n - above))
    if denominator == 0:
        return float("nan")
    below = below[np.lexsort((tie_breaker, x))]
    return float(1.0 - n * np.sum(np.abs(np.diff(below))) / (2.0 * denominator))


def estimate(x, y, random_state=None) -> Estimate:
    return Estimate(coefficient(x, y, random_state), len(x))
