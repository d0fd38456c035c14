import numpy as np
from scipy.stats import norm

from corrsketch import pearson
from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate
from corrsketch.stats import rank


def rankit(x) -> np.ndarray:
    """Rank-based inverse normal transformation: the standard normal
    quantiles of ``(rank - 0.5) / n``. The result is approximately normal
    regardless of the distribution of `x`, as long as ties are rare."""
    x = np.asarray(x, dtype=np.float64)
    return norm.ppf((rank(x) - 0.5) / len(x))


def coefficient(x, y) -> float:
    """Pearson's correlation of the rank-based inverse normal (RIN)
    transformations of `x` and `y`."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if len(x) != len(y):
        raise InvalidInputError("Input vector sizes are different.")
    if len(x) == 0:
        raise InvalidInputError("Empty vector.")
    return pearson.coefficient(rankit(x), rankit(y))


def estimate(x, y) -> Estimate:
    return Estimate(coefficient(x, y), len(x))
