import numpy as np

from corrsketch import pearson
from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate
from corrsketch.stats import rank


def coefficient(x, y) -> float:
    """Spearman's rank correlation: Pearson's correlation of the ranks of
    `x` and `y`, with ties resolved by average rank."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if len(x) != len(y):
        raise InvalidInputError("Input vector sizes are different.")
    return pearson.coefficient(rank(x), rank(y))


def estimate(x, y) -> Estimate:
    return Estimate(coefficient(x, y), len(x))
