"""Bootstrap estimate of Pearson's correlation coefficient."""
from __future__ import annotations

import numpy as np

from corrsketch.errors import InvalidInputError
from corrsketch.estimate import BootstrapEstimate

DEFAULT_NUM_SAMPLES = 1000


def _pearson_rows(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    # Pearson's correlation of every row of `x` with the same row of `y`.
    xc = x - x.mean(axis=1, keepdims=True)
    yc = y - y.mean(axis=1, keepdims=True)
    sxy = (xc * yc).sum(axis=1)
    sxx = (xc * xc).sum(axis=1)
    syy = (yc * yc).sum(axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        r = sxy / np.sqrt(sxx * syy)
    r[~((sxx > 0.0) & (syy > 0.0))] = np.nan
    return np.clip(r, -1.0, 1.0)


def estimate(x, y, num_samples: int = DEFAULT_NUM_SAMPLES, alpha: float = 0.05,
             random_state=None) -> BootstrapEstimate:
    """Estimate Pearson's correlation by resampling the pairs with
    replacement `num_samples` times.

    Replicates that are not computable (a resample with constant values) are
    ignored. When none is computable every statistic is NaN.

    Args:
        x: the first vector.
        y: the second vector.
        num_samples (int): the number of bootstrap resamples.
        alpha (float): the interval covers the ``alpha/2`` to
            ``1 - alpha/2`` percentiles of the replicates.
        random_state: a seed or :class:`numpy.random.RandomState`.

    Returns:
        BootstrapEstimate: mean, median and percentile interval of the
        replicates.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = len(x)
    if n != len(y):
        raise InvalidInputError("x and y must have the same length")
    if num_samples < 1:
        raise InvalidInputError("num_samples must be positive, got %d" % num_samples)
    if not 0.0 < alpha < 1.0:
        raise InvalidInputError("alpha must be between 0 and 1, got %f" % alpha)
    if n < 2:
        nan = float("nan")
        return BootstrapEstimate(nan, nan, nan, nan, n)
    if not isinstance(random_state, np.random.RandomState):
        random_state = np.random.RandomState(random_state)
    idx = random_state.randint(0, n, size=(num_samples, n))
    replicates = _pearson_rows(x[idx], y[idx])
    replicates = replicates[~np.isnan(replicates)]
    if len(replicates) == 0:
        nan = float("nan")
        return BootstrapEstimate(nan, nan, nan, nan, n)
    lower, upper = np.percentile(replicates, [100.0 * alpha / 2.0, 100.0 * (1.0 - alpha / 2.0)])
    return BootstrapEstimate(np.mean(replicates), np.median(replicates), lower, upper, n)
