"""Mutual information estimators, in nats.

* :func:`mle`: plug-in estimate for two categorical variables.
* :func:`ksg`: mixed KSG estimate for two numerical variables that may
  contain repeated values.
* :func:`dc`: Ross' estimate for a categorical and a numerical variable.

Categorical values are integer codes; float inputs are truncated to
integers.
"""
from __future__ import annotations

from typing import Dict, List

import numpy as np
from scipy.spatial import cKDTree
from scipy.special import digamma

from corrsketch.column import Column, ColumnType
from corrsketch.entropy import differential_entropy_mixed, entropy, entropy_from_probs
from corrsketch.errors import InvalidInputError
from corrsketch.estimate import MIEstimate
from corrsketch.stats import count_points_in_range, kth_nearest, mean

DEFAULT_K = 3
# Relative scale of the Gaussian noise added by ksg() when a random state is given.
JITTER_SCALE = 1e-10


def _check_lengths(x, y) -> None:
    if len(x) != len(y):
        raise InvalidInputError(
            "x and y must have same size. x.size=[%d] y.size=[%d]" % (len(x), len(y)))


def _as_labels(x) -> np.ndarray:
    return Column(x, ColumnType.CATEGORICAL).values_as_ints()


def mle(x, y) -> MIEstimate:
    """Maximum likelihood (plug-in) estimate of the mutual information of
    two categorical variables, computed from their contingency table.

    Returns:
        MIEstimate: the estimate, the plug-in entropies of both variables
        and their numbers of distinct values. NaN for empty input.
    """
    _check_lengths(x, y)
    n = len(x)
    if n == 0:
        return MIEstimate(float("nan"), 0)
    x_labels, x_idx = np.unique(_as_labels(x), return_inverse=True)
    y_labels, y_idx = np.unique(_as_labels(y), return_inverse=True)
    table = np.zeros((len(x_labels), len(y_labels)), dtype=np.int64)
    np.add.at(table, (x_idx.ravel(), y_idx.ravel()), 1)
    pxy = table / float(n)
    px = pxy.sum(axis=1)
    py = pxy.sum(axis=0)
    nz = table > 0
    expected = np.outer(px, py)
    mi = float(np.sum(pxy[nz] * np.log(pxy[nz] / expected[nz])))
    return MIEstimate(mi, n, entropy_from_probs(px), entropy_from_probs(py),
                      len(x_labels), len(y_labels))


def ksg_raw(x, y, k: int = DEFAULT_K, random_state=None) -> float:
    """The mixed KSG estimate without flooring at zero, see :func:`ksg`."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    _check_lengths(x, y)
    n = len(x)
    if n < 2:
        return float("nan")
    k = min(k, n - 1)

    if random_state is not None:
        if not isinstance(random_state, np.random.RandomState):
            random_state = np.random.RandomState(random_state)
        xm = max(1.0, mean(x))
        ym = max(1.0, mean(y))
        x = x + random_state.standard_normal(n) * xm * JITTER_SCALE
        y = y + random_state.standard_normal(n) * ym * JITTER_SCALE

    xy = np.column_stack((x, y))
    x1 = x.reshape(-1, 1)
    y1 = y.reshape(-1, 1)
    xy_tree = cKDTree(xy)
    x_tree = cKDTree(x1)
    y_tree = cKDTree(y1)

    # k + 1 neighbours because the query point is its own nearest neighbour
    distances, _ = xy_tree.query(xy, k=k + 1, p=np.inf)
    kth_distance = distances[:, -1]

    ties = kth_distance == 0.0
    radius = np.where(ties, np.nextafter(0.0, 1.0), np.nextafter(kth_distance, 0.0))
    kp = np.full(n, k, dtype=np.int64)
    if ties.any():
        kp[ties] = xy_tree.query_ball_point(xy[ties], radius[ties], p=np.inf,
                                            return_length=True)
    # The counts include the query point itself, so they already equal
    # nx + 1 and ny + 1 of the KSG formula.
    nx = x_tree.query_ball_point(x1, radius, p=np.inf, return_length=True)
    ny = y_tree.query_ball_point(y1, radius, p=np.inf, return_length=True)

    terms = digamma(kp) - digamma(nx) - digamma(ny)
    return float(np.mean(terms) + digamma(n))


def ksg(x, y, k: int = DEFAULT_K, random_state=None) -> float:
    """Mutual information of two numerical variables using the MixedKSG
    estimator from W. Gao, S. Kannan, S. Oh and P. Viswanath, "Estimating
    mutual information for discrete-continuous mixtures", NeurIPS 2017.

    Neighbourhoods are measured with the maximum norm. When the distance to
    the k-th nearest neighbour of a point is zero (repeated values), the
    number of points sharing its coordinates replaces k.

    Args:
        x: the first variable.
        y: the second variable.
        k (int): the number of nearest neighbours, capped at ``len(x) - 1``.
        random_state: if given (a seed or
            :class:`numpy.random.RandomState`), tiny Gaussian noise is
            added to the data, which breaks ties and recovers the original
            KSG estimator.

    Returns:
        float: the estimate floored at zero, NaN for fewer than two points.
    """
    mi = ksg_raw(x, y, k, random_state)
    if np.isnan(mi):
        return mi
    return max(0.0, mi)


def ksg_estimate(x, y, k: int = DEFAULT_K, random_state=None) -> MIEstimate:
    """:func:`ksg` together with the mixed differential entropies of both
    variables."""
    mi = ksg(x, y, k, random_state)
    return MIEstimate(mi, len(x), differential_entropy_mixed(x, k),
                      differential_entropy_mixed(y, k))


def _group_by_label(d, c) -> List[List[float]]:
    # Groups keep the order of `c`, labels are numbered by first appearance.
    groups: Dict[int, List[float]] = {}
    for label, value in zip(d, c):
        groups.setdefault(label, []).append(value)
    return list(groups.values())


def dc_raw(d, c, k: int = DEFAULT_K) -> float:
    """Ross' estimate without flooring at zero, see :func:`dc`."""
    _check_lengths(d, c)
    c = np.asarray(c, dtype=np.float64)
    n = len(c)
    if n == 0:
        return float("nan")
    order = np.argsort(c, kind="stable")
    c = c[order]
    d = _as_labels(d)[order]
    groups = _group_by_label(d.tolist(), c.tolist())
    num_symbols = len(groups)

    psi_m_sum = 0.0
    psi_nd_avg = 0.0
    psi_k_avg = 0.0
    for group in groups:
        one_k = min(k, len(group) - 1)
        if one_k > 0:
            for i, value in enumerate(group):
                # The radius comes from points with the same label, the
                # count from all points.
                nn = kth_nearest(group, i, one_k)
                if nn.left:
                    lo, hi = nn.kth_nearest, value + nn.distance
                else:
                    lo, hi = value - nn.distance, nn.kth_nearest
                m = max(count_points_in_range(c, lo, hi), one_k)
                psi_m_sum += digamma(m)
        else:
            psi_m_sum += digamma(num_symbols * 2)
        p_d = len(group) / float(n)
        psi_nd_avg += p_d * digamma(p_d * n)
        psi_k_avg += p_d * digamma(max(one_k, 1))

    return float(digamma(n) - psi_nd_avg + psi_k_avg - psi_m_sum / n)


def dc(d, c, k: int = DEFAULT_K) -> float:
    """Mutual information between a discrete and a continuous variable, as
    described in B. C. Ross, "Mutual information between discrete and
    continuous data sets", PLoS ONE 9:2 (2014).

    Args:
        d: the discrete variable (integer labels).
        c: the continuous variable.
        k (int): the number of nearest neighbours within each label.

    Returns:
        float: the estimate floored at zero, NaN for empty input.
    """
    mi = dc_raw(d, c, k)
    if np.isnan(mi):
        return mi
    return max(0.0, mi)


def dc_estimate(d, c, k: int = DEFAULT_K) -> MIEstimate:
    """:func:`dc` together with the discrete entropy of `d` and the mixed
    differential entropy of `c`. The entropies are in the order of the
    arguments."""
    mi = dc(d, c, k)
    labels = _as_labels(d)
    return MIEstimate(mi, len(c), entropy(labels), differential_entropy_mixed(c, k),
                      nx=len(np.unique(labels)))
