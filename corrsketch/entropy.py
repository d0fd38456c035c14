"""Entropy estimators, in nats.

Discrete entropy uses the plug-in (maximum likelihood) estimate. The
differential entropy estimators are k-nearest-neighbour estimators for
one-dimensional data under the maximum norm.
"""
from __future__ import annotations

import math

import numpy as np
from scipy.special import digamma

from corrsketch.stats import kth_nearest, kth_nearest_nonzero

# log of the volume of the one-dimensional unit ball under the maximum norm
LOG_CD = math.log(2.0)


def entropy(labels) -> float:
    """Plug-in entropy of a discrete variable.

    Args:
        labels: the integer label of every observation.

    Returns:
        float: the entropy, 0 for fewer than two observations or a single
        distinct label.
    """
    labels = np.asarray(labels)
    if len(labels) <= 1:
        return 0.0
    _, counts = np.unique(labels, return_counts=True)
    if len(counts) <= 1:
        return 0.0
    return entropy_from_probs(counts / float(len(labels)))


def entropy_from_probs(probabilities) -> float:
    """Entropy of a distribution given the probability of every value."""
    p = np.asarray(probabilities, dtype=np.float64)
    return float(-np.sum(p * np.log(p)))


def differential_entropy(x, k: int = 3) -> float:
    """Kozachenko-Leonenko (1987) estimate of the differential entropy, as
    described in D. Lombardi and S. Pant, "Nonparametric k-nearest-neighbor
    entropy estimator", Physical Review E 93 (2016).

    Repeated values make a k-th nearest distance zero, and the estimate
    becomes ``-inf``. Use :func:`differential_entropy_mixed` for such data.
    """
    x = np.sort(np.asarray(x, dtype=np.float64))
    n = len(x)
    if n == 0:
        return float("nan")
    data = x.tolist()
    distances = np.array([kth_nearest(data, i, k).distance for i in range(n)])
    with np.errstate(divide="ignore"):
        log_distances = np.log(distances)
    return float(digamma(n) - digamma(k) + LOG_CD + np.mean(log_distances))


def differential_entropy_mixed(x, k: int = 3) -> float:
    """Variation of the Kozachenko-Leonenko estimator for mixtures of
    discrete and continuous distributions (W. Gao, S. Kannan, S. Oh and
    P. Viswanath, "Estimating mutual information for discrete-continuous
    mixtures", NeurIPS 2017): when a k-th nearest distance is zero the
    neighbourhood grows until the distance becomes positive, and the
    digamma term uses the number of neighbours actually walked.

    Returns:
        float: the entropy estimate, ``-inf`` when all values are equal.
    """
    x = np.sort(np.asarray(x, dtype=np.float64))
    n = len(x)
    if n == 0:
        return float("nan")
    data = x.tolist()
    terms = np.empty(n)
    for i in range(n):
        nn = kth_nearest_nonzero(data, i, k)
        if nn.distance == 0.0:
            # every value is the same
            return float("-inf")
        terms[i] = math.log(nn.distance) - digamma(nn.k)
    return float(digamma(n) + LOG_CD + np.mean(terms))
