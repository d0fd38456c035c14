"""Correlation estimators that can be plugged into a correlation sketch.

Every estimator handles some of the four combinations of column types. The
combination of a pair of columns is resolved through a closed table, so a
pair that an estimator does not implement fails with
:class:`corrsketch.errors.UnsupportedCombinationError` before anything is
computed.
"""
from __future__ import annotations

import enum

import numpy as np

from corrsketch import bootstrap, chatterjee, kendall, mutual_info, pearson, qn, rin, spearman
from corrsketch.column import ColumnType
from corrsketch.errors import InvalidInputError, UnsupportedCombinationError
from corrsketch.estimate import Estimate

_dispatch = {
    (ColumnType.NUMERICAL, ColumnType.NUMERICAL): "numerical",
    (ColumnType.CATEGORICAL, ColumnType.CATEGORICAL): "categorical",
    (ColumnType.CATEGORICAL, ColumnType.NUMERICAL): "categorical_numerical",
    (ColumnType.NUMERICAL, ColumnType.CATEGORICAL): "numerical_categorical",
}


class Estimator(object):
    """Base class of the estimators. Subclasses override the methods of the
    column type combinations they support; the others raise
    :class:`UnsupportedCombinationError`.
    """

    name = "estimator"

    def _unsupported(self, x_type: ColumnType, y_type: ColumnType):
        raise UnsupportedCombinationError(
            "%s does not support %s x %s columns" % (self.name, x_type.name, y_type.name))

    def numerical(self, x, y) -> Estimate:
        self._unsupported(ColumnType.NUMERICAL, ColumnType.NUMERICAL)

    def categorical(self, x, y) -> Estimate:
        self._unsupported(ColumnType.CATEGORICAL, ColumnType.CATEGORICAL)

    def categorical_numerical(self, x, y) -> Estimate:
        self._unsupported(ColumnType.CATEGORICAL, ColumnType.NUMERICAL)

    def numerical_categorical(self, x, y) -> Estimate:
        self._unsupported(ColumnType.NUMERICAL, ColumnType.CATEGORICAL)

    def supports(self, x_type: ColumnType, y_type: ColumnType) -> bool:
        method = _dispatch.get((x_type, y_type))
        return method is not None and \
            getattr(type(self), method) is not getattr(Estimator, method)

    def estimate(self, x, y, x_type: ColumnType = ColumnType.NUMERICAL,
                 y_type: ColumnType = ColumnType.NUMERICAL) -> Estimate:
        """Estimate the correlation of the paired vectors `x` and `y`.

        Raises:
            InvalidInputError: if the vectors differ in length or a type is
                not a :class:`ColumnType`.
            UnsupportedCombinationError: if the estimator does not handle the
                given pair of column types.
        """
        method = _dispatch.get((x_type, y_type))
        if method is None:
            raise InvalidInputError("Unknown column types: %r, %r" % (x_type, y_type))
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if len(x) != len(y):
            raise InvalidInputError(
                "x and y must have same size. x.size=[%d] y.size=[%d]" % (len(x), len(y)))
        return getattr(self, method)(x, y)

    def __repr__(self) -> str:
        return "%s()" % type(self).__name__


class PearsonEstimator(Estimator):

    name = "pearson"

    def numerical(self, x, y) -> Estimate:
        return pearson.estimate(x, y)


class SpearmanEstimator(Estimator):

    name = "spearman"

    def numerical(self, x, y) -> Estimate:
        return spearman.estimate(x, y)


class QnEstimator(Estimator):

    name = "robust_qn"

    def numerical(self, x, y) -> Estimate:
        return qn.estimate(x, y)


class KendallEstimator(Estimator):

    name = "kendall"

    def numerical(self, x, y) -> Estimate:
        return kendall.estimate(x, y)


class RinEstimator(Estimator):

    name = "rin"

    def numerical(self, x, y) -> Estimate:
        return rin.estimate(x, y)


class ChatterjeeEstimator(Estimator):
    """Chatterjee's xi. Ties in `x` are broken with a random state seeded
    with `seed` on every call."""

    name = "chatterjee"

    def __init__(self, seed: int = 1) -> None:
        self.seed = seed

    def numerical(self, x, y) -> Estimate:
        return chatterjee.estimate(x, y, np.random.RandomState(self.seed))

    def __repr__(self) -> str:
        return "ChatterjeeEstimator(seed=%r)" % self.seed


class BootstrapPearsonEstimator(Estimator):
    """Bootstrap estimate of Pearson's correlation. A new random state is
    seeded with `seed` on every call, so repeated calls on the same data
    return the same estimate."""

    name = "bootstrap_pearson"

    def __init__(self, num_samples: int = bootstrap.DEFAULT_NUM_SAMPLES,
                 alpha: float = 0.05, seed: int = 1) -> None:
        self.num_samples = num_samples
        self.alpha = alpha
        self.seed = seed

    def numerical(self, x, y) -> Estimate:
        return bootstrap.estimate(x, y, self.num_samples, self.alpha,
                                  np.random.RandomState(self.seed))

    def __repr__(self) -> str:
        return "BootstrapPearsonEstimator(num_samples=%d, alpha=%r, seed=%r)" % (
            self.num_samples, self.alpha, self.seed)


class MutualInformationEstimator(Estimator):
    """Mutual information for every combination of column types: MLE for
    two categorical columns, mixed KSG for two numerical columns and Ross'
    estimator when the types differ.

    Args:
        k (int): the number of nearest neighbours of the KSG and Ross'
            estimators.
    """

    name = "mutual_information"

    def __init__(self, k: int = mutual_info.DEFAULT_K) -> None:
        self.k = k

    def numerical(self, x, y) -> Estimate:
        return mutual_info.ksg_estimate(x, y, self.k)

    def categorical(self, x, y) -> Estimate:
        return mutual_info.mle(x, y)

    def categorical_numerical(self, x, y) -> Estimate:
        return mutual_info.dc_estimate(x, y, self.k)

    def numerical_categorical(self, x, y) -> Estimate:
        e = mutual_info.dc_estimate(y, x, self.k)
        e.ex, e.ey = e.ey, e.ex
        e.nx, e.ny = e.ny, e.nx
        return e


class NormalizedMutualInformationEstimator(Estimator):
    """Mutual information of two categorical columns divided by a function
    of their entropies.

    Args:
        normalization (str): one of ``"sqrt"``, ``"max"`` or ``"min"``.
    """

    _normalizations = ("sqrt", "max", "min")

    def __init__(self, normalization: str = "sqrt") -> None:
        if normalization not in self._normalizations:
            raise InvalidInputError("Unknown normalization: %r" % normalization)
        self.normalization = normalization
        self.name = "nmi_" + normalization

    def categorical(self, x, y) -> Estimate:
        mi = mutual_info.mle(x, y)
        value = getattr(mi, "nmi_" + self.normalization)()
        return Estimate(value, mi.sample_size)

    def __repr__(self) -> str:
        return "NormalizedMutualInformationEstimator(%r)" % self.normalization


class CorrelationType(enum.Enum):
    """The estimators available to a correlation sketch."""

    PEARSON = "pearson"
    SPEARMAN = "spearman"
    ROBUST_QN = "robust_qn"
    KENDALL = "kendall"
    RIN = "rin"
    CHATTERJEE = "chatterjee"
    BOOTSTRAP_PEARSON = "bootstrap_pearson"
    MUTUAL_INFORMATION = "mutual_information"
    NMI_SQRT = "nmi_sqrt"
    NMI_MAX = "nmi_max"
    NMI_MIN = "nmi_min"

    def get(self) -> Estimator:
        """Create the estimator of this type with default parameters."""
        if self is CorrelationType.PEARSON:
            return PearsonEstimator()
        if self is CorrelationType.SPEARMAN:
            return SpearmanEstimator()
        if self is CorrelationType.ROBUST_QN:
            return QnEstimator()
        if self is CorrelationType.KENDALL:
            return KendallEstimator()
        if self is CorrelationType.RIN:
            return RinEstimator()
        if self is CorrelationType.CHATTERJEE:
            return ChatterjeeEstimator()
        if self is CorrelationType.BOOTSTRAP_PEARSON:
            return BootstrapPearsonEstimator()
        if self is CorrelationType.MUTUAL_INFORMATION:
            return MutualInformationEstimator()
        return NormalizedMutualInformationEstimator(self.value[len("nmi_"):])
