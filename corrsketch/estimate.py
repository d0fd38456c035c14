from __future__ import annotations

import math

import numpy as np


class Estimate(object):
    """A correlation estimate and the number of paired samples it was
    computed from. A NaN value means the estimate is not computable (e.g.
    constant input or too few samples) and should be skipped."""

    __slots__ = ("value", "sample_size")

    def __init__(self, value: float, sample_size: int) -> None:
        self.value = float(value)
        self.sample_size = int(sample_size)

    @classmethod
    def nan(cls, sample_size: int = 0) -> Estimate:
        return cls(float("nan"), sample_size)

    def is_nan(self) -> bool:
        return math.isnan(self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Estimate):
            return False
        same = self.value == other.value or (self.is_nan() and other.is_nan())
        return same and self.sample_size == other.sample_size

    def __repr__(self) -> str:
        return "%s(value=%r, sample_size=%d)" % (
            type(self).__name__, self.value, self.sample_size)


class MIEstimate(Estimate):
    """A mutual information estimate (in nats) together with the entropies
    of both variables, used to normalize it.

    Attributes:
        ex (float): the entropy of x.
        ey (float): the entropy of y.
        nx (int): the number of distinct values of x (-1 if unknown).
        ny (int): the number of distinct values of y (-1 if unknown).
    """

    __slots__ = ("ex", "ey", "nx", "ny")

    def __init__(self, mi: float, sample_size: int, ex: float = float("nan"),
                 ey: float = float("nan"), nx: int = -1, ny: int = -1) -> None:
        super().__init__(mi, sample_size)
        self.ex = float(ex)
        self.ey = float(ey)
        self.nx = nx
        self.ny = ny

    def nmi_max(self) -> float:
        return nmi_max(self.value, self.ex, self.ey)

    def nmi_min(self) -> float:
        return nmi_min(self.value, self.ex, self.ey)

    def nmi_sqrt(self) -> float:
        return nmi_sqrt(self.value, self.ex, self.ey)

    def info_gain_ratio_x(self) -> float:
        return _div(self.value, self.ex)

    def info_gain_ratio_y(self) -> float:
        return _div(self.value, self.ey)


class BootstrapEstimate(Estimate):
    """Summary of a bootstrap distribution. `value` is the mean of the
    bootstrap replicates."""

    __slots__ = ("median", "lower", "upper")

    def __init__(self, mean: float, median: float, lower: float, upper: float,
                 sample_size: int) -> None:
        super().__init__(mean, sample_size)
        self.median = float(median)
        self.lower = float(lower)
        self.upper = float(upper)

    def __repr__(self) -> str:
        return "BootstrapEstimate(mean=%r, median=%r, ci=[%r, %r], sample_size=%d)" % (
            self.value, self.median, self.lower, self.upper, self.sample_size)


def _div(a: float, b: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(a) / np.float64(b))


def nmi_max(mi: float, ex: float, ey: float) -> float:
    return _div(mi, max(ex, ey))


def nmi_min(mi: float, ex: float, ey: float) -> float:
    return _div(mi, min(ex, ey))


def nmi_sqrt(mi: float, ex: float, ey: float) -> float:
    with np.errstate(invalid="ignore"):
        d = np.sqrt(np.float64(ex) * ey)
    return _div(mi, d)
