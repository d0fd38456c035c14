"""Strategies for combining the values of rows that share a join key.

A sketch keeps one handler per retained join key. The first value seen for a
key is passed to :meth:`first`, and every following value for the same key to
:meth:`update`. Aggregators collapse all values into a single number, while
the reservoir sampler used by :attr:`AggregateFunction.NONE` keeps a bounded
uniform sample of them.
"""
from __future__ import annotations

import enum
from collections import Counter
from typing import List, Optional

import numpy as np

from corrsketch.column import ColumnType
from corrsketch.errors import InvalidInputError

DEFAULT_RESERVOIR_SIZE = 256


class _Aggregator(object):

    is_aggregator = True

    def __init__(self) -> None:
        self.previous = 0.0

    def first(self, value: float) -> None:
        self.previous = value

    def update(self, value: float) -> None:
        raise NotImplementedError

    def aggregated_value(self) -> float:
        return self.previous

    def values(self) -> List[float]:
        return [self.aggregated_value()]

    def output_type(self, column_type: ColumnType) -> ColumnType:
        return ColumnType.NUMERICAL

    def accepts(self, column_type: ColumnType) -> bool:
        return column_type == ColumnType.NUMERICAL


class _SameTypeAggregator(_Aggregator):
    """Aggregators whose output is one of the input values."""

    def output_type(self, column_type: ColumnType) -> ColumnType:
        return column_type

    def accepts(self, column_type: ColumnType) -> bool:
        return True


class FirstAggregator(_SameTypeAggregator):
    def update(self, value: float) -> None:
        pass


class LastAggregator(_SameTypeAggregator):
    def update(self, value: float) -> None:
        self.previous = value


class MaxAggregator(_Aggregator):
    def update(self, value: float) -> None:
        self.previous = max(self.previous, value)


class MinAggregator(_Aggregator):
    def update(self, value: float) -> None:
        self.previous = min(self.previous, value)


class SumAggregator(_Aggregator):
    def update(self, value: float) -> None:
        self.previous += value


class MeanAggregator(_Aggregator):
    def __init__(self) -> None:
        super().__init__()
        self.n = 1

    def update(self, value: float) -> None:
        self.n += 1
        self.previous += (value - self.previous) / self.n


class CountAggregator(_Aggregator):
    """Counts the rows of a key. Rows of any column type can be counted."""

    def __init__(self) -> None:
        super().__init__()
        self.count = 0

    def first(self, value: float) -> None:
        self.count += 1

    def update(self, value: float) -> None:
        self.count += 1

    def aggregated_value(self) -> float:
        return float(self.count)

    def accepts(self, column_type: ColumnType) -> bool:
        return True


class MostFrequentAggregator(_SameTypeAggregator):
    """Keeps the most frequent categorical code. Ties go to the code seen
    first."""

    def __init__(self) -> None:
        super().__init__()
        self.counts = Counter()

    def first(self, value: float) -> None:
        self.update(value)

    def update(self, value: float) -> None:
        self.counts[int(value)] += 1

    def aggregated_value(self) -> float:
        return float(self.counts.most_common(1)[0][0])

    def accepts(self, column_type: ColumnType) -> bool:
        return column_type == ColumnType.CATEGORICAL


class ReservoirSampler(object):
    """Bounded uniform sample of the values seen for one key
    (reservoir sampling, Vitter's algorithm R).

    Args:
        size (int): the maximum number of values kept.
        random_state (numpy.random.RandomState): the source of randomness.
            Sharing one random state among the samplers of a sketch keeps
            results reproducible for a fixed input order.
    """

    is_aggregator = False

    def __init__(self, size: int = DEFAULT_RESERVOIR_SIZE,
                 random_state: Optional[np.random.RandomState] = None) -> None:
        if size < 1:
            raise InvalidInputError("Reservoir size must be at least 1, got %d" % size)
        self.size = size
        self.random_state = random_state if random_state is not None \
            else np.random.RandomState(1)
        self.reservoir = []
        self.seen = 0

    def first(self, value: float) -> None:
        self.update(value)

    def update(self, value: float) -> None:
        if len(self.reservoir) < self.size:
            self.reservoir.append(value)
        else:
            i = self.random_state.randint(0, self.seen + 1)
            if i < self.size:
                self.reservoir[i] = value
        self.seen += 1

    def aggregated_value(self) -> float:
        raise TypeError("A reservoir sampler does not aggregate values")

    def values(self) -> List[float]:
        return self.reservoir

    def output_type(self, column_type: ColumnType) -> ColumnType:
        return column_type

    def accepts(self, column_type: ColumnType) -> bool:
        return True


_handlers = {
    "first": FirstAggregator,
    "last": LastAggregator,
    "max": MaxAggregator,
    "min": MinAggregator,
    "sum": SumAggregator,
    "mean": MeanAggregator,
    "count": CountAggregator,
    "most_frequent": MostFrequentAggregator,
}


class AggregateFunction(enum.Enum):
    """How repeated values of the same join key are combined."""

    FIRST = "first"
    LAST = "last"
    MAX = "max"
    MIN = "min"
    SUM = "sum"
    MEAN = "mean"
    COUNT = "count"
    MOST_FREQUENT = "most_frequent"
    NONE = "none"

    @classmethod
    def all(cls) -> List[AggregateFunction]:
        """The aggregate functions applicable to numerical columns."""
        return [cls.FIRST, cls.LAST, cls.MAX, cls.MIN, cls.SUM, cls.MEAN, cls.COUNT]

    @property
    def is_aggregator(self) -> bool:
        return self is not AggregateFunction.NONE

    def create(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
               random_state: Optional[np.random.RandomState] = None):
        """Create a new handler for one join key.

        Args:
            reservoir_size (int): only used by :attr:`NONE`.
            random_state (numpy.random.RandomState): only used by :attr:`NONE`.
        """
        if self is AggregateFunction.NONE:
            return ReservoirSampler(reservoir_size, random_state)
        return _handlers[self.value]()

    def aggregate(self, values) -> float:
        """Fold an array of values into one, with the same semantics used
        inside sketches.

        Raises:
            InvalidInputError: if `values` is empty or the function is NONE.
        """
        if self is AggregateFunction.NONE:
            raise InvalidInputError("NONE does not aggregate values")
        if len(values) == 0:
            raise InvalidInputError("Cannot aggregate an empty array")
        handler = self.create()
        handler.first(float(values[0]))
        for v in values[1:]:
            handler.update(float(v))
        return handler.aggregated_value()
