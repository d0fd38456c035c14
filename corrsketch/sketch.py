from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import Callable, Optional, Union

import numpy as np

from corrsketch.aggregations import AggregateFunction, DEFAULT_RESERVOIR_SIZE
from corrsketch.column import ColumnPair, ColumnType
from corrsketch.errors import InvalidInputError
from corrsketch.estimate import Estimate
from corrsketch.estimators import CorrelationType, Estimator
from corrsketch.hashfunc import sha1_hash32
from corrsketch.join import PairedSample, join
from corrsketch.kmv import (DEFAULT_K, FixedCount, FixedThreshold, MinValueSketch,
                            containment_ratio)

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLE_SIZE = 3


class SketchType(enum.Enum):
    """KMV keeps a fixed number of keys, GKMV keeps every key whose unit
    hash is below a fixed threshold."""

    KMV = "KMV"
    GKMV = "GKMV"


@dataclass(frozen=True)
class SketchConfig:
    """Parameters shared by the correlation sketches of a collection.

    Sketches are only comparable when built with the same `sketch_type`,
    `budget` and `hashfunc`.

    Args:
        sketch_type (SketchType): the synopsis kind.
        budget (float): the number of retained keys `k` for KMV (a positive
            integer), or the unit hash threshold `t` for GKMV (between 0 and 1).
        aggregate (AggregateFunction): how values of a repeated join key
            are combined.
        estimator (CorrelationType): the default estimator used by
            :meth:`CorrelationSketch.correlation_to`.
        min_sample_size (int): joins with fewer paired values yield a NaN
            estimate.
        reservoir_size (int): per-key sample size for
            :attr:`AggregateFunction.NONE`.
        seed (int): seed of the random state used for sampling.
        hashfunc (Callable): the join key hash function.
    """

    sketch_type: SketchType = SketchType.KMV
    budget: float = DEFAULT_K
    aggregate: AggregateFunction = AggregateFunction.FIRST
    estimator: CorrelationType = CorrelationType.PEARSON
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE
    reservoir_size: int = DEFAULT_RESERVOIR_SIZE
    seed: int = 1
    hashfunc: Callable = sha1_hash32

    def __post_init__(self) -> None:
        if not isinstance(self.sketch_type, SketchType):
            raise InvalidInputError("Invalid sketch type: %r" % (self.sketch_type,))
        if self.sketch_type is SketchType.KMV:
            if self.budget < 1 or int(self.budget) != self.budget:
                raise InvalidInputError(
                    "KMV budget must be a positive integer, got %r" % (self.budget,))
        elif not 0.0 <= self.budget <= 1.0:
            raise InvalidInputError(
                "GKMV budget must be between 0 and 1, got %r" % (self.budget,))
        if not isinstance(self.aggregate, AggregateFunction):
            raise InvalidInputError("Invalid aggregate function: %r" % (self.aggregate,))
        if not isinstance(self.estimator, CorrelationType):
            raise InvalidInputError("Invalid estimator: %r" % (self.estimator,))
        if self.min_sample_size < 2:
            raise InvalidInputError(
                "min_sample_size must be at least 2, got %d" % self.min_sample_size)
        if self.reservoir_size < 1:
            raise InvalidInputError(
                "reservoir_size must be positive, got %d" % self.reservoir_size)
        if not callable(self.hashfunc):
            raise InvalidInputError("The hashfunc must be a callable.")

    def new_sketch(self) -> MinValueSketch:
        if self.sketch_type is SketchType.KMV:
            policy = FixedCount(int(self.budget))
        else:
            policy = FixedThreshold(self.budget)
        return MinValueSketch(policy, aggregate=self.aggregate, hashfunc=self.hashfunc,
                              reservoir_size=self.reservoir_size, seed=self.seed)


def _as_estimator(estimator) -> Estimator:
    if isinstance(estimator, CorrelationType):
        return estimator.get()
    if isinstance(estimator, Estimator):
        return estimator
    raise InvalidInputError("Invalid estimator: %r" % (estimator,))


class CorrelationSketch(object):
    """A sketch of a (join key, value) column that can estimate the size of
    joins with other columns and the correlation of the joined values.

    Args:
        config (SketchConfig): the sketch parameters, the defaults when
            omitted.
        column_type (ColumnType): the type of the values.

    Example:

        .. code-block:: python

            from corrsketch import CorrelationSketch

            a = CorrelationSketch.from_keys(["a", "b", "c", "d"], [1, 2, 3, 4])
            b = CorrelationSketch.from_keys(["a", "b", "c", "z"], [2, 4, 6, 9])
            a.correlation_to(b).value
    """

    def __init__(self, config: Optional[SketchConfig] = None,
                 column_type: ColumnType = ColumnType.NUMERICAL) -> None:
        self.config = config if config is not None else SketchConfig()
        if not isinstance(column_type, ColumnType):
            raise InvalidInputError("Invalid column type: %r" % (column_type,))
        handler = self.config.aggregate.create(self.config.reservoir_size)
        if not handler.accepts(column_type):
            raise InvalidInputError("The %s aggregate function does not accept %s columns"
                                    % (self.config.aggregate.name, column_type.name))
        self.column_type = column_type
        # The type of the sketched values, e.g. COUNT turns any column numerical.
        self.output_type = handler.output_type(column_type)
        self.sketch = self.config.new_sketch()
        self._cardinality = None

    @classmethod
    def from_keys(cls, keys, values, column_type: ColumnType = ColumnType.NUMERICAL,
                  config: Optional[SketchConfig] = None) -> CorrelationSketch:
        """Build a sketch from the join keys and values of a column."""
        cs = cls(config, column_type)
        cs.update_batch(keys, values)
        return cs

    @classmethod
    def from_column_pair(cls, pair: ColumnPair,
                         config: Optional[SketchConfig] = None) -> CorrelationSketch:
        return cls.from_keys(pair.keys, pair.values, pair.value_type, config)

    def update(self, key: str, value: float) -> None:
        self.sketch.update(key, value)

    def update_batch(self, keys, values) -> None:
        self.sketch.update_batch(keys, values)

    def set_cardinality(self, cardinality: int) -> None:
        """Set the exact number of distinct keys of the column, reported by
        :meth:`cardinality` instead of the estimate."""
        self._cardinality = cardinality

    def cardinality(self) -> float:
        if self._cardinality is not None:
            return float(self._cardinality)
        return self.sketch.distinct_values()

    def union_size(self, other: CorrelationSketch) -> float:
        return self.sketch.union_size(other.sketch)

    def intersection_size(self, other: CorrelationSketch) -> float:
        return self.sketch.intersection_size(other.sketch)

    def jaccard(self, other: CorrelationSketch) -> float:
        return self.sketch.jaccard(other.sketch)

    def containment(self, other: CorrelationSketch) -> float:
        """Estimate the fraction of the keys of this column that also occur
        in the other."""
        return containment_ratio(self.intersection_size(other), self.cardinality())

    def join(self, other: CorrelationSketch) -> PairedSample:
        return self.freeze().join(other.freeze())

    def correlation_to(self, other: CorrelationSketch, estimator=None) -> Estimate:
        """Estimate the correlation of the values of this column and the
        other, paired by join key.

        Args:
            other (CorrelationSketch): the other column.
            estimator: a :class:`CorrelationType` or :class:`Estimator`
                overriding the configured estimator.

        Returns:
            Estimate: the estimate, NaN when fewer than `min_sample_size`
            keys are shared.
        """
        return self.freeze().correlation_to(other.freeze(), estimator)

    def freeze(self) -> FrozenCorrelationSketch:
        """Create a read-only copy holding the sampled keys and values
        sorted by key hash."""
        samples = self.sketch.samples()
        logger.debug("Freezing sketch with %d entries (%d samples)",
                     len(self.sketch), len(samples))
        return FrozenCorrelationSketch(samples.keys, samples.values, self.output_type,
                                       estimator=self.config.estimator,
                                       min_sample_size=self.config.min_sample_size)

    def __len__(self) -> int:
        return len(self.sketch)

    def __repr__(self) -> str:
        return "CorrelationSketch(config=%r, column_type=%s, output_type=%s, size=%d)" % (
            self.config, self.column_type.name, self.output_type.name, len(self))


class FrozenCorrelationSketch(object):
    """The read-only form of a :class:`CorrelationSketch`: key hashes sorted
    in ascending order and their values. It is what an index persists and
    what repeated joins should use.

    It has no `update()`. The minimal form ``{"key_hashes": [...],
    "values": [...]}`` produced by :meth:`to_dict` is enough to rebuild it.

    Args:
        key_hashes: the 32-bit key hashes.
        values: the value of each key hash.
        column_type (ColumnType): the type of the values.
        estimator: the default :class:`CorrelationType` or
            :class:`Estimator`.
        min_sample_size (int): joins with fewer paired values yield a NaN
            estimate.
    """

    __slots__ = ("key_hashes", "values", "column_type", "estimator", "min_sample_size")

    def __init__(self, key_hashes, values, column_type: ColumnType = ColumnType.NUMERICAL,
                 estimator: Union[CorrelationType, Estimator] = CorrelationType.PEARSON,
                 min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE) -> None:
        keys = np.asarray(key_hashes, dtype=np.int64)
        values = np.asarray(values, dtype=np.float64)
        if keys.ndim != 1 or values.ndim != 1 or len(keys) != len(values):
            raise InvalidInputError(
                "key_hashes and values must have same size. keys.size=[%d] values.size=[%d]"
                % (keys.size, values.size))
        if len(keys) and (keys.min() < 0 or keys.max() > 0xFFFFFFFF):
            raise InvalidInputError("key hashes must be unsigned 32-bit integers")
        if not isinstance(column_type, ColumnType):
            raise InvalidInputError("Invalid column type: %r" % (column_type,))
        if min_sample_size < 2:
            raise InvalidInputError(
                "min_sample_size must be at least 2, got %d" % min_sample_size)
        order = np.argsort(keys, kind="stable")
        self.key_hashes = keys[order].astype(np.uint32)
        self.values = values[order]
        self.column_type = column_type
        self.estimator = _as_estimator(estimator)
        self.min_sample_size = int(min_sample_size)

    def update(self, key, value):
        '''This method is not available on a FrozenCorrelationSketch.
        Calling it raises a TypeError.
        '''
        raise TypeError("Cannot update a FrozenCorrelationSketch")

    def join(self, other: FrozenCorrelationSketch) -> PairedSample:
        return join(self.key_hashes, self.values, other.key_hashes, other.values,
                    presorted=True)

    def correlation_to(self, other: FrozenCorrelationSketch, estimator=None) -> Estimate:
        estimator = self.estimator if estimator is None else _as_estimator(estimator)
        paired = self.join(other)
        if len(paired) < self.min_sample_size:
            return Estimate.nan(len(paired))
        return estimator.estimate(paired.x, paired.y, self.column_type, other.column_type)

    def to_dict(self) -> dict:
        """The minimal serializable form of the sketch."""
        return {
            "key_hashes": self.key_hashes.tolist(),
            "values": self.values.tolist(),
            "column_type": self.column_type.name,
        }

    @classmethod
    def from_dict(cls, d: dict, estimator=CorrelationType.PEARSON,
                  min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE) -> FrozenCorrelationSketch:
        """Rebuild a sketch from the output of :meth:`to_dict`. The column
        type is numerical when absent.

        Raises:
            InvalidInputError: if a field is missing or malformed.
        """
        try:
            key_hashes = d["key_hashes"]
            values = d["values"]
            column_type = ColumnType[d.get("column_type", ColumnType.NUMERICAL.name)]
        except (KeyError, TypeError) as e:
            raise InvalidInputError("Malformed serialized sketch: %r" % (e,))
        return cls(key_hashes, values, column_type, estimator, min_sample_size)

    def bytesize(self, byteorder='@') -> int:
        '''Compute the byte size after serialization.

        Args:
            byteorder (str, optional): This is byte order of the serialized data. Use one
                of the `byte order characters
                <https://docs.python.org/3/library/struct.html#byte-order-size-and-alignment>`_:
                ``@``, ``=``, ``<``, ``>``, and ``!``.
                Default is ``@``, the native order.
        Returns:
            int: Size in number of bytes after serialization.
        '''
        return struct.calcsize(self._format(len(self), byteorder))

    @staticmethod
    def _format(n: int, byteorder: str) -> str:
        return "%siii%dI%dd" % (byteorder, n, n)

    def serialize(self, buf, byteorder='@') -> None:
        '''
        Serialize this sketch and store the result in an allocated buffer.

        The serialization schema:
            1. 4 bytes for the column type
            2. 4 bytes for the minimum sample size
            3. 4 bytes for the number of key hashes
            4. the key hashes, each uses 4 bytes
            5. the values, each uses 8 bytes

        The estimator is not serialized.

        Example:
            .. code-block:: python

                buf = bytearray(frozen.bytesize())
                frozen.serialize(buf)
        '''
        if len(buf) < self.bytesize(byteorder):
            raise InvalidInputError("The buffer does not have enough space "
                                    "for holding this sketch.")
        n = len(self)
        struct.pack_into(self._format(n, byteorder), buf, 0,
                         self.column_type.value, self.min_sample_size, n,
                         *self.key_hashes.tolist(), *self.values.tolist())

    @classmethod
    def deserialize(cls, buf, byteorder='@',
                    estimator=CorrelationType.PEARSON) -> FrozenCorrelationSketch:
        '''
        Deserialize a sketch from a buffer written by :meth:`serialize`.

        Raises:
            InvalidInputError: if the buffer is truncated or malformed.
        '''
        try:
            n = struct.unpack_from("%siii" % byteorder, buf, 0)[2]
            fields = struct.unpack_from(cls._format(n, byteorder), buf, 0)
        except struct.error as e:
            raise InvalidInputError("Malformed serialized sketch: %s" % e)
        column_type, min_sample_size = fields[0], fields[1]
        key_hashes, values = fields[3:3 + n], fields[3 + n:]
        return cls(key_hashes, values, ColumnType.from_int(column_type), estimator,
                   min_sample_size)

    def __getstate__(self):
        buf = bytearray(self.bytesize())
        self.serialize(buf)
        return buf, self.estimator

    def __setstate__(self, state):
        buf, estimator = state
        other = FrozenCorrelationSketch.deserialize(buf, estimator=estimator)
        for name in self.__slots__:
            setattr(self, name, getattr(other, name))

    def __len__(self) -> int:
        return len(self.key_hashes)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FrozenCorrelationSketch) and \
            self.column_type is other.column_type and \
            np.array_equal(self.key_hashes, other.key_hashes) and \
            np.array_equal(self.values, other.values)

    __hash__ = None

    def __repr__(self) -> str:
        return "FrozenCorrelationSketch(size=%d, column_type=%s, estimator=%r)" % (
            len(self), self.column_type.name, self.estimator)
