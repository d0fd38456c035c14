from __future__ import annotations

import heapq
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from corrsketch.aggregations import AggregateFunction, DEFAULT_RESERVOIR_SIZE
from corrsketch.errors import EmptySynopsisError, InvalidInputError, SketchStateError
from corrsketch.hashfunc import hash_key, sha1_hash32, unit_hash

DEFAULT_K = 256
DEFAULT_THRESHOLD = 0.1


class ValueHash(object):
    """A retained sketch entry: the hash of a join key, its unit hash and the
    handler holding the value(s) associated with the key.

    Args:
        key_hash (int): the 32-bit hash of the join key.
        unit_hash (float): the key hash mapped into [0, 1).
        value (float): the first value seen for the key.
        handler: the repeated value handler, see
            :meth:`corrsketch.aggregations.AggregateFunction.create`.
    """

    __slots__ = ("key_hash", "unit_hash", "handler", "count")

    def __init__(self, key_hash: int, unit_hash: float, value: float, handler) -> None:
        self.key_hash = key_hash
        self.unit_hash = unit_hash
        self.handler = handler
        self.handler.first(value)
        # the number of rows seen for this join key
        self.count = 1

    def update(self, value: float) -> None:
        self.handler.update(value)
        self.count += 1

    @property
    def value(self) -> float:
        return self.handler.aggregated_value()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ValueHash) and self.key_hash == other.key_hash

    def __hash__(self) -> int:
        return self.key_hash

    def __repr__(self) -> str:
        return "ValueHash(key_hash=%d, unit_hash=%f, count=%d)" % (
            self.key_hash, self.unit_hash, self.count)


class FixedCount(object):
    """Admission policy of the KMV synopsis (Beyer et al., "On synopses for
    distinct-value estimation under multiset operations", SIGMOD 2007):
    retain the `k` keys with the smallest unit hashes.

    Args:
        k (int): the maximum number of retained keys.
    """

    name = "KMV"

    def __init__(self, k: int = DEFAULT_K) -> None:
        if k < 1:
            raise InvalidInputError("Minimum k size is 1, but larger is recommended.")
        self.k = int(k)

    def admits(self, unit_hash: float, size: int, threshold: float) -> bool:
        return size < self.k or unit_hash < threshold

    def capacity(self) -> Optional[int]:
        return self.k

    def sample_budget(self, size: int) -> int:
        return self.k

    def union_parameters(self, a: MinValueSketch, b: MinValueSketch) -> Tuple[int, float]:
        """Returns the `k` used by the set estimators and the k-th smallest
        unit hash of the union of both synopses."""
        k = min(len(a), len(b))
        union = dict(a._entries)
        union.update(b._entries)
        unit = np.fromiter((vh.unit_hash for vh in union.values()),
                           dtype=np.float64, count=len(union))
        kth = np.partition(unit, k - 1)[k - 1]
        return k, float(kth)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FixedCount) and self.k == other.k

    def __repr__(self) -> str:
        return "FixedCount(k=%d)" % self.k


class FixedThreshold(object):
    """Admission policy of the GKMV synopsis (Yang et al., "GB-KMV: An
    augmented KMV sketch for approximate containment similarity search",
    ICDE 2019): retain every key whose unit hash is at most `t`. The number of
    retained keys is unbounded and grows with the number of distinct keys.

    Args:
        t (float): the unit hash threshold, between 0 and 1.
    """

    name = "GKMV"

    def __init__(self, t: float = DEFAULT_THRESHOLD) -> None:
        if t < 0.0 or t > 1.0:
            raise InvalidInputError("GKMV threshold (t=%f) must be between 0 and 1." % t)
        self.t = float(t)

    def admits(self, unit_hash: float, size: int, threshold: float) -> bool:
        return unit_hash <= self.t

    def capacity(self) -> Optional[int]:
        return None

    def sample_budget(self, size: int) -> int:
        return size

    def union_parameters(self, a: MinValueSketch, b: MinValueSketch) -> Tuple[int, float]:
        # All retained keys of both synopses take part in the union, so the
        # k-th value is the largest of the two thresholds.
        k = len(a._entries.keys() | b._entries.keys())
        return k, max(a.threshold, b.threshold)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FixedThreshold) and self.t == other.t

    def __repr__(self) -> str:
        return "FixedThreshold(t=%f)" % self.t


class Samples(object):
    """Key hashes and values extracted from a sketch, ordered by unit hash.

    `unique_keys` is False when the sketch keeps several sampled values per
    key, in which case a key hash is repeated once per value.
    """

    __slots__ = ("keys", "values", "unique_keys")

    def __init__(self, keys: np.ndarray, values: np.ndarray, unique_keys: bool) -> None:
        self.keys = keys
        self.values = values
        self.unique_keys = unique_keys

    def __len__(self) -> int:
        return len(self.keys)


class MinValueSketch(object):
    """A bounded-memory synopsis of a stream of (join key, value) rows.

    The sketch retains the keys with the smallest unit hashes, as decided by
    its admission policy (:class:`FixedCount` for KMV, :class:`FixedThreshold`
    for GKMV), together with the values of the rows holding those keys.
    Values of rows that repeat a retained key are combined by the handler of
    the configured :class:`corrsketch.aggregations.AggregateFunction`.

    Args:
        policy: the admission policy, :class:`FixedCount` or
            :class:`FixedThreshold`.
        aggregate (AggregateFunction): how values of a repeated key are
            combined.
        hashfunc (Callable): the hash function used for join keys. It takes
            bytes and returns an integer that can be encoded with 32 bits.
        reservoir_size (int): per-key sample size used when `aggregate` is
            :attr:`AggregateFunction.NONE`.
        seed (int): the seed of the random state used by reservoir sampling
            and by :meth:`samples`.

    Example:

        .. code-block:: python

            from corrsketch.kmv import MinValueSketch

            sk = MinValueSketch.kmv(k=128)
            sk.update_batch(["a", "b", "c"], [1.0, 2.0, 3.0])
            sk.distinct_values()
    """

    def __init__(
        self,
        policy=None,
        aggregate: AggregateFunction = AggregateFunction.FIRST,
        hashfunc: Callable = sha1_hash32,
        reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
        seed: int = 1,
    ) -> None:
        if not callable(hashfunc):
            raise InvalidInputError("The hashfunc must be a callable.")
        self.policy = policy if policy is not None else FixedCount()
        self.aggregate = aggregate
        self.hashfunc = hashfunc
        self.reservoir_size = reservoir_size
        self.seed = seed
        self._random_state = np.random.RandomState(seed)
        self._entries: Dict[int, ValueHash] = {}
        # Max-heap (through negated unit hashes) of the retained entries,
        # the top is the eviction candidate.
        self._heap: List[Tuple[float, int]] = []
        self.threshold = 0.0
        self.seen_items = 0
        self.retained_item_weight = 0

    @classmethod
    def kmv(cls, k: int = DEFAULT_K, **kwargs) -> MinValueSketch:
        return cls(FixedCount(k), **kwargs)

    @classmethod
    def gkmv(cls, t: float = DEFAULT_THRESHOLD, **kwargs) -> MinValueSketch:
        return cls(FixedThreshold(t), **kwargs)

    def update(self, key: str, value: float) -> None:
        """Update the sketch with a row. Empty keys are ignored.

        Args:
            key (str): the join key.
            value (float): the value of the row.
        """
        if key is None or len(key) == 0:
            return
        self.update_hashed(hash_key(key, self.hashfunc), value)

    def update_hashed(self, key_hash: int, value: float) -> None:
        """Update the sketch with a row whose join key was already hashed."""
        self.seen_items += 1
        vh = self._entries.get(key_hash)
        if vh is not None:
            vh.update(value)
            self.retained_item_weight += 1
            return
        hu = unit_hash(key_hash)
        if not self.policy.admits(hu, len(self._entries), self.threshold):
            return
        handler = self.aggregate.create(self.reservoir_size, self._random_state)
        vh = ValueHash(key_hash, hu, value, handler)
        self._entries[key_hash] = vh
        heapq.heappush(self._heap, (-hu, key_hash))
        self.retained_item_weight += 1
        capacity = self.policy.capacity()
        if capacity is not None and len(self._entries) > capacity:
            self._evict()
            if len(self._entries) > capacity:
                raise SketchStateError(
                    "Sketch holds %d entries, capacity is %d" % (len(self._entries), capacity))
            self.threshold = -self._heap[0][0]
        elif hu > self.threshold:
            self.threshold = hu

    def _evict(self) -> None:
        _, key_hash = heapq.heappop(self._heap)
        evicted = self._entries.pop(key_hash)
        self.retained_item_weight -= evicted.count

    def update_batch(self, keys: Iterable[str], values: Iterable[float]) -> None:
        """Update the sketch with the rows of a column.

        Raises:
            InvalidInputError: if `keys` and `values` differ in length.
        """
        keys = list(keys)
        values = np.asarray(values, dtype=np.float64)
        if len(keys) != len(values):
            raise InvalidInputError(
                "keys and values must have equal size. keys.size=[%d] values.size=[%d]"
                % (len(keys), len(values)))
        for key, value in zip(keys, values):
            self.update(key, float(value))

    def update_hashed_batch(self, hashes: Iterable[int], values: Iterable[float]) -> None:
        """Update the sketch with pre-computed key hashes and their values.

        Raises:
            InvalidInputError: if `hashes` and `values` differ in length.
        """
        hashes = np.asarray(hashes, dtype=np.uint32)
        values = np.asarray(values, dtype=np.float64)
        if len(hashes) != len(values):
            raise InvalidInputError(
                "hashedKeys and values must have equal size. hashes.size=[%d] values.size=[%d]"
                % (len(hashes), len(values)))
        for h, value in zip(hashes.tolist(), values.tolist()):
            self.update_hashed(h, value)

    def distinct_values(self) -> float:
        """The unbiased distinct value estimator (UB) from Beyer et al.,
        SIGMOD 2007: (n - 1) / threshold.

        Returns:
            float: the estimated number of distinct keys, 0 for an empty sketch.
        """
        if not self._entries:
            return 0.0
        return (len(self._entries) - 1.0) / self.threshold

    def distinct_values_be(self) -> float:
        """The basic (biased) distinct value estimator (BE): n / threshold."""
        if not self._entries:
            return 0.0
        return len(self._entries) / self.threshold

    def _check_compatible(self, other: MinValueSketch) -> None:
        if type(self.policy) is not type(other.policy):
            raise InvalidInputError(
                "Cannot compare a %s synopsis with a %s synopsis"
                % (self.policy.name, other.policy.name))
        if not self._entries or not other._entries:
            raise EmptySynopsisError(
                "Can not compute estimates on empty synopsis. x.size=[%d] y.size=[%d]"
                % (len(self), len(other)))

    def _intersection_count(self, other: MinValueSketch) -> int:
        return len(self._entries.keys() & other._entries.keys())

    def union_size(self, other: MinValueSketch) -> float:
        """Estimate the number of distinct keys in the union of the sets
        represented by this sketch and the other: (k - 1) / kth.

        Raises:
            EmptySynopsisError: if either sketch is empty.
        """
        self._check_compatible(other)
        k, kth = self.policy.union_parameters(self, other)
        return (k - 1) / kth

    def jaccard(self, other: MinValueSketch) -> float:
        """Estimate the Jaccard similarity using the p = K_e / k estimator
        from Beyer et al. (2007)."""
        self._check_compatible(other)
        k, _ = self.policy.union_parameters(self, other)
        return self._intersection_count(other) / float(k)

    def intersection_size(self, other: MinValueSketch) -> float:
        """Estimate the number of keys shared by the sets represented by this
        sketch and the other."""
        self._check_compatible(other)
        k, kth = self.policy.union_parameters(self, other)
        # p is an unbiased estimate of the Jaccard similarity
        p = self._intersection_count(other) / float(k)
        return p * (k - 1) / kth

    def containment(self, other: MinValueSketch) -> float:
        """Estimate the Jaccard containment of this set in the other:
        |this ∩ other| / |this|, clipped to [0, 1].

        Returns:
            float: the containment, NaN when this sketch holds a single key.
        """
        return containment_ratio(self.intersection_size(other), self.distinct_values())

    def entries(self) -> List[ValueHash]:
        """The retained entries sorted by unit hash ascending."""
        return sorted(self._entries.values(), key=lambda vh: vh.unit_hash)

    def samples(self) -> Samples:
        """Extract the retained keys and their values.

        When the aggregate function collapses each key into one value the
        result has unique keys. Otherwise, for every retained key
        ``n = max(1, floor(count / seen_items * k))`` values are drawn from
        its reservoir, so that keys repeated more often in the stream are
        represented by more values.
        """
        entries = self.entries()
        if self.aggregate.is_aggregator:
            keys = np.fromiter((vh.key_hash for vh in entries), dtype=np.uint32,
                               count=len(entries))
            values = np.fromiter((vh.value for vh in entries), dtype=np.float64,
                                 count=len(entries))
            return Samples(keys, values, True)
        rng = np.random.RandomState(self.seed)
        budget = self.policy.sample_budget(len(entries))
        keys, values = [], []
        for vh in entries:
            weight = vh.count / float(self.seen_items)
            n = max(1, int(np.floor(weight * budget)))
            reservoir = vh.handler.values()
            drawn = rng.choice(reservoir, size=n, replace=n > len(reservoir))
            keys.extend([vh.key_hash] * n)
            values.extend(drawn.tolist())
        return Samples(np.asarray(keys, dtype=np.uint32),
                       np.asarray(values, dtype=np.float64), False)

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key_hash: int) -> bool:
        return key_hash in self._entries

    def __repr__(self) -> str:
        return "MinValueSketch(policy=%r, size=%d, threshold=%f)" % (
            self.policy, len(self), self.threshold)


def containment_ratio(intersection: float, cardinality: float) -> float:
    """Divide an intersection size estimate by a cardinality, clipping the
    result to [0, 1]. NaN when the cardinality is zero."""
    if cardinality == 0:
        return float("nan")
    return min(1.0, max(0.0, intersection / cardinality))
