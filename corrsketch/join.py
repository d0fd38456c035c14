from __future__ import annotations

from collections import defaultdict
from typing import Callable, Iterable

import numpy as np

from corrsketch.aggregations import AggregateFunction
from corrsketch.errors import InvalidInputError
from corrsketch.hashfunc import hash_key, sha1_hash32


class PairedSample(object):
    """Values of two columns paired by join key, sorted by key hash.

    Attributes:
        keys (numpy.ndarray): the shared key hashes.
        x (numpy.ndarray): values of the first column.
        y (numpy.ndarray): values of the second column.
    """

    __slots__ = ("keys", "x", "y")

    def __init__(self, keys, x, y) -> None:
        self.keys = np.asarray(keys, dtype=np.uint32)
        self.x = np.asarray(x, dtype=np.float64)
        self.y = np.asarray(y, dtype=np.float64)
        if not (len(self.keys) == len(self.x) == len(self.y)):
            raise InvalidInputError("keys, x and y must have the same length")

    def __len__(self) -> int:
        return len(self.keys)

    def __repr__(self) -> str:
        return "PairedSample(keys=%r, x=%r, y=%r)" % (
            self.keys.tolist(), self.x.tolist(), self.y.tolist())


def _sorted_by_key(keys, values):
    keys = np.asarray(keys, dtype=np.uint32)
    values = np.asarray(values, dtype=np.float64)
    if len(keys) != len(values):
        raise InvalidInputError(
            "keys and values must have same size. keys.size=[%d] values.size=[%d]"
            % (len(keys), len(values)))
    order = np.argsort(keys, kind="stable")
    return keys[order], values[order]


def join(a_keys, a_values, b_keys, b_values, presorted: bool = False) -> PairedSample:
    """Pair the values of two sketches that share a key hash.

    Both inputs are merged in key hash order. A key hash repeated on either
    side (sketches that keep several sampled values per key) yields every
    combination of its values.

    Args:
        a_keys: key hashes of the first sketch.
        a_values: values of the first sketch.
        b_keys: key hashes of the second sketch.
        b_values: values of the second sketch.
        presorted (bool): skip sorting when both inputs are already sorted
            by key hash.

    Returns:
        PairedSample: the paired values, empty when no key is shared.
    """
    if presorted:
        a_keys = np.asarray(a_keys, dtype=np.uint32)
        b_keys = np.asarray(b_keys, dtype=np.uint32)
        a_values = np.asarray(a_values, dtype=np.float64)
        b_values = np.asarray(b_values, dtype=np.float64)
    else:
        a_keys, a_values = _sorted_by_key(a_keys, a_values)
        b_keys, b_values = _sorted_by_key(b_keys, b_values)
    ak = a_keys.tolist()
    bk = b_keys.tolist()
    keys, x, y = [], [], []
    i, j = 0, 0
    n, m = len(ak), len(bk)
    while i < n and j < m:
        if ak[i] < bk[j]:
            i += 1
        elif ak[i] > bk[j]:
            j += 1
        else:
            key = ak[i]
            i_end = i
            while i_end < n and ak[i_end] == key:
                i_end += 1
            j_end = j
            while j_end < m and bk[j_end] == key:
                j_end += 1
            for ii in range(i, i_end):
                for jj in range(j, j_end):
                    keys.append(key)
                    x.append(a_values[ii])
                    y.append(b_values[jj])
            i, j = i_end, j_end
    return PairedSample(keys, x, y)


def _aggregate_by_key(keys: Iterable[str], values, aggregate: AggregateFunction,
                      hashfunc: Callable):
    grouped = defaultdict(list)
    for key, value in zip(keys, values):
        if key is None or len(key) == 0:
            continue
        grouped[hash_key(key, hashfunc)].append(value)
    hashes = np.fromiter(grouped.keys(), dtype=np.uint32, count=len(grouped))
    aggregated = np.fromiter((aggregate.aggregate(v) for v in grouped.values()),
                             dtype=np.float64, count=len(grouped))
    return hashes, aggregated


def exact_join(
    x_keys,
    x_values,
    y_keys,
    y_values,
    x_aggregate: AggregateFunction = AggregateFunction.FIRST,
    y_aggregate: AggregateFunction = AggregateFunction.FIRST,
    hashfunc: Callable = sha1_hash32,
) -> PairedSample:
    """Compute the full join of two columns after aggregating each of them by
    join key. This is the ground truth that sketch estimates approximate, so
    it hashes keys and aggregates values exactly the way sketches do.

    Raises:
        InvalidInputError: if keys and values differ in length, or an
            aggregate function is NONE.
    """
    if len(x_keys) != len(x_values) or len(y_keys) != len(y_values):
        raise InvalidInputError("keys and values must have same size")
    xk, xv = _aggregate_by_key(x_keys, x_values, x_aggregate, hashfunc)
    yk, yv = _aggregate_by_key(y_keys, y_values, y_aggregate, hashfunc)
    return join(xk, xv, yk, yv)
