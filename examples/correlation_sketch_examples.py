'''
Some examples for CorrelationSketch
'''

from dataclasses import replace

import numpy as np

from corrsketch import (AggregateFunction, ColumnPair, ColumnType, CorrelationSketch,
                        CorrelationType, FrozenCorrelationSketch, SketchConfig, SketchType)
from corrsketch.join import exact_join
from corrsketch import pearson

rng = np.random.RandomState(42)
n = 5000
keys = ["key-%d" % i for i in range(n)]
x = rng.normal(size=n)
y = 2.0 * x + rng.normal(scale=0.5, size=n)


def eg1():
    a = CorrelationSketch.from_keys(keys, x)
    b = CorrelationSketch.from_keys(keys[n // 2:], y[n // 2:])
    print("Estimated cardinality of a:", a.cardinality(), "actual:", n)
    print("Estimated Jaccard:", a.jaccard(b), "actual:", 0.5)
    print("Estimated containment of b in a:", b.containment(a), "actual:", 1.0)

    estimate = a.correlation_to(b)
    truth = exact_join(keys, x, keys[n // 2:], y[n // 2:])
    print("Estimated Pearson:", estimate.value, "from", estimate.sample_size, "samples")
    print("Actual Pearson:", pearson.coefficient(truth.x, truth.y))


def eg2():
    # Categorical columns paired by a key with repeated values
    config = SketchConfig(sketch_type=SketchType.GKMV, budget=0.2,
                          aggregate=AggregateFunction.MOST_FREQUENT,
                          estimator=CorrelationType.MUTUAL_INFORMATION)
    # MOST_FREQUENT only applies to categorical values
    numerical_config = replace(config, aggregate=AggregateFunction.MEAN)
    labels = (x > 0).astype(int)
    pair_a = ColumnPair("d1", "key", keys, "label", ColumnType.CATEGORICAL, labels)
    pair_b = ColumnPair("d2", "key", keys, "y", ColumnType.NUMERICAL, y)
    a = CorrelationSketch.from_column_pair(pair_a, config)
    b = CorrelationSketch.from_column_pair(pair_b, numerical_config)
    mi = a.correlation_to(b)
    print("Estimated mutual information:", mi.value, "nats")


def eg3():
    # Store a frozen sketch and rebuild it
    a = CorrelationSketch.from_keys(keys, x).freeze()
    b = CorrelationSketch.from_keys(keys, y).freeze()
    restored = FrozenCorrelationSketch.from_dict(a.to_dict())
    print("Before:", a.correlation_to(b).value, "after:", restored.correlation_to(b).value)


if __name__ == "__main__":
    eg1()
    eg2()
    eg3()
