import math
import unittest

import numpy as np

from corrsketch.entropy import (differential_entropy, differential_entropy_mixed, entropy,
                                entropy_from_probs)


class TestEntropy(unittest.TestCase):

    def test_entropy(self):
        self.assertEqual(entropy([1]), 0.0)
        self.assertEqual(entropy([1, 1, 1, 1, 1]), 0.0)
        self.assertAlmostEqual(entropy([1, 1, 2, 2, 1]), 0.6730116670092565)
        self.assertAlmostEqual(entropy([1, 2, 4, 8, 16]), math.log(5))
        self.assertAlmostEqual(entropy([1, 2]), math.log(2))

    def test_entropy_of_uniform_labels(self):
        labels = np.repeat(np.arange(8), 5)
        self.assertAlmostEqual(entropy(labels), math.log(8))

    def test_entropy_from_probs(self):
        self.assertAlmostEqual(entropy_from_probs([0.5, 0.5]), math.log(2))
        self.assertAlmostEqual(entropy_from_probs([1.0]), 0.0)


# Samples from a standard normal distribution
_normal_sample = [-0.59152691, -0.21027888, 1.40407995, -0.53021491, 0.58272939,
                  -0.23601182, -1.19971974, -1.50147482, 0.25556115, -0.06472547,
                  -0.56735615, -0.38815229, -1.10666078, -0.26985764, 0.1365975]


class TestDifferentialEntropy(unittest.TestCase):

    def test_known_values(self):
        for estimator in (differential_entropy, differential_entropy_mixed):
            self.assertAlmostEqual(estimator([1, 2, 4, 8, 16]), 3.218266805508045, places=7)
            self.assertAlmostEqual(estimator([1, 2, 1, 2, 1.2]), 1.2318518036304367, places=7)
            self.assertAlmostEqual(estimator(_normal_sample), 1.2231987815353995, places=7)

    def test_known_distributions(self):
        rng = np.random.RandomState(10)
        n = 10 * 1024
        for estimator in (differential_entropy, differential_entropy_mixed):
            x = rng.normal(size=n)
            self.assertAlmostEqual(estimator(x), math.log(math.sqrt(2 * math.pi * math.e)),
                                   delta=0.1)
            x = rng.exponential(scale=0.5, size=n)
            self.assertAlmostEqual(estimator(x), 1 - math.log(2), delta=0.1)
            x = rng.uniform(size=n)
            self.assertAlmostEqual(estimator(x), 0.0, delta=0.1)

    def test_repeated_values(self):
        x = [1.0, 1.0, 1.0, 1.0, 2.0, 3.0, 4.0]
        self.assertEqual(differential_entropy(x), float("-inf"))
        self.assertTrue(math.isfinite(differential_entropy_mixed(x)))
        self.assertEqual(differential_entropy_mixed([5.0, 5.0, 5.0]), float("-inf"))

    def test_empty(self):
        self.assertTrue(math.isnan(differential_entropy([])))
        self.assertTrue(math.isnan(differential_entropy_mixed([])))


if __name__ == "__main__":
    unittest.main()
