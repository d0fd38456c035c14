import unittest

import numpy as np

from corrsketch import bootstrap, pearson
from corrsketch.errors import InvalidInputError


class TestBootstrap(unittest.TestCase):

    def setUp(self):
        rng = np.random.RandomState(9)
        self.x = rng.normal(size=100)
        self.y = 0.5 * self.x + rng.normal(size=100)

    def test_estimate(self):
        e = bootstrap.estimate(self.x, self.y, random_state=1)
        r = pearson.coefficient(self.x, self.y)
        self.assertEqual(e.sample_size, 100)
        self.assertTrue(e.lower <= e.value <= e.upper)
        self.assertTrue(e.lower <= e.median <= e.upper)
        self.assertAlmostEqual(e.value, r, delta=0.05)
        self.assertTrue(e.lower < r < e.upper)

    def test_deterministic(self):
        a = bootstrap.estimate(self.x, self.y, num_samples=200, random_state=3)
        b = bootstrap.estimate(self.x, self.y, num_samples=200,
                               random_state=np.random.RandomState(3))
        self.assertEqual(a.value, b.value)
        self.assertEqual(a.lower, b.lower)

    def test_not_computable(self):
        self.assertTrue(bootstrap.estimate([1.0], [2.0]).is_nan())
        self.assertTrue(bootstrap.estimate([1, 1, 1], [1, 2, 3], random_state=1).is_nan())

    def test_invalid_input(self):
        self.assertRaises(InvalidInputError, bootstrap.estimate, [1, 2], [1])
        self.assertRaises(InvalidInputError, bootstrap.estimate, [1, 2], [1, 2], 0)
        self.assertRaises(InvalidInputError, bootstrap.estimate, [1, 2], [1, 2], 10, 1.5)


if __name__ == "__main__":
    unittest.main()
