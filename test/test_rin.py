import math
import unittest

import numpy as np
from scipy import stats

from corrsketch import rin
from corrsketch.errors import InvalidInputError


class TestRin(unittest.TestCase):

    def test_rankit(self):
        z = rin.rankit([10.0, 30.0, 20.0])
        q = stats.norm.ppf(1 / 6.0)
        self.assertAlmostEqual(z[0], q)
        self.assertAlmostEqual(z[1], -q)
        self.assertAlmostEqual(z[2], 0.0)

    def test_small(self):
        # rankits [-q, 0, q] and [-q, q, 0] have a covariance of q^2 and a
        # variance of 2 q^2
        self.assertAlmostEqual(rin.coefficient([1, 2, 3], [1, 3, 2]), 0.5)

    def test_monotone(self):
        x = np.arange(1, 21, dtype=float)
        self.assertAlmostEqual(rin.coefficient(x, np.exp(x)), 1.0)
        self.assertAlmostEqual(rin.coefficient(x, -x ** 3), -1.0)

    def test_ties(self):
        x = [1, 2, 2, 3, 4, 4, 4, 5]
        y = [3, 1, 2, 5, 5, 4, 6, 7]
        n = len(x)
        a = stats.norm.ppf((stats.rankdata(x) - 0.5) / n)
        b = stats.norm.ppf((stats.rankdata(y) - 0.5) / n)
        self.assertAlmostEqual(rin.coefficient(x, y), stats.pearsonr(a, b)[0], places=10)

    def test_invalid_input(self):
        self.assertRaises(InvalidInputError, rin.coefficient, [1, 2], [1])
        self.assertRaises(InvalidInputError, rin.coefficient, [], [])
        self.assertTrue(math.isnan(rin.coefficient([1, 1, 1], [1, 2, 3])))
        self.assertEqual(rin.estimate([1, 2, 3], [1, 3, 2]).sample_size, 3)


if __name__ == "__main__":
    unittest.main()
