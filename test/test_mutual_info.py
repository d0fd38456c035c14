import math
import unittest
import warnings

import numpy as np
from scipy.special import digamma

from corrsketch import mutual_info
from corrsketch.entropy import entropy
from corrsketch.errors import InvalidInputError


class TestMLE(unittest.TestCase):

    def test_mi_of_itself_is_entropy(self):
        x = [1, 1, 2, 3, 3, 3, 4]
        mi = mutual_info.mle(x, x)
        self.assertAlmostEqual(mi.value, entropy(x))
        self.assertAlmostEqual(mi.ex, entropy(x))
        self.assertAlmostEqual(mi.ey, entropy(x))
        self.assertEqual(mi.nx, 4)
        self.assertEqual(mi.ny, 4)
        self.assertAlmostEqual(mi.nmi_sqrt(), 1.0)
        self.assertAlmostEqual(mi.nmi_max(), 1.0)
        self.assertAlmostEqual(mi.nmi_min(), 1.0)

    def test_symmetric(self):
        rng = np.random.RandomState(11)
        x = rng.randint(0, 4, size=100)
        y = (x + rng.randint(0, 2, size=100)) % 5
        self.assertAlmostEqual(mutual_info.mle(x, y).value, mutual_info.mle(y, x).value)

    def test_independent(self):
        self.assertAlmostEqual(mutual_info.mle([0, 0, 1, 1], [0, 1, 0, 1]).value, 0.0)

    def test_casts_to_int(self):
        mi = mutual_info.mle([1.0, 1.0, 2.0, 2.0], [7.0, 7.0, 3.0, 3.0])
        self.assertAlmostEqual(mi.value, math.log(2))
        self.assertEqual(mi.sample_size, 4)
        truncated = mutual_info.mle([1.7, 1.2, 2.9, 2.1], [7.5, 7.0, 3.3, 3.8])
        self.assertEqual(truncated.value, mi.value)
        self.assertEqual(truncated.nx, 2)

    def test_invalid_input(self):
        self.assertRaises(InvalidInputError, mutual_info.mle, [1, 2], [1])
        self.assertTrue(mutual_info.mle([], []).is_nan())


class TestMixedKSG(unittest.TestCase):

    def _expected(self, log_n_estimate, n):
        # Reference values computed with log(N) in place of digamma(N)
        return max(0.0, log_n_estimate - (math.log(n) - digamma(n)))

    def test_known_values(self):
        x = [1, 1, 2, 2, 3, 3]
        cases = [
            ([1.0, 1.0, 2.3, 2.4, 3.1, 3.5], 0.468975134129588),
            ([1.0, 1.0, 2.3, 2.4, 3.1, 3.2], 0.8689751341295882),
            ([1.0, 1.0, 2.3, 3.4, 3.1, 0.5], 0.14397513412958812),
            ([1.0, 1.0, 2.3, 3.4, 3.1, 3.2], 0.4023084674629213),
            ([3.0, 1.0, 2.3, 3.4, 3.1, 3.2], 0.6134195785740324),
        ]
        for y, reference in cases:
            self.assertAlmostEqual(mutual_info.ksg(x, y, 3), self._expected(reference, 6),
                                   places=7)

    def test_repeated_values_beyond_k(self):
        x = [1, 1, 1, 1, 2, 3]
        cases = [
            ([1.0, 1.0, 1.0, 1.0, 3.15, 3.2], 0.5523084674629213),
            ([3.0, 100.0, 2.3, 3.4, 3.15, 3.2], 0.4189751341295881),
            ([3.0, 100.0, 2.3, 3.4, 3.1, 103.2], 0.49675291190736587),
            ([3.0, 100.0, 2.3, 3.4, 100000, 103.2], 0.08564180079625461),
            ([1e-18, 1e-18, 0.0001, 3.4, 1e-19, 3.45], 0.46897513412958813),
        ]
        for y, reference in cases:
            self.assertAlmostEqual(mutual_info.ksg(x, y, 3), self._expected(reference, 6),
                                   places=7)

    def test_non_negative(self):
        rng = np.random.RandomState(12)
        for _ in range(10):
            x = rng.normal(size=30)
            y = rng.normal(size=30)
            self.assertTrue(mutual_info.ksg(x, y) >= 0.0)
        x = [1.0] * 5 + [-1.0] * 5
        self.assertTrue(mutual_info.ksg(x, [0.0] * 10) >= 0.0)

    def test_symmetric(self):
        rng = np.random.RandomState(13)
        x = rng.normal(size=300)
        y = x + rng.normal(size=300)
        self.assertAlmostEqual(mutual_info.ksg(x, y), mutual_info.ksg(y, x))

    def test_gaussian(self):
        rng = np.random.RandomState(14)
        rho = 0.8
        x = rng.normal(size=2000)
        y = rho * x + math.sqrt(1 - rho ** 2) * rng.normal(size=2000)
        expected = -0.5 * math.log(1 - rho ** 2)
        self.assertAlmostEqual(mutual_info.ksg(x, y), expected, delta=0.1)

    def test_jitter_reproducible(self):
        x = [1, 1, 2, 2, 3, 3, 4, 4]
        y = [1, 1, 2, 2, 3, 3, 4, 5]
        a = mutual_info.ksg(x, y, random_state=9)
        b = mutual_info.ksg(x, y, random_state=np.random.RandomState(9))
        self.assertEqual(a, b)
        self.assertTrue(a >= 0.0)

    def test_small_inputs(self):
        self.assertTrue(math.isnan(mutual_info.ksg([1.0], [2.0])))
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            mi = mutual_info.ksg([1.0, 2.0, 3.0], [1.0, 2.0, 4.0], k=3)
            self.assertEqual(len(w), 0)
        self.assertTrue(mi >= 0.0)
        self.assertEqual(mi, mutual_info.ksg([1.0, 2.0, 3.0], [1.0, 2.0, 4.0], k=2))
        self.assertRaises(InvalidInputError, mutual_info.ksg, [1, 2], [1])

    def test_estimate_has_entropies(self):
        rng = np.random.RandomState(15)
        x = rng.normal(size=200)
        y = x + rng.normal(size=200)
        e = mutual_info.ksg_estimate(x, y)
        self.assertEqual(e.sample_size, 200)
        self.assertAlmostEqual(e.value, mutual_info.ksg(x, y))
        self.assertTrue(math.isfinite(e.ex))
        self.assertTrue(math.isfinite(e.ey))


class TestDC(unittest.TestCase):

    def test_known_values(self):
        d1 = [1, 1, 2, 2, 3, 3]
        cases = [
            (d1, [1.0, 1.0, 2.3, 2.4, 3.1, 0.5], 0.5889),
            (d1, [1.0, 1.0, 2.3, 2.4, 3.1, 3.2], 1.2833),
            (d1, [1.0, 1.0, 2.3, 3.4, 3.1, 0.5], 0.2972),
            (d1, [1.0, 1.0, 2.3, 3.4, 3.1, 3.2], 0.7833),
            (d1, [3.0, 1.0, 2.3, 3.4, 3.1, 3.2], -0.0083),
            ([1, 2, 2, 2, 3, 3], [3.0, 100.0, 2.3, 3.4, 3.1, 3.2], 0.1111),
            ([1, 2, 2, 2, 3, 3], [3.0, 100.0, 2.3, 3.4, 3.1, 103.2], -0.2361),
            ([0, 1, 2, 2, 2, 3, 4, 5], [3.0, 100.0, -2.3, -103.4, 0, 0, 0, 0], -0.1987),
            ([0, 1, 2, 2, 2, 3, 4, 5], [0, 0, 0, 1e99, 0, 0, 0, 0], -0.4008),
        ]
        for d, c, expected in cases:
            self.assertAlmostEqual(mutual_info.dc_raw(d, c, 3), expected, delta=1e-4)
            self.assertAlmostEqual(mutual_info.dc(d, c, 3), max(0.0, expected), delta=1e-4)

    def test_dependent_variables(self):
        rng = np.random.RandomState(16)
        d = rng.randint(0, 3, size=500)
        c = d + 0.1 * rng.normal(size=500)
        # the classes are separated, so the MI is close to the entropy of d
        self.assertAlmostEqual(mutual_info.dc(d, c), entropy(d), delta=0.1)
        noise = rng.normal(size=500)
        self.assertTrue(mutual_info.dc(d, noise) < 0.1)

    def test_estimate(self):
        d = [0, 0, 1, 1, 1, 2, 2, 2]
        c = [0.1, 0.2, 1.1, 1.0, 1.3, 2.2, 2.1, 2.5]
        e = mutual_info.dc_estimate(d, c)
        self.assertEqual(e.nx, 3)
        self.assertAlmostEqual(e.ex, entropy(d))
        self.assertEqual(e.sample_size, 8)

    def test_invalid_input(self):
        self.assertRaises(InvalidInputError, mutual_info.dc, [1, 2], [1.0])
        self.assertTrue(math.isnan(mutual_info.dc([], [])))


if __name__ == "__main__":
    unittest.main()
