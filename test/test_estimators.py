import math
import unittest

import numpy as np

from corrsketch import mutual_info, pearson
from corrsketch.column import ColumnType
from corrsketch.entropy import differential_entropy_mixed, entropy
from corrsketch.errors import InvalidInputError, UnsupportedCombinationError
from corrsketch.estimate import BootstrapEstimate, MIEstimate
from corrsketch.estimators import (BootstrapPearsonEstimator, ChatterjeeEstimator,
                                   CorrelationType, KendallEstimator, MutualInformationEstimator,
                                   NormalizedMutualInformationEstimator, PearsonEstimator,
                                   QnEstimator, RinEstimator, SpearmanEstimator)

NUM = ColumnType.NUMERICAL
CAT = ColumnType.CATEGORICAL


class TestCorrelationType(unittest.TestCase):

    def test_get(self):
        self.assertIsInstance(CorrelationType.PEARSON.get(), PearsonEstimator)
        self.assertIsInstance(CorrelationType.SPEARMAN.get(), SpearmanEstimator)
        self.assertIsInstance(CorrelationType.ROBUST_QN.get(), QnEstimator)
        self.assertIsInstance(CorrelationType.KENDALL.get(), KendallEstimator)
        self.assertIsInstance(CorrelationType.RIN.get(), RinEstimator)
        self.assertIsInstance(CorrelationType.CHATTERJEE.get(), ChatterjeeEstimator)
        self.assertIsInstance(CorrelationType.BOOTSTRAP_PEARSON.get(), BootstrapPearsonEstimator)
        self.assertIsInstance(CorrelationType.MUTUAL_INFORMATION.get(),
                              MutualInformationEstimator)
        for t in (CorrelationType.NMI_SQRT, CorrelationType.NMI_MAX, CorrelationType.NMI_MIN):
            e = t.get()
            self.assertIsInstance(e, NormalizedMutualInformationEstimator)
            self.assertEqual(e.name, t.value)

    def test_every_type_estimates_something(self):
        for t in CorrelationType:
            e = t.get()
            self.assertTrue(e.supports(NUM, NUM) or e.supports(CAT, CAT))


class TestNumericalEstimators(unittest.TestCase):

    def setUp(self):
        rng = np.random.RandomState(17)
        self.x = rng.normal(size=50)
        self.y = self.x + rng.normal(size=50)

    def test_numerical(self):
        e = PearsonEstimator().estimate(self.x, self.y)
        self.assertAlmostEqual(e.value, pearson.coefficient(self.x, self.y))
        self.assertEqual(e.sample_size, 50)
        for estimator in (SpearmanEstimator(), QnEstimator(), KendallEstimator(), RinEstimator()):
            value = estimator.estimate(self.x, self.y, NUM, NUM).value
            self.assertTrue(0.0 < value <= 1.0)
        xi = ChatterjeeEstimator().estimate(self.x, self.x ** 3)
        self.assertAlmostEqual(xi.value, 1.0 - 3.0 / 51)

    def test_unsupported_combinations(self):
        for estimator in (PearsonEstimator(), SpearmanEstimator(), QnEstimator(),
                          KendallEstimator(), RinEstimator(), ChatterjeeEstimator(),
                          BootstrapPearsonEstimator(num_samples=10)):
            self.assertTrue(estimator.supports(NUM, NUM))
            for types in [(CAT, CAT), (CAT, NUM), (NUM, CAT)]:
                self.assertFalse(estimator.supports(*types))
                self.assertRaises(UnsupportedCombinationError, estimator.estimate,
                                  self.x, self.y, *types)

    def test_unsupported_is_invalid_input(self):
        try:
            PearsonEstimator().estimate([1, 2], [1, 2], CAT, CAT)
        except InvalidInputError:
            pass
        else:
            raise Exception

    def test_invalid_input(self):
        self.assertRaises(InvalidInputError, PearsonEstimator().estimate, [1, 2, 3], [1, 2])
        self.assertRaises(InvalidInputError, PearsonEstimator().estimate, [1, 2], [1, 2],
                          "numerical", NUM)

    def test_chatterjee_deterministic(self):
        x = np.round(self.x)
        estimator = ChatterjeeEstimator(seed=7)
        self.assertEqual(estimator.estimate(x, self.y).value, estimator.estimate(x, self.y).value)

    def test_bootstrap(self):
        estimator = BootstrapPearsonEstimator(num_samples=200, seed=5)
        a = estimator.estimate(self.x, self.y)
        b = estimator.estimate(self.x, self.y)
        self.assertIsInstance(a, BootstrapEstimate)
        self.assertEqual(a.value, b.value)
        self.assertTrue(a.lower <= a.value <= a.upper)


class TestMutualInformationEstimators(unittest.TestCase):

    def setUp(self):
        rng = np.random.RandomState(18)
        self.d = rng.randint(0, 3, size=100).astype(float)
        self.c = self.d + rng.normal(size=100)

    def test_all_combinations(self):
        estimator = MutualInformationEstimator()
        for types in [(NUM, NUM), (CAT, CAT), (CAT, NUM), (NUM, CAT)]:
            self.assertTrue(estimator.supports(*types))

        e = estimator.estimate(self.d, self.d, CAT, CAT)
        self.assertIsInstance(e, MIEstimate)
        self.assertAlmostEqual(e.value, entropy(self.d))

        e = estimator.estimate(self.c, self.c + 1.0, NUM, NUM)
        self.assertAlmostEqual(e.value, mutual_info.ksg(self.c, self.c + 1.0))

        e = estimator.estimate(self.d, self.c, CAT, NUM)
        self.assertAlmostEqual(e.value, mutual_info.dc(self.d, self.c))
        self.assertAlmostEqual(e.ex, entropy(self.d))
        self.assertAlmostEqual(e.ey, differential_entropy_mixed(self.c))
        self.assertEqual(e.nx, 3)

        e = estimator.estimate(self.c, self.d, NUM, CAT)
        self.assertAlmostEqual(e.value, mutual_info.dc(self.d, self.c))
        self.assertAlmostEqual(e.ex, differential_entropy_mixed(self.c))
        self.assertAlmostEqual(e.ey, entropy(self.d))
        self.assertEqual(e.ny, 3)

    def test_normalized(self):
        x = [1, 1, 2, 2, 3, 3]
        y = [1, 1, 2, 2, 3, 4]
        mi = mutual_info.mle(x, y)
        sqrt = CorrelationType.NMI_SQRT.get().estimate(x, y, CAT, CAT)
        self.assertAlmostEqual(sqrt.value, mi.value / math.sqrt(mi.ex * mi.ey))
        nmax = CorrelationType.NMI_MAX.get().estimate(x, y, CAT, CAT)
        self.assertAlmostEqual(nmax.value, mi.value / max(mi.ex, mi.ey))
        nmin = CorrelationType.NMI_MIN.get().estimate(x, y, CAT, CAT)
        self.assertAlmostEqual(nmin.value, 1.0)
        self.assertRaises(UnsupportedCombinationError,
                          CorrelationType.NMI_SQRT.get().estimate, x, y, NUM, NUM)
        self.assertRaises(InvalidInputError, NormalizedMutualInformationEstimator, "mean")

    def test_normalized_constant(self):
        e = CorrelationType.NMI_MAX.get().estimate([1, 1, 1], [1, 1, 1], CAT, CAT)
        self.assertTrue(e.is_nan())


if __name__ == "__main__":
    unittest.main()
