import math
import unittest

from corrsketch.estimate import (BootstrapEstimate, Estimate, MIEstimate, nmi_max, nmi_min,
                                 nmi_sqrt)


class TestEstimate(unittest.TestCase):

    def test_nan(self):
        e = Estimate.nan(4)
        self.assertTrue(e.is_nan())
        self.assertEqual(e.sample_size, 4)
        self.assertEqual(e, Estimate.nan(4))
        self.assertNotEqual(e, Estimate.nan(5))
        self.assertNotEqual(Estimate(0.5, 4), Estimate(0.6, 4))

    def test_bootstrap(self):
        e = BootstrapEstimate(0.5, 0.4, 0.1, 0.9, 10)
        self.assertEqual(e.value, 0.5)
        self.assertEqual(e, Estimate(0.5, 10))


class TestMIEstimate(unittest.TestCase):

    def test_normalizations(self):
        e = MIEstimate(0.5, 10, ex=1.0, ey=0.25)
        self.assertEqual(e.nmi_max(), 0.5)
        self.assertEqual(e.nmi_min(), 2.0)
        self.assertEqual(e.nmi_sqrt(), 1.0)
        self.assertEqual(e.info_gain_ratio_x(), 0.5)
        self.assertEqual(e.info_gain_ratio_y(), 2.0)

    def test_zero_entropy(self):
        self.assertTrue(math.isnan(nmi_max(0.0, 0.0, 0.0)))
        self.assertTrue(math.isinf(nmi_min(0.5, 0.0, 1.0)))
        self.assertTrue(math.isnan(nmi_sqrt(0.5, -1.0, 1.0)))
        self.assertTrue(math.isnan(MIEstimate(0.5, 10).nmi_sqrt()))


if __name__ == "__main__":
    unittest.main()
