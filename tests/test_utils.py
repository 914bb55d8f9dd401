import unittest
from decimal import Decimal

from rent_tracker.core.utils import SPLIT_TOLERANCE, equal_share, qround, shares_balance, split_tolerance


class TestEqualShare(unittest.TestCase):
    def test_even_split(self):
        self.assertEqual(equal_share(Decimal("300"), 3), Decimal("100.0000"))

    def test_uneven_split_is_not_rebalanced(self):
        share = equal_share(Decimal("100"), 3)

        self.assertEqual(share, Decimal("33.3333"))
        self.assertTrue(shares_balance(Decimal("100"), [share] * 3))

    def test_rounds_half_up(self):
        self.assertEqual(equal_share(Decimal("0.00005"), 1), Decimal("0.0001"))

    def test_accepts_plain_numbers(self):
        self.assertEqual(equal_share(45.5, 2), Decimal("22.7500"))

    def test_needs_members(self):
        with self.assertRaises(ValueError):
            equal_share(Decimal("10"), 0)


class TestSharesBalance(unittest.TestCase):
    def test_within_tolerance(self):
        self.assertTrue(shares_balance(Decimal("10"), [Decimal("3.3333")] * 3))

    def test_large_groups_widen_tolerance(self):
        # 1.34 / 400 = 0.00335 rounds up, so the shares overshoot by 0.02
        share = equal_share(Decimal("1.34"), 400)

        self.assertEqual(share, Decimal("0.0034"))
        self.assertEqual(split_tolerance(400), Decimal("0.02"))
        self.assertEqual(split_tolerance(3), SPLIT_TOLERANCE)
        self.assertTrue(shares_balance(Decimal("1.34"), [share] * 400))

    def test_out_of_tolerance(self):
        self.assertFalse(shares_balance(Decimal("10"), [Decimal("3.30")] * 3))

    def test_qround(self):
        self.assertEqual(qround(Decimal("2.345")), Decimal("2.35"))
