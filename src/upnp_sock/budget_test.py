import unittest

from .budget import TimeoutBudget


class TestTimeoutBudget(unittest.TestCase):

    def test_negative_budget_is_expired(self):
        budget = TimeoutBudget(-1)
        self.assertTrue(budget.expired)
        self.assertFalse(budget.unbounded)

    def test_zero_budget_waits_forever(self):
        budget = TimeoutBudget(0)
        self.assertTrue(budget.unbounded)
        self.assertFalse(budget.expired)
        self.assertIsNone(budget.wait_timeout())

    def test_positive_budget_timeout_is_whole_seconds(self):
        self.assertEqual(TimeoutBudget(7).wait_timeout(), 7)

    def test_charge_decrements_in_place(self):
        budget = TimeoutBudget(5)
        budget.charge(2)
        self.assertEqual(budget.seconds, 3)
        budget.charge(4)
        self.assertTrue(budget.expired, "Charging past zero should leave the budget expired")

    def test_zero_budget_never_decays(self):
        budget = TimeoutBudget(0)
        budget.charge(30)
        self.assertEqual(budget.seconds, 0)

    def test_compares_with_ints(self):
        self.assertEqual(TimeoutBudget(3), 3)
        self.assertEqual(TimeoutBudget(3), TimeoutBudget(3))
        self.assertEqual(int(TimeoutBudget(-2)), -2)


if __name__ == '__main__':
    unittest.main()
