import unittest

from weekplan.domain.Preferences import Preferences
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.logic.reporting.nutrition import compute_week_nutrition
from weekplan.tests.fake_gateway import day, meal, sample_plan
from weekplan.utilities.constants import DAYS


class TestNutrition(unittest.TestCase):

    def test_week_totals(self):
        stats = compute_week_nutrition(sample_plan())
        self.assertEqual(stats['week_totals']['calories'], 7 * 1700)
        self.assertEqual(stats['week_totals']['proteins'], 7 * 77)
        self.assertEqual(stats['daily_average']['calories'], 1700)
        self.assertIsNone(stats['days'][0]['target_delta'])

    def test_fasting_meals_ignored(self):
        plan = WeeklyPlan([day(label, meal("breakfast", "Fast", 0, is_fasting=True), meal("lunch", "Bowl", 800))
                           for label in DAYS])
        stats = compute_week_nutrition(plan, Preferences(daily_calories=1000))
        self.assertEqual(stats['days'][0]['meals'], 1)
        self.assertEqual(stats['days'][0]['target_delta'], -200)


if __name__ == '__main__':
    unittest.main()
