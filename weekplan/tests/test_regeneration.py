import unittest

from weekplan.domain.Preferences import Preferences
from weekplan.logic.plan.regeneration import generate_plan, regenerate_day
from weekplan.tests.fake_gateway import FakeGateway, sample_plan
from weekplan.utilities.errors import ValidationPrecondition


class TestRegenerateDay(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.gateway = FakeGateway()
        self.plan = sample_plan()
        self.prefs = Preferences(daily_calories=1800)

    async def test_only_target_day_changes(self):
        result = await regenerate_day(self.plan, 2, self.prefs, self.gateway)
        self.assertTrue(result.ok)
        new_plan = result.value
        for i in range(7):
            if i != 2:
                self.assertIs(new_plan.days[i], self.plan.days[i])
        self.assertEqual([m.name for m in new_plan.days[2].meals], ["New toast 2", "New pasta 2", "New omelette 2"])
        self.assertEqual(new_plan.days[2].total_calories, 1500)
        # Input plan untouched
        self.assertEqual(self.plan, sample_plan())

    async def test_day_label_is_stable(self):
        result = await regenerate_day(self.plan, 3, self.prefs, self.gateway)
        self.assertEqual(result.value.days[3].day, "Thursday")

    async def test_gateway_receives_current_plan(self):
        await regenerate_day(self.plan, 5, self.prefs, self.gateway)
        name, day_index, current = self.gateway.calls[-1]
        self.assertEqual((name, day_index), ("regenerate_day", 5))
        self.assertIs(current, self.plan)

    async def test_failure_returns_input_plan(self):
        self.gateway.fail = True
        result = await regenerate_day(self.plan, 2, self.prefs, self.gateway)
        self.assertFalse(result.ok)
        self.assertIs(result.value, self.plan)
        self.assertIn("backend unavailable", result.error)

    async def test_unexpected_error_is_a_failure(self):
        async def boom(*args):
            raise RuntimeError("socket closed")
        self.gateway.regenerate_day = boom
        result = await regenerate_day(self.plan, 1, self.prefs, self.gateway)
        self.assertFalse(result.ok)
        self.assertIs(result.value, self.plan)

    async def test_empty_day_is_a_failure(self):
        self.gateway.day_meals = []
        result = await regenerate_day(self.plan, 0, self.prefs, self.gateway)
        self.assertFalse(result.ok)
        self.assertIs(result.value, self.plan)

    async def test_out_of_range_day_rejected_before_call(self):
        with self.assertRaises(ValidationPrecondition):
            await regenerate_day(self.plan, 7, self.prefs, self.gateway)
        self.assertEqual(self.gateway.calls, [])


class TestGeneratePlan(unittest.IsolatedAsyncioTestCase):

    async def test_generate_success(self):
        result = await generate_plan(Preferences(), FakeGateway())
        self.assertTrue(result.ok)
        self.assertEqual(len(result.value), 7)
        self.assertEqual(result.value.days[0].total_calories, 1700)

    async def test_generate_failure(self):
        gateway = FakeGateway()
        gateway.fail = True
        result = await generate_plan(Preferences(), gateway)
        self.assertFalse(result.ok)
        self.assertIsNone(result.value)


if __name__ == '__main__':
    unittest.main()
