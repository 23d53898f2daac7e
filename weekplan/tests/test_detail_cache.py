import unittest

from weekplan.domain.RecipeDetails import RecipeDetails
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.logic.recipes.detail_cache import (
    RecipeDetailCache, cache_key, fallback_recipe, get_or_generate
)
from weekplan.tests.fake_gateway import FakeGateway, day, meal, sample_plan
from weekplan.utilities.constants import DAYS


class TestRecipeDetailCache(unittest.TestCase):

    def test_get_put(self):
        cache = RecipeDetailCache()
        details = RecipeDetails(["egg"], ["boil"], [])
        self.assertIsNone(cache.get(0, 1, "Eggs"))
        cache.put(0, 1, "Eggs", details)
        self.assertIs(cache.get(0, 1, "Eggs"), details)
        self.assertIsNone(cache.get(0, 1, "Other name"))
        self.assertIn(cache_key(0, 1, "Eggs"), cache)
        self.assertEqual(cache_key(0, 1, "Eggs"), "0-1-Eggs")

    def test_fallback_is_deterministic(self):
        m = meal("lunch", "Chicken bowl", 650, proteins=40, carbs=60, fats=15, prep_time=20)
        first = fallback_recipe(m)
        self.assertEqual(first, fallback_recipe(m))
        self.assertTrue(first.ingredients)
        self.assertTrue(first.instructions)
        self.assertIn("Chicken bowl", first.ingredients[0])
        self.assertTrue(any("40 g protein" in i for i in first.ingredients))
        self.assertTrue(any("650 kcal" in s for s in first.instructions))


class TestGetOrGenerate(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.gateway = FakeGateway()
        self.cache = RecipeDetailCache()
        self.plan = sample_plan()

    async def test_miss_then_hit(self):
        first = await get_or_generate(self.cache, self.plan, 0, 0, self.gateway)
        second = await get_or_generate(self.cache, self.plan, 0, 0, self.gateway)
        self.assertIs(first, second)
        self.assertEqual(len([c for c in self.gateway.calls if c[0] == "generate_recipe_details"]), 1)
        self.assertIs(self.cache.get(0, 0, "Porridge 0"), first)

    async def test_failure_falls_back_without_caching(self):
        self.gateway.fail = True
        details = await get_or_generate(self.cache, self.plan, 1, 2, self.gateway)
        self.assertEqual(details, fallback_recipe(self.plan.days[1].meals[2]))
        self.assertEqual(len(self.cache), 0)

    async def test_empty_details_fall_back(self):
        self.gateway.details = RecipeDetails([], [], [])
        details = await get_or_generate(self.cache, self.plan, 0, 0, self.gateway)
        self.assertTrue(details.ingredients)
        self.assertEqual(len(self.cache), 0)

    async def test_fasting_meal_skips_gateway(self):
        plan = WeeklyPlan([day(label, meal("breakfast", "Fast", 0, is_fasting=True)) for label in DAYS])
        details = await get_or_generate(self.cache, plan, 0, 0, self.gateway)
        self.assertIn("Water", details.ingredients)
        self.assertEqual(self.gateway.calls, [])


if __name__ == '__main__':
    unittest.main()
