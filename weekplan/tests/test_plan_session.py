import asyncio
import tempfile
import unittest
from pathlib import Path

from weekplan.domain.Preferences import Preferences
from weekplan.events.Event_Bus import (
    EventBus, PLAN_DAY_REGENERATED, PLAN_GENERATION_FAILED, PLAN_MEAL_MOVED, PLAN_SAVED
)
from weekplan.infra.Plan_Repository import PlanRepository
from weekplan.session.Plan_Session import NoPlanError, PlanSession
from weekplan.tests.fake_gateway import FakeGateway, day, meal
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.utilities.constants import DAYS
from weekplan.utilities.errors import RegenerationInProgress, ValidationPrecondition


class SessionTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.gateway = FakeGateway()
        self.bus = EventBus()
        self.events = []
        for name in (PLAN_DAY_REGENERATED, PLAN_GENERATION_FAILED, PLAN_MEAL_MOVED, PLAN_SAVED):
            self.bus.subscribe(name, lambda n, p: self.events.append((n, p)))
        self.session = PlanSession(
            self.gateway,
            repository=PlanRepository(Path(self.tmp.name) / "plans.json"),
            preferences=Preferences(daily_calories=2200, weekly_budget=100),
            event_bus=self.bus,
        )
        result = await self.session.generate()
        self.assertTrue(result.ok)

    async def asyncTearDown(self):
        self.tmp.cleanup()


class TestSessionGeneration(SessionTestCase):

    async def test_no_plan_before_generation(self):
        session = PlanSession(FakeGateway())
        with self.assertRaises(NoPlanError):
            session.delete_meal(0, 0)

    async def test_full_regeneration_resets_tracker_and_cache(self):
        self.session.toggle_validation(0, 0)
        await self.session.recipe_details(0, 1)
        self.assertEqual(len(self.session.cache), 1)
        result = await self.session.generate()
        self.assertTrue(result.ok)
        self.assertEqual(len(self.session.tracker), 0)
        self.assertEqual(len(self.session.cache), 0)
        self.assertTrue(self.session.plan.days[0].meals[0].name.startswith("G2"))

    async def test_failed_generation_keeps_everything(self):
        self.session.toggle_validation(0, 0)
        before = self.session.plan
        self.gateway.fail = True
        result = await self.session.generate()
        self.assertFalse(result.ok)
        self.assertIs(self.session.plan, before)
        self.assertTrue(self.session.tracker.is_validated(0, 0))


class TestSessionRegeneration(SessionTestCase):

    async def test_regenerate_clears_day_validations_only(self):
        self.session.validate_all_for_day(2)
        self.session.toggle_validation(3, 1)
        result = await self.session.regenerate_day(2)
        self.assertTrue(result.ok)
        self.assertFalse(self.session.is_day_fully_validated(2))
        self.assertEqual(self.session.tracker.validated_count(self.session.plan, 2), 0)
        self.assertTrue(self.session.tracker.is_validated(3, 1))
        self.assertEqual(self.events[-1], (PLAN_DAY_REGENERATED, {"day_index": 2, "cleared_validations": 4}))

    async def test_failed_regeneration_leaves_state(self):
        self.session.validate_all_for_day(2)
        before = self.session.plan
        self.gateway.fail = True
        result = await self.session.regenerate_day(2)
        self.assertFalse(result.ok)
        self.assertIs(self.session.plan, before)
        self.assertTrue(self.session.is_day_fully_validated(2))
        self.assertEqual(self.events[-1][0], PLAN_GENERATION_FAILED)

    async def test_single_flight_per_day(self):
        self.gateway.gate = asyncio.Event()
        first = asyncio.create_task(self.session.regenerate_day(4))
        await asyncio.sleep(0)
        self.assertTrue(self.session.is_regenerating(4))
        with self.assertRaises(RegenerationInProgress):
            await self.session.regenerate_day(4)
        with self.assertRaises(RegenerationInProgress):
            await self.session.generate()
        # Another day may regenerate meanwhile
        second = asyncio.create_task(self.session.regenerate_day(5))
        await asyncio.sleep(0)
        self.assertTrue(self.session.is_regenerating(5))
        self.gateway.gate.set()
        self.assertTrue((await first).ok)
        self.assertTrue((await second).ok)
        self.assertFalse(self.session.is_regenerating())
        self.assertEqual(self.session.plan.days[4].meals[0].name, "New toast 4")
        self.assertEqual(self.session.plan.days[5].meals[0].name, "New toast 5")

    async def test_local_mutation_during_regeneration_is_kept(self):
        self.gateway.gate = asyncio.Event()
        task = asyncio.create_task(self.session.regenerate_day(1))
        await asyncio.sleep(0)
        self.session.delete_meal(6, 0)
        self.gateway.gate.set()
        await task
        self.assertEqual(len(self.session.plan.days[6].meals), 3)
        self.assertEqual(self.session.plan.days[1].meals[0].name, "New toast 1")

    async def test_move_into_regenerating_day_is_refused(self):
        self.gateway.gate = asyncio.Event()
        task = asyncio.create_task(self.session.regenerate_day(3))
        await asyncio.sleep(0)
        moved = self.session.plan.days[0].meals[1].name
        with self.assertRaises(RegenerationInProgress):
            self.session.move_meal(0, 1, 3)
        self.gateway.gate.set()
        self.assertTrue((await task).ok)
        names = [m.name for d in self.session.plan.days for m in d.meals]
        self.assertEqual(names.count(moved), 1)
        self.assertEqual(self.session.plan.days[0].meals[1].name, moved)

    async def test_edits_of_regenerating_day_are_refused(self):
        self.gateway.gate = asyncio.Event()
        task = asyncio.create_task(self.session.regenerate_day(2))
        await asyncio.sleep(0)
        before = self.session.plan
        with self.assertRaises(RegenerationInProgress):
            self.session.delete_meal(2, 0)
        with self.assertRaises(RegenerationInProgress):
            self.session.move_meal(2, 0, 5)
        with self.assertRaises(RegenerationInProgress):
            self.session.reorder_meals(2, [3, 2, 1, 0])
        with self.assertRaises(RegenerationInProgress):
            self.session.toggle_validation(2, 0)
        with self.assertRaises(RegenerationInProgress):
            self.session.validate_all_for_day(2)
        self.assertIs(self.session.plan, before)
        self.assertEqual(len(self.session.tracker), 0)
        self.gateway.gate.set()
        await task

    async def test_details_started_before_full_generation_are_not_cached(self):
        self.gateway.gate = asyncio.Event()
        generation = asyncio.create_task(self.session.generate())
        await asyncio.sleep(0)
        details = asyncio.create_task(self.session.recipe_details(0, 1))
        await asyncio.sleep(0)
        self.gateway.gate.set()
        self.assertTrue((await generation).ok)
        self.assertEqual((await details).ingredients, self.gateway.details.ingredients)
        self.assertEqual(len(self.session.cache), 0)
        self.assertTrue(self.session.plan.days[0].meals[0].name.startswith("G2"))


class TestSessionLocalMutations(SessionTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        days = [day(label,
                    meal("breakfast", "Fasting - Water/Tea/Coffee", 0, is_fasting=True),
                    meal("lunch", f"Lunch {i}", 700),
                    meal("dinner", f"Dinner {i}", 600))
                for i, label in enumerate(DAYS)]
        self.session.plan = WeeklyPlan(days)

    async def test_fasting_slot_cannot_be_deleted_moved_or_validated(self):
        with self.assertRaises(ValidationPrecondition):
            self.session.delete_meal(0, 0)
        with self.assertRaises(ValidationPrecondition):
            self.session.move_meal(0, 0, 1)
        with self.assertRaises(ValidationPrecondition):
            self.session.toggle_validation(0, 0)

    async def test_move_publishes_event(self):
        self.session.move_meal(0, 1, 3)
        self.assertEqual([m.type for m in self.session.plan.days[3].meals],
                         ["breakfast", "lunch", "lunch", "dinner"])
        self.assertEqual(self.session.plan.days[3].total_calories, 2000)
        self.assertEqual(self.events[-1], (PLAN_MEAL_MOVED, {"from_day": 0, "to_day": 3, "name": "Lunch 0"}))

    async def test_validation_keys_are_positional(self):
        self.session.toggle_validation(2, 2)
        self.session.delete_meal(2, 1)
        # The key now points past the end of the shifted day
        self.assertTrue(self.session.tracker.is_validated(2, 2))
        self.assertEqual(len(self.session.plan.days[2].meals), 2)

    async def test_reorder(self):
        self.session.reorder_meals(1, [0, 2, 1])
        self.assertEqual([m.type for m in self.session.plan.days[1].meals], ["breakfast", "dinner", "lunch"])

    async def test_save_snapshot(self):
        result = self.session.save()
        self.assertTrue(result.ok)
        snapshot = self.session.repository.load_snapshot(result.value)
        self.assertEqual(snapshot, self.session.snapshot())
        self.assertEqual(self.events[-1], (PLAN_SAVED, {"plan_id": result.value}))

    async def test_to_dict_reports_validation(self):
        self.session.validate_all_for_day(0)
        data = self.session.to_dict()
        self.assertTrue(data["days"][0]["fullyValidated"])
        self.assertFalse(data["days"][0]["meals"][0]["validated"])
        self.assertTrue(data["days"][0]["meals"][1]["validated"])


class TestSessionShoppingList(SessionTestCase):

    async def test_uses_preferences_budget(self):
        result = await self.session.shopping_list()
        self.assertEqual(result.value.budget_delta, -15)

    async def test_explicit_budget_wins(self):
        result = await self.session.shopping_list(80)
        self.assertEqual(result.value.budget_delta, 5)


if __name__ == '__main__':
    unittest.main()
