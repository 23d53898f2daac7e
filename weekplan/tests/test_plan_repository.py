import tempfile
import unittest
from pathlib import Path

from weekplan.domain.Preferences import Preferences
from weekplan.infra.Plan_Repository import PlanRepository
from weekplan.logic.plan.totals import to_snapshot
from weekplan.tests.fake_gateway import sample_plan


class TestPlanRepository(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.repo = PlanRepository(Path(self.tmp.name) / "nested" / "plans.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_persist_and_load(self):
        snapshot = to_snapshot(sample_plan())
        plan_id = self.repo.persist_plan(snapshot, Preferences(daily_calories=1900, diet_type="vegetarian"))
        self.assertEqual(len(plan_id), 32)
        self.assertEqual(self.repo.load_snapshot(plan_id), snapshot)
        listed = self.repo.list_plans()
        self.assertEqual(listed[0]['id'], plan_id)
        self.assertEqual(listed[0]['targetCalories'], 1900)
        self.assertEqual(listed[0]['dietType'], "vegetarian")

    def test_unknown_id(self):
        self.assertIsNone(self.repo.load_snapshot("missing"))
        self.assertEqual(self.repo.list_plans(), [])

    def test_corrupt_file_is_treated_as_empty(self):
        self.repo.path.parent.mkdir(parents=True)
        self.repo.path.write_text("{not json", encoding="utf-8")
        self.assertEqual(self.repo.list_plans(), [])
        plan_id = self.repo.persist_plan({"days": []})
        self.assertIsNotNone(self.repo.load_snapshot(plan_id))


if __name__ == '__main__':
    unittest.main()
