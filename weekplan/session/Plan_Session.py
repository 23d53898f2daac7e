"""Plan session: one WeeklyPlan together with its validation tracker and recipe detail cache.

The session is driven from a single event loop. Local mutations are applied
immediately in call order; the coroutines that wait on the generation gateway
are guarded by in-flight sets so a second request for the same day (or the
same recipe detail key) is rejected instead of queued.
"""
import logging
from typing import Optional, Sequence, Set

from weekplan.domain.Meal import Meal
from weekplan.domain.Preferences import Preferences
from weekplan.domain.RecipeDetails import RecipeDetails
from weekplan.domain.Result import Result
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.events.Event_Bus import (
    GLOBAL_EVENT_BUS, PLAN_DAY_REGENERATED, PLAN_GENERATED, PLAN_GENERATION_FAILED,
    PLAN_MEAL_DELETED, PLAN_MEAL_MOVED, PLAN_MEALS_REORDERED, PLAN_SAVED, PLAN_VALIDATION_CHANGED,
)
from weekplan.infra.Plan_Repository import PlanRepository
from weekplan.logic.plan import mutations
from weekplan.logic.plan.regeneration import generate_plan, regenerate_day
from weekplan.logic.plan.totals import to_snapshot
from weekplan.logic.recipes.detail_cache import RecipeDetailCache, cache_key, get_or_generate
from weekplan.logic.shopping.list_builder import build_shopping_list
from weekplan.logic.validation.tracker import ValidationTracker
from weekplan.utilities.errors import PlanError, RegenerationInProgress, ValidationPrecondition

logger = logging.getLogger(__name__)


class NoPlanError(PlanError):
    pass


class PlanSession:
    def __init__(self, gateway, repository: Optional[PlanRepository] = None,
                 preferences: Optional[Preferences] = None, event_bus=None):
        self.gateway = gateway
        self.repository = repository or PlanRepository()
        self.preferences = preferences or Preferences()
        self._event_bus = event_bus or GLOBAL_EVENT_BUS
        self.plan: Optional[WeeklyPlan] = None
        self.tracker = ValidationTracker()
        self.cache = RecipeDetailCache()
        self._generating = False
        self._regenerating: Set[int] = set()
        self._details_in_flight: Set[str] = set()
        # Bumped on every successful full generation
        self._generation = 0

    # --- Helpers -------------------------------------------------------------
    def require_plan(self) -> WeeklyPlan:
        if self.plan is None:
            raise NoPlanError("No plan has been generated yet")
        return self.plan

    def _meal(self, day_index: int, meal_index: int) -> Meal:
        plan = self.require_plan()
        mutations.check_meal_index(plan, day_index, meal_index)
        return plan.days[day_index].meals[meal_index]

    def _require_not_fasting(self, day_index: int, meal_index: int, action: str) -> Meal:
        meal = self._meal(day_index, meal_index)
        if meal.is_fasting:
            raise ValidationPrecondition(f"Cannot {action} a fasting slot (day {day_index}, meal {meal_index})")
        return meal

    def _require_not_regenerating(self, *day_indices: int) -> None:
        for day_index in day_indices:
            if day_index in self._regenerating:
                logger.warning("Edit of day %s refused: regeneration in progress", day_index)
                raise RegenerationInProgress(f"day {day_index}")

    def is_regenerating(self, day_index: Optional[int] = None) -> bool:
        if day_index is None:
            return bool(self._regenerating)
        return day_index in self._regenerating

    @property
    def is_generating(self) -> bool:
        return self._generating

    # --- Generation ----------------------------------------------------------
    async def generate(self, preferences: Optional[Preferences] = None) -> Result:
        """Full-plan generation. On success plan, tracker and cache are reset together."""
        if self._generating:
            raise RegenerationInProgress("plan")
        if self._regenerating:
            raise RegenerationInProgress(f"day {min(self._regenerating)}")
        preferences = preferences or self.preferences
        self._generating = True
        try:
            result = await generate_plan(preferences, self.gateway)
        finally:
            self._generating = False
        if not result.ok:
            self._event_bus.publish(PLAN_GENERATION_FAILED,
                                    {"operation": "generate", "error": result.error, "day_index": None})
            return result
        self.preferences = preferences
        self.plan = result.value
        self._generation += 1
        self.tracker.clear()
        self.cache.clear()
        logger.info("Weekly plan generated: %s kcal over the week", self.plan.total_calories)
        self._event_bus.publish(PLAN_GENERATED, {"days": len(self.plan), "total_calories": self.plan.total_calories})
        return result

    async def regenerate_day(self, day_index: int, preferences: Optional[Preferences] = None) -> Result:
        plan = self.require_plan()
        mutations.check_day_index(day_index)
        if self._generating:
            raise RegenerationInProgress("plan")
        if day_index in self._regenerating:
            logger.warning("Regeneration of day %s refused: already in progress", day_index)
            raise RegenerationInProgress(f"day {day_index}")
        self._regenerating.add(day_index)
        try:
            result = await regenerate_day(plan, day_index, preferences or self.preferences, self.gateway)
        finally:
            self._regenerating.discard(day_index)

        if not result.ok:
            self._event_bus.publish(PLAN_GENERATION_FAILED,
                                    {"operation": "regenerate_day", "error": result.error, "day_index": day_index})
            return Result.failure(result.error, self.plan)

        # Other mutations may have landed while waiting; only this day is replaced
        self.plan = self.plan.with_day(day_index, result.value.days[day_index])
        cleared = self.tracker.clear_day(day_index)
        self._event_bus.publish(PLAN_DAY_REGENERATED, {"day_index": day_index, "cleared_validations": cleared})
        return Result.success(self.plan)

    # --- Local mutations -------------------------------------------------------
    def delete_meal(self, day_index: int, meal_index: int) -> WeeklyPlan:
        meal = self._require_not_fasting(day_index, meal_index, "delete")
        self._require_not_regenerating(day_index)
        self.plan = mutations.delete_meal(self.plan, day_index, meal_index)
        self._event_bus.publish(PLAN_MEAL_DELETED,
                                {"day_index": day_index, "meal_index": meal_index, "name": meal.name})
        return self.plan

    def move_meal(self, from_day_index: int, meal_index: int, to_day_index: int) -> WeeklyPlan:
        meal = self._require_not_fasting(from_day_index, meal_index, "move")
        mutations.check_day_index(to_day_index)
        self._require_not_regenerating(from_day_index, to_day_index)
        if from_day_index == to_day_index:
            return self.plan
        self.plan = mutations.move_meal(self.plan, from_day_index, meal_index, to_day_index)
        self._event_bus.publish(PLAN_MEAL_MOVED,
                                {"from_day": from_day_index, "to_day": to_day_index, "name": meal.name})
        return self.plan

    def reorder_meals(self, day_index: int, order: Sequence[int]) -> WeeklyPlan:
        """Drag-and-drop reorder; `order` lists current positions in their new order."""
        self._require_not_regenerating(day_index)
        self.plan = mutations.reorder_meals_by_index(self.require_plan(), day_index, order)
        self._event_bus.publish(PLAN_MEALS_REORDERED, {"day_index": day_index})
        return self.plan

    # --- Validation ----------------------------------------------------------
    def toggle_validation(self, day_index: int, meal_index: int) -> bool:
        self._require_not_fasting(day_index, meal_index, "validate")
        self._require_not_regenerating(day_index)
        validated = self.tracker.toggle_meal(day_index, meal_index)
        self._event_bus.publish(PLAN_VALIDATION_CHANGED,
                                {"day_index": day_index, "meal_index": meal_index, "validated": validated})
        return validated

    def validate_all_for_day(self, day_index: int) -> bool:
        self._require_not_regenerating(day_index)
        validated = self.tracker.validate_all_for_day(self.require_plan(), day_index)
        self._event_bus.publish(PLAN_VALIDATION_CHANGED,
                                {"day_index": day_index, "meal_index": None, "validated": validated})
        return validated

    def is_day_fully_validated(self, day_index: int) -> bool:
        return self.tracker.is_day_fully_validated(self.require_plan(), day_index)

    # --- Recipe details --------------------------------------------------------
    async def recipe_details(self, day_index: int, meal_index: int) -> RecipeDetails:
        meal = self._meal(day_index, meal_index)
        key = cache_key(day_index, meal_index, meal.name)
        if key in self._details_in_flight:
            raise RegenerationInProgress(key)
        self._details_in_flight.add(key)
        generation = self._generation
        try:
            return await get_or_generate(self.cache, self.plan, day_index, meal_index, self.gateway,
                                         keep=lambda: generation == self._generation)
        finally:
            self._details_in_flight.discard(key)

    # --- Shopping list ---------------------------------------------------------
    async def shopping_list(self, weekly_budget: Optional[float] = None) -> Result:
        plan = self.require_plan()
        if weekly_budget is None:
            weekly_budget = self.preferences.weekly_budget
        return await build_shopping_list(plan, self.gateway, weekly_budget,
                                         price_preference=self.preferences.price_preference)

    # --- Persistence -----------------------------------------------------------
    def snapshot(self):
        return to_snapshot(self.require_plan())

    def save(self) -> Result:
        snapshot = self.snapshot()
        try:
            plan_id = self.repository.persist_plan(snapshot, self.preferences)
        except OSError as e:
            logger.error("Failed to save meal plan: %s", e)
            return Result.failure(f"Could not save the plan: {e}")
        self._event_bus.publish(PLAN_SAVED, {"plan_id": plan_id})
        return Result.success(plan_id)

    def to_dict(self):
        plan = self.require_plan()
        data = plan.to_dict()
        for day_index, day in enumerate(data["days"]):
            day["fullyValidated"] = self.tracker.is_day_fully_validated(plan, day_index)
            day["regenerating"] = day_index in self._regenerating
            for meal_index, meal in enumerate(day["meals"]):
                meal["validated"] = self.tracker.is_validated(day_index, meal_index)
        return data


__all__ = ["PlanSession", "NoPlanError"]
