"""Single-day regeneration through the generation gateway."""
import logging

from weekplan.domain.Preferences import Preferences
from weekplan.domain.Result import Result
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.logic.plan.mutations import check_day_index
from weekplan.logic.plan.totals import normalize_plan, recompute_day_total
from weekplan.utilities.errors import EmptyResult, GenerationFailure

logger = logging.getLogger(__name__)


async def generate_plan(preferences: Preferences, gateway) -> Result:
    """Full-week synthesis; the returned plan has every total recomputed."""
    try:
        plan = await gateway.generate_weekly_plan(preferences)
    except GenerationFailure as e:
        logger.warning("Weekly plan generation failed: %s", e)
        return Result.failure(str(e))
    except Exception as e:
        logger.exception("Unexpected error from the generation gateway")
        return Result.failure(f"Generation failed: {e}")
    for i, day in enumerate(plan.days):
        if not day.meals:
            logger.warning("Generated plan has no meals on day %s", i)
            return Result.failure(str(EmptyResult(f"Generated plan has no meals on day {i}")))
    return Result.success(normalize_plan(plan))


async def regenerate_day(plan: WeeklyPlan, day_index: int, preferences: Preferences, gateway) -> Result:
    """Replace `plan.days[day_index]` with a freshly generated day.

    The gateway receives the current plan so it can avoid meals already used
    elsewhere in the week. On success only that slot changes and every other
    DayPlan is the same object as before. On failure the result carries the
    input plan unchanged.
    """
    check_day_index(day_index)
    try:
        day = await gateway.regenerate_day(day_index, preferences, plan)
    except GenerationFailure as e:
        logger.warning("Regeneration of day %s failed: %s", day_index, e)
        return Result.failure(str(e), plan)
    except Exception as e:
        logger.exception("Unexpected error while regenerating day %s", day_index)
        return Result.failure(f"Generation failed: {e}", plan)

    if day is None or not day.meals:
        logger.warning("Regeneration of day %s returned no meals", day_index)
        return Result.failure(str(EmptyResult(f"No meals generated for day {day_index}")), plan)

    # The slot keeps its label even if the generator names it differently
    day = recompute_day_total(type(day)(day=plan.days[day_index].day, meals=day.meals))
    logger.info("Day %s (%s) regenerated: %s meals, %s kcal", day_index, day.day, len(day.meals), day.total_calories)
    return Result.success(plan.with_day(day_index, day))


__all__ = ["generate_plan", "regenerate_day"]
