"""Local plan mutations: delete, reorder and move meals.

All functions are synchronous, never consult the generation gateway and
return a new WeeklyPlan; days that are not touched are shared by reference.
Index checks happen before anything is changed.

Positional keys held by the validation tracker and the recipe detail cache
are not renumbered here: after a delete, move or reorder those keys may point
at a different meal.
"""
from typing import List, Sequence

from weekplan.domain.Meal import Meal
from weekplan.domain.WeeklyPlan import WeeklyPlan
from weekplan.logic.plan.totals import recompute_day_total
from weekplan.utilities.constants import DAYS_IN_WEEK, MEAL_TYPE_ORDER
from weekplan.utilities.errors import ValidationPrecondition


def check_day_index(day_index: int) -> None:
    if not isinstance(day_index, int) or not 0 <= day_index < DAYS_IN_WEEK:
        raise ValidationPrecondition(f"Day index out of range: {day_index}")


def check_meal_index(plan: WeeklyPlan, day_index: int, meal_index: int) -> None:
    check_day_index(day_index)
    meals = plan.days[day_index].meals
    if not isinstance(meal_index, int) or not 0 <= meal_index < len(meals):
        raise ValidationPrecondition(f"Meal index out of range: day {day_index}, meal {meal_index}")


def sort_by_meal_type(meals: Sequence[Meal]) -> List[Meal]:
    """Stable sort by breakfast < lunch < snack < dinner."""
    return sorted(meals, key=lambda m: MEAL_TYPE_ORDER.get(m.type, len(MEAL_TYPE_ORDER)))


def delete_meal(plan: WeeklyPlan, day_index: int, meal_index: int) -> WeeklyPlan:
    '''
    Removes the meal at (day_index, meal_index); later meals shift left.
    Fasting slots are not refused here, callers check is_fasting first.
    '''
    check_meal_index(plan, day_index, meal_index)
    day = plan.days[day_index]
    meals = day.meals[:meal_index] + day.meals[meal_index + 1:]
    return plan.with_day(day_index, recompute_day_total(_with_meals(day, meals)))


def reorder_meals(plan: WeeklyPlan, day_index: int, new_order: Sequence[Meal]) -> WeeklyPlan:
    '''
    Replaces the meals of a day with `new_order`, which must be a permutation
    of the same meals (drag-and-drop).
    '''
    check_day_index(day_index)
    day = plan.days[day_index]
    new_order = list(new_order)
    if not _is_permutation(day.meals, new_order):
        raise ValidationPrecondition(f"New order for day {day_index} is not a permutation of its meals")
    return plan.with_day(day_index, recompute_day_total(_with_meals(day, new_order)))


def reorder_meals_by_index(plan: WeeklyPlan, day_index: int, order: Sequence[int]) -> WeeklyPlan:
    """Same as reorder_meals, with the new order given as current positions."""
    check_day_index(day_index)
    meals = plan.days[day_index].meals
    if sorted(order) != list(range(len(meals))):
        raise ValidationPrecondition(f"Order {list(order)} is not a permutation of positions 0..{len(meals) - 1}")
    return reorder_meals(plan, day_index, [meals[i] for i in order])


def move_meal(plan: WeeklyPlan, from_day_index: int, meal_index: int, to_day_index: int) -> WeeklyPlan:
    '''
    Moves a meal to another day, then re-sorts the destination by meal type.
    Moving within the same day is a no-op and returns `plan` itself.
    '''
    check_meal_index(plan, from_day_index, meal_index)
    check_day_index(to_day_index)
    if from_day_index == to_day_index:
        return plan

    source = plan.days[from_day_index]
    target = plan.days[to_day_index]
    moved = source.meals[meal_index]

    source_meals = source.meals[:meal_index] + source.meals[meal_index + 1:]
    target_meals = sort_by_meal_type(target.meals + [moved])

    updated = plan.with_day(from_day_index, recompute_day_total(_with_meals(source, source_meals)))
    return updated.with_day(to_day_index, recompute_day_total(_with_meals(target, target_meals)))


def _with_meals(day, meals):
    # total is refreshed by the caller
    return type(day)(day=day.day, meals=list(meals), total_calories=day.total_calories)


def _is_permutation(current: Sequence[Meal], proposed: Sequence[Meal]) -> bool:
    if len(current) != len(proposed):
        return False
    remaining = list(current)
    for meal in proposed:
        for i, candidate in enumerate(remaining):
            if candidate is meal or candidate == meal:
                del remaining[i]
                break
        else:
            return False
    return True


__all__ = [
    "delete_meal", "reorder_meals", "reorder_meals_by_index", "move_meal",
    "sort_by_meal_type", "check_day_index", "check_meal_index",
]
