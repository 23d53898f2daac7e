"""Derived aggregates of the plan model.

`total_calories` on a DayPlan is a cached projection of its meals. Every
operation that adds, removes or replaces a meal passes the touched day through
`recompute_day_total` before handing the plan back.
"""
from dataclasses import replace
from typing import Any, Dict

from weekplan.domain.DayPlan import DayPlan
from weekplan.domain.WeeklyPlan import WeeklyPlan


def recompute_day_total(day: DayPlan) -> DayPlan:
    """Return a new DayPlan whose total equals the sum of its meal calories."""
    return replace(day, meals=list(day.meals), total_calories=sum(m.calories for m in day.meals))


def normalize_plan(plan: WeeklyPlan) -> WeeklyPlan:
    """Recompute every day total (used on plans coming back from generation)."""
    return WeeklyPlan([recompute_day_total(d) for d in plan.days])


def is_consistent(plan: WeeklyPlan) -> bool:
    return all(d.total_calories == sum(m.calories for m in d.meals) for d in plan.days)


def to_snapshot(plan: WeeklyPlan) -> Dict[str, Any]:
    """Lightweight projection saved for later feedback collection.

    Keeps day label, meal type, name, calories, proteins and the recipe reference only.
    """
    return {
        "days": [
            {
                "day": d.day,
                "meals": [
                    {
                        "type": m.type,
                        "name": m.name,
                        "calories": m.calories,
                        "proteins": m.proteins,
                        "recipeId": m.recipe_id,
                    }
                    for m in d.meals
                ],
            }
            for d in plan.days
        ]
    }


__all__ = ["recompute_day_total", "normalize_plan", "is_consistent", "to_snapshot"]
